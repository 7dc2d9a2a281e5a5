"""
Extraction strategies, cheapest and most specific first.
"""

from typing import List, Optional

from careerfetch.extract.html import HtmlParser
from careerfetch.fetchers.browser import BrowserConfig
from careerfetch.strategies.api import ApiStrategy
from careerfetch.strategies.base import FetchStrategy
from careerfetch.strategies.browser import BrowserStrategy
from careerfetch.strategies.embedded import EmbeddedDataStrategy
from careerfetch.strategies.html import HtmlStrategy
from careerfetch.strategies.json_feed import JsonFeedStrategy


def default_strategies(
    browser_config: Optional[BrowserConfig] = None,
    parser: Optional[HtmlParser] = None,
    use_browser: bool = True,
) -> List[FetchStrategy]:
    """api -> json -> html -> embedded -> browser"""
    strategies: List[FetchStrategy] = [
        ApiStrategy(),
        JsonFeedStrategy(),
        HtmlStrategy(parser),
        EmbeddedDataStrategy(),
    ]
    if use_browser:
        strategies.append(BrowserStrategy(browser_config))
    return strategies


__all__ = [
    "FetchStrategy",
    "ApiStrategy",
    "JsonFeedStrategy",
    "HtmlStrategy",
    "EmbeddedDataStrategy",
    "BrowserStrategy",
    "default_strategies",
]
