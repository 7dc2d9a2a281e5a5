"""
Static HTML strategy: fetch the careers page and hand it to an HTML parser.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from careerfetch.errors import ParseFailure
from careerfetch.extract.html import HtmlJobParser, HtmlParser, has_no_jobs_indicator
from careerfetch.fetchers.http import HttpClient
from careerfetch.models import RawJobRecord, TargetConfig
from careerfetch.strategies.base import HTML_ACCEPT, FetchStrategy, get_page, response_text

logger = logging.getLogger(__name__)


class HtmlStrategy(FetchStrategy):
    name = "html"

    def __init__(self, parser: Optional[HtmlParser] = None):
        self.parser = parser or HtmlJobParser()

    def can_handle(self, config: TargetConfig) -> bool:
        return bool(config.careers_url)

    async def fetch_jobs(self, config: TargetConfig, client: HttpClient) -> List[RawJobRecord]:
        response = await get_page(client, config.careers_url, HTML_ACCEPT, "HTML page not accessible")
        html = response_text(response)

        if has_no_jobs_indicator(html):
            logger.info("Careers page reports no open positions")
            return []

        jobs = self.parser.parse_jobs_from_html(html, config.careers_url)
        if not jobs:
            # Script-rendered or JSON-LD-only pages; let later strategies look
            raise ParseFailure("No jobs found in HTML")

        return jobs
