"""
Playwright-based browser access for JS-rendered careers pages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from playwright.async_api import async_playwright

logger = logging.getLogger(__name__)


DEFAULT_BROWSER_ARGS: Tuple[str, ...] = (
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
)

EXTRA_HEADERS: Dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}

BLOCKED_RESOURCE_TYPES = ("image", "font", "media")


@dataclass
class BrowserConfig:
    """Browser configuration."""
    headless: bool = True
    wait_for_selector: str = ".job-listing, .job-item, .career-listing"
    debug: bool = False
    user_agent: str = "careerfetch-browser/1.0"
    browser_args: List[str] = field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))
    block_stylesheets: bool = True  # Stylesheets are blocked with images/fonts/media
    screenshot_dir: str = "./temp"
    settle_delay_ms: int = 2000
    viewport: Dict[str, int] = field(default_factory=lambda: {"width": 1280, "height": 720})

    def blocked_resource_types(self) -> Tuple[str, ...]:
        if self.block_stylesheets:
            return BLOCKED_RESOURCE_TYPES + ("stylesheet",)
        return BLOCKED_RESOURCE_TYPES


class BrowserSession:
    """
    One browser/context/page triple. ``close()`` releases everything and
    never raises; failures are logged as warnings.
    """

    def __init__(self, playwright: Any, browser: Any, context: Any, page: Any):
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page

    async def close(self) -> None:
        for name, resource, method in (
            ("page", self.page, "close"),
            ("context", self.context, "close"),
            ("browser", self.browser, "close"),
            ("playwright", self.playwright, "stop"),
        ):
            if resource is None:
                continue
            try:
                await getattr(resource, method)()
            except Exception as e:
                logger.warning("Failed to close %s: %s", name, e)
        self.page = self.context = self.browser = self.playwright = None


class BrowserDriver:
    """
    Launches Chromium through Playwright and prepares a page for scraping:
    timeouts, resource blocking and (in debug mode) console forwarding.
    """

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()

    async def open(self, timeout_ms: int = 30000) -> BrowserSession:
        playwright = await async_playwright().start()
        session = BrowserSession(playwright, None, None, None)
        try:
            session.browser = await playwright.chromium.launch(
                headless=self.config.headless,
                args=list(self.config.browser_args),
            )
            session.context = await session.browser.new_context(
                user_agent=self.config.user_agent,
                viewport=dict(self.config.viewport),
                ignore_https_errors=True,
                extra_http_headers=dict(EXTRA_HEADERS),
            )
            session.page = await session.context.new_page()
            await self.setup_page(session.page, timeout_ms)
        except Exception:
            await session.close()
            raise
        return session

    async def setup_page(self, page: Any, timeout_ms: int) -> None:
        page.set_default_timeout(timeout_ms)
        page.set_default_navigation_timeout(timeout_ms)

        blocked = self.config.blocked_resource_types()

        async def handle_route(route):
            if route.request.resource_type in blocked:
                await route.abort()
            else:
                await route.continue_()

        await page.route("**/*", handle_route)

        if self.config.debug:
            page.on(
                "console",
                lambda msg: logger.debug("Page console.%s: %s", msg.type, msg.text),
            )
