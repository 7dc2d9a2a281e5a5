"""
Dynamic browser strategy for careers pages rendered client-side.

Per attempt: open a Playwright page, navigate, wait for listings (falling
back to network idle plus a settle delay), check for "no positions" text.
Only that setup/navigation part is retried. Extraction then runs the
in-page tactics in order and the first non-empty one wins.
"""

from __future__ import annotations

import logging
import os
from typing import Any, List, Optional, Tuple

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from careerfetch.extract.page_scripts import (
    EXPAND_SCRIPT,
    JSONLD_SCRIPT,
    STRUCTURED_SCRIPT,
    TEXT_PATTERN_SCRIPT,
)
from careerfetch.fetchers.browser import BrowserConfig, BrowserDriver, BrowserSession
from careerfetch.models import RawJobRecord, TargetConfig, now_utc_iso
from careerfetch.strategies.base import FetchStrategy

logger = logging.getLogger(__name__)


NO_JOBS_SELECTORS = (
    'text="No positions available"',
    'text="No current openings"',
    'text="No job opportunities"',
    "text=\"We don't have any open positions\"",
)

# (name, script, takes the page URL as argument)
EXTRACTION_TACTICS: Tuple[Tuple[str, str, bool], ...] = (
    ("structured", STRUCTURED_SCRIPT, True),
    ("json-ld", JSONLD_SCRIPT, False),
    ("text-pattern", TEXT_PATTERN_SCRIPT, False),
)


class BrowserStrategy(FetchStrategy):
    name = "browser"

    def __init__(
        self,
        config: Optional[BrowserConfig] = None,
        driver: Optional[BrowserDriver] = None,
    ):
        self.config = config or BrowserConfig()
        self.driver = driver or BrowserDriver(self.config)

    def can_handle(self, config: TargetConfig) -> bool:
        return bool(config.careers_url)

    async def fetch_jobs(self, config: TargetConfig, client: Any = None) -> List[RawJobRecord]:
        attempts = max(1, config.max_retries)
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            session: Optional[BrowserSession] = None
            try:
                logger.debug("Browser attempt %d/%d: navigating to %s", attempt, attempts, config.careers_url)
                session = await self.driver.open(config.timeout_ms)
                no_jobs = await self.load_page(session.page, config)
            except Exception as e:
                last_error = e
                logger.warning("Browser attempt %d/%d failed: %s", attempt, attempts, e)
                if session is not None:
                    await session.close()
                continue

            try:
                if no_jobs:
                    logger.info("No jobs available indicator found on %s", config.careers_url)
                    return []
                jobs = await self.extract(session.page, config.careers_url)
                if self.config.debug:
                    await self.take_debug_screenshot(session.page, config.company_id)
                return jobs
            finally:
                await session.close()

        raise last_error

    async def load_page(self, page: Any, config: TargetConfig) -> bool:
        """
        Navigate and wait for content. Returns True when the page states it
        has no openings. Navigation errors propagate; a selector timeout does not.
        """
        await page.goto(config.careers_url, wait_until="networkidle", timeout=config.timeout_ms)

        try:
            await page.wait_for_selector(
                self.config.wait_for_selector,
                timeout=config.timeout_ms,
                state="visible",
            )
            logger.debug("Job listing elements found")
        except PlaywrightTimeoutError:
            logger.debug("Job listing selectors not found, waiting for network idle")
            await page.wait_for_load_state("networkidle", timeout=config.timeout_ms)
            await page.wait_for_timeout(self.config.settle_delay_ms)

        return await self.has_no_jobs_indicator(page)

    async def has_no_jobs_indicator(self, page: Any) -> bool:
        for selector in NO_JOBS_SELECTORS:
            try:
                if await page.locator(selector).first.is_visible():
                    return True
            except Exception:
                continue
        return False

    async def expand_listings(self, page: Any) -> None:
        try:
            info = await page.evaluate(EXPAND_SCRIPT)
            if isinstance(info, dict):
                logger.debug("Expanded %s of %s collapsible headers", info.get("clicked", 0), info.get("found", 0))
        except Exception as e:
            logger.debug("Expansion step failed: %s", e)

    async def extract(self, page: Any, page_url: str) -> List[RawJobRecord]:
        await self.expand_listings(page)

        for tactic, script, takes_url in EXTRACTION_TACTICS:
            try:
                result = await (page.evaluate(script, page_url) if takes_url else page.evaluate(script))
            except Exception as e:
                logger.debug("Extraction tactic %s failed: %s", tactic, e)
                continue

            jobs = [item for item in result if isinstance(item, dict)] if isinstance(result, list) else []
            if jobs:
                logger.debug("Found %d jobs with tactic %s", len(jobs), tactic)
                return jobs

        logger.warning("No job data could be extracted from %s", page_url)
        return []

    async def take_debug_screenshot(self, page: Any, company_id: str) -> Optional[str]:
        timestamp = now_utc_iso().replace(":", "-").replace(".", "-")
        path = os.path.join(self.config.screenshot_dir, f"scrape-debug-{company_id}-{timestamp}.png")
        try:
            os.makedirs(self.config.screenshot_dir, exist_ok=True)
            await page.screenshot(path=path, full_page=True)
        except Exception as e:
            logger.warning("Debug screenshot failed: %s", e)
            return None
        logger.debug("Debug screenshot saved to %s", path)
        return path
