from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from careerfetch.extract.page_scripts import (
    EXPAND_SCRIPT,
    JSONLD_SCRIPT,
    STRUCTURED_SCRIPT,
    TEXT_PATTERN_SCRIPT,
)
from careerfetch.fetchers.browser import BrowserConfig, BrowserSession
from careerfetch.models import TargetConfig
from careerfetch.strategies.browser import BrowserStrategy


CAREERS = "https://acme.example/careers"


class FakeLocator:
    def __init__(self, visible: bool):
        self.visible = visible

    @property
    def first(self) -> "FakeLocator":
        return self

    async def is_visible(self) -> bool:
        return self.visible


class FakePage:
    def __init__(
        self,
        scripts: Optional[Dict[str, Any]] = None,
        goto_error: Optional[Exception] = None,
        selector_timeout: bool = False,
        no_jobs_text: Optional[str] = None,
    ):
        self.scripts = scripts or {}
        self.goto_error = goto_error
        self.selector_timeout = selector_timeout
        self.no_jobs_text = no_jobs_text
        self.evaluated: List[str] = []
        self.events: List[str] = []
        self.screenshots: List[Dict[str, Any]] = []
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        self.events.append(f"goto:{wait_until}")
        if self.goto_error:
            raise self.goto_error

    async def wait_for_selector(self, selector, timeout=None, state=None):
        self.events.append("wait_for_selector")
        if self.selector_timeout:
            raise PlaywrightTimeoutError("Timeout waiting for selector")

    async def wait_for_load_state(self, state, timeout=None):
        self.events.append(f"load_state:{state}")

    async def wait_for_timeout(self, ms):
        self.events.append(f"sleep:{ms}")

    def locator(self, selector):
        return FakeLocator(bool(self.no_jobs_text) and self.no_jobs_text in selector)

    async def evaluate(self, script, arg=None):
        self.evaluated.append(script)
        outcome = self.scripts.get(script, [])
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def screenshot(self, path=None, full_page=False):
        self.screenshots.append({"path": path, "full_page": full_page})

    async def close(self):
        self.closed = True


class FakeDriver:
    """Hands out one prepared page per open(); open() may fail first."""

    def __init__(self, pages: List[FakePage], open_errors: Optional[List[Exception]] = None):
        self.pages = list(pages)
        self.open_errors = list(open_errors or [])
        self.sessions: List[BrowserSession] = []
        self.opened = 0

    async def open(self, timeout_ms=30000):
        self.opened += 1
        if self.open_errors:
            raise self.open_errors.pop(0)
        session = BrowserSession(None, None, None, self.pages.pop(0))
        self.sessions.append(session)
        return session


def _target(retries: int = 3) -> TargetConfig:
    return TargetConfig(company_id="acme", careers_url=CAREERS, max_retries=retries)


async def test_first_non_empty_tactic_wins():
    page = FakePage(scripts={
        EXPAND_SCRIPT: {"found": 2, "clicked": 2},
        STRUCTURED_SCRIPT: [],
        JSONLD_SCRIPT: [{"title": "A"}, {"title": "B"}],
        TEXT_PATTERN_SCRIPT: [{"title": "never"}],
    })
    strategy = BrowserStrategy(driver=FakeDriver([page]))

    jobs = await strategy.fetch_jobs(_target())

    assert [j["title"] for j in jobs] == ["A", "B"]
    assert page.evaluated == [EXPAND_SCRIPT, STRUCTURED_SCRIPT, JSONLD_SCRIPT]
    assert page.closed is True


async def test_failing_tactic_counts_as_empty():
    page = FakePage(scripts={
        EXPAND_SCRIPT: RuntimeError("no document"),
        STRUCTURED_SCRIPT: RuntimeError("evaluation failed"),
        JSONLD_SCRIPT: "not a list",
        TEXT_PATTERN_SCRIPT: [{"id": "pattern-1", "title": "senior engineer role"}],
    })

    jobs = await BrowserStrategy(driver=FakeDriver([page])).fetch_jobs(_target())

    assert jobs == [{"id": "pattern-1", "title": "senior engineer role"}]


async def test_no_records_is_empty_success():
    page = FakePage()

    assert await BrowserStrategy(driver=FakeDriver([page])).fetch_jobs(_target()) == []
    assert page.closed is True


async def test_selector_timeout_falls_back_to_network_idle():
    page = FakePage(selector_timeout=True, scripts={STRUCTURED_SCRIPT: [{"title": "X"}]})
    strategy = BrowserStrategy(BrowserConfig(settle_delay_ms=1500), driver=FakeDriver([page]))

    await strategy.fetch_jobs(_target())

    assert page.events[:4] == ["goto:networkidle", "wait_for_selector", "load_state:networkidle", "sleep:1500"]


async def test_no_jobs_indicator_short_circuits():
    page = FakePage(no_jobs_text="No current openings", scripts={STRUCTURED_SCRIPT: [{"title": "X"}]})

    assert await BrowserStrategy(driver=FakeDriver([page])).fetch_jobs(_target()) == []
    assert page.evaluated == []
    assert page.closed is True


async def test_navigation_failure_retried_then_succeeds():
    bad = FakePage(goto_error=PlaywrightTimeoutError("Navigation timeout"))
    good = FakePage(scripts={STRUCTURED_SCRIPT: [{"title": "X"}]})
    driver = FakeDriver([bad, good])

    jobs = await BrowserStrategy(driver=driver).fetch_jobs(_target(retries=3))

    assert jobs == [{"title": "X"}]
    assert driver.opened == 2
    assert bad.closed and good.closed


async def test_setup_exhaustion_reraises_last_error():
    errors = [RuntimeError("launch 1"), RuntimeError("launch 2")]
    driver = FakeDriver([], open_errors=errors)

    with pytest.raises(RuntimeError, match="launch 2"):
        await BrowserStrategy(driver=driver).fetch_jobs(_target(retries=2))

    assert driver.opened == 2


async def test_extraction_is_not_retried():
    page = FakePage(scripts={STRUCTURED_SCRIPT: RuntimeError("boom")})
    driver = FakeDriver([page, FakePage()])

    assert await BrowserStrategy(driver=driver).fetch_jobs(_target()) == []
    assert driver.opened == 1


async def test_debug_screenshot_path(tmp_path):
    page = FakePage(scripts={STRUCTURED_SCRIPT: [{"title": "X"}]})
    config = BrowserConfig(debug=True, screenshot_dir=str(tmp_path / "shots"))

    await BrowserStrategy(config, driver=FakeDriver([page])).fetch_jobs(_target())

    assert len(page.screenshots) == 1
    shot = page.screenshots[0]
    assert shot["full_page"] is True
    assert os.path.basename(shot["path"]).startswith("scrape-debug-acme-")
    assert shot["path"].endswith(".png")
    assert os.path.isdir(tmp_path / "shots")


async def test_session_close_failures_are_swallowed(caplog):
    class Exploding:
        async def close(self):
            raise RuntimeError("already closed")

        async def stop(self):
            raise RuntimeError("gone")

    session = BrowserSession(Exploding(), Exploding(), Exploding(), Exploding())

    await session.close()

    assert session.page is None
    assert sum("Failed to close" in r.getMessage() for r in caplog.records) == 4


def test_blocked_resource_types():
    assert BrowserConfig().blocked_resource_types() == ("image", "font", "media", "stylesheet")
    assert BrowserConfig(block_stylesheets=False).blocked_resource_types() == ("image", "font", "media")


def test_can_handle():
    assert BrowserStrategy(driver=FakeDriver([])).can_handle(_target())
    assert not BrowserStrategy(driver=FakeDriver([])).can_handle(TargetConfig(company_id="acme"))
