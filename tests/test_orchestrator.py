from __future__ import annotations

import logging
from typing import Any, List

import pytest

from careerfetch.errors import NetworkFailure, UnsupportedTarget
from careerfetch.metrics import FetchMetrics
from careerfetch.models import FetchResult, TargetConfig
from careerfetch.orchestrator import JobFetchService
from careerfetch.strategies import (
    ApiStrategy,
    BrowserStrategy,
    EmbeddedDataStrategy,
    HtmlStrategy,
    JsonFeedStrategy,
    default_strategies,
)
from careerfetch.strategies.base import FetchStrategy

from conftest import FakeHttpClient, make_response


class ScriptedStrategy(FetchStrategy):
    def __init__(self, name: str, capable: bool = True, result: Any = None, error: Exception = None):
        self.name = name
        self.capable = capable
        self.result = result if result is not None else []
        self.error = error
        self.calls = 0

    def can_handle(self, config):
        return self.capable

    async def fetch_jobs(self, config, client=None) -> List[dict]:
        self.calls += 1
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def config():
    return TargetConfig(company_id="acme", careers_url="https://acme.example/careers")


async def test_skips_incapable_and_failing_strategies(config, caplog):
    a = ScriptedStrategy("A", capable=False)
    b = ScriptedStrategy("B", error=NetworkFailure("connection reset"))
    c = ScriptedStrategy("C", result=[{"title": "X"}, {"foo": "y"}])
    d = ScriptedStrategy("D", result=[{"title": "never"}])
    service = JobFetchService(strategies=[a, b, c, d], client=FakeHttpClient())

    with caplog.at_level(logging.INFO):
        result = await service.fetch_jobs(config, source="careers-site")

    assert result.success is True
    assert result.method == "C"
    assert result.total_count == 1
    assert result.jobs[0].title == "X"
    assert result.jobs[0].source == "careers-site"
    assert result.message == "Successfully fetched 1 jobs"
    assert result.error is None
    assert result.failures == (("B", "connection reset"),)
    assert a.calls == 0 and d.calls == 0

    messages = [r.getMessage() for r in caplog.records]
    assert "Strategy B failed: connection reset" in messages
    assert "Attempting to fetch jobs using strategy: C" in messages
    assert not any("Strategy A failed" in m for m in messages)


async def test_all_failed(config):
    service = JobFetchService(
        strategies=[
            ScriptedStrategy("A", error=UnsupportedTarget("no api")),
            ScriptedStrategy("B", error=RuntimeError("bug")),
        ],
        client=FakeHttpClient(),
    )

    result = await service.fetch_jobs(config)

    assert result.success is False
    assert result.method == "none"
    assert result.error == "All fetch strategies failed"
    assert result.jobs == ()
    assert result.total_count == 0
    assert [name for name, _ in result.failures] == ["A", "B"]


async def test_none_capable_is_failure(config):
    service = JobFetchService(strategies=[ScriptedStrategy("A", capable=False)], client=FakeHttpClient())

    result = await service.fetch_jobs(config)

    assert result.success is False
    assert result.failures == ()


async def test_empty_success_is_success(config):
    service = JobFetchService(strategies=[ScriptedStrategy("html", result=[])], client=FakeHttpClient())

    result = await service.fetch_jobs(config)

    assert result.success is True
    assert result.total_count == 0
    assert result.method == "html"


async def test_invalid_config_raises_type_error():
    service = JobFetchService(strategies=[], client=FakeHttpClient())

    with pytest.raises(TypeError):
        await service.fetch_jobs({"company_id": "acme"})


async def test_relative_apply_urls_resolved_against_careers_page(config):
    strategy = ScriptedStrategy("json", result=[{"title": "A", "apply_url": "/apply/1"}])
    service = JobFetchService(strategies=[strategy], client=FakeHttpClient())

    result = await service.fetch_jobs(config)

    assert result.jobs[0].apply_url == "https://acme.example/apply/1"


async def test_metrics_recorded(config):
    metrics = FetchMetrics()
    service = JobFetchService(
        strategies=[ScriptedStrategy("A", error=RuntimeError("x")), ScriptedStrategy("B", result=[{"title": "t"}])],
        client=FakeHttpClient(),
        metrics=metrics,
    )

    await service.fetch_jobs(config)

    assert [m.metadata["status"] for m in metrics.by_name("strategy.A")] == ["error"]
    assert [m.metadata["status"] for m in metrics.by_name("strategy.B")] == ["success"]
    assert len(metrics.by_name("fetch")) == 1
    assert metrics.counters == {"strategy.A.failed": 1, "strategy.B.succeeded": 1}


JSONLD_PAGE = (
    '<script type="application/ld+json">'
    '{"@type": "JobPosting", "identifier": "job-123", "title": "Welder"}'
    "</script>"
)


async def test_script_rendered_page_falls_through_to_embedded(config):
    page = '<html><body><div id="app"></div>' + JSONLD_PAGE + "</body></html>"
    client = FakeHttpClient({"https://acme.example/careers": make_response(200, page)})
    service = JobFetchService(strategies=default_strategies(use_browser=False), client=client)

    result = await service.fetch_jobs(config)

    assert result.success is True
    assert result.method == "embedded"
    assert result.total_count == 1
    assert result.jobs[0].id == "job-123"
    assert result.failures == (("json", "JSON endpoint not accessible"), ("html", "No jobs found in HTML"))


async def test_no_openings_page_is_an_empty_success(config):
    page = "<p>There are no current openings.</p>" + JSONLD_PAGE
    client = FakeHttpClient({"https://acme.example/careers": make_response(200, page)})
    service = JobFetchService(strategies=default_strategies(use_browser=False), client=client)

    result = await service.fetch_jobs(config)

    assert result.success is True
    assert result.method == "html"
    assert result.total_count == 0


async def test_falls_back_to_embedded_when_parser_fails(config):
    class BrokenParser:
        def parse_jobs_from_html(self, html, base_url):
            raise ValueError("unparseable markup")

    client = FakeHttpClient({"https://acme.example/careers": make_response(200, JSONLD_PAGE)})
    service = JobFetchService(
        strategies=default_strategies(parser=BrokenParser(), use_browser=False),
        client=client,
    )

    result = await service.fetch_jobs(config, source="site")

    assert result.method == "embedded"
    assert result.jobs[0].id == "job-123"
    assert result.jobs[0].source == "site"
    assert result.failures == (("json", "JSON endpoint not accessible"), ("html", "unparseable markup"))


def test_default_strategy_order():
    names = [s.name for s in default_strategies()]
    assert names == ["api", "json", "html", "embedded", "browser"]
    types = [type(s) for s in JobFetchService().strategies]
    assert types == [ApiStrategy, JsonFeedStrategy, HtmlStrategy, EmbeddedDataStrategy, BrowserStrategy]


def test_fetch_result_to_dict_uses_wire_names():
    result = FetchResult.failed((("api", "down"),))
    d = result.to_dict()

    assert d["success"] is False
    assert d["totalCount"] == 0
    assert d["error"] == "All fetch strategies failed"
    assert "fetchedAt" in d
