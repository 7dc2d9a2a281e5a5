from __future__ import annotations

import dataclasses
import logging

import pytest

from careerfetch.errors import HttpStatusFailure, NetworkFailure, ParseFailure, UnsupportedTarget
from careerfetch.metrics import FetchMetrics, timed
from careerfetch.models import NormalizedJob, TargetConfig, parse_date, resolve_url, slugify


def test_target_config_requires_company_id():
    with pytest.raises(ValueError):
        TargetConfig(company_id="")
    with pytest.raises(ValueError):
        TargetConfig(company_id="   ")


def test_target_config_is_immutable():
    config = TargetConfig(company_id="acme")

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.careers_url = "https://x"


def test_normalized_job_wire_names():
    job = NormalizedJob(id="1", title="T", posted_date="p", apply_url="a", processed_at="n", raw_data={"k": 1})

    d = job.to_dict()

    assert set(d) == {
        "id", "title", "description", "location", "department", "type",
        "postedDate", "applyUrl", "source", "processedAt", "rawData",
    }
    assert d["rawData"] == {"k": 1}


def test_helpers():
    assert slugify("  Hello, World!  ") == "hello-world"
    assert resolve_url("//cdn.example/x", "https://a.example") == "https://cdn.example/x"
    assert resolve_url("x", "") == "x"
    assert parse_date("") is None
    assert parse_date("1709596800000").year == 2024


def test_error_taxonomy():
    assert HttpStatusFailure(502).retryable is True
    assert HttpStatusFailure(400).retryable is False
    assert str(HttpStatusFailure(400)) == "HTTP 400"
    assert NetworkFailure("x").retryable is True
    assert ParseFailure("bad").reason == "bad"
    assert UnsupportedTarget("no").kind == "unsupported"


async def test_timed_records_success_and_error():
    metrics = FetchMetrics()

    async def ok():
        return 5

    async def boom():
        raise RuntimeError("x")

    assert await timed(metrics, "op", ok, company_id="acme") == 5
    with pytest.raises(RuntimeError):
        await timed(metrics, "op", boom)

    statuses = [m.metadata["status"] for m in metrics.by_name("op")]
    assert statuses == ["success", "error"]
    assert metrics.by_name("op")[0].metadata["company_id"] == "acme"


async def test_timed_without_metrics_just_awaits():
    async def ok():
        return "v"

    assert await timed(None, "op", ok) == "v"


def test_thresholds_and_summary(caplog):
    metrics = FetchMetrics(max_metrics=3, warning_ms=100, critical_ms=500)

    with caplog.at_level(logging.WARNING):
        for value in (10, 200, 900, 50):
            metrics.record("fetch", value)

    summary = metrics.summary()
    assert summary["totalMetrics"] == 3
    assert summary["maxExecutionTime"] == 900
    assert summary["minExecutionTime"] == 50
    assert [v.severity for v in metrics.violations] == ["warning", "critical"]
    assert any("Critical duration" in r.getMessage() for r in caplog.records)


def test_disabled_metrics_record_nothing():
    metrics = FetchMetrics(enabled=False)
    metrics.record("fetch", 10)
    metrics.increment("x")

    assert metrics.metrics == []
    assert metrics.counters == {}
