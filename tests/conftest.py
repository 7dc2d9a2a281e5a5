from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest

from careerfetch.fetchers.http import HttpClientError, HttpResponse
from careerfetch.models import TargetConfig


def make_response(status: int = 200, data: Any = None) -> HttpResponse:
    return HttpResponse(
        status=status,
        status_text="OK" if status < 400 else "Error",
        headers={},
        data={} if data is None else data,
        success=200 <= status < 300,
    )


class FakeHttpClient:
    """
    Stands in for HttpClient. Routes map a URL to an HttpResponse or an
    exception to raise; unknown URLs answer 404.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes = dict(routes or {})
        self.calls: List[Tuple[str, str, Any, Dict[str, str]]] = []

    async def _dispatch(self, method: str, url: str, data: Any, headers: Optional[Dict[str, str]]) -> HttpResponse:
        self.calls.append((method, url, data, dict(headers or {})))
        outcome = self.routes.get(url, make_response(404, "Not Found"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return await self._dispatch("GET", url, None, headers)

    async def post(self, url: str, data: Any = None, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return await self._dispatch("POST", url, data, headers)

    @property
    def urls(self) -> List[str]:
        return [url for _, url, _, _ in self.calls]


@pytest.fixture
def fake_client():
    return FakeHttpClient()


@pytest.fixture
def target():
    return TargetConfig(
        company_id="acme",
        careers_url="https://acme.example/careers",
        api_base_url="https://careers-api.example",
        timeout_ms=5000,
        max_retries=2,
    )


def network_error(message: str = "connection refused") -> HttpClientError:
    return HttpClientError(message, is_network_error=True)
