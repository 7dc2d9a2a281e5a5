"""
Remote JSON feed strategy: the careers URL with a ``.json`` suffix.
"""

from __future__ import annotations

from typing import List
from urllib.parse import urlsplit, urlunsplit

from careerfetch.errors import ParseFailure
from careerfetch.fetchers.http import HttpClient
from careerfetch.models import RawJobRecord, TargetConfig
from careerfetch.strategies.base import JSON_ACCEPT, FetchStrategy, get_page


def build_json_url(careers_url: str) -> str:
    """``https://x.com/careers/?a=1`` -> ``https://x.com/careers.json?a=1``"""
    parts = urlsplit(careers_url)
    path = parts.path.rstrip("/") + ".json"
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


class JsonFeedStrategy(FetchStrategy):
    name = "json"

    def can_handle(self, config: TargetConfig) -> bool:
        return bool(config.careers_url)

    async def fetch_jobs(self, config: TargetConfig, client: HttpClient) -> List[RawJobRecord]:
        url = build_json_url(config.careers_url)
        response = await get_page(client, url, JSON_ACCEPT, "JSON endpoint not accessible")

        data = response.data
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("jobs"), list):
            return data["jobs"]
        raise ParseFailure("Invalid JSON response format")
