"""
Remote JSON API strategy.

Tries the conventional careers API endpoints for a company in order and
returns the first one that answers with a non-empty job array.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from careerfetch.errors import AllStrategiesExhausted
from careerfetch.fetchers.http import HttpClient, HttpClientError
from careerfetch.models import RawJobRecord, TargetConfig
from careerfetch.strategies.base import JSON_ACCEPT, FetchStrategy

logger = logging.getLogger(__name__)

PAYLOAD_LIST_KEYS = ("jobs", "positions", "data")


def build_api_urls(config: TargetConfig) -> List[str]:
    base = config.api_base_url.rstrip("/")
    company = config.company_id
    return [
        f"{base}/api/careers/{company}/jobs",
        f"{base}/api/v1/careers/{company}/positions",
        f"https://api.{company}.com/api/jobs",
    ]


def extract_job_array(payload: Any) -> Optional[List[RawJobRecord]]:
    """The job list carried by an API payload, or None if it has none."""
    if isinstance(payload, list):
        return payload if payload else None
    if isinstance(payload, dict):
        for key in PAYLOAD_LIST_KEYS:
            value = payload.get(key)
            if isinstance(value, list) and value:
                return value
    return None


class ApiStrategy(FetchStrategy):
    name = "api"

    def can_handle(self, config: TargetConfig) -> bool:
        return bool(config.company_id and config.api_base_url)

    async def fetch_jobs(self, config: TargetConfig, client: HttpClient) -> List[RawJobRecord]:
        for url in build_api_urls(config):
            try:
                response = await client.get(url, headers={"Accept": JSON_ACCEPT})
            except HttpClientError as e:
                logger.debug("API endpoint %s failed: %s", url, e)
                continue

            if not response.success:
                logger.debug("API endpoint %s returned HTTP %d", url, response.status)
                continue

            jobs = extract_job_array(response.data)
            if jobs is None:
                logger.debug("API endpoint %s returned no job array", url)
                continue

            logger.debug("API endpoint %s returned %d records", url, len(jobs))
            return jobs

        raise AllStrategiesExhausted("All API endpoints failed")
