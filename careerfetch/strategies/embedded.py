"""
Embedded data strategy.

One GET of the careers page, then two tactics over the same markup:
JSON-LD JobPosting blocks, then job arrays assigned in inline scripts.
"""

from __future__ import annotations

import logging
from typing import List

from careerfetch.errors import ParseFailure
from careerfetch.extract.embedded import extract_embedded_jobs
from careerfetch.extract.jsonld import extract_job_postings_from_html
from careerfetch.fetchers.http import HttpClient
from careerfetch.models import RawJobRecord, TargetConfig
from careerfetch.strategies.base import HTML_ACCEPT, FetchStrategy, get_page, response_text

logger = logging.getLogger(__name__)


class EmbeddedDataStrategy(FetchStrategy):
    name = "embedded"

    def can_handle(self, config: TargetConfig) -> bool:
        return bool(config.careers_url)

    async def fetch_jobs(self, config: TargetConfig, client: HttpClient) -> List[RawJobRecord]:
        response = await get_page(client, config.careers_url, HTML_ACCEPT, "HTML page not accessible")
        html = response_text(response)

        jobs = extract_job_postings_from_html(html)
        if jobs:
            logger.debug("Found %d JobPosting records in JSON-LD", len(jobs))
            return jobs

        jobs = extract_embedded_jobs(html)
        if jobs:
            logger.debug("Found %d records in inline script data", len(jobs))
            return jobs

        raise ParseFailure("No embedded data found")
