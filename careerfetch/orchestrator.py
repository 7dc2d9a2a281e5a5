"""
Fetch orchestrator for careerfetch.

Runs the extraction strategies in order against one target, normalizes the
first successful batch and reports the outcome as a FetchResult.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from careerfetch.fetchers.browser import BrowserConfig
from careerfetch.fetchers.http import HttpClient
from careerfetch.metrics import FetchMetrics, timed
from careerfetch.models import DEFAULT_SOURCE, FetchResult, TargetConfig, now_utc
from careerfetch.normalize import JobNormalizer
from careerfetch.strategies import FetchStrategy, default_strategies

logger = logging.getLogger(__name__)


class JobFetchService:
    """
    Multi-strategy job fetcher with graceful degradation.

    The strategy list is fixed at construction. A strategy that raises is
    logged and skipped; only when none succeeds is a failed result returned.
    The service keeps no per-fetch state, so one instance can serve several
    targets concurrently.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[FetchStrategy]] = None,
        normalizer: Optional[JobNormalizer] = None,
        metrics: Optional[FetchMetrics] = None,
        client: Optional[HttpClient] = None,
        browser_config: Optional[BrowserConfig] = None,
    ):
        self.strategies: Tuple[FetchStrategy, ...] = tuple(
            strategies if strategies is not None else default_strategies(browser_config)
        )
        self.normalizer = normalizer or JobNormalizer()
        self.metrics = metrics
        self.client = client

    async def fetch_jobs(self, config: TargetConfig, source: str = DEFAULT_SOURCE) -> FetchResult:
        """
        Fetch and normalize jobs for one target.

        Args:
            config: Target site
            source: Tag stamped on every returned job

        Returns:
            FetchResult; never raises for expected failures
        """
        if not isinstance(config, TargetConfig):
            raise TypeError(f"config must be a TargetConfig, got {type(config).__name__}")

        if self.client is not None:
            return await timed(self.metrics, "fetch", lambda: self._run(config, source, self.client),
                               company_id=config.company_id)

        async with HttpClient(timeout_ms=config.timeout_ms, retries=config.max_retries) as client:
            return await timed(self.metrics, "fetch", lambda: self._run(config, source, client),
                               company_id=config.company_id)

    async def _run(self, config: TargetConfig, source: str, client: HttpClient) -> FetchResult:
        failures: List[Tuple[str, str]] = []

        for strategy in self.strategies:
            if not strategy.can_handle(config):
                logger.debug("Strategy %s cannot handle %s, skipping", strategy.name, config.company_id)
                continue

            logger.info("Attempting to fetch jobs using strategy: %s", strategy.name)
            try:
                raw_jobs = await timed(
                    self.metrics,
                    f"strategy.{strategy.name}",
                    lambda: strategy.fetch_jobs(config, client),
                    company_id=config.company_id,
                )
            except Exception as e:
                logger.warning("Strategy %s failed: %s", strategy.name, e)
                failures.append((strategy.name, str(e) or type(e).__name__))
                if self.metrics is not None:
                    self.metrics.increment(f"strategy.{strategy.name}.failed")
                continue

            jobs = self.normalizer.normalize(
                raw_jobs,
                source=source,
                base_url=config.careers_url,
                processed=now_utc(),
            )
            logger.info("Successfully fetched %d jobs using %s", len(jobs), strategy.name)
            if self.metrics is not None:
                self.metrics.increment(f"strategy.{strategy.name}.succeeded")
            return FetchResult.succeeded(jobs, strategy.name, tuple(failures))

        logger.error("All fetch strategies failed for %s", config.company_id)
        if self.metrics is not None:
            self.metrics.increment("fetch.exhausted")
        return FetchResult.failed(tuple(failures))
