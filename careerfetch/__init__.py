"""
careerfetch: resilient job-listing fetcher for a single careers site.

Tries a careers API, a JSON feed, the static HTML page, embedded structured
data and finally a headless browser, and normalizes whatever succeeds first.
"""

__version__ = "1.0.0"

from careerfetch.models import FetchResult, NormalizedJob, TargetConfig
from careerfetch.orchestrator import JobFetchService

__all__ = [
    "FetchResult",
    "NormalizedJob",
    "TargetConfig",
    "JobFetchService",
]
