"""
Fetcher layer for careerfetch.

Provides HTTP and browser-based fetching with:
- Retries with exponential backoff and jitter
- Per-request timeouts
- Playwright page setup with resource blocking
"""

from careerfetch.fetchers.http import HttpClient, HttpClientError, HttpResponse, RetryConfig, RetryStrategy
from careerfetch.fetchers.browser import BrowserConfig, BrowserDriver, BrowserSession

__all__ = [
    "HttpClient",
    "HttpClientError",
    "HttpResponse",
    "RetryConfig",
    "RetryStrategy",
    "BrowserConfig",
    "BrowserDriver",
    "BrowserSession",
]
