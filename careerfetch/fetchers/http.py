"""
HTTP client with retries and exponential backoff.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
from urllib.parse import urljoin

import aiohttp

from careerfetch.errors import StrategyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Backoff parameters. Built once per client and reused across calls."""
    max_attempts: int = 3
    base_delay_ms: int = 1000
    exponential_base: float = 2.0
    jitter: bool = True
    max_delay_ms: int = 10000

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")


def compute_delay(
    attempt: int,
    config: RetryConfig,
    rand: Callable[[], float] = random.random,
) -> float:
    """
    Delay in milliseconds to wait after the given (1-based) failed attempt.

    Exponential, capped at max_delay_ms; jitter spreads it by up to +/-10%.
    """
    delay = min(
        config.base_delay_ms * (config.exponential_base ** (attempt - 1)),
        config.max_delay_ms,
    )
    if not config.jitter:
        return float(delay)
    spread = delay * 0.1
    return max(0.0, delay + (rand() * 2 - 1) * spread)


@dataclass
class HttpResponse:
    """A well-formed HTTP response. Non-2xx is reported through ``success``."""
    status: int
    status_text: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    data: Any = None
    success: bool = False


class HttpClientError(Exception):
    """Transport failure (or a 5xx seen inside the retry loop)."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        status_text: Optional[str] = None,
        response: Optional[HttpResponse] = None,
        is_network_error: bool = False,
        is_timeout_error: bool = False,
    ):
        super().__init__(message)
        self.status = status
        self.status_text = status_text
        self.response = response
        self.is_network_error = is_network_error
        self.is_timeout_error = is_timeout_error


def is_retryable_error(error: BaseException) -> bool:
    """Network faults, timeouts and 5xx are transient; everything else is fatal."""
    if isinstance(error, HttpClientError):
        return (
            error.is_network_error
            or error.is_timeout_error
            or (error.status is not None and error.status >= 500)
        )
    if isinstance(error, StrategyError):
        return error.retryable
    return False


class RetryStrategy:
    """
    Runs an async operation, retrying transient failures with backoff.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep or asyncio.sleep

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        is_retryable: Optional[Callable[[BaseException], bool]] = None,
    ) -> T:
        check = is_retryable or is_retryable_error
        last_error: Optional[Exception] = None

        for attempt in range(1, self.config.max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                last_error = e
                if attempt == self.config.max_attempts or not check(e):
                    raise
                delay = compute_delay(attempt, self.config)
                logger.debug(
                    "Attempt %d/%d failed (%s), retrying in %.0fms",
                    attempt, self.config.max_attempts, e, delay,
                )
                await self._sleep(delay / 1000)

        # max_attempts >= 1 guarantees the loop returned or raised
        raise last_error  # pragma: no cover


class HttpClient:
    """
    Async HTTP client with timeouts, header injection and retry/backoff.

    GET/POST/PUT/DELETE resolve to an HttpResponse for every well-formed
    response, including 4xx/5xx; only transport failures raise HttpClientError.
    """

    USER_AGENT = "careerfetch/1.0 (+job listing sync)"

    def __init__(
        self,
        base_url: str = "",
        timeout_ms: int = 30000,
        retries: int = 3,
        user_agent: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        retry_config: Optional[RetryConfig] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.base_url = base_url
        self.timeout_ms = timeout_ms
        self.user_agent = user_agent or self.USER_AGENT
        self.default_headers = dict(headers or {})
        self.retry = RetryStrategy(
            retry_config or RetryConfig(
                max_attempts=retries + 1,
                base_delay_ms=1000,
                max_delay_ms=10000,
                exponential_base=2.0,
                jitter=True,
            ),
            sleep=sleep,
        )
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HttpClient":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def start(self) -> None:
        """Initialize the HTTP session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=20,
                ttl_dns_cache=300,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                cookie_jar=aiohttp.CookieJar(),
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return await self.request("GET", url, headers=headers)

    async def post(
        self,
        url: str,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        return await self.request("POST", url, data=data, headers=headers)

    async def put(
        self,
        url: str,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        return await self.request("PUT", url, data=data, headers=headers)

    async def delete(self, url: str, headers: Optional[Dict[str, str]] = None) -> HttpResponse:
        return await self.request("DELETE", url, headers=headers)

    async def request(
        self,
        method: str,
        url: str,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        full_url = self.build_url(url)
        request_headers = self.build_headers(headers or {}, has_body=data is not None)
        body = self._encode_body(data)

        try:
            return await self.retry.execute(
                lambda: self._send_once(method, full_url, body, request_headers)
            )
        except HttpClientError as e:
            # 5xx that survived every retry is still a well-formed response
            if e.response is not None:
                return e.response
            raise

    def build_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")) or not self.base_url:
            return url
        return urljoin(self.base_url.rstrip("/") + "/", url.lstrip("/"))

    def build_headers(self, custom: Dict[str, str], has_body: bool) -> Dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
            **self.default_headers,
            **custom,
        }
        if has_body and not any(k.lower() == "content-type" for k in headers):
            headers["Content-Type"] = "application/json"
        return headers

    @staticmethod
    def _encode_body(data: Any) -> Optional[bytes]:
        if data is None:
            return None
        if isinstance(data, bytes):
            return data
        if isinstance(data, str):
            return data.encode("utf-8")
        return json.dumps(data).encode("utf-8")

    @staticmethod
    def _parse_body(text: str) -> Any:
        if not text.strip():
            return {}
        try:
            return json.loads(text)
        except ValueError:
            return text

    async def _send_once(
        self,
        method: str,
        url: str,
        body: Optional[bytes],
        headers: Dict[str, str],
    ) -> HttpResponse:
        if self._session is None or self._session.closed:
            await self.start()

        timeout = aiohttp.ClientTimeout(total=self.timeout_ms / 1000)
        try:
            async with self._session.request(
                method,
                url,
                data=body,
                headers=headers,
                timeout=timeout,
                allow_redirects=True,
            ) as resp:
                text = await resp.text(errors="replace")
                response = HttpResponse(
                    status=resp.status,
                    status_text=resp.reason or "",
                    headers={k.lower(): v for k, v in resp.headers.items()},
                    data=self._parse_body(text),
                    success=200 <= resp.status < 300,
                )
        except asyncio.TimeoutError:
            raise HttpClientError(
                f"Request timeout after {self.timeout_ms}ms: {method} {url}",
                is_timeout_error=True,
            ) from None
        except aiohttp.ClientError as e:
            raise HttpClientError(f"Network error: {e}", is_network_error=True) from e

        if response.status >= 500:
            raise HttpClientError(
                f"HTTP {response.status}: {response.status_text}",
                status=response.status,
                status_text=response.status_text,
                response=response,
            )
        return response
