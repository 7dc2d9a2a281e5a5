"""
Strategy error taxonomy.

Every failure a strategy can raise carries a ``kind`` tag and whether it is
worth retrying, so the HTTP retry loop and the orchestrator can act on it
without string matching.
"""

from __future__ import annotations

from typing import Optional


class StrategyError(Exception):
    """Base error for extraction strategies."""

    kind = "strategy"

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class UnsupportedTarget(StrategyError):
    """The strategy cannot handle this target configuration."""

    kind = "unsupported"


class NetworkFailure(StrategyError):
    kind = "network"

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=True)


class TimeoutFailure(StrategyError):
    kind = "timeout"

    def __init__(self, message: str) -> None:
        super().__init__(message, retryable=True)


class HttpStatusFailure(StrategyError):
    """Non-success HTTP status. Only 5xx is retryable."""

    kind = "http_status"

    def __init__(self, code: int, message: Optional[str] = None) -> None:
        super().__init__(message or f"HTTP {code}", retryable=code >= 500)
        self.code = code


class ParseFailure(StrategyError):
    """Payload was fetched but could not be interpreted."""

    kind = "parse"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class AllStrategiesExhausted(StrategyError):
    """Every candidate (endpoint, tactic or strategy) failed."""

    kind = "exhausted"
