"""
In-process fetch metrics.

A FetchMetrics instance is handed to the JobFetchService; there is no global
registry. ``timed()`` wraps one awaitable and records how long it took.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, TypeVar

from careerfetch.models import now_utc_iso

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Metric:
    name: str
    value: float
    unit: str = "milliseconds"
    timestamp: str = field(default_factory=now_utc_iso)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Violation:
    metric: str
    value: float
    threshold: float
    severity: str


class FetchMetrics:
    """
    Bounded store of timing metrics with warning/critical thresholds.
    """

    def __init__(
        self,
        max_metrics: int = 1000,
        warning_ms: float = 1000,
        critical_ms: float = 5000,
        enabled: bool = True,
    ):
        self.enabled = enabled
        self.warning_ms = warning_ms
        self.critical_ms = critical_ms
        self._metrics: Deque[Metric] = deque(maxlen=max_metrics)
        self._violations: Deque[Violation] = deque(maxlen=max_metrics)
        self.counters: Dict[str, int] = {}

    def record(
        self,
        name: str,
        value: float,
        unit: str = "milliseconds",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not self.enabled:
            return
        self._metrics.append(Metric(name=name, value=value, unit=unit, metadata=dict(metadata or {})))
        if unit == "milliseconds":
            self._check_thresholds(name, value)

    def increment(self, name: str, by: int = 1) -> None:
        if self.enabled:
            self.counters[name] = self.counters.get(name, 0) + by

    def _check_thresholds(self, name: str, value: float) -> None:
        if value >= self.critical_ms:
            self._violations.append(Violation(name, value, self.critical_ms, "critical"))
            logger.warning("Critical duration for %s: %.0fms (threshold %.0fms)", name, value, self.critical_ms)
        elif value >= self.warning_ms:
            self._violations.append(Violation(name, value, self.warning_ms, "warning"))
            logger.debug("Slow %s: %.0fms (threshold %.0fms)", name, value, self.warning_ms)

    @property
    def metrics(self) -> List[Metric]:
        return list(self._metrics)

    @property
    def violations(self) -> List[Violation]:
        return list(self._violations)

    def by_name(self, name: str) -> List[Metric]:
        return [m for m in self._metrics if m.name == name]

    def summary(self) -> Dict[str, Any]:
        durations = [m.value for m in self._metrics if m.unit == "milliseconds"]
        return {
            "timestamp": now_utc_iso(),
            "totalMetrics": len(self._metrics),
            "totalExecutions": len(durations),
            "averageExecutionTime": sum(durations) / len(durations) if durations else 0.0,
            "maxExecutionTime": max(durations) if durations else 0.0,
            "minExecutionTime": min(durations) if durations else 0.0,
            "violations": len(self._violations),
            "counters": dict(self.counters),
        }

    def clear(self) -> None:
        self._metrics.clear()
        self._violations.clear()
        self.counters.clear()


async def timed(
    metrics: Optional[FetchMetrics],
    name: str,
    operation: Callable[[], Awaitable[T]],
    **metadata: Any,
) -> T:
    """
    Await ``operation()`` and record its duration under ``name``, with
    ``status`` set to success or error. Exceptions propagate unchanged.
    """
    if metrics is None:
        return await operation()

    start = time.perf_counter()
    status = "error"
    try:
        result = await operation()
        status = "success"
        return result
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        metrics.record(name, elapsed_ms, metadata={**metadata, "status": status})
