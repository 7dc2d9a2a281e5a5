"""
Core data models for careerfetch.

Provides:
- TargetConfig: the single careers site a fetch is aimed at
- NormalizedJob: canonical job representation produced by the normalizer
- FetchResult: outcome of one orchestration run
- Text, URL and date helpers shared by strategies and the normalizer
"""

from __future__ import annotations

import copy
import re
import urllib.parse
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


RawJobRecord = Dict[str, Any]

DEFAULT_SOURCE = "unknown-source"


# ----------------------------- Utilities -----------------------------

def normalize_text(s: str) -> str:
    """Collapse whitespace and strip."""
    return re.sub(r"\s+", " ", (s or "")).strip()


def as_text(value: Any) -> str:
    """Stringify a primitive raw value; containers and None become ''."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip()


def slugify(text: str, max_len: int = 20) -> str:
    """Lowercase, non-alphanumerics collapsed to single dashes."""
    slug = re.sub(r"[^a-z0-9]", "-", (text or "").lower())
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug[:max_len]


def resolve_url(url: str, base_url: str) -> str:
    """Resolve a possibly relative URL against the page it came from."""
    url = (url or "").strip()
    if not url:
        return ""
    if url.startswith(("http://", "https://")):
        return url
    if url.startswith("//"):
        return "https:" + url
    if not base_url:
        return url
    return urllib.parse.urljoin(base_url, url)


def now_utc() -> datetime:
    """Current UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """ISO-8601 UTC string with millisecond precision and a Z suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_utc_iso() -> str:
    """Current UTC time as ISO string."""
    return to_iso(now_utc())


def parse_date(date_str: str) -> Optional[datetime]:
    """
    Parse various date formats into a datetime object.
    Returns None if parsing fails.
    """
    if not date_str:
        return None
    date_str = normalize_text(date_str)

    try:
        dt = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    except ValueError:
        pass

    # Common formats
    formats = [
        "%Y-%m-%dT%H:%M:%S.%fZ",
        "%Y-%m-%dT%H:%M:%SZ",
        "%Y-%m-%d",
        "%m/%d/%Y",
        "%d/%m/%Y",
        "%B %d, %Y",
        "%b %d, %Y",
        "%d %B %Y",
        "%d %b %Y",
        "%a, %d %b %Y %H:%M:%S GMT",
    ]
    for fmt in formats:
        try:
            dt = datetime.strptime(date_str, fmt)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt
        except ValueError:
            continue

    # Try Unix timestamp (seconds or milliseconds)
    try:
        ts = int(date_str)
        if ts > 1e12:  # milliseconds
            ts = ts / 1000
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    except (ValueError, OSError, OverflowError):
        pass

    return None


# ----------------------------- TargetConfig -----------------------------

@dataclass(frozen=True)
class TargetConfig:
    """The careers site to scrape. Immutable for the duration of a fetch."""

    company_id: str
    careers_url: str = ""
    api_base_url: str = ""
    timeout_ms: int = 30000
    max_retries: int = 3

    def __post_init__(self):
        if not self.company_id or not str(self.company_id).strip():
            raise ValueError("company_id is required")
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")


# ----------------------------- NormalizedJob -----------------------------

@dataclass(frozen=True)
class NormalizedJob:
    """
    Canonical job record. Built only by the normalizer; never mutated.
    """

    id: str
    title: str
    description: str = ""
    location: str = ""
    department: str = ""
    type: str = ""
    posted_date: str = ""
    apply_url: str = ""
    source: str = DEFAULT_SOURCE
    processed_at: str = ""
    raw_data: RawJobRecord = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation used in delivery payloads."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "department": self.department,
            "type": self.type,
            "postedDate": self.posted_date,
            "applyUrl": self.apply_url,
            "source": self.source,
            "processedAt": self.processed_at,
            "rawData": copy.deepcopy(self.raw_data),
        }


# ----------------------------- FetchResult -----------------------------

@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single JobFetchService.fetch_jobs call."""

    success: bool
    jobs: Tuple[NormalizedJob, ...] = ()
    method: str = "none"
    error: Optional[str] = None
    message: str = ""
    fetched_at: str = field(default_factory=now_utc_iso)
    failures: Tuple[Tuple[str, str], ...] = ()

    @property
    def total_count(self) -> int:
        return len(self.jobs)

    @classmethod
    def succeeded(cls, jobs: List[NormalizedJob], method: str,
                  failures: Tuple[Tuple[str, str], ...] = ()) -> "FetchResult":
        return cls(
            success=True,
            jobs=tuple(jobs),
            method=method,
            message=f"Successfully fetched {len(jobs)} jobs",
            failures=failures,
        )

    @classmethod
    def failed(cls, failures: Tuple[Tuple[str, str], ...] = ()) -> "FetchResult":
        attempted = ", ".join(name for name, _ in failures) or "none capable"
        return cls(
            success=False,
            jobs=(),
            method="none",
            error="All fetch strategies failed",
            message=f"No strategy produced jobs (attempted: {attempted})",
            failures=failures,
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "success": self.success,
            "jobs": [job.to_dict() for job in self.jobs],
            "totalCount": self.total_count,
            "method": self.method,
            "message": self.message,
            "fetchedAt": self.fetched_at,
        }
        if self.error is not None:
            d["error"] = self.error
        return d
