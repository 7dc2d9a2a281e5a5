"""
Job normalization pipeline.

Maps heterogeneous raw records onto NormalizedJob. Each canonical field has an
explicit, ordered tuple of alias keys; the first non-empty alias wins.
Records without a resolvable title are dropped.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple

from careerfetch.models import (
    DEFAULT_SOURCE,
    NormalizedJob,
    RawJobRecord,
    as_text,
    now_utc,
    parse_date,
    resolve_url,
    slugify,
    to_iso,
)

logger = logging.getLogger(__name__)


FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "title": ("title", "position_title", "name"),
    "id": ("id", "job_id"),
    "department": ("department", "category", "division"),
    "location": ("location", "city", "office"),
    "type": ("type", "employment_type", "schedule"),
    "description": ("description", "summary", "overview"),
    "posted_date": ("posted_date", "created_at", "date_posted"),
    "apply_url": ("apply_url", "application_url", "url"),
}


def resolve_field(raw: RawJobRecord, field_name: str) -> str:
    """Return the first non-empty alias value for a canonical field, or ''."""
    for key in FIELD_ALIASES[field_name]:
        value = as_text(raw.get(key))
        if value:
            return value
    return ""


def generate_job_id(title: str, processed: datetime) -> str:
    """Deterministic fallback id: slugified title plus processing epoch millis."""
    return f"{slugify(title)}-{int(processed.timestamp() * 1000)}"


class JobNormalizer:
    """Converts raw records from any strategy into NormalizedJob objects."""

    def normalize(
        self,
        raw_jobs: Iterable[RawJobRecord],
        source: str = DEFAULT_SOURCE,
        base_url: str = "",
        processed: Optional[datetime] = None,
    ) -> List[NormalizedJob]:
        """
        Normalize a batch of raw records.

        Args:
            raw_jobs: Records as emitted by a strategy
            source: Caller-supplied source tag
            base_url: Page URL used to resolve relative apply links
            processed: Processing time shared by every record (defaults to now)

        Returns:
            NormalizedJob list in input order, untitled records removed
        """
        processed = processed or now_utc()
        processed_at = to_iso(processed)
        source = source or DEFAULT_SOURCE

        jobs: List[NormalizedJob] = []
        emitted_ids: Set[str] = set()
        dropped = 0

        for raw in raw_jobs:
            if not isinstance(raw, dict):
                dropped += 1
                continue
            job = self._normalize_one(raw, source, base_url, processed, processed_at)
            if job is None:
                dropped += 1
                continue

            # Keep ids unique inside one result set, suffixed ids included
            if job.id in emitted_ids:
                suffix = 2
                while f"{job.id}-{suffix}" in emitted_ids:
                    suffix += 1
                job = replace(job, id=f"{job.id}-{suffix}")
            emitted_ids.add(job.id)
            jobs.append(job)

        if dropped:
            logger.debug("Dropped %d raw records without a usable title", dropped)
        return jobs

    def _normalize_one(
        self,
        raw: RawJobRecord,
        source: str,
        base_url: str,
        processed: datetime,
        processed_at: str,
    ) -> Optional[NormalizedJob]:
        title = resolve_field(raw, "title")
        if not title:
            return None

        posted = parse_date(resolve_field(raw, "posted_date"))

        return NormalizedJob(
            id=resolve_field(raw, "id") or generate_job_id(title, processed),
            title=title,
            description=resolve_field(raw, "description"),
            location=resolve_field(raw, "location"),
            department=resolve_field(raw, "department"),
            type=resolve_field(raw, "type"),
            posted_date=to_iso(posted) if posted else processed_at,
            apply_url=resolve_url(resolve_field(raw, "apply_url"), base_url),
            source=source,
            processed_at=processed_at,
            raw_data=copy.deepcopy(raw),
        )

