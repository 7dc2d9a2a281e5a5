"""
Extraction of job data embedded in inline <script> bodies.

Careers pages often ship their listing as a JS literal assigned to a global
(``window.jobData = {...}``, ``var positions = [...]``) or as an
``application/json`` data island. This module finds those literals, parses
them tolerantly and digs out the array that looks like job records.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional

from bs4 import BeautifulSoup

from careerfetch.extract.jsonld import is_job_posting, job_posting_to_raw, parse_jsonld_tolerant
from careerfetch.models import RawJobRecord

JOB_CONTAINER_KEYS = ("jobs", "positions", "data", "results", "openings", "postings", "items")
TITLE_KEYS = ("title", "position_title", "name")

_ASSIGNMENT = re.compile(
    r"(?:\bwindow\.|\bvar\s+|\blet\s+|\bconst\s+)?[A-Za-z_$][\w$.]*(?:\[[\"'][^\"']+[\"']\])?\s*=\s*(?=[\[{])"
)


def extract_inline_scripts(html: str) -> List[str]:
    """Bodies of inline scripts that may hold data (no src, not JSON-LD)."""
    if not html:
        return []

    soup = BeautifulSoup(html, "lxml")
    bodies = []
    for script in soup.find_all("script"):
        if script.get("src"):
            continue
        script_type = (script.get("type") or "").lower()
        if script_type == "application/ld+json":
            continue
        content = script.string
        if content and content.strip():
            bodies.append(content)
    return bodies


def cut_literal(text: str, start: int) -> Optional[str]:
    """
    Return the balanced {...} or [...] literal starting at ``start``,
    skipping brackets inside string literals. None when unbalanced.
    """
    opener = text[start]
    closer = "}" if opener == "{" else "]"
    depth = 0
    quote = ""
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = ""
            continue
        if ch in ("\"", "'", "`"):
            quote = ch
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def iter_assigned_literals(script: str) -> Iterable[Any]:
    """Parse every object/array literal assigned in a script body."""
    for match in _ASSIGNMENT.finditer(script):
        literal = cut_literal(script, match.end())
        if not literal:
            continue
        data = parse_jsonld_tolerant(literal)
        if data is not None:
            yield data


def looks_like_job(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    if is_job_posting(item):
        return True
    return any(isinstance(item.get(k), str) and item.get(k).strip() for k in TITLE_KEYS)


def find_job_array(data: Any, depth: int = 0) -> List[dict]:
    """
    Locate a list of job-like dicts: the value itself, or one nested under a
    recognized container key (searched a few levels deep).
    """
    if depth > 3:
        return []
    if isinstance(data, list):
        if data and any(looks_like_job(item) for item in data):
            return [item for item in data if isinstance(item, dict)]
        return []
    if isinstance(data, dict):
        for key in JOB_CONTAINER_KEYS:
            if key in data:
                found = find_job_array(data[key], depth + 1)
                if found:
                    return found
    return []


def to_raw_record(item: dict) -> RawJobRecord:
    if is_job_posting(item):
        return job_posting_to_raw(item)
    return dict(item)


def extract_embedded_jobs(html: str) -> List[RawJobRecord]:
    """
    Extract job records from inline script data. First plausible array wins.
    """
    for body in extract_inline_scripts(html):
        stripped = body.strip()
        candidates: Iterable[Any]
        if stripped[:1] in ("{", "["):
            # Pure data island (e.g. <script type="application/json">)
            whole = parse_jsonld_tolerant(stripped)
            candidates = [whole] if whole is not None else iter_assigned_literals(body)
        else:
            candidates = iter_assigned_literals(body)

        for data in candidates:
            jobs = find_job_array(data)
            if jobs:
                return [to_raw_record(item) for item in jobs]

    return []
