"""
Robust JSON-LD extraction for JobPosting schema.org data.

Handles:
- Multiple script tags with different JSON-LD objects
- @graph containers and top-level arrays
- Malformed JSON (trailing commas, JS-style comments)
- Nested location / organization objects
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List

from bs4 import BeautifulSoup

from careerfetch.models import RawJobRecord, normalize_text


def extract_jsonld_scripts(html: str) -> List[str]:
    """Extract all JSON-LD script contents from HTML."""
    if not html:
        return []

    scripts = []
    soup = BeautifulSoup(html, "lxml")

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        content = script.string
        if content:
            scripts.append(content.strip())

    return scripts


def clean_jsonld_string(s: str) -> str:
    """
    Clean malformed JSON-LD that might have JS artifacts.
    """
    # Remove JS-style multi-line comments
    s = re.sub(r"/\*.*?\*/", "", s, flags=re.DOTALL)

    # Remove JS-style single-line comments (not the // inside URLs)
    s = re.sub(r"(?<![:\"'])//[^\n]*$", "", s, flags=re.MULTILINE)

    # Fix trailing commas before ] or }
    s = re.sub(r",\s*([\]}])", r"\1", s)

    # Fix unquoted keys (common in JS literals)
    # This is a simple heuristic, won't catch all cases
    s = re.sub(r"(?<=[{,])\s*([a-zA-Z_][a-zA-Z0-9_]*)\s*:", r'"\1":', s)

    return s


def parse_jsonld_tolerant(script_content: str) -> Any:
    """
    Parse JSON-LD with tolerance for common issues. Returns None on failure.
    """
    try:
        return json.loads(script_content)
    except json.JSONDecodeError:
        pass

    cleaned = clean_jsonld_string(script_content)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    # Sometimes there's wrapper JS around the object
    match = re.search(r"(\{.*\}|\[.*\])", cleaned, re.DOTALL)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    return None


def is_job_posting(obj: Any) -> bool:
    """Check if an object is a JobPosting."""
    if not isinstance(obj, dict):
        return False
    obj_type = obj.get("@type", "")
    if isinstance(obj_type, list):
        return "JobPosting" in obj_type
    return obj_type == "JobPosting"


def iter_job_postings(data: Any) -> Iterable[Dict]:
    """
    Yield every JobPosting in a parsed JSON-LD value: the value itself,
    elements of a top-level array, and members of a @graph container.
    """
    if isinstance(data, list):
        for item in data:
            yield from iter_job_postings(item)
    elif isinstance(data, dict):
        if is_job_posting(data):
            yield data
        if "@graph" in data:
            yield from iter_job_postings(data["@graph"])
        for item in data.get("itemListElement", None) or []:
            if isinstance(item, dict) and "item" in item:
                yield from iter_job_postings(item["item"])


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return normalize_text(str(value))
    if isinstance(value, dict):
        return normalize_text(str(value.get("name", "") or value.get("@value", "") or value.get("value", "")))
    if isinstance(value, list):
        return ", ".join(t for t in (_text(v) for v in value) if t)
    return ""


def extract_identifier(obj: Dict) -> str:
    identifier = obj.get("identifier")
    if isinstance(identifier, dict):
        return _text(identifier.get("value", ""))
    if identifier not in (None, ""):
        return _text(identifier)
    return _text(obj.get("id", ""))


def extract_location(obj: Dict) -> str:
    """addressLocality of jobLocation.address, or a plain string location."""
    job_loc = obj.get("jobLocation")
    if isinstance(job_loc, list):
        job_loc = job_loc[0] if job_loc else None
    if isinstance(job_loc, dict):
        address = job_loc.get("address")
        if isinstance(address, dict):
            return _text(address.get("addressLocality", ""))
        if isinstance(address, str):
            return normalize_text(address)
        return _text(job_loc.get("name", ""))
    if isinstance(job_loc, str):
        return normalize_text(job_loc)
    return ""


def extract_department(obj: Dict) -> str:
    hiring_org = obj.get("hiringOrganization")
    if isinstance(hiring_org, dict) and hiring_org.get("name"):
        return _text(hiring_org["name"])
    if isinstance(hiring_org, str) and hiring_org.strip():
        return normalize_text(hiring_org)
    return _text(obj.get("department", ""))


def job_posting_to_raw(obj: Dict) -> RawJobRecord:
    """Map a JobPosting object onto the raw record field names."""
    return {
        "id": extract_identifier(obj),
        "title": _text(obj.get("title", "")),
        "description": str(obj.get("description", "") or ""),
        "location": extract_location(obj),
        "department": extract_department(obj),
        "type": _text(obj.get("employmentType", "")),
        "posted_date": _text(obj.get("datePosted", "")),
        "apply_url": _text(obj.get("url", "") or obj.get("applicationUrl", "")),
    }


def extract_job_postings_from_html(html: str) -> List[RawJobRecord]:
    """
    Extract all JobPosting objects from the JSON-LD blocks of a page.

    A block that fails to parse is skipped; it never aborts the scan.
    """
    jobs: List[RawJobRecord] = []

    for script_content in extract_jsonld_scripts(html):
        data = parse_jsonld_tolerant(script_content)
        if data is None:
            continue
        for obj in iter_job_postings(data):
            jobs.append(job_posting_to_raw(obj))

    return jobs
