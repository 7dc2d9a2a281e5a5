"""
Extraction utilities for careerfetch.

Provides:
- JSON-LD JobPosting extraction (tolerant of malformed data)
- Inline script data extraction
- Selector-driven HTML parsing
- In-page scripts for the browser strategy
"""

from careerfetch.extract.jsonld import extract_job_postings_from_html, job_posting_to_raw
from careerfetch.extract.embedded import extract_embedded_jobs
from careerfetch.extract.html import HtmlJobParser, HtmlParser, has_no_jobs_indicator, strip_html

__all__ = [
    "extract_job_postings_from_html",
    "job_posting_to_raw",
    "extract_embedded_jobs",
    "HtmlJobParser",
    "HtmlParser",
    "has_no_jobs_indicator",
    "strip_html",
]
