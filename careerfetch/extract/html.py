"""
Static HTML parsing of careers pages.

HtmlJobParser is the default implementation of the HTML parsing capability
consumed by the static HTML strategy: selector-driven extraction of job
containers into raw records.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from bs4 import BeautifulSoup, Tag

from careerfetch.models import (
    RawJobRecord,
    normalize_text,
    parse_date,
    resolve_url,
    to_iso,
)


NO_JOBS_INDICATORS = (
    "no positions available",
    "no current openings",
    "no job availabilities",
    "no opportunities",
)


class HtmlParser(Protocol):
    """Anything that can turn careers-page markup into raw job records."""

    def parse_jobs_from_html(self, html: str, base_url: str) -> List[RawJobRecord]:
        ...


def strip_html(html: str, max_len: int = 8000) -> str:
    """
    Convert HTML to plain text, stripping tags.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "lxml")

    # Remove script, style, and other non-content tags
    for tag in soup(["script", "style", "noscript", "iframe", "svg", "canvas"]):
        tag.decompose()

    text = soup.get_text(" ", strip=True)
    text = re.sub(r"\s+", " ", text).strip()

    return text[:max_len]


def has_no_jobs_indicator(html: str) -> bool:
    """True when the page states outright that nothing is open."""
    text = strip_html(html, max_len=200000).lower()
    return any(indicator in text for indicator in NO_JOBS_INDICATORS)


@dataclass(frozen=True)
class HtmlParsingConfig:
    job_selectors: Tuple[str, ...] = (
        ".job-listing",
        ".career-item",
        ".position-card",
        "[data-job-id]",
        ".opportunity",
        "article.job",
        ".job-post",
        ".job-item",
        ".position",
        ".opening",
    )
    title_selectors: Tuple[str, ...] = (
        "h1", "h2", "h3", "h4",
        ".job-title", ".title", ".position-title", "[class*='title']", ".heading",
    )
    department_selectors: Tuple[str, ...] = (
        ".department", ".category", "[class*='department']", ".job-category", ".division", ".team",
    )
    location_selectors: Tuple[str, ...] = (
        ".location", ".job-location", "[class*='location']", ".city", ".office", ".workplace",
    )
    type_selectors: Tuple[str, ...] = (
        ".employment-type", ".job-type", ".schedule", ".commitment", ".contract-type",
    )
    description_selectors: Tuple[str, ...] = (
        ".description", ".summary", "[class*='description']", ".job-summary", ".overview", ".details",
    )
    date_selectors: Tuple[str, ...] = (
        ".posted-date", ".date", "[class*='posted']", "time", ".created-date", ".publish-date",
    )
    apply_url_selectors: Tuple[str, ...] = (
        "a[href*='apply']", "a.apply-button", "[class*='apply'] a", ".apply-link", ".application-link",
    )
    id_attributes: Tuple[str, ...] = ("data-job-id", "id", "data-id", "data-position-id")
    max_description_len: int = 500


class HtmlJobParser:
    """
    Selector-driven parser. The first job-container selector that yields
    titled records wins; later selectors are not consulted.
    """

    def __init__(self, config: Optional[HtmlParsingConfig] = None):
        self.config = config or HtmlParsingConfig()

    def parse_jobs_from_html(self, html: str, base_url: str) -> List[RawJobRecord]:
        if not html:
            return []

        soup = BeautifulSoup(html, "lxml")
        jobs: List[RawJobRecord] = []

        for selector in self.config.job_selectors:
            for element in soup.select(selector):
                job = self._extract_job(element, base_url)
                if job["title"]:
                    jobs.append(job)
            if jobs:
                break

        return jobs

    def _extract_job(self, element: Tag, base_url: str) -> RawJobRecord:
        return {
            "id": self._id(element),
            "title": self._text(element, self.config.title_selectors),
            "department": self._text(element, self.config.department_selectors),
            "location": self._text(element, self.config.location_selectors),
            "type": self._text(element, self.config.type_selectors),
            "description": self._description(element),
            "posted_date": self._date(element),
            "apply_url": self._apply_url(element, base_url),
        }

    def _text(self, element: Tag, selectors: Tuple[str, ...]) -> str:
        for selector in selectors:
            found = element.select_one(selector)
            if found is not None:
                text = normalize_text(found.get_text(" ", strip=True))
                if text:
                    return text
        return ""

    def _id(self, element: Tag) -> str:
        for attr in self.config.id_attributes:
            value = element.get(attr)
            if value:
                return str(value)
        return ""

    def _description(self, element: Tag) -> str:
        description = self._text(element, self.config.description_selectors)
        limit = self.config.max_description_len
        if len(description) > limit:
            return description[:limit].strip() + "..."
        return description

    def _date(self, element: Tag) -> str:
        for selector in self.config.date_selectors:
            found = element.select_one(selector)
            if found is None:
                continue
            if found.get("datetime"):
                return str(found["datetime"])
            parsed = parse_date(found.get_text(" ", strip=True))
            if parsed:
                return to_iso(parsed)
        return ""

    def _apply_url(self, element: Tag, base_url: str) -> str:
        for selector in self.config.apply_url_selectors:
            link = element.select_one(selector)
            if link is not None and link.get("href"):
                return resolve_url(link["href"], base_url)
        fallback = element if element.name == "a" and element.get("href") else element.select_one("a[href]")
        if fallback is not None:
            return resolve_url(fallback["href"], base_url)
        return ""
