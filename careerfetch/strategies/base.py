"""
Base strategy interface for job extraction.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, TYPE_CHECKING

from careerfetch.errors import HttpStatusFailure, NetworkFailure, StrategyError, TimeoutFailure
from careerfetch.fetchers.http import HttpClientError, HttpResponse
from careerfetch.models import RawJobRecord, TargetConfig

if TYPE_CHECKING:
    from careerfetch.fetchers.http import HttpClient


HTML_ACCEPT = "text/html,application/xhtml+xml"
JSON_ACCEPT = "application/json"


class FetchStrategy(ABC):
    """
    Base class for extraction strategies.

    Each strategy is responsible for:
    - Deciding whether a target carries what it needs (``can_handle``)
    - Fetching and extracting raw records, raising StrategyError on failure

    Normalization and the fallback order belong to the JobFetchService.
    """

    name: str = "base"

    @abstractmethod
    def can_handle(self, config: TargetConfig) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def fetch_jobs(
        self,
        config: TargetConfig,
        client: Optional["HttpClient"],
    ) -> List[RawJobRecord]:
        """
        Fetch raw job records for the target.

        Args:
            config: Target site
            client: HTTP client shared by every strategy of one fetch
                (the browser strategy ignores it)

        Returns:
            Raw records; an empty list means the site has no openings
        """
        raise NotImplementedError


def to_strategy_error(error: HttpClientError) -> StrategyError:
    """Map a transport-level client error onto the strategy taxonomy."""
    if error.is_timeout_error:
        return TimeoutFailure(str(error))
    if error.is_network_error:
        return NetworkFailure(str(error))
    if error.status is not None:
        return HttpStatusFailure(error.status, str(error))
    return NetworkFailure(str(error))


async def get_page(
    client: "HttpClient",
    url: str,
    accept: str,
    not_accessible: str,
) -> HttpResponse:
    """
    GET ``url`` and insist on a 2xx status.

    Raises HttpStatusFailure(status, not_accessible) on a non-success
    response and a mapped StrategyError on transport failure.
    """
    headers: Dict[str, str] = {"Accept": accept}
    try:
        response = await client.get(url, headers=headers)
    except HttpClientError as e:
        raise to_strategy_error(e) from e
    if not response.success:
        raise HttpStatusFailure(response.status, not_accessible)
    return response


def response_text(response: HttpResponse) -> str:
    """HTML body as text; the client hands back parsed JSON when it can."""
    data = response.data
    if isinstance(data, str):
        return data
    if data is None or data == {}:
        return ""
    return json.dumps(data)
