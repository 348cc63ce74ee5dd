"""People-search collaborator: HTTP client for the profile lookup service."""

from typing import Any, Protocol

import httpx

from ..errors import SearchFailed
from ..logging_config import get_logger
from ..models import Profile, SearchCriteria

logger = get_logger(__name__)


class IPeopleSearch(Protocol):
    """Looks up profiles matching search criteria."""

    async def search(self, criteria: SearchCriteria) -> list[Profile]:
        """Return matching profiles in display order; raise SearchFailed on error."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


class HttpPeopleSearch:
    """POSTs criteria as JSON and reads back a list of profile records."""

    def __init__(
        self,
        search_url: str | None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._search_url = search_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def search(self, criteria: SearchCriteria) -> list[Profile]:
        """Query the search service."""
        if not self._search_url:
            raise SearchFailed("People search URL is not configured")

        try:
            response = await self._client.post(self._search_url, json=criteria)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise SearchFailed(
                f"People search returned {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise SearchFailed(f"People search request failed: {e}") from e

        records = self._extract_records(body)
        profiles = [Profile.from_dict(r) for r in records if isinstance(r, dict)]
        logger.debug("People search %s -> %d profiles", criteria, len(profiles))
        return profiles

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _extract_records(body: Any) -> list:
        if isinstance(body, list):
            return body
        if isinstance(body, dict) and isinstance(body.get("profiles"), list):
            return body["profiles"]
        raise SearchFailed(f"Unexpected people search response: {type(body).__name__}")
