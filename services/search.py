"""Google Custom Search client."""
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

CUSTOM_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


class SearchProviderError(Exception):
    """Raised when the search provider fails or reports an error."""


class GoogleSearchClient:
    """Thin async client for the Custom Search JSON API."""

    def __init__(
        self,
        api_key: str,
        search_engine_id: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.search_engine_id = search_engine_id
        self.timeout = timeout
        self._transport = transport

    async def search(self, query: str) -> Dict[str, Any]:
        """
        Run a search query.

        Returns:
            The decoded JSON payload

        Raises:
            SearchProviderError: On transport failure or an error payload
        """
        params = {"key": self.api_key, "cx": self.search_engine_id, "q": query}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(CUSTOM_SEARCH_URL, params=params)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Search request failed: {e}")
            raise SearchProviderError(f"Search request failed: {e}") from e

        if "error" in data:
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise SearchProviderError(message or "Google Search API error")

        return data

    async def probe(self, query: str) -> Dict[str, Any]:
        """Run a query and keep the first three items plus search information."""
        data = await self.search(query)
        return {
            "items": (data.get("items") or [])[:3],
            "search_information": data.get("searchInformation"),
        }
