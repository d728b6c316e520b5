"""
Async client for the Wikidata SPARQL endpoint and search API.

Every failure (timeout, HTTP status, transport, malformed payload) is raised
as UpstreamQueryError. Callers decide whether to degrade or propagate.
"""

import logging
import time
from typing import Optional

import httpx

from boxtobox.config import Settings, get_settings
from boxtobox.exceptions import UpstreamQueryError
from boxtobox.telemetry.metrics import record_upstream_error, record_upstream_request

logger = logging.getLogger(__name__)


class WikidataClient:
    """Thin wrapper around one shared httpx.AsyncClient."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def language(self) -> str:
        return self.settings.WIKIDATA_LANGUAGE

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.WIKIDATA_TIMEOUT_SECONDS,
                headers={"User-Agent": self.settings.USER_AGENT},
                transport=self._transport,
            )
        return self._client

    async def _get_json(self, endpoint: str, url: str, params: dict, headers: dict, timeout: float) -> dict:
        client = self._get_client()
        start = time.perf_counter()
        try:
            response = await client.get(url, params=params, headers=headers, timeout=timeout)
            latency_ms = (time.perf_counter() - start) * 1000
            record_upstream_request(endpoint, response.status_code, latency_ms)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            record_upstream_request(endpoint, 0, (time.perf_counter() - start) * 1000)
            record_upstream_error(endpoint, "timeout")
            logger.warning(f"[WIKIDATA] Timeout on {endpoint} after {timeout}s")
            raise UpstreamQueryError("Wikidata query timed out", details=str(e) or "timeout") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            record_upstream_error(endpoint, "rate_limit" if status == 429 else "http_error")
            logger.warning(f"[WIKIDATA] HTTP {status} on {endpoint}")
            raise UpstreamQueryError("Wikidata query failed", details=f"HTTP {status}") from e
        except httpx.HTTPError as e:
            record_upstream_error(endpoint, "transport")
            logger.warning(f"[WIKIDATA] Transport error on {endpoint}: {e}")
            raise UpstreamQueryError("Wikidata query failed", details=str(e)) from e
        except ValueError as e:
            record_upstream_error(endpoint, "bad_payload")
            logger.warning(f"[WIKIDATA] Invalid JSON from {endpoint}: {e}")
            raise UpstreamQueryError("Wikidata returned an invalid response", details=str(e)) from e

    async def execute_sparql(self, query: str) -> list[dict]:
        """Run a SPARQL query and return its result bindings."""
        data = await self._get_json(
            "sparql",
            self.settings.WIKIDATA_SPARQL_ENDPOINT,
            params={"query": query, "format": "json"},
            headers={"Accept": "application/sparql-results+json"},
            timeout=self.settings.WIKIDATA_TIMEOUT_SECONDS,
        )
        try:
            return data["results"]["bindings"]
        except (KeyError, TypeError) as e:
            raise UpstreamQueryError("Unexpected SPARQL response shape", details=str(e)) from e

    async def search_entities(self, search: str, limit: int) -> list[dict]:
        """Call wbsearchentities (label prefix search, much faster than SPARQL)."""
        data = await self._get_json(
            "search",
            self.settings.WIKIDATA_API_ENDPOINT,
            params={
                "action": "wbsearchentities",
                "search": search,
                "language": self.language,
                "limit": limit,
                "format": "json",
            },
            headers={"Accept": "application/json"},
            timeout=self.settings.AUTOCOMPLETE_TIMEOUT_SECONDS,
        )
        return data.get("search") or []

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
