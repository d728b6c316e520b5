"""Unit tests for WikidataClient error mapping (httpx.MockTransport)."""

import httpx
import pytest

from boxtobox.config import Settings
from boxtobox.exceptions import UpstreamQueryError
from boxtobox.wikidata import WikidataClient


def make_client(handler) -> WikidataClient:
    settings = Settings(USER_AGENT="Box-to-Box-Tests/1.0")
    return WikidataClient(settings, transport=httpx.MockTransport(handler))


class TestExecuteSparql:

    @pytest.mark.asyncio
    async def test_returns_bindings(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            seen["user_agent"] = request.headers["User-Agent"]
            return httpx.Response(200, json={"results": {"bindings": [{"x": {"value": "1"}}]}})

        client = make_client(handler)
        try:
            bindings = await client.execute_sparql("SELECT ?x WHERE {}")
        finally:
            await client.close()

        assert bindings == [{"x": {"value": "1"}}]
        assert seen["params"] == {"query": "SELECT ?x WHERE {}", "format": "json"}
        assert seen["user_agent"] == "Box-to-Box-Tests/1.0"

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)
        with pytest.raises(UpstreamQueryError) as exc_info:
            await client.execute_sparql("SELECT")
        assert exc_info.value.message == "Wikidata query timed out"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = make_client(lambda request: httpx.Response(500, text="oops"))
        with pytest.raises(UpstreamQueryError) as exc_info:
            await client.execute_sparql("SELECT")
        assert exc_info.value.details == "HTTP 500"

    @pytest.mark.asyncio
    async def test_rate_limited(self):
        client = make_client(lambda request: httpx.Response(429))
        with pytest.raises(UpstreamQueryError) as exc_info:
            await client.execute_sparql("SELECT")
        assert exc_info.value.details == "HTTP 429"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamQueryError):
            await make_client(handler).execute_sparql("SELECT")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(UpstreamQueryError):
            await client.execute_sparql("SELECT")

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        client = make_client(lambda request: httpx.Response(200, json={"head": {}}))
        with pytest.raises(UpstreamQueryError):
            await client.execute_sparql("SELECT")


class TestSearchEntities:

    @pytest.mark.asyncio
    async def test_search_params(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"search": [{"id": "Q615", "label": "Lionel Messi"}]})

        client = make_client(handler)
        hits = await client.search_entities("Messi", 25)

        assert hits == [{"id": "Q615", "label": "Lionel Messi"}]
        assert seen["url"].startswith("https://www.wikidata.org/w/api.php")
        assert seen["params"]["action"] == "wbsearchentities"
        assert seen["params"]["limit"] == "25"
        assert seen["params"]["language"] == "en"

    @pytest.mark.asyncio
    async def test_no_results_key(self):
        client = make_client(lambda request: httpx.Response(200, json={}))
        assert await client.search_entities("zzz", 5) == []
