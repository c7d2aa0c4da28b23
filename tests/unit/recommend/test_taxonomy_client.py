"""Tests for the ESCO taxonomy client."""

import httpx
import pytest

from src.recommend.outcome import (
    MalformedResponseError,
    RateLimitedError,
    UpstreamUnavailableError,
)
from src.recommend.taxonomy import (
    DEFAULT_DESCRIPTION,
    EscoTaxonomyClient,
    clean_description,
)

ESCO_PAYLOAD = {
    "_embedded": {
        "results": [
            {
                "uri": "http://data.europa.eu/esco/occupation/1",
                "title": "software developer",
                "description": {"en": {"literal": "<p>Software developers implement software.</p>"}},
            },
            {
                "uri": "http://data.europa.eu/esco/occupation/2",
                "preferredLabel": {"en": "ICT application developer"},
            },
            {"uri": "http://data.europa.eu/esco/occupation/3"},
            "not an object",
        ]
    }
}


def _client(handler, recommend_config) -> EscoTaxonomyClient:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://esco.test"
    )
    return EscoTaxonomyClient(recommend_config, http_client=http_client)


class TestSearch:
    @pytest.mark.asyncio
    async def test_parses_occupations(self, recommend_config):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=ESCO_PAYLOAD)

        client = _client(handler, recommend_config)

        occupations = await client.search("software developer")

        assert [o.title for o in occupations] == [
            "software developer",
            "ICT application developer",
        ]
        assert occupations[0].id == "http://data.europa.eu/esco/occupation/1"
        assert occupations[0].description == "Software developers implement software."
        assert occupations[1].description == DEFAULT_DESCRIPTION

        params = requests[0].url.params
        assert requests[0].url.path == "/search"
        assert params["text"] == "software developer"
        assert params["type"] == "occupation"
        assert params["language"] == "en"
        assert params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_no_embedded_means_no_results(self, recommend_config):
        client = _client(lambda request: httpx.Response(200, json={"total": 0}), recommend_config)

        assert await client.search("astronaut") == []

    @pytest.mark.asyncio
    async def test_rate_limited(self, recommend_config):
        client = _client(lambda request: httpx.Response(429), recommend_config)

        with pytest.raises(RateLimitedError):
            await client.search("nurse")

    @pytest.mark.asyncio
    async def test_server_error(self, recommend_config):
        client = _client(lambda request: httpx.Response(503), recommend_config)

        with pytest.raises(UpstreamUnavailableError):
            await client.search("nurse")

    @pytest.mark.asyncio
    async def test_invalid_json(self, recommend_config):
        client = _client(lambda request: httpx.Response(200, text="<html>"), recommend_config)

        with pytest.raises(MalformedResponseError):
            await client.search("nurse")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [[1, 2], {"_embedded": {"results": "nope"}}])
    async def test_unexpected_shape(self, recommend_config, payload):
        client = _client(lambda request: httpx.Response(200, json=payload), recommend_config)

        with pytest.raises(MalformedResponseError):
            await client.search("nurse")

    @pytest.mark.asyncio
    async def test_timeout(self, recommend_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = _client(handler, recommend_config)

        with pytest.raises(TimeoutError):
            await client.search("nurse")

    @pytest.mark.asyncio
    async def test_connection_error(self, recommend_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = _client(handler, recommend_config)

        with pytest.raises(UpstreamUnavailableError):
            await client.search("nurse")


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, recommend_config):
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        )

        async with EscoTaxonomyClient(recommend_config, http_client=http_client):
            pass

        assert http_client.is_closed is False
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self, recommend_config):
        client = EscoTaxonomyClient(recommend_config)
        http_client = client._get_client()

        await client.aclose()

        assert http_client.is_closed is True


class TestCleanDescription:
    def test_strips_tags_and_whitespace(self):
        assert clean_description("<b>Fly</b>\n  planes") == "Fly planes"

    def test_truncates(self):
        cleaned = clean_description("a" * 301)
        assert cleaned == "a" * 300 + "..."

    @pytest.mark.parametrize("value", [None, "", "<p></p>"])
    def test_empty_uses_default(self, value):
        assert clean_description(value) == DEFAULT_DESCRIPTION
