"""Unit tests for the Bitcoin price server."""

import json

import httpx
import pytest

from pocketmcp.apps.price_server import BtcPriceService, build_server, format_quote
from pocketmcp.lib.exceptions import PriceSourceError

QUOTE = {
    "usd": 65432.1,
    "usd_24h_change": -1.234,
    "usd_24h_vol": 12345678901.4,
    "usd_market_cap": 1290000000000.0,
    "last_updated_at": 1700000000,
}


def mock_client(status_code=200, payload=None, requests=None):
    """AsyncClient whose transport answers every request with one response."""

    def respond(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status_code, json={"bitcoin": QUOTE} if payload is None else payload)

    return httpx.AsyncClient(transport=httpx.MockTransport(respond))


class TestFormatQuote:
    def test_default_includes_change_only(self):
        result = format_quote(QUOTE, {})

        assert result["isError"] is False
        assert result["data"] == {
            "price": 65432.1,
            "currency": "USD",
            "last_updated": "2023-11-14T22:13:20+00:00",
            "source": "CoinGecko",
            "change_24h": -1.234,
            "change_24h_percent": "-1.23%",
        }
        text = result["content"][0]["text"]
        assert text.startswith("Bitcoin Price: $65,432.10\n24h Change: -1.23%")
        assert text.endswith("Source: CoinGecko API")

    def test_all_flags(self):
        result = format_quote(
            QUOTE, {"include_change": False, "include_volume": True, "include_market_cap": True}
        )

        assert "change_24h" not in result["data"]
        assert result["data"]["volume_24h"] == 12345678901.4
        assert result["data"]["market_cap"] == 1290000000000.0
        text = result["content"][0]["text"]
        assert "24h Volume: $12,345,678,901" in text
        assert "Market Cap: $1,290,000,000,000" in text
        assert "24h Change" not in text


class TestBtcPriceService:
    @pytest.mark.asyncio
    async def test_fetch_and_cache(self, test_config):
        requests = []
        service = BtcPriceService(test_config, mock_client(requests=requests))

        first = await service.get_quote()
        second = await service.get_quote()

        assert first == QUOTE
        assert second == QUOTE
        assert len(requests) == 1
        assert requests[0].url.host == "prices.test"
        assert requests[0].url.params["ids"] == "bitcoin"
        assert requests[0].url.params["include_last_updated_at"] == "true"

    @pytest.mark.asyncio
    async def test_cache_disabled(self, test_config):
        requests = []
        test_config.price_cache_seconds = 0
        service = BtcPriceService(test_config, mock_client(requests=requests))

        await service.get_quote()
        await service.get_quote()

        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_upstream_error(self, test_config):
        service = BtcPriceService(test_config, mock_client(status_code=503, payload={}))

        with pytest.raises(PriceSourceError) as exc_info:
            await service.get_quote()

        assert exc_info.value.status_code == 503
        assert "CoinGecko API error: 503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_payload(self, test_config):
        service = BtcPriceService(test_config, mock_client(payload={"ethereum": {}}))

        with pytest.raises(PriceSourceError) as exc_info:
            await service.get_quote()

        assert str(exc_info.value).endswith("Invalid response format from CoinGecko API")

    @pytest.mark.asyncio
    async def test_transport_error(self, test_config):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(fail))
        service = BtcPriceService(test_config, client)

        with pytest.raises(PriceSourceError):
            await service.get_quote()


class TestBuildServer:
    @pytest.mark.asyncio
    async def test_capabilities_and_tool(self, test_config, message):
        server = build_server(test_config, mock_client())

        reply = await server.handle_message(message("initialize"))
        result = reply.body["result"]

        assert result["serverInfo"] == {"name": "test-server", "version": "1.0.0"}
        assert result["capabilities"] == {"tools": {}, "resources": {}, "prompts": {}, "sampling": {}}
        assert server.summary()["tools"] == ["get_btc_price"]

    @pytest.mark.asyncio
    async def test_call_tool(self, test_config, message):
        server = build_server(test_config, mock_client())

        reply = await server.handle_message(
            message("tools/call", params={"name": "get_btc_price", "arguments": {"include_volume": True}})
        )

        assert reply.status == 200
        result = reply.body["result"]
        assert result["data"]["price"] == 65432.1
        assert result["data"]["volume_24h"] == 12345678901.4
        json.dumps(result)

    @pytest.mark.asyncio
    async def test_upstream_failure_is_error_envelope(self, test_config, message):
        server = build_server(test_config, mock_client(status_code=500, payload={}))

        reply = await server.handle_message(
            message("tools/call", params={"name": "get_btc_price"})
        )

        assert reply.status == 500
        assert reply.body["error"]["message"].startswith(
            "Failed to fetch Bitcoin price from CoinGecko: CoinGecko API error: 500"
        )
