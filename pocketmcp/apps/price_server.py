"""
Bitcoin price MCP server.

Exposes a single ``get_btc_price`` tool backed by the CoinGecko simple price
API. Quotes are cached in-process for ``price_cache_seconds``.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from pocketmcp.core.config import PocketMcpConfig, get_config
from pocketmcp.lib.exceptions import PriceSourceError
from pocketmcp.logic.mcp.builders.tools import ToolDefinition, create_tool
from pocketmcp.logic.mcp.core.server import McpServer

logger = logging.getLogger(__name__)

PRICE_QUERY = {
    "ids": "bitcoin",
    "vs_currencies": "usd",
    "include_24hr_change": "true",
    "include_24hr_vol": "true",
    "include_market_cap": "true",
    "include_last_updated_at": "true",
}

BTC_PRICE_TOOL = {
    "name": "get_btc_price",
    "description": "Get current Bitcoin price in USD with market data from CoinGecko API",
    "inputSchema": {
        "type": "object",
        "properties": {
            "include_change": {
                "type": "boolean",
                "description": "Include 24h price change data",
                "default": True,
            },
            "include_volume": {
                "type": "boolean",
                "description": "Include 24h trading volume data",
                "default": False,
            },
            "include_market_cap": {
                "type": "boolean",
                "description": "Include market capitalization data",
                "default": False,
            },
        },
        "required": [],
    },
}


class BtcPriceService:
    """Fetches and caches Bitcoin quotes."""

    def __init__(
        self,
        config: Optional[PocketMcpConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize price service.

        Args:
            config: Settings for the API URL, cache lifetime and timeout
            client: HTTP client to reuse; a short-lived one is opened per
                fetch when omitted
        """
        self.config = config or get_config()
        self.client = client
        self._cached: Optional[dict[str, Any]] = None
        self._cached_at = 0.0

    def _cache_valid(self) -> bool:
        if self._cached is None:
            return False
        return time.monotonic() - self._cached_at < self.config.price_cache_seconds

    async def get_quote(self) -> dict[str, Any]:
        """Return the ``bitcoin`` quote, from cache when still fresh."""
        if self._cache_valid():
            logger.debug("Serving Bitcoin quote from cache")
            return self._cached

        quote = await self._fetch()
        self._cached = quote
        self._cached_at = time.monotonic()
        return quote

    async def _fetch(self) -> dict[str, Any]:
        if self.client is not None:
            return await self._request(self.client)
        async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
            return await self._request(client)

    async def _request(self, client: httpx.AsyncClient) -> dict[str, Any]:
        try:
            response = await client.get(self.config.price_api_url, params=PRICE_QUERY)
        except httpx.HTTPError as e:
            logger.error(f"Price API request failed: {e}")
            raise PriceSourceError(str(e)) from e

        if response.status_code != 200:
            raise PriceSourceError(
                f"CoinGecko API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise PriceSourceError("Invalid response format from CoinGecko API") from e

        if not isinstance(payload, dict) or not isinstance(payload.get("bitcoin"), dict):
            raise PriceSourceError("Invalid response format from CoinGecko API")

        return payload["bitcoin"]

    async def get_btc_price(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Tool handler for ``get_btc_price``."""
        quote = await self.get_quote()
        return format_quote(quote, arguments)


def format_quote(quote: dict[str, Any], arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Render a quote as a tool result.

    ``include_change`` is on unless explicitly false; volume and market cap
    are opt-in.
    """
    include_change = arguments.get("include_change") is not False
    include_volume = bool(arguments.get("include_volume"))
    include_market_cap = bool(arguments.get("include_market_cap"))

    price = quote["usd"]
    last_updated = datetime.fromtimestamp(quote["last_updated_at"], tz=timezone.utc).isoformat()

    data: dict[str, Any] = {
        "price": price,
        "currency": "USD",
        "last_updated": last_updated,
        "source": "CoinGecko",
    }
    lines = [f"Bitcoin Price: ${price:,.2f}"]

    if include_change:
        change = quote["usd_24h_change"]
        data["change_24h"] = change
        data["change_24h_percent"] = f"{change:.2f}%"
        lines.append(f"24h Change: {change:.2f}%")

    if include_volume:
        data["volume_24h"] = quote["usd_24h_vol"]
        lines.append(f"24h Volume: ${quote['usd_24h_vol']:,.0f}")

    if include_market_cap:
        data["market_cap"] = quote["usd_market_cap"]
        lines.append(f"Market Cap: ${quote['usd_market_cap']:,.0f}")

    lines.append(f"Last Updated: {last_updated}")
    lines.append("Source: CoinGecko API")

    return {
        "content": [{"type": "text", "text": "\n".join(lines)}],
        "isError": False,
        "data": data,
    }


def create_price_tool(service: BtcPriceService) -> ToolDefinition:
    return create_tool(BTC_PRICE_TOOL, service.get_btc_price)


def build_server(
    config: Optional[PocketMcpConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> McpServer:
    """
    Build the Bitcoin price server.

    Args:
        config: Settings (defaults to the global configuration)
        client: Optional HTTP client for the price API

    Returns:
        McpServer advertising tools, resources, prompts and sampling
    """
    config = config or get_config()
    server = McpServer(
        {"name": config.server_name, "version": config.server_version},
        {"tools": {}, "resources": {}, "prompts": {}, "sampling": {}},
    )
    server.add_tool(*create_price_tool(BtcPriceService(config, client)))
    logger.info(f"Built {config.server_name} v{config.server_version}")
    return server
