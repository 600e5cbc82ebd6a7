"""Test configuration and fixtures for pocketmcp tests."""

import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import pytest

from pocketmcp.core.config import PocketMcpConfig
from pocketmcp.logic.mcp.core.server import McpServer
from pocketmcp.logic.mcp.protocol.handler import ProtocolHandler

SERVER_INFO = {"name": "test-server", "version": "1.0.0"}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def test_config(temp_dir: Path) -> PocketMcpConfig:
    """Create test configuration that does not read the environment file."""
    return PocketMcpConfig(
        _env_file=None,
        server_name="test-server",
        server_version="1.0.0",
        price_api_url="https://prices.test/api/v3/simple/price",
        log_file=temp_dir / "logs" / "pocketmcp.log",
    )


@pytest.fixture
def handler() -> ProtocolHandler:
    """Protocol handler with default capabilities and nothing registered."""
    return ProtocolHandler(SERVER_INFO)


@pytest.fixture
def server() -> McpServer:
    """Server with an echo tool registered."""
    server = McpServer(SERVER_INFO)
    server.add_tool(
        {
            "name": "echo",
            "description": "Echo the arguments back",
            "inputSchema": {"type": "object", "properties": {"text": {"type": "string"}}},
        },
        lambda arguments: {"echo": arguments.get("text")},
    )
    return server


@pytest.fixture
def message() -> Callable[..., str]:
    """Factory for raw JSON-RPC request text.

    Pass ``request_id=None`` for an explicit null id; omit the id entirely
    with ``notification=True``.
    """

    def build(
        method: str,
        params: Optional[Any] = None,
        request_id: Any = 1,
        notification: bool = False,
    ) -> str:
        payload: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if not notification:
            payload["id"] = request_id
        if params is not None:
            payload["params"] = params
        return json.dumps(payload)

    return build
