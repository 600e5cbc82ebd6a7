"""Application-facing MCP server."""

import logging
from typing import Any, Optional, Union

from fastapi import FastAPI

from pocketmcp.logic.mcp.core.registry import PromptHandler, ResourceHandler, ToolHandler
from pocketmcp.logic.mcp.core.sampling import SamplingHandler
from pocketmcp.logic.mcp.protocol.capabilities import ServerCapabilities, ServerInfo
from pocketmcp.logic.mcp.protocol.handler import ProtocolHandler
from pocketmcp.logic.mcp.protocol.message import McpReply

logger = logging.getLogger(__name__)


class McpServer:
    """
    MCP server with its capabilities and HTTP application.

    Register tools, resources, resource templates and prompts, optionally a
    sampling handler, then serve ``server.app`` with any ASGI server or feed
    raw messages to ``handle_message``.

    Example:
        server = McpServer({"name": "demo", "version": "1.0.0"})
        server.add_tool(echo_tool, echo_handler)
        reply = await server.handle_message(body)
    """

    def __init__(
        self,
        server_info: Union[ServerInfo, dict[str, Any]],
        capabilities: Union[ServerCapabilities, dict[str, Any], None] = None,
    ):
        self.handler = ProtocolHandler(server_info, capabilities)
        self._app: Optional[FastAPI] = None

    @property
    def server_info(self) -> ServerInfo:
        return self.handler.server_info

    @property
    def capabilities(self) -> ServerCapabilities:
        return self.handler.capabilities

    @property
    def log_level(self) -> Any:
        """Current protocol log level (``info`` until changed)."""
        return self.handler.log_level

    def add_tool(self, tool: Any, handler: ToolHandler) -> None:
        self.handler.add_tool(tool, handler)

    def add_resource(self, resource: Any, handler: ResourceHandler) -> None:
        self.handler.add_resource(resource, handler)

    def add_resource_template(self, template: Any, handler: ResourceHandler) -> None:
        self.handler.add_resource_template(template, handler)

    def add_prompt(self, prompt: Any, handler: PromptHandler) -> None:
        self.handler.add_prompt(prompt, handler)

    def set_sampling_handler(self, handler: SamplingHandler) -> None:
        self.handler.set_sampling_handler(handler)

    def set_log_level(self, level: Any) -> None:
        self.handler.set_log_level(level)

    async def handle_message(self, raw: Union[str, bytes, None]) -> McpReply:
        """Handle one raw JSON-RPC message; see ProtocolHandler.handle_message."""
        return await self.handler.handle_message(raw)

    @property
    def app(self) -> FastAPI:
        """FastAPI application serving this server (created on first use)."""
        if self._app is None:
            from pocketmcp.api.main import create_app

            self._app = create_app(self)
        return self._app

    def summary(self) -> dict[str, list[str]]:
        """Names of everything registered, by capability kind."""
        return {
            "tools": [tool.name for tool in self.handler.tools.list()],
            "resources": [resource.uri for resource in self.handler.resources.list()],
            "resourceTemplates": [
                template.uri_template for template in self.handler.resource_templates.list()
            ],
            "prompts": [prompt.name for prompt in self.handler.prompts.list()],
        }

    def __repr__(self) -> str:
        return (
            f"McpServer(name='{self.server_info.name}', "
            f"tools={len(self.handler.tools)}, "
            f"resources={len(self.handler.resources)}, "
            f"templates={len(self.handler.resource_templates)}, "
            f"prompts={len(self.handler.prompts)})"
        )
