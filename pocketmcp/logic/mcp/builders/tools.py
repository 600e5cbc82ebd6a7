"""Tool builder."""

from typing import Any, NamedTuple, Union

from pocketmcp.logic.mcp.core.registry import ToolHandler
from pocketmcp.logic.mcp.models.mcp_types import Tool


class ToolDefinition(NamedTuple):
    """A tool descriptor paired with its handler, ready to register."""

    tool: Tool
    handler: ToolHandler


def create_tool(config: Union[Tool, dict[str, Any]], handler: ToolHandler) -> ToolDefinition:
    """
    Create a tool definition.

    Args:
        config: Tool descriptor (``name``, ``description``, ``inputSchema``)
        handler: Function called with the call arguments

    Returns:
        ToolDefinition to pass to ``server.add_tool(*definition)``

    Example:
        weather = create_tool(
            {
                "name": "get_weather",
                "description": "Get current weather for a location",
                "inputSchema": {
                    "type": "object",
                    "properties": {"location": {"type": "string"}},
                    "required": ["location"],
                },
            },
            fetch_weather,
        )
        server.add_tool(*weather)
    """
    tool = config if isinstance(config, Tool) else Tool.model_validate(config)
    return ToolDefinition(tool=tool, handler=handler)
