"""
MCP Protocol Layer

Implements the Model Context Protocol (MCP) specification.
https://modelcontextprotocol.io/
"""

from .message import (
    NO_CONTENT,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    McpErrorCode,
    McpReply,
    decode_envelope,
    encode_error,
    encode_result,
)
from .capabilities import (
    PROTOCOL_VERSION,
    LoggingCapability,
    PromptsCapability,
    ResourcesCapability,
    SamplingCapability,
    ServerCapabilities,
    ServerInfo,
    ToolsCapability,
)
from .handler import ProtocolHandler
from .transport import HttpTransport

__all__ = [
    # Message types
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "McpErrorCode",
    "McpReply",
    "NO_CONTENT",
    "decode_envelope",
    "encode_result",
    "encode_error",
    # Capabilities
    "PROTOCOL_VERSION",
    "ServerCapabilities",
    "ToolsCapability",
    "ResourcesCapability",
    "PromptsCapability",
    "SamplingCapability",
    "LoggingCapability",
    "ServerInfo",
    # Protocol handling
    "ProtocolHandler",
    "HttpTransport",
]
