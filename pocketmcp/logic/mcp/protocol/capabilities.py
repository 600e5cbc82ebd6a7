"""
MCP Capability Negotiation Models

Implements server capability models for the MCP protocol. They are advertised
verbatim during the initialize handshake: a category that is not configured
is omitted, a configured category without options serializes as ``{}``.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

PROTOCOL_VERSION = "2024-11-05"


class _Capability(BaseModel):
    """Base for capability categories; unknown options pass through."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ToolsCapability(_Capability):
    """Tools capability configuration."""

    list_changed: Optional[bool] = Field(
        default=None,
        alias="listChanged",
        description="Server supports notifications when tools list changes",
    )


class ResourcesCapability(_Capability):
    """Resources capability configuration."""

    subscribe: Optional[bool] = Field(
        default=None,
        description="Server supports resource subscriptions for real-time updates",
    )
    list_changed: Optional[bool] = Field(
        default=None,
        alias="listChanged",
        description="Server supports notifications when resources list changes",
    )


class PromptsCapability(_Capability):
    """Prompts capability configuration."""

    list_changed: Optional[bool] = Field(
        default=None,
        alias="listChanged",
        description="Server supports notifications when prompts list changes",
    )


class SamplingCapability(_Capability):
    """Sampling capability configuration (no options defined)."""


class LoggingCapability(_Capability):
    """Logging capability configuration (no options defined)."""


class ServerCapabilities(_Capability):
    """Server capabilities exposed during initialization."""

    tools: Optional[ToolsCapability] = Field(
        default=None,
        description="Tools capability (function calling)",
    )
    resources: Optional[ResourcesCapability] = Field(
        default=None,
        description="Resources capability (data access)",
    )
    prompts: Optional[PromptsCapability] = Field(
        default=None,
        description="Prompts capability (prompt templates)",
    )
    sampling: Optional[SamplingCapability] = Field(
        default=None,
        description="Sampling capability (model completions)",
    )
    logging: Optional[LoggingCapability] = Field(
        default=None,
        description="Logging capability",
    )

    @classmethod
    def default(cls) -> "ServerCapabilities":
        """Capabilities used when none are supplied: tools only."""
        return cls(tools=ToolsCapability())

    @classmethod
    def full(cls) -> "ServerCapabilities":
        """Advertise every category the server implements."""
        return cls(
            tools=ToolsCapability(),
            resources=ResourcesCapability(),
            prompts=PromptsCapability(),
            sampling=SamplingCapability(),
            logging=LoggingCapability(),
        )

    @classmethod
    def coerce(
        cls, value: Union["ServerCapabilities", dict[str, Any], None]
    ) -> "ServerCapabilities":
        """Accept a model, a plain dict, or None for the default set."""
        if value is None:
            return cls.default()
        if isinstance(value, cls):
            return value
        return cls.model_validate(value)

    def to_wire(self) -> dict[str, Any]:
        """Dump advertised categories as configured; unconfigured ones are omitted."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class ServerInfo(BaseModel):
    """Server information exposed during initialization."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Server name")
    version: str = Field(..., description="Server version")


class InitializeResponse(BaseModel):
    """MCP initialize response result."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(
        alias="protocolVersion",
        description="MCP protocol version",
    )
    capabilities: ServerCapabilities = Field(
        ...,
        description="Server capabilities",
    )
    server_info: ServerInfo = Field(
        alias="serverInfo",
        description="Server information",
    )

    @classmethod
    def create(
        cls,
        server_info: ServerInfo,
        capabilities: ServerCapabilities,
        protocol_version: str = PROTOCOL_VERSION,
    ) -> "InitializeResponse":
        """Create an initialize response."""
        return cls(
            protocol_version=protocol_version,
            capabilities=capabilities,
            server_info=server_info,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)
