"""
MCP Core Types

Models for MCP tools, resources, prompts and sampling according to the
protocol spec. https://modelcontextprotocol.io/

Field names are snake_case in Python and camelCase on the wire; dump with
``to_wire()`` to get the protocol shape.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer


def present(**fields: Any) -> dict[str, Any]:
    """Keyword arguments that are not None, for building models from optional inputs."""
    return {key: value for key, value in fields.items() if value is not None}


class McpModel(BaseModel):
    """Base model for protocol objects.

    Unknown fields are kept so that descriptors registered by an application
    are listed back exactly as they were given. A field is omitted from the
    dump only when it is None and was never supplied; an explicit null is kept.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @model_serializer(mode="wrap")
    def serialize_present(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name, field in type(self).model_fields.items():
            if name in self.model_fields_set or getattr(self, name) is not None:
                continue
            data.pop(name, None)
            if field.alias:
                data.pop(field.alias, None)
        return data

    def to_wire(self) -> dict[str, Any]:
        """Dump to the camelCase wire shape, omitting absent fields."""
        return self.model_dump(by_alias=True, mode="json")


class Tool(McpModel):
    """
    MCP Tool definition.

    Tools represent callable functions/commands that can be invoked by clients.
    """

    name: str = Field(..., description="Unique tool identifier")
    description: str = Field(..., description="Human-readable tool description")
    input_schema: dict[str, Any] = Field(
        ...,
        alias="inputSchema",
        description="JSON Schema for tool parameters",
    )

    @classmethod
    def create(
        cls,
        name: str,
        description: str,
        input_schema: Optional[dict[str, Any]] = None,
    ) -> "Tool":
        """
        Create a tool with optional input schema.

        Args:
            name: Tool name
            description: Tool description
            input_schema: JSON Schema for parameters (defaults to empty object)

        Returns:
            Tool instance
        """
        if input_schema is None:
            input_schema = {"type": "object", "properties": {}}
        return cls(name=name, description=description, input_schema=input_schema)


class Resource(McpModel):
    """
    MCP Resource definition.

    Resources represent data that can be read by clients (files, documents, etc).
    """

    uri: str = Field(..., description="Unique resource URI")
    name: str = Field(..., description="Human-readable resource name")
    description: Optional[str] = Field(
        None,
        description="Optional resource description",
    )
    mime_type: Optional[str] = Field(
        None,
        alias="mimeType",
        description="MIME type of the resource content",
    )


class ResourceContents(McpModel):
    """
    MCP Resource contents returned when reading a resource.

    Exactly one of ``text`` or ``blob`` is normally set.
    """

    uri: str = Field(..., description="Resource URI")
    mime_type: Optional[str] = Field(
        None,
        alias="mimeType",
        description="MIME type of the content",
    )
    text: Optional[str] = Field(
        None,
        description="Text content (for text-based resources)",
    )
    blob: Optional[str] = Field(
        None,
        description="Base64-encoded binary content",
    )


class ResourceTemplate(McpModel):
    """
    MCP Resource template for dynamic resource URIs.

    Each ``{placeholder}`` matches exactly one non-empty path segment.
    """

    uri_template: str = Field(
        ...,
        alias="uriTemplate",
        description="URI template with placeholders (e.g., 'logs://{date}/{level}')",
    )
    name: str = Field(..., description="Template name")
    description: Optional[str] = Field(
        None,
        description="Template description",
    )
    mime_type: Optional[str] = Field(
        None,
        alias="mimeType",
        description="MIME type of resources created from this template",
    )


class PromptArgument(McpModel):
    """Named argument accepted by a prompt."""

    name: str = Field(..., description="Argument name")
    description: Optional[str] = Field(None, description="Argument description")
    required: Optional[bool] = Field(None, description="Whether the argument must be supplied")


class Prompt(McpModel):
    """
    MCP Prompt template.

    Prompts are reusable message templates that clients can use.
    """

    name: str = Field(..., description="Unique prompt identifier")
    description: Optional[str] = Field(
        None,
        description="Prompt description",
    )
    arguments: Optional[list[PromptArgument]] = Field(
        None,
        description="Ordered list of prompt arguments",
    )

    @property
    def required_arguments(self) -> list[str]:
        """Names of the arguments flagged as required."""
        return [arg.name for arg in self.arguments or [] if arg.required]


Role = Literal["user", "assistant", "system"]


class MessageContent(McpModel):
    """Text or base64 image payload of a message."""

    type: Literal["text", "image"] = Field(..., description="Content type")
    text: Optional[str] = Field(None, description="Text content")
    data: Optional[str] = Field(None, description="Base64-encoded image data")
    mime_type: Optional[str] = Field(
        None,
        alias="mimeType",
        description="MIME type of the image data",
    )


class PromptMessage(McpModel):
    """
    Message within a prompt template.
    """

    role: Role = Field(..., description="Message role (user/assistant/system)")
    content: MessageContent = Field(..., description="Message content")

    @classmethod
    def from_text(cls, role: Role, text: str) -> "PromptMessage":
        """Create a text message."""
        return cls(role=role, content=MessageContent(type="text", text=text))


class PromptResult(McpModel):
    """
    Result when retrieving a prompt.
    """

    description: Optional[str] = Field(None, description="Prompt description")
    messages: list[PromptMessage] = Field(..., description="Prompt messages")


class SamplingMessage(PromptMessage):
    """Message exchanged in a sampling request."""


class ModelHint(McpModel):
    """Hint naming a preferred model family."""

    name: Optional[str] = None


class ModelPreferences(McpModel):
    """Relative priorities the client should weigh when picking a model."""

    hints: Optional[ModelHint] = None
    cost_priority: Optional[float] = Field(None, alias="costPriority", ge=0, le=1)
    speed_priority: Optional[float] = Field(None, alias="speedPriority", ge=0, le=1)
    intelligence_priority: Optional[float] = Field(
        None, alias="intelligencePriority", ge=0, le=1
    )


IncludeContext = Literal["none", "thisServer", "allServers", "thisSession"]


class SamplingRequest(McpModel):
    """Parameters of sampling/createMessage."""

    messages: list[SamplingMessage] = Field(..., min_length=1)
    model_preferences: Optional[ModelPreferences] = Field(None, alias="modelPreferences")
    system_prompt: Optional[str] = Field(None, alias="systemPrompt")
    include_context: Optional[IncludeContext] = Field(None, alias="includeContext")
    temperature: Optional[float] = None
    max_tokens: Optional[int] = Field(None, alias="maxTokens")
    stop_sequences: Optional[list[str]] = Field(None, alias="stopSequences")
    metadata: Optional[dict[str, Any]] = None


class SamplingTextContent(McpModel):
    """Text-only content of a sampling response."""

    type: Literal["text"] = "text"
    text: str


class SamplingResponse(McpModel):
    """Single assistant message produced by a sampling handler."""

    role: Literal["assistant"] = "assistant"
    content: SamplingTextContent
    model: Optional[str] = None
    stop_reason: Optional[Literal["endTurn", "stopSequence", "maxTokens"]] = Field(
        None, alias="stopReason"
    )


class LogLevel(str, Enum):
    """Protocol log severities, lowest first."""

    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    ALERT = "alert"
    EMERGENCY = "emergency"

    def __str__(self) -> str:
        return self.value

    @property
    def severity(self) -> int:
        """Position of the level in the severity ordering."""
        return list(LogLevel).index(self)

    @classmethod
    def is_known(cls, value: Any) -> bool:
        """Check whether a value names one of the eight levels."""
        return isinstance(value, str) and value in cls._value2member_map_


# List response models
class ToolsList(McpModel):
    """Response for tools/list method."""

    tools: list[Tool] = Field(..., description="Available tools")


class ResourcesList(McpModel):
    """Response for resources/list method."""

    resources: list[Resource] = Field(..., description="Available resources")


class ResourceTemplatesList(McpModel):
    """Response for resources/templates/list method."""

    resource_templates: list[ResourceTemplate] = Field(
        ...,
        alias="resourceTemplates",
        description="Available resource templates",
    )


class PromptsList(McpModel):
    """Response for prompts/list method."""

    prompts: list[Prompt] = Field(..., description="Available prompts")
