"""MCP data models and schemas."""

from .mcp_types import (
    LogLevel,
    MessageContent,
    ModelPreferences,
    Prompt,
    PromptArgument,
    PromptMessage,
    PromptResult,
    PromptsList,
    Resource,
    ResourceContents,
    ResourceTemplate,
    ResourceTemplatesList,
    ResourcesList,
    SamplingMessage,
    SamplingRequest,
    SamplingResponse,
    Tool,
    ToolsList,
)

__all__ = [
    "Tool",
    "ToolsList",
    "Resource",
    "ResourceContents",
    "ResourceTemplate",
    "ResourcesList",
    "ResourceTemplatesList",
    "Prompt",
    "PromptArgument",
    "PromptMessage",
    "PromptResult",
    "PromptsList",
    "MessageContent",
    "ModelPreferences",
    "SamplingMessage",
    "SamplingRequest",
    "SamplingResponse",
    "LogLevel",
]
