"""Helpers for building tools, resources, prompts and sampling requests."""

from .prompts import (
    PromptDefinition,
    create_analysis_prompt,
    create_multi_step_prompt,
    create_prompt,
    create_simple_prompt,
)
from .resources import (
    ResourceDefinition,
    ResourceTemplateDefinition,
    create_binary_resource,
    create_file_resource,
    create_resource,
    create_resource_template,
    create_text_resource,
)
from .sampling import (
    create_analysis_sampling_request,
    create_code_review_sampling_request,
    create_conversation_sampling_request,
    create_sampling_handler,
    create_simple_sampling_request,
    create_summarization_sampling_request,
)
from .tools import ToolDefinition, create_tool

__all__ = [
    # Tools
    "ToolDefinition",
    "create_tool",
    # Resources
    "ResourceDefinition",
    "ResourceTemplateDefinition",
    "create_resource",
    "create_resource_template",
    "create_text_resource",
    "create_binary_resource",
    "create_file_resource",
    # Prompts
    "PromptDefinition",
    "create_prompt",
    "create_simple_prompt",
    "create_multi_step_prompt",
    "create_analysis_prompt",
    # Sampling
    "create_sampling_handler",
    "create_simple_sampling_request",
    "create_conversation_sampling_request",
    "create_analysis_sampling_request",
    "create_code_review_sampling_request",
    "create_summarization_sampling_request",
]
