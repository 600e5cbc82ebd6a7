"""Prompt builders with ``{{placeholder}}`` substitution."""

import json
from typing import Any, Literal, NamedTuple, Optional, Sequence, Union

from pocketmcp.logic.mcp.core.registry import PromptHandler
from pocketmcp.logic.mcp.models.mcp_types import (
    Prompt,
    PromptArgument,
    PromptMessage,
    PromptResult,
    present,
)

ANALYST_INSTRUCTIONS = "You are an analytical expert. Provide thorough and insightful analysis."

ArgumentSpec = Union[PromptArgument, dict[str, Any]]


class PromptDefinition(NamedTuple):
    prompt: Prompt
    handler: PromptHandler


def default_analysis_arguments() -> list[PromptArgument]:
    return [
        PromptArgument(name="data", description="Data to analyze", required=True),
        PromptArgument(name="analysis_type", description="Type of analysis to perform", required=False),
        PromptArgument(name="format", description="Output format", required=False),
    ]


def substitute(template: str, arguments: Optional[dict[str, Any]]) -> str:
    """
    Replace every ``{{name}}`` in template with the matching argument.

    Placeholders whose argument is absent are left in place. None and
    booleans render as their JSON literals (``null``, ``true``, ``false``);
    other values use ``str()``.
    """
    for key, value in (arguments or {}).items():
        rendered = json.dumps(value) if value is None or isinstance(value, bool) else str(value)
        template = template.replace("{{" + key + "}}", rendered)
    return template


def _arguments(arguments: Optional[Sequence[ArgumentSpec]]) -> Optional[list[PromptArgument]]:
    if arguments is None:
        return None
    return [
        arg if isinstance(arg, PromptArgument) else PromptArgument.model_validate(arg)
        for arg in arguments
    ]


def create_prompt(prompt: Union[Prompt, dict[str, Any]], handler: PromptHandler) -> PromptDefinition:
    """Pair a prompt descriptor with its handler."""
    if not isinstance(prompt, Prompt):
        prompt = Prompt.model_validate(prompt)
    return PromptDefinition(prompt=prompt, handler=handler)


def create_simple_prompt(
    name: str,
    description: str,
    message: str,
    arguments: Optional[Sequence[ArgumentSpec]] = None,
    role: Literal["user", "assistant"] = "user",
) -> PromptDefinition:
    """
    Create a prompt producing a single templated message.

    Example:
        translate = create_simple_prompt(
            "translate-text",
            "Translate text to another language",
            "Translate this {{source}} text to {{target}}: {{text}}",
            arguments=[{"name": "text", "required": True}],
        )
    """
    prompt = Prompt(
        **present(name=name, description=description, arguments=_arguments(arguments))
    )

    async def handler(args: dict[str, Any]) -> PromptResult:
        return PromptResult(
            description=description,
            messages=[PromptMessage.from_text(role, substitute(message, args))],
        )

    return PromptDefinition(prompt=prompt, handler=handler)


def create_multi_step_prompt(
    name: str,
    description: str,
    steps: Sequence[Union[PromptMessage, dict[str, Any]]],
    arguments: Optional[Sequence[ArgumentSpec]] = None,
) -> PromptDefinition:
    """Create a prompt producing several templated messages, one per step."""
    prompt = Prompt(
        **present(name=name, description=description, arguments=_arguments(arguments))
    )
    templates = [
        step if isinstance(step, PromptMessage) else PromptMessage.model_validate(step)
        for step in steps
    ]

    async def handler(args: dict[str, Any]) -> PromptResult:
        return PromptResult(
            description=description,
            messages=[
                PromptMessage.from_text(step.role, substitute(step.content.text or "", args))
                for step in templates
            ],
        )

    return PromptDefinition(prompt=prompt, handler=handler)


def create_analysis_prompt(
    name: str,
    description: str,
    instructions: str,
    arguments: Optional[Sequence[ArgumentSpec]] = None,
) -> PromptDefinition:
    """
    Create a prompt for analytical tasks.

    The result is a system message setting up an analyst persona followed by
    a user message carrying the templated instructions and the data. When no
    arguments are given, the prompt declares ``data`` (required),
    ``analysis_type`` and ``format``.
    """
    prompt = Prompt(
        **present(
            name=name,
            description=description,
            arguments=_arguments(arguments) if arguments is not None else default_analysis_arguments(),
        )
    )

    async def handler(args: dict[str, Any]) -> PromptResult:
        request = substitute(instructions, args)
        data = (args or {}).get("data") or "the provided data"
        return PromptResult(
            description=description,
            messages=[
                PromptMessage.from_text("system", ANALYST_INSTRUCTIONS),
                PromptMessage.from_text("user", f"{request}\n\nPlease analyze: {data}"),
            ],
        )

    return PromptDefinition(prompt=prompt, handler=handler)
