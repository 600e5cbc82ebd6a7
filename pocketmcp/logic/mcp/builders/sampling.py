"""Sampling handler and sampling request builders."""

from typing import Literal, Optional, Sequence, Union

from pocketmcp.logic.mcp.core.sampling import SamplingHandler
from pocketmcp.logic.mcp.models.mcp_types import (
    IncludeContext,
    ModelPreferences,
    SamplingMessage,
    SamplingRequest,
    present,
)

ANALYST_SYSTEM_TEXT = "You are an analytical expert. Provide thorough and insightful analysis."
REVIEWER_SYSTEM_TEXT = (
    "You are a code review expert. Provide constructive feedback on code quality, "
    "security, performance, and maintainability."
)
SUMMARIZER_SYSTEM_TEXT = (
    "You are a summarization expert. Create concise, accurate summaries that "
    "capture the key points."
)

SummaryStyle = Literal["bullet-points", "paragraph", "executive-summary"]

SUMMARY_STYLE_PHRASES = {
    "bullet-points": " using bullet points",
    "executive-summary": " as an executive summary",
    "paragraph": " in paragraph form",
}


def create_sampling_handler(handler: SamplingHandler) -> SamplingHandler:
    """Return handler unchanged; marks a function as a sampling handler."""
    return handler


def _request(
    messages: Sequence[Union[SamplingMessage, dict]],
    system_prompt: Optional[str],
    temperature: Optional[float],
    max_tokens: Optional[int],
    model_preferences: Optional[ModelPreferences],
    include_context: IncludeContext,
) -> SamplingRequest:
    return SamplingRequest(
        messages=list(messages),
        **present(
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            model_preferences=model_preferences,
            include_context=include_context,
        ),
    )


def create_simple_sampling_request(
    user_message: str,
    system_prompt: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    model_preferences: Optional[ModelPreferences] = None,
    include_context: IncludeContext = "none",
) -> SamplingRequest:
    """Create a request with a single user message."""
    return _request(
        [SamplingMessage.from_text("user", user_message)],
        system_prompt,
        temperature,
        max_tokens,
        model_preferences,
        include_context,
    )


def create_conversation_sampling_request(
    conversation: Sequence[Union[SamplingMessage, dict]],
    system_prompt: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    model_preferences: Optional[ModelPreferences] = None,
    include_context: IncludeContext = "thisSession",
) -> SamplingRequest:
    """Create a request continuing an existing conversation."""
    return _request(
        conversation, system_prompt, temperature, max_tokens, model_preferences, include_context
    )


def create_analysis_sampling_request(
    analysis_prompt: str,
    context_data: Optional[str] = None,
    system_prompt: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    model_preferences: Optional[ModelPreferences] = None,
    include_context: IncludeContext = "none",
) -> SamplingRequest:
    """
    Create a request for an analytical task.

    Defaults to temperature 0.3 and 2000 max tokens. Context data, when
    given, is appended to the user message.
    """
    text = analysis_prompt
    if context_data:
        text = f"{analysis_prompt}\n\nContext data:\n{context_data}"
    return _request(
        [
            SamplingMessage.from_text("system", ANALYST_SYSTEM_TEXT),
            SamplingMessage.from_text("user", text),
        ],
        system_prompt,
        temperature or 0.3,
        max_tokens or 2000,
        model_preferences,
        include_context,
    )


def create_code_review_sampling_request(
    code: str,
    language: Optional[str] = None,
    focus_areas: Optional[Sequence[str]] = None,
    system_prompt: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    model_preferences: Optional[ModelPreferences] = None,
    include_context: IncludeContext = "none",
) -> SamplingRequest:
    """Create a code review request; temperature defaults to 0.2."""
    prompt = f"Please review this {language or 'code'} for best practices, potential bugs, and improvements:"
    if focus_areas:
        prompt += f"\n\nFocus areas: {', '.join(focus_areas)}"
    prompt += f"\n\n```{language or ''}\n{code}\n```"

    return _request(
        [
            SamplingMessage.from_text("system", REVIEWER_SYSTEM_TEXT),
            SamplingMessage.from_text("user", prompt),
        ],
        system_prompt,
        temperature or 0.2,
        max_tokens,
        model_preferences,
        include_context,
    )


def create_summarization_sampling_request(
    content: str,
    max_length: Optional[int] = None,
    style: SummaryStyle = "paragraph",
    system_prompt: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    model_preferences: Optional[ModelPreferences] = None,
    include_context: IncludeContext = "none",
) -> SamplingRequest:
    """
    Create a summarization request.

    Args:
        content: Text to summarize
        max_length: Optional word limit for the summary
        style: bullet-points, paragraph or executive-summary

    Defaults to temperature 0.4 and 1000 max tokens.
    """
    prompt = "Please summarize the following content"
    if max_length:
        prompt += f" in {max_length} words or less"
    prompt += SUMMARY_STYLE_PHRASES.get(style, SUMMARY_STYLE_PHRASES["paragraph"])
    prompt += f":\n\n{content}"

    return _request(
        [
            SamplingMessage.from_text("system", SUMMARIZER_SYSTEM_TEXT),
            SamplingMessage.from_text("user", prompt),
        ],
        system_prompt,
        temperature or 0.4,
        max_tokens or 1000,
        model_preferences,
        include_context,
    )
