"""Single-slot gateway for sampling/createMessage requests."""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import ValidationError

from pocketmcp.lib.exceptions import InvalidSamplingRequestError, SamplingNotConfiguredError
from pocketmcp.logic.mcp.models.mcp_types import SamplingRequest, SamplingResponse

logger = logging.getLogger(__name__)

SamplingHandler = Callable[
    [SamplingRequest], Union[SamplingResponse, dict[str, Any], Awaitable[Any]]
]


class SamplingGateway:
    """
    Holds at most one sampling handler.

    The server cannot produce model completions itself; the application
    supplies a handler (typically a call to an LLM provider) and every
    sampling request is delegated to it.
    """

    def __init__(self, handler: Optional[SamplingHandler] = None):
        self._handler = handler

    @property
    def is_configured(self) -> bool:
        return self._handler is not None

    def configure(self, handler: SamplingHandler) -> None:
        """Install handler, replacing any previous one."""
        if self._handler is not None:
            logger.debug("Replacing sampling handler")
        self._handler = handler

    async def invoke(self, params: Any) -> Any:
        """
        Validate a sampling request and delegate it to the handler.

        Args:
            params: Raw ``sampling/createMessage`` params

        Returns:
            The handler's response, unchanged

        Raises:
            SamplingNotConfiguredError: If no handler is installed
            InvalidSamplingRequestError: If ``messages`` is missing, not a
                list, or empty, or the request is otherwise malformed
        """
        if self._handler is None:
            raise SamplingNotConfiguredError()

        messages = params.get("messages") if isinstance(params, dict) else None
        if not isinstance(messages, list) or not messages:
            raise InvalidSamplingRequestError()

        try:
            request = SamplingRequest.model_validate(params)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False, include_input=False)
            raise InvalidSamplingRequestError(
                f"Invalid sampling request: {e.error_count()} validation error(s)",
                {"errors": errors},
            )

        logger.debug(f"Delegating sampling request with {len(request.messages)} message(s)")
        response = self._handler(request)
        if inspect.isawaitable(response):
            response = await response
        return response
