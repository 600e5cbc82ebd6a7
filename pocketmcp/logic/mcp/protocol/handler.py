"""
MCP Protocol Handler

Routes JSON-RPC requests to the MCP method implementations. Owns the four
capability registries, the sampling gateway and the protocol log level.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Union

from pocketmcp.lib.exceptions import (
    MissingArgumentError,
    MissingLogLevelError,
    MissingUriError,
    ProtocolError,
    ResourceNotFoundError,
    UnknownMethodError,
    UnknownPromptError,
    UnknownToolError,
)
from pocketmcp.logic.mcp.core import uri_template
from pocketmcp.logic.mcp.core.registry import (
    PromptHandler,
    ResourceHandler,
    ToolHandler,
    prompt_registry,
    resource_registry,
    resource_template_registry,
    tool_registry,
)
from pocketmcp.logic.mcp.core.sampling import SamplingGateway, SamplingHandler
from pocketmcp.logic.mcp.models.mcp_types import (
    LogLevel,
    Prompt,
    PromptsList,
    Resource,
    ResourcesList,
    ResourceTemplate,
    ResourceTemplatesList,
    Tool,
    ToolsList,
)

from .capabilities import InitializeResponse, ServerCapabilities, ServerInfo
from .message import NO_CONTENT, JsonRpcRequest, McpReply, decode_envelope, to_wire_value
from .params import (
    InitializeParams,
    PromptGetParams,
    ResourceReadParams,
    SetLevelParams,
    ToolCallParams,
    parse_params,
)

logger = logging.getLogger(__name__)

Descriptor = Union[dict[str, Any], Any]


async def _call(handler: Callable[..., Any], *args: Any) -> Any:
    """Invoke a sync or async handler and return its result."""
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class ProtocolHandler:
    """
    MCP protocol handler for routing requests to method implementations.

    Each message is handled start to finish on its own: there is no
    per-connection state, only the registries, the sampling handler and the
    log level, which live as long as the handler instance.
    """

    def __init__(
        self,
        server_info: Union[ServerInfo, dict[str, Any]],
        capabilities: Union[ServerCapabilities, dict[str, Any], None] = None,
    ):
        """
        Initialize protocol handler.

        Args:
            server_info: Name and version reported by ``initialize``
            capabilities: Capabilities to advertise (defaults to tools only)
        """
        self.server_info = (
            server_info if isinstance(server_info, ServerInfo) else ServerInfo.model_validate(server_info)
        )
        self.capabilities = ServerCapabilities.coerce(capabilities)

        self.tools = tool_registry()
        self.resources = resource_registry()
        self.resource_templates = resource_template_registry()
        self.prompts = prompt_registry()
        self.sampling = SamplingGateway()
        self.log_level: Any = LogLevel.INFO.value

        # Fixed routing table
        self._handlers: dict[str, Callable[[Any], Awaitable[Any]]] = {
            "initialize": self._handle_initialize,
            "notifications/initialized": self._handle_initialized,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
            "resources/list": self._handle_resources_list,
            "resources/templates/list": self._handle_resource_templates_list,
            "resources/read": self._handle_resources_read,
            "prompts/list": self._handle_prompts_list,
            "prompts/get": self._handle_prompts_get,
            "sampling/createMessage": self._handle_sampling,
            "logging/setLevel": self._handle_set_level,
        }

    @property
    def methods(self) -> list[str]:
        """Method names this handler routes."""
        return list(self._handlers)

    # Registration

    def add_tool(self, tool: Descriptor, handler: ToolHandler) -> None:
        """Register a tool; a tool with the same name is replaced."""
        self.tools.register(_coerce(Tool, tool), handler)

    def add_resource(self, resource: Descriptor, handler: ResourceHandler) -> None:
        """Register a resource under its exact URI."""
        self.resources.register(_coerce(Resource, resource), handler)

    def add_resource_template(self, template: Descriptor, handler: ResourceHandler) -> None:
        """Register a resource template under its raw template string."""
        self.resource_templates.register(_coerce(ResourceTemplate, template), handler)

    def add_prompt(self, prompt: Descriptor, handler: PromptHandler) -> None:
        """Register a prompt; a prompt with the same name is replaced."""
        self.prompts.register(_coerce(Prompt, prompt), handler)

    def set_sampling_handler(self, handler: SamplingHandler) -> None:
        """Install the handler that serves sampling/createMessage."""
        self.sampling.configure(handler)

    def set_log_level(self, level: Any) -> None:
        """Store the protocol log level; the value is not checked."""
        if not LogLevel.is_known(level):
            logger.warning(f"Log level '{level}' is not a standard MCP log level")
        self.log_level = level

    # Message handling

    async def handle_message(self, raw: Union[str, bytes, None]) -> McpReply:
        """
        Handle one raw JSON-RPC message.

        This is the single error boundary: every failure, whether a protocol
        error or an exception from an application handler, becomes an error
        envelope. Nothing is raised to the caller.

        Args:
            raw: Request body text

        Returns:
            McpReply with status 200 and a result envelope, 204 and no body
            for the no-content outcome, or 500 and an error envelope
        """
        request_id = None
        try:
            request = decode_envelope(raw)
            request_id = request.id
            result = await self.handle_request(request)
            return McpReply.from_result(result, request_id)

        except ProtocolError as e:
            logger.warning(
                f"Protocol error ({e.kind}): {e.message}",
                extra={"error_kind": e.kind.value, "request_id": request_id},
            )
            return McpReply.from_error(e, request_id)

        except Exception as e:
            logger.exception(f"Error handling message: {e}")
            return McpReply.from_error(e, request_id)

    async def handle_request(self, request: JsonRpcRequest) -> Any:
        """
        Route a decoded request to its method implementation.

        Args:
            request: The decoded JSON-RPC request

        Returns:
            The method result, or NO_CONTENT when no body is produced

        Raises:
            ProtocolError: For unknown methods and invalid calls
        """
        handler = self._handlers.get(request.method)
        if handler is None:
            raise UnknownMethodError(request.method)

        logger.debug(f"Dispatching {request.method} (id={request.id!r})")
        return await handler(request.params)

    # Method implementations

    async def _handle_initialize(self, params: Any) -> dict:
        """
        Handle initialize request.

        The client's declaration is accepted as-is and never validated;
        an object is only read for the log line.
        """
        if isinstance(params, dict):
            init = InitializeParams.model_validate(params)
            logger.info(
                f"Initialize from client {init.client_info!r} "
                f"(protocol {init.protocol_version!r})"
            )
        else:
            logger.info("Initialize from client without a declaration")
        return InitializeResponse.create(
            server_info=self.server_info,
            capabilities=self.capabilities,
        ).to_wire()

    async def _handle_initialized(self, params: Any) -> Any:
        """Handle initialized notification; never produces a body."""
        logger.info("Client confirmed initialization")
        return NO_CONTENT

    async def _handle_tools_list(self, params: Any) -> dict:
        return ToolsList(tools=self.tools.list()).to_wire()

    async def _handle_resources_list(self, params: Any) -> dict:
        return ResourcesList(resources=self.resources.list()).to_wire()

    async def _handle_resource_templates_list(self, params: Any) -> dict:
        return ResourceTemplatesList(resource_templates=self.resource_templates.list()).to_wire()

    async def _handle_prompts_list(self, params: Any) -> dict:
        return PromptsList(prompts=self.prompts.list()).to_wire()

    async def _handle_tools_call(self, params: Any) -> Any:
        """
        Handle tools/call.

        Neither the arguments nor the result are checked against the tool's
        input schema; that is left to the tool handler.
        """
        call = parse_params("tools/call", ToolCallParams, params)
        handler = self.tools.lookup(call.name) if call.name is not None else None
        if handler is None:
            raise UnknownToolError(call.name)

        return await _call(handler, call.arguments or {})

    async def _handle_resources_read(self, params: Any) -> dict:
        """
        Handle resources/read.

        An exact resource URI wins over templates; otherwise the first
        matching template in registration order is used. The handler always
        receives the full URI.
        """
        read = parse_params("resources/read", ResourceReadParams, params)
        if not read.uri:
            raise MissingUriError()

        handler = self.resources.lookup(read.uri)
        if handler is None:
            template = uri_template.resolve(
                read.uri, (key for key, _, _ in self.resource_templates.entries())
            )
            if template is not None:
                handler = self.resource_templates.lookup(template)

        if handler is None:
            raise ResourceNotFoundError(read.uri)

        content = await _call(handler, read.uri)
        return {"contents": [to_wire_value(content)]}

    async def _handle_prompts_get(self, params: Any) -> Any:
        """
        Handle prompts/get.

        Required arguments are checked for a truthy value before the prompt
        handler runs.
        """
        get = parse_params("prompts/get", PromptGetParams, params)
        entry = self.prompts.get(get.name) if get.name is not None else None
        if entry is None:
            raise UnknownPromptError(get.name)

        prompt, handler = entry
        arguments = get.arguments or {}
        for name in prompt.required_arguments:
            if not arguments.get(name):
                raise MissingArgumentError(name, prompt=prompt.name)

        return await _call(handler, arguments)

    async def _handle_sampling(self, params: Any) -> Any:
        return await self.sampling.invoke(params)

    async def _handle_set_level(self, params: Any) -> dict:
        set_level = parse_params("logging/setLevel", SetLevelParams, params)
        if not set_level.level:
            raise MissingLogLevelError()

        self.set_log_level(set_level.level)
        return {}


def _coerce(model: Any, value: Descriptor) -> Any:
    """Accept either a model instance or a plain dict describing one."""
    if isinstance(value, model):
        return value
    return model.model_validate(value)
