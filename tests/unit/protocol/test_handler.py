"""Unit tests for MCP protocol handler."""

from unittest.mock import Mock

import pytest

from pocketmcp.lib.exceptions import UnknownMethodError
from pocketmcp.logic.mcp.models.mcp_types import (
    Prompt,
    PromptArgument,
    PromptMessage,
    PromptResult,
    ResourceContents,
    SamplingRequest,
    Tool,
)
from pocketmcp.logic.mcp.protocol.handler import ProtocolHandler
from pocketmcp.logic.mcp.protocol.message import JsonRpcRequest

ECHO_TOOL = {
    "name": "echo",
    "description": "Echo the arguments back",
    "inputSchema": {"type": "object", "properties": {"text": {"type": "string"}}},
}


def error_message(reply) -> str:
    assert reply.status == 500
    assert reply.body["error"]["code"] == -32603
    return reply.body["error"]["message"]


class TestRouting:
    """Test method routing and the error boundary."""

    def test_routes_all_methods(self, handler):
        assert sorted(handler.methods) == sorted([
            "initialize",
            "notifications/initialized",
            "tools/list",
            "tools/call",
            "resources/list",
            "resources/templates/list",
            "resources/read",
            "prompts/list",
            "prompts/get",
            "sampling/createMessage",
            "logging/setLevel",
        ])

    @pytest.mark.asyncio
    async def test_unknown_method(self, handler, message):
        reply = await handler.handle_message(message("foo/bar", request_id=9))

        assert error_message(reply) == "Unknown method: foo/bar"
        assert reply.body["id"] == 9

    @pytest.mark.asyncio
    async def test_handle_request_raises_for_unknown_method(self, handler):
        request = JsonRpcRequest(jsonrpc="2.0", id=1, method="ping")
        with pytest.raises(UnknownMethodError):
            await handler.handle_request(request)

    @pytest.mark.asyncio
    async def test_empty_body(self, handler):
        reply = await handler.handle_message("")

        assert error_message(reply) == "Empty request body"
        assert reply.body["id"] is None

    @pytest.mark.asyncio
    async def test_invalid_json(self, handler):
        reply = await handler.handle_message("{oops")
        assert error_message(reply) == "Invalid JSON in request body"
        assert reply.body["id"] is None

    @pytest.mark.asyncio
    async def test_error_echoes_string_id(self, handler, message):
        reply = await handler.handle_message(message("nope", request_id="req-1"))
        assert reply.body["id"] == "req-1"
        assert reply.body["jsonrpc"] == "2.0"
        assert "result" not in reply.body

    @pytest.mark.asyncio
    async def test_invalid_params_shape(self, handler, message):
        handler.add_tool(ECHO_TOOL, lambda arguments: arguments)
        reply = await handler.handle_message(message("tools/call", params=[1, 2]))

        assert error_message(reply) == "Invalid params for tools/call: expected an object, got list"

    @pytest.mark.asyncio
    async def test_success_envelope(self, handler, message):
        reply = await handler.handle_message(message("tools/list", request_id=3))

        assert reply.status == 200
        assert reply.body == {"jsonrpc": "2.0", "id": 3, "result": {"tools": []}}


class TestInitialize:
    """Test the initialize handshake."""

    @pytest.mark.asyncio
    async def test_initialize_default_capabilities(self, handler, message):
        reply = await handler.handle_message(
            message(
                "initialize",
                params={
                    "protocolVersion": "2024-11-05",
                    "capabilities": {},
                    "clientInfo": {"name": "test-client", "version": "1.0.0"},
                },
            )
        )

        assert reply.status == 200
        assert reply.body["result"] == {
            "protocolVersion": "2024-11-05",
            "capabilities": {"tools": {}},
            "serverInfo": {"name": "test-server", "version": "1.0.0"},
        }

    @pytest.mark.asyncio
    async def test_initialize_advertises_configured_capabilities(self, message):
        handler = ProtocolHandler(
            {"name": "full", "version": "2.0.0"},
            {"tools": {"listChanged": True}, "resources": {}, "sampling": {}},
        )
        reply = await handler.handle_message(message("initialize"))

        assert reply.body["result"]["capabilities"] == {
            "tools": {"listChanged": True},
            "resources": {},
            "sampling": {},
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", ["42", "[]", '"x"', "null", "true"])
    async def test_initialize_ignores_non_object_params(self, handler, params):
        raw = '{"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": %s}' % params
        reply = await handler.handle_message(raw)

        assert reply.status == 200
        assert reply.body["result"]["protocolVersion"] == "2024-11-05"
        assert reply.body["result"]["serverInfo"] == {"name": "test-server", "version": "1.0.0"}

    @pytest.mark.asyncio
    async def test_client_capabilities_not_inspected(self, handler, message):
        reply = await handler.handle_message(
            message("initialize", params={"capabilities": {"anything": [1, 2, 3]}})
        )
        assert reply.status == 200

    @pytest.mark.asyncio
    async def test_initialized_notification_has_no_body(self, handler, message):
        reply = await handler.handle_message(
            message("notifications/initialized", notification=True)
        )

        assert reply.status == 204
        assert reply.body is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", ["null", "{}", '{"extra": [1, 2]}', "[1]", '"text"'])
    async def test_initialized_ignores_params(self, handler, params):
        raw = '{"jsonrpc": "2.0", "method": "notifications/initialized", "params": %s}' % params
        reply = await handler.handle_message(raw)
        assert reply.status == 204
        assert reply.body is None

    @pytest.mark.asyncio
    async def test_initialized_with_id_has_no_body(self, handler, message):
        reply = await handler.handle_message(message("notifications/initialized", request_id=4))
        assert reply.status == 204
        assert reply.body is None


class TestTools:
    """Test tools/list and tools/call."""

    @pytest.mark.asyncio
    async def test_list_preserves_order_and_descriptor(self, handler, message):
        annotated = dict(ECHO_TOOL, name="annotated", annotations={"readOnlyHint": True})
        handler.add_tool(ECHO_TOOL, lambda arguments: arguments)
        handler.add_tool(Tool.create("second", "Second tool"), lambda arguments: arguments)
        handler.add_tool(annotated, lambda arguments: arguments)

        reply = await handler.handle_message(message("tools/list"))
        tools = reply.body["result"]["tools"]

        assert [tool["name"] for tool in tools] == ["echo", "second", "annotated"]
        assert tools[0] == ECHO_TOOL
        assert tools[2]["annotations"] == {"readOnlyHint": True}

    @pytest.mark.asyncio
    async def test_call_sync_handler(self, handler, message):
        handler.add_tool(ECHO_TOOL, lambda arguments: {"echo": arguments["text"]})

        reply = await handler.handle_message(
            message("tools/call", params={"name": "echo", "arguments": {"text": "hi"}})
        )

        assert reply.status == 200
        assert reply.body["result"] == {"echo": "hi"}

    @pytest.mark.asyncio
    async def test_call_async_handler(self, handler, message):
        async def shout(arguments):
            return {"content": [{"type": "text", "text": arguments["text"].upper()}]}

        handler.add_tool(ECHO_TOOL, shout)
        reply = await handler.handle_message(
            message("tools/call", params={"name": "echo", "arguments": {"text": "hi"}})
        )

        assert reply.body["result"] == {"content": [{"type": "text", "text": "HI"}]}

    @pytest.mark.asyncio
    async def test_missing_arguments_become_empty(self, handler, message):
        tool_handler = Mock(return_value="ok")
        handler.add_tool(ECHO_TOOL, tool_handler)

        await handler.handle_message(message("tools/call", params={"name": "echo"}))

        tool_handler.assert_called_once_with({})

    @pytest.mark.asyncio
    async def test_arguments_not_checked_against_schema(self, handler, message):
        handler.add_tool(ECHO_TOOL, lambda arguments: arguments)
        reply = await handler.handle_message(
            message("tools/call", params={"name": "echo", "arguments": {"text": 42, "x": 1}})
        )
        assert reply.body["result"] == {"text": 42, "x": 1}

    @pytest.mark.asyncio
    async def test_echo_round_trip(self, handler, message):
        handler.add_tool(
            {
                "name": "echo",
                "description": "Echo a message",
                "inputSchema": {
                    "type": "object",
                    "properties": {"message": {"type": "string"}},
                    "required": ["message"],
                },
            },
            lambda args: {"content": [{"type": "text", "text": "Echo: " + args["message"]}]},
        )

        reply = await handler.handle_message(
            message("tools/call", params={"name": "echo", "arguments": {"message": "hi"}})
        )

        assert reply.body["result"] == {"content": [{"type": "text", "text": "Echo: hi"}]}

    @pytest.mark.asyncio
    async def test_unknown_tool(self, handler, message):
        handler.add_tool(ECHO_TOOL, lambda arguments: arguments)
        before = handler.tools.entries()

        reply = await handler.handle_message(
            message("tools/call", params={"name": "nope"}, request_id=2)
        )

        assert error_message(reply) == "Unknown tool: nope"
        assert reply.body["id"] == 2
        assert handler.tools.entries() == before

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_error_envelope(self, handler, message):
        def broken(arguments):
            raise RuntimeError("tool exploded")

        handler.add_tool(ECHO_TOOL, broken)
        reply = await handler.handle_message(message("tools/call", params={"name": "echo"}))

        assert error_message(reply) == "tool exploded"

    @pytest.mark.asyncio
    async def test_reregistration_replaces(self, handler, message):
        handler.add_tool(ECHO_TOOL, lambda arguments: "first")
        handler.add_tool(dict(ECHO_TOOL, description="Replaced"), lambda arguments: "second")

        listed = await handler.handle_message(message("tools/list"))
        called = await handler.handle_message(message("tools/call", params={"name": "echo"}))

        assert len(listed.body["result"]["tools"]) == 1
        assert listed.body["result"]["tools"][0]["description"] == "Replaced"
        assert called.body["result"] == "second"

    @pytest.mark.asyncio
    async def test_failed_call_leaves_state_unchanged(self, handler, message):
        handler.add_tool(ECHO_TOOL, lambda arguments: arguments)

        await handler.handle_message(message("tools/call", params={"name": "missing"}))
        await handler.handle_message(message("logging/setLevel", params={}))

        assert len(handler.tools) == 1
        assert handler.log_level == "info"


class TestResources:
    """Test resources/list, resources/templates/list and resources/read."""

    @pytest.fixture
    def resource_handler(self):
        return Mock(side_effect=lambda uri: {"uri": uri, "mimeType": "text/plain", "text": "exact"})

    @pytest.fixture
    def template_handler(self):
        return Mock(side_effect=lambda uri: {"uri": uri, "text": "templated"})

    @pytest.mark.asyncio
    async def test_lists(self, handler, message):
        handler.add_resource({"uri": "config://app", "name": "Config"}, Mock())
        handler.add_resource_template(
            {"uriTemplate": "logs://{date}/{level}", "name": "Logs", "mimeType": "text/plain"},
            Mock(),
        )

        resources = await handler.handle_message(message("resources/list"))
        templates = await handler.handle_message(message("resources/templates/list"))

        assert resources.body["result"] == {
            "resources": [{"uri": "config://app", "name": "Config"}]
        }
        assert templates.body["result"] == {
            "resourceTemplates": [
                {"uriTemplate": "logs://{date}/{level}", "name": "Logs", "mimeType": "text/plain"}
            ]
        }

    @pytest.mark.asyncio
    async def test_list_keeps_explicit_null(self, handler, message):
        handler.add_resource(
            {"uri": "config://app", "name": "Config", "description": None, "mimeType": "text/plain"},
            Mock(),
        )

        reply = await handler.handle_message(message("resources/list"))

        assert reply.body["result"] == {
            "resources": [
                {"uri": "config://app", "name": "Config", "description": None, "mimeType": "text/plain"}
            ]
        }

    @pytest.mark.asyncio
    async def test_read_exact(self, handler, message, resource_handler):
        handler.add_resource({"uri": "config://app", "name": "Config"}, resource_handler)

        reply = await handler.handle_message(
            message("resources/read", params={"uri": "config://app"})
        )

        assert reply.body["result"] == {
            "contents": [{"uri": "config://app", "mimeType": "text/plain", "text": "exact"}]
        }
        resource_handler.assert_called_once_with("config://app")

    @pytest.mark.asyncio
    async def test_read_model_contents(self, handler, message):
        handler.add_resource(
            {"uri": "data://blob", "name": "Blob"},
            lambda uri: ResourceContents(uri=uri, mime_type="image/png", blob="aGk="),
        )

        reply = await handler.handle_message(
            message("resources/read", params={"uri": "data://blob"})
        )

        assert reply.body["result"]["contents"] == [
            {"uri": "data://blob", "mimeType": "image/png", "blob": "aGk="}
        ]

    @pytest.mark.asyncio
    async def test_read_template_receives_full_uri(self, handler, message, template_handler):
        handler.add_resource_template(
            {"uriTemplate": "logs://{date}/{level}", "name": "Logs"}, template_handler
        )

        reply = await handler.handle_message(
            message("resources/read", params={"uri": "logs://2024-01-15/error"})
        )

        assert reply.status == 200
        template_handler.assert_called_once_with("logs://2024-01-15/error")

    @pytest.mark.asyncio
    async def test_exact_match_wins_over_template(
        self, handler, message, resource_handler, template_handler
    ):
        handler.add_resource_template(
            {"uriTemplate": "logs://{date}/{level}", "name": "Logs"}, template_handler
        )
        handler.add_resource({"uri": "logs://today/error", "name": "Today"}, resource_handler)

        reply = await handler.handle_message(
            message("resources/read", params={"uri": "logs://today/error"})
        )

        assert reply.body["result"]["contents"][0]["text"] == "exact"
        template_handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_first_registered_template_wins(self, handler, message):
        first = Mock(return_value={"uri": "docs://a", "text": "first"})
        second = Mock(return_value={"uri": "docs://a", "text": "second"})
        handler.add_resource_template({"uriTemplate": "docs://{id}", "name": "By id"}, first)
        handler.add_resource_template({"uriTemplate": "docs://{slug}", "name": "By slug"}, second)

        reply = await handler.handle_message(message("resources/read", params={"uri": "docs://a"}))

        assert reply.body["result"]["contents"][0]["text"] == "first"
        second.assert_not_called()

    @pytest.mark.asyncio
    async def test_placeholder_does_not_span_segments(self, handler, message, template_handler):
        handler.add_resource_template(
            {"uriTemplate": "logs://{date}/{level}", "name": "Logs"}, template_handler
        )

        reply = await handler.handle_message(
            message("resources/read", params={"uri": "logs://2024/01/error"})
        )

        assert error_message(reply) == "Resource not found: logs://2024/01/error"
        template_handler.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("uri", ["logs://2024-01-15/error.log\n", "config://app\n"])
    async def test_trailing_newline_is_not_found(
        self, handler, message, resource_handler, template_handler, uri
    ):
        handler.add_resource({"uri": "config://app", "name": "Config"}, resource_handler)
        handler.add_resource_template(
            {"uriTemplate": "logs://{date}/error.log", "name": "Error log"}, template_handler
        )

        reply = await handler.handle_message(message("resources/read", params={"uri": uri}))

        assert error_message(reply) == f"Resource not found: {uri}"
        resource_handler.assert_not_called()
        template_handler.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{}, {"uri": ""}, None])
    async def test_missing_uri(self, handler, message, params):
        reply = await handler.handle_message(message("resources/read", params=params))
        assert error_message(reply) == "URI is required for resource read"

    @pytest.mark.asyncio
    async def test_not_found(self, handler, message):
        reply = await handler.handle_message(
            message("resources/read", params={"uri": "file:///missing"})
        )
        assert error_message(reply) == "Resource not found: file:///missing"


class TestPrompts:
    """Test prompts/list and prompts/get."""

    @pytest.fixture
    def review_prompt(self):
        return Prompt(
            name="code-review",
            description="Review code",
            arguments=[
                PromptArgument(name="code", required=True),
                PromptArgument(name="language", required=False),
            ],
        )

    @pytest.mark.asyncio
    async def test_list(self, handler, message, review_prompt):
        handler.add_prompt(review_prompt, Mock())
        handler.add_prompt({"name": "bare"}, Mock())

        reply = await handler.handle_message(message("prompts/list"))

        assert reply.body["result"] == {
            "prompts": [
                {
                    "name": "code-review",
                    "description": "Review code",
                    "arguments": [
                        {"name": "code", "required": True},
                        {"name": "language", "required": False},
                    ],
                },
                {"name": "bare"},
            ]
        }

    @pytest.mark.asyncio
    async def test_get(self, handler, message, review_prompt):
        async def render(arguments):
            return PromptResult(
                description="Review code",
                messages=[PromptMessage.from_text("user", f"Review: {arguments['code']}")],
            )

        handler.add_prompt(review_prompt, render)
        reply = await handler.handle_message(
            message("prompts/get", params={"name": "code-review", "arguments": {"code": "x = 1"}})
        )

        assert reply.body["result"] == {
            "description": "Review code",
            "messages": [{"role": "user", "content": {"type": "text", "text": "Review: x = 1"}}],
        }

    @pytest.mark.asyncio
    async def test_unknown_prompt(self, handler, message):
        reply = await handler.handle_message(message("prompts/get", params={"name": "ghost"}))
        assert error_message(reply) == "Unknown prompt: ghost"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("arguments", [None, {}, {"code": ""}, {"language": "python"}])
    async def test_missing_required_argument(self, handler, message, review_prompt, arguments):
        prompt_handler = Mock()
        handler.add_prompt(review_prompt, prompt_handler)
        params = {"name": "code-review"}
        if arguments is not None:
            params["arguments"] = arguments

        reply = await handler.handle_message(message("prompts/get", params=params))

        assert error_message(reply) == "Required argument missing: code"
        prompt_handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_optional_argument_may_be_absent(self, handler, message, review_prompt):
        prompt_handler = Mock(return_value={"messages": []})
        handler.add_prompt(review_prompt, prompt_handler)

        reply = await handler.handle_message(
            message("prompts/get", params={"name": "code-review", "arguments": {"code": "pass"}})
        )

        assert reply.status == 200
        prompt_handler.assert_called_once_with({"code": "pass"})


class TestSampling:
    """Test sampling/createMessage."""

    MESSAGES = [{"role": "user", "content": {"type": "text", "text": "Hello"}}]

    @pytest.mark.asyncio
    async def test_not_configured(self, handler, message):
        reply = await handler.handle_message(
            message("sampling/createMessage", params={"messages": self.MESSAGES})
        )
        assert error_message(reply) == "Sampling handler not configured"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [None, {}, {"messages": []}, {"messages": "hi"}])
    async def test_messages_required(self, handler, message, params):
        handler.set_sampling_handler(Mock())
        reply = await handler.handle_message(message("sampling/createMessage", params=params))
        assert error_message(reply) == "Messages array is required and cannot be empty"

    @pytest.mark.asyncio
    async def test_delegates_to_handler(self, handler, message):
        received = []

        async def complete(request):
            received.append(request)
            return {
                "role": "assistant",
                "content": {"type": "text", "text": "Hi there"},
                "model": "test-model",
            }

        handler.set_sampling_handler(complete)
        reply = await handler.handle_message(
            message(
                "sampling/createMessage",
                params={"messages": self.MESSAGES, "maxTokens": 100, "temperature": 0.5},
            )
        )

        assert reply.status == 200
        assert reply.body["result"]["content"]["text"] == "Hi there"
        assert isinstance(received[0], SamplingRequest)
        assert received[0].max_tokens == 100
        assert received[0].messages[0].content.text == "Hello"

    @pytest.mark.asyncio
    async def test_handler_replaced(self, handler, message):
        handler.set_sampling_handler(lambda request: "first")
        handler.set_sampling_handler(lambda request: "second")

        reply = await handler.handle_message(
            message("sampling/createMessage", params={"messages": self.MESSAGES})
        )
        assert reply.body["result"] == "second"


class TestLogging:
    """Test logging/setLevel."""

    def test_default_level(self, handler):
        assert handler.log_level == "info"

    @pytest.mark.asyncio
    async def test_set_level(self, handler, message):
        reply = await handler.handle_message(message("logging/setLevel", params={"level": "debug"}))

        assert reply.status == 200
        assert reply.body["result"] == {}
        assert handler.log_level == "debug"

    @pytest.mark.asyncio
    async def test_non_standard_level_accepted(self, handler, message):
        reply = await handler.handle_message(
            message("logging/setLevel", params={"level": "verbose"})
        )
        assert reply.status == 200
        assert handler.log_level == "verbose"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [None, {}, {"level": ""}])
    async def test_missing_level(self, handler, message, params):
        reply = await handler.handle_message(message("logging/setLevel", params=params))

        assert error_message(reply) == "Log level is required"
        assert handler.log_level == "info"
