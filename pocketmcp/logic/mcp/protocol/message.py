"""
JSON-RPC 2.0 Message Models for MCP Protocol

Implements the envelope codec: decoding raw request text into a validated
``JsonRpcRequest`` and encoding results and errors back into response
envelopes. https://www.jsonrpc.org/specification
"""

from enum import IntEnum
from typing import Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)
from pydantic_core import to_jsonable_python

from pocketmcp.lib.exceptions import MalformedEnvelopeError

JSONRPC_VERSION = "2.0"

RequestId = Union[StrictStr, StrictInt, StrictFloat, None]


class McpErrorCode(IntEnum):
    """Standard JSON-RPC 2.0 error codes.

    Only INTERNAL_ERROR is ever sent; the others are kept for clients and logs.
    """

    # Standard JSON-RPC 2.0 errors
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


# Every failure is reported with this code on the wire
WIRE_ERROR_CODE = McpErrorCode.INTERNAL_ERROR


class _NoContent:
    """Marker returned by routines that produce no response body."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_CONTENT"

    def __bool__(self) -> bool:
        return False


NO_CONTENT = _NoContent()


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request or notification.

    A message without an ``id`` key is a notification; ``id: null`` is still
    a request.
    """

    model_config = ConfigDict(extra="ignore")

    jsonrpc: Literal["2.0"] = Field(..., description="JSON-RPC version")
    id: RequestId = Field(None, description="Request ID")
    method: StrictStr = Field(..., min_length=1, description="Method name")
    params: Optional[Any] = Field(None, description="Method parameters")

    @property
    def is_notification(self) -> bool:
        """True when the message carried no id at all."""
        return "id" not in self.model_fields_set


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response message."""

    jsonrpc: Literal["2.0"] = Field(JSONRPC_VERSION, description="JSON-RPC version")
    id: RequestId = Field(None, description="Request ID")
    result: Optional[Any] = Field(None, description="Result data")
    error: Optional[JsonRpcError] = Field(None, description="Error object")

    @model_validator(mode="after")
    def validate_result_or_error(self) -> "JsonRpcResponse":
        """Validate that result and error are not both set."""
        if self.result is not None and self.error is not None:
            raise ValueError("Response must have either result or error, not both")
        return self

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def success(cls, request_id: Any, result: Any) -> "JsonRpcResponse":
        """Create a success response."""
        return cls(id=request_id, result=to_wire_value(result))

    @classmethod
    def error_response(cls, request_id: Any, message: str) -> "JsonRpcResponse":
        """Create an error response with the fixed wire error code."""
        return cls(
            id=request_id,
            error=JsonRpcError(code=int(WIRE_ERROR_CODE), message=message),
        )

    def to_wire(self) -> dict[str, Any]:
        """Dump as ``{jsonrpc, id, result}`` or ``{jsonrpc, id, error}``."""
        body: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            body["error"] = self.error.model_dump()
        else:
            body["result"] = self.result
        return body


def to_wire_value(value: Any) -> Any:
    """Convert handler output to plain JSON data.

    Protocol models drop their absent fields; anything else is converted
    as-is so handler results reach the caller unchanged.
    """
    if isinstance(value, BaseModel) and hasattr(value, "to_wire"):
        return value.to_wire()
    return to_jsonable_python(value, by_alias=True)


def decode_envelope(raw: Union[str, bytes, None]) -> JsonRpcRequest:
    """
    Parse and validate a raw JSON-RPC request.

    Args:
        raw: Request body text

    Returns:
        Validated request

    Raises:
        MalformedEnvelopeError: If the body is empty, not JSON, or not a
            JSON-RPC 2.0 request object
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedEnvelopeError(f"Request body is not valid UTF-8: {e}")

    if raw is None or not raw.strip():
        raise MalformedEnvelopeError("Empty request body")

    try:
        return JsonRpcRequest.model_validate_json(raw)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        if any(err["type"] == "json_invalid" for err in errors):
            raise MalformedEnvelopeError(
                "Invalid JSON in request body", {"errors": errors}
            )
        raise MalformedEnvelopeError(
            f"Invalid JSON-RPC request: {_summarize(errors)}", {"errors": errors}
        )


def _summarize(errors: list[dict[str, Any]]) -> str:
    parts = []
    for err in errors:
        location = ".".join(str(part) for part in err["loc"]) or "body"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


def encode_result(result: Any, request_id: Any = None) -> Optional[dict[str, Any]]:
    """Build a success envelope, or ``None`` for the no-content marker."""
    if result is NO_CONTENT:
        return None
    return JsonRpcResponse.success(request_id, result).to_wire()


def encode_error(error: BaseException, request_id: Any = None) -> dict[str, Any]:
    """Build an error envelope carrying the exception text."""
    message = str(error) or "Internal error"
    return JsonRpcResponse.error_response(request_id, message).to_wire()


class McpReply(BaseModel):
    """Transport-neutral outcome of handling one message."""

    status: int = Field(200, description="HTTP-style status code")
    body: Optional[dict[str, Any]] = Field(None, description="Response envelope, absent for no-content")

    @classmethod
    def from_result(cls, result: Any, request_id: Any = None) -> "McpReply":
        body = encode_result(result, request_id)
        if body is None:
            return cls(status=204)
        return cls(status=200, body=body)

    @classmethod
    def from_error(cls, error: BaseException, request_id: Any = None) -> "McpReply":
        return cls(status=500, body=encode_error(error, request_id))
