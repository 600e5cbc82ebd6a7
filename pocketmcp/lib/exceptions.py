"""Exception hierarchy for pocketmcp.

Every protocol failure is a ``ProtocolError`` subclass tagged with a
``ProtocolErrorKind``. The kind is what tests and logs assert on; on the wire
all of them collapse to the single JSON-RPC internal error code.
"""

from enum import Enum
from typing import Any, Dict, Optional


class PocketMcpError(Exception):
    """Base exception for all pocketmcp errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize pocketmcp error."""
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and diagnostics."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ProtocolErrorKind(str, Enum):
    """Closed set of failures the dispatcher can raise."""

    MALFORMED_ENVELOPE = "malformed_envelope"
    UNKNOWN_METHOD = "unknown_method"
    INVALID_PARAMS = "invalid_params"
    UNKNOWN_TOOL = "unknown_tool"
    MISSING_URI = "missing_uri"
    RESOURCE_NOT_FOUND = "resource_not_found"
    UNKNOWN_PROMPT = "unknown_prompt"
    MISSING_ARGUMENT = "missing_argument"
    SAMPLING_NOT_CONFIGURED = "sampling_not_configured"
    INVALID_SAMPLING_REQUEST = "invalid_sampling_request"
    MISSING_LOG_LEVEL = "missing_log_level"

    def __str__(self) -> str:
        return self.value


class ProtocolError(PocketMcpError):
    """Raised inside a routing branch; converted to an error envelope."""

    kind: ProtocolErrorKind
    # JSON-RPC internal error, shared by every kind
    code: int = -32603

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["kind"] = self.kind.value
        return data


class MalformedEnvelopeError(ProtocolError):
    """Raised when the raw message is empty, not JSON, or not a JSON-RPC request."""

    kind = ProtocolErrorKind.MALFORMED_ENVELOPE


class UnknownMethodError(ProtocolError):
    """Raised when the method name is not in the routing table."""

    kind = ProtocolErrorKind.UNKNOWN_METHOD

    def __init__(self, method: str):
        super().__init__(f"Unknown method: {method}", {"method": method})
        self.method = method


class InvalidParamsError(ProtocolError):
    """Raised when params do not have the shape a method expects."""

    kind = ProtocolErrorKind.INVALID_PARAMS

    def __init__(self, method: str, reason: str):
        super().__init__(f"Invalid params for {method}: {reason}", {"method": method})
        self.method = method


class UnknownToolError(ProtocolError):
    """Raised when tools/call names a tool that is not registered."""

    kind = ProtocolErrorKind.UNKNOWN_TOOL

    def __init__(self, name: Optional[str]):
        super().__init__(f"Unknown tool: {name}", {"name": name})
        self.name = name


class MissingUriError(ProtocolError):
    """Raised when resources/read carries no URI."""

    kind = ProtocolErrorKind.MISSING_URI

    def __init__(self):
        super().__init__("URI is required for resource read")


class ResourceNotFoundError(ProtocolError):
    """Raised when neither a resource nor a template matches the URI."""

    kind = ProtocolErrorKind.RESOURCE_NOT_FOUND

    def __init__(self, uri: str):
        super().__init__(f"Resource not found: {uri}", {"uri": uri})
        self.uri = uri


class UnknownPromptError(ProtocolError):
    """Raised when prompts/get names a prompt that is not registered."""

    kind = ProtocolErrorKind.UNKNOWN_PROMPT

    def __init__(self, name: Optional[str]):
        super().__init__(f"Unknown prompt: {name}", {"name": name})
        self.name = name


class MissingArgumentError(ProtocolError):
    """Raised when a required prompt argument is absent or empty."""

    kind = ProtocolErrorKind.MISSING_ARGUMENT

    def __init__(self, argument: str, prompt: Optional[str] = None):
        details = {"argument": argument}
        if prompt:
            details["prompt"] = prompt
        super().__init__(f"Required argument missing: {argument}", details)
        self.argument = argument


class SamplingNotConfiguredError(ProtocolError):
    """Raised when sampling is requested before a handler was configured."""

    kind = ProtocolErrorKind.SAMPLING_NOT_CONFIGURED

    def __init__(self):
        super().__init__("Sampling handler not configured")


class InvalidSamplingRequestError(ProtocolError):
    """Raised when a sampling request has no usable messages."""

    kind = ProtocolErrorKind.INVALID_SAMPLING_REQUEST

    def __init__(self, message: str = "Messages array is required and cannot be empty",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class MissingLogLevelError(ProtocolError):
    """Raised when logging/setLevel carries no level."""

    kind = ProtocolErrorKind.MISSING_LOG_LEVEL

    def __init__(self):
        super().__init__("Log level is required")


class ResourceReadError(PocketMcpError):
    """Raised by built-in resource handlers when content cannot be produced."""

    def __init__(self, message: str, path: Optional[str] = None):
        details = {}
        if path:
            details["path"] = path
        super().__init__(message, details)


class PriceSourceError(PocketMcpError):
    """Raised when the upstream price API fails or returns an unexpected payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"Failed to fetch Bitcoin price from CoinGecko: {message}", details)
        self.status_code = status_code
