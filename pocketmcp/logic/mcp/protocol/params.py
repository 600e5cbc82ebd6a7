"""
Per-method request parameters.

Each routed method declares the params shape it reads. ``parse_params``
validates the raw ``params`` value once at the routing boundary so the
branches in the handler work with typed attributes instead of probing an
untyped mapping. Fields stay optional where an absent value has its own
protocol error (unknown tool, missing URI, ...), which the handler raises.
"""

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pocketmcp.lib.exceptions import InvalidParamsError


class MethodParams(BaseModel):
    """Base for method params; unknown keys are accepted and ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class InitializeParams(MethodParams):
    """Params of ``initialize``. The client's declaration is not inspected."""

    protocol_version: Optional[Any] = Field(None, alias="protocolVersion")
    capabilities: Optional[Any] = None
    client_info: Optional[Any] = Field(None, alias="clientInfo")


class ToolCallParams(MethodParams):
    """Params of ``tools/call``."""

    name: Optional[str] = None
    arguments: Optional[dict[str, Any]] = None


class ResourceReadParams(MethodParams):
    """Params of ``resources/read``."""

    uri: Optional[str] = None


class PromptGetParams(MethodParams):
    """Params of ``prompts/get``."""

    name: Optional[str] = None
    arguments: Optional[dict[str, Any]] = None


class SetLevelParams(MethodParams):
    """Params of ``logging/setLevel``. Any value is accepted as a level."""

    level: Optional[Any] = None


P = TypeVar("P", bound=MethodParams)


def parse_params(method: str, model: Type[P], raw: Any) -> P:
    """
    Validate raw params against a method's params model.

    Args:
        method: Method name, used in the error message
        model: Params model for the method
        raw: The ``params`` value of the request (``None`` when absent)

    Returns:
        Validated params instance

    Raises:
        InvalidParamsError: If params is not an object or a field has the
            wrong type
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise InvalidParamsError(method, f"expected an object, got {type(raw).__name__}")
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors(include_url=False)
        )
        raise InvalidParamsError(method, reasons)
