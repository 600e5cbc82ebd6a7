"""Registries, URI template matching, sampling and the server facade.

``McpServer`` lives in ``pocketmcp.logic.mcp.core.server``; it is not
re-exported here because it depends on the protocol package, which in turn
depends on this one.
"""

from .registry import CapabilityRegistry
from .sampling import SamplingGateway

__all__ = ["CapabilityRegistry", "SamplingGateway"]
