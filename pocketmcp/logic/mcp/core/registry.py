"""Capability registries: keyed stores of descriptor plus handler."""

import logging
import threading
from typing import Any, Awaitable, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar, Union

from pocketmcp.logic.mcp.models.mcp_types import Prompt, Resource, ResourceTemplate, Tool

logger = logging.getLogger(__name__)

# Handlers may be plain functions or coroutine functions
ToolHandler = Callable[[dict[str, Any]], Union[Any, Awaitable[Any]]]
ResourceHandler = Callable[[str], Any]
PromptHandler = Callable[[dict[str, Any]], Any]

D = TypeVar("D")
H = TypeVar("H")


class CapabilityRegistry(Generic[D, H]):
    """
    Insertion-ordered map from a key to a descriptor and its handler.

    Registering an existing key overwrites both descriptor and handler (last
    write wins). There is no removal. A lock guards the map so registration
    from another thread cannot interleave with a listing or lookup.
    """

    def __init__(self, kind: str, key: Callable[[D], str]):
        """
        Initialize an empty registry.

        Args:
            kind: Human-readable capability kind, used in logs
            key: Function extracting the registry key from a descriptor
        """
        self.kind = kind
        self._key = key
        self._entries: dict[str, tuple[D, H]] = {}
        self._lock = threading.Lock()

    def register(self, descriptor: D, handler: H) -> str:
        """Insert or overwrite an entry; returns its key."""
        key = self._key(descriptor)
        with self._lock:
            replaced = key in self._entries
            self._entries[key] = (descriptor, handler)
        if replaced:
            logger.debug(f"Replaced {self.kind}: {key}")
        else:
            logger.debug(f"Registered {self.kind}: {key}")
        return key

    def list(self) -> List[D]:
        """Return all descriptors in insertion order."""
        with self._lock:
            return [descriptor for descriptor, _ in self._entries.values()]

    def lookup(self, key: str) -> Optional[H]:
        """Return the handler registered under key, or None."""
        with self._lock:
            entry = self._entries.get(key)
        return entry[1] if entry else None

    def get(self, key: str) -> Optional[tuple[D, H]]:
        """Return the (descriptor, handler) pair registered under key, or None."""
        with self._lock:
            return self._entries.get(key)

    def entries(self) -> List[Tuple[str, D, H]]:
        """Snapshot of (key, descriptor, handler) in insertion order."""
        with self._lock:
            return [(key, d, h) for key, (d, h) in self._entries.items()]

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[D]:
        return iter(self.list())

    def __repr__(self) -> str:
        return f"CapabilityRegistry(kind='{self.kind}', entries={len(self)})"


def tool_registry() -> CapabilityRegistry[Tool, ToolHandler]:
    """Registry of tools keyed by name."""
    return CapabilityRegistry("tool", key=lambda tool: tool.name)


def resource_registry() -> CapabilityRegistry[Resource, ResourceHandler]:
    """Registry of resources keyed by exact URI."""
    return CapabilityRegistry("resource", key=lambda resource: resource.uri)


def resource_template_registry() -> CapabilityRegistry[ResourceTemplate, ResourceHandler]:
    """Registry of resource templates keyed by the raw template string."""
    return CapabilityRegistry("resource template", key=lambda template: template.uri_template)


def prompt_registry() -> CapabilityRegistry[Prompt, PromptHandler]:
    """Registry of prompts keyed by name."""
    return CapabilityRegistry("prompt", key=lambda prompt: prompt.name)
