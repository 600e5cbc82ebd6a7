"""Resource and resource template builders."""

import base64
import logging
import mimetypes
from pathlib import Path
from typing import Any, NamedTuple, Optional, Union

from pocketmcp.lib.exceptions import ResourceReadError
from pocketmcp.logic.mcp.core.registry import ResourceHandler
from pocketmcp.logic.mcp.models.mcp_types import (
    Resource,
    ResourceContents,
    ResourceTemplate,
    present,
)

logger = logging.getLogger(__name__)

DEFAULT_TEXT_MIME_TYPE = "text/plain"
DEFAULT_BINARY_MIME_TYPE = "application/octet-stream"

# Extensions resolved before falling back to the platform mimetypes table
MIME_TYPES = {
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "pdf": "application/pdf",
    "txt": "text/plain",
}

TEXTUAL_APPLICATION_TYPES = {
    "application/javascript",
    "application/json",
    "application/xml",
}


class ResourceDefinition(NamedTuple):
    resource: Resource
    handler: ResourceHandler


class ResourceTemplateDefinition(NamedTuple):
    resource_template: ResourceTemplate
    handler: ResourceHandler


def create_resource(
    resource: Union[Resource, dict[str, Any]], handler: ResourceHandler
) -> ResourceDefinition:
    """Pair a resource descriptor with its handler."""
    if not isinstance(resource, Resource):
        resource = Resource.model_validate(resource)
    return ResourceDefinition(resource=resource, handler=handler)


def create_resource_template(
    template: Union[ResourceTemplate, dict[str, Any]], handler: ResourceHandler
) -> ResourceTemplateDefinition:
    """Pair a resource template with its handler.

    The handler receives the full requested URI, not extracted placeholders.
    """
    if not isinstance(template, ResourceTemplate):
        template = ResourceTemplate.model_validate(template)
    return ResourceTemplateDefinition(resource_template=template, handler=handler)


def create_text_resource(
    uri: str,
    name: str,
    text: str,
    description: Optional[str] = None,
    mime_type: Optional[str] = None,
) -> ResourceDefinition:
    """
    Create a resource serving fixed text.

    Args:
        uri: Resource URI
        name: Display name
        text: Content returned on every read
        description: Optional description
        mime_type: Media type (defaults to text/plain)
    """
    resource = Resource(
        **present(
            uri=uri,
            name=name,
            description=description,
            mime_type=mime_type or DEFAULT_TEXT_MIME_TYPE,
        )
    )

    async def handler(requested_uri: str) -> ResourceContents:
        return ResourceContents(uri=uri, mime_type=resource.mime_type, text=text)

    return ResourceDefinition(resource=resource, handler=handler)


def create_binary_resource(
    uri: str,
    name: str,
    data: str,
    description: Optional[str] = None,
    mime_type: Optional[str] = None,
) -> ResourceDefinition:
    """
    Create a resource serving fixed binary content.

    Args:
        uri: Resource URI
        name: Display name
        data: Base64-encoded payload
        description: Optional description
        mime_type: Media type (defaults to application/octet-stream)
    """
    resource = Resource(
        **present(
            uri=uri,
            name=name,
            description=description,
            mime_type=mime_type or DEFAULT_BINARY_MIME_TYPE,
        )
    )

    async def handler(requested_uri: str) -> ResourceContents:
        return ResourceContents(uri=uri, mime_type=resource.mime_type, blob=data)

    return ResourceDefinition(resource=resource, handler=handler)


def detect_mime_type(path: Union[str, Path]) -> str:
    """Guess the media type of a file from its extension."""
    suffix = Path(path).suffix.lower().lstrip(".")
    if suffix in MIME_TYPES:
        return MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(str(path))
    return guessed or DEFAULT_BINARY_MIME_TYPE


def is_textual(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in TEXTUAL_APPLICATION_TYPES


def create_file_resource(
    uri: str,
    name: str,
    file_path: Union[str, Path],
    description: Optional[str] = None,
    mime_type: Optional[str] = None,
) -> ResourceDefinition:
    """
    Create a resource backed by a file on disk.

    The file is read on every ``resources/read``, so changes are picked up
    without re-registering. Textual media types are returned as ``text``,
    everything else as a base64 ``blob``.

    Raises (from the handler):
        ResourceReadError: If the file cannot be read
    """
    path = Path(file_path)
    resource = Resource(
        **present(
            uri=uri,
            name=name,
            description=description,
            mime_type=mime_type or detect_mime_type(path),
        )
    )

    def handler(requested_uri: str) -> ResourceContents:
        try:
            if is_textual(resource.mime_type):
                return ResourceContents(
                    uri=uri, mime_type=resource.mime_type, text=path.read_text(encoding="utf-8")
                )
            payload = base64.b64encode(path.read_bytes()).decode("ascii")
            return ResourceContents(uri=uri, mime_type=resource.mime_type, blob=payload)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            raise ResourceReadError(f"Failed to read file: {file_path}", path=str(file_path)) from e

    return ResourceDefinition(resource=resource, handler=handler)
