"""Resolve concrete resource URIs against registered URI templates."""

import re
from functools import lru_cache
from typing import Iterable, Optional, Pattern

_PLACEHOLDER = re.compile(r"\{[^}]+\}")

# One or more non-slash characters, non-greedy
_SEGMENT = "[^/]+?"


@lru_cache(maxsize=256)
def template_to_pattern(template: str) -> Pattern[str]:
    """
    Compile a URI template into a regular expression for full-string matching.

    Every ``{name}`` placeholder matches a single non-empty path segment;
    the literal text between placeholders is matched exactly.

    Example:
        >>> bool(template_to_pattern("logs://{date}/{level}").fullmatch("logs://2024-01-15/error"))
        True
    """
    parts = []
    position = 0
    for placeholder in _PLACEHOLDER.finditer(template):
        parts.append(re.escape(template[position:placeholder.start()]))
        parts.append(_SEGMENT)
        position = placeholder.end()
    parts.append(re.escape(template[position:]))
    return re.compile("".join(parts))


def matches_template(uri: str, template: str) -> bool:
    """Check whether uri is an instance of template."""
    return template_to_pattern(template).fullmatch(uri) is not None


def resolve(uri: str, templates: Iterable[str]) -> Optional[str]:
    """Return the first template (in iteration order) that uri matches."""
    for template in templates:
        if matches_template(uri, template):
            return template
    return None
