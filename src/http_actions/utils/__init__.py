"""Utility modules for http-actions."""

from .headers import (
    ENTITY_HEADERS,
    env_header_key,
    get_header_value,
    has_header,
    merge_headers,
    requires_no_body,
    strip_to_entity_headers,
)

__all__ = [
    "ENTITY_HEADERS",
    "env_header_key",
    "get_header_value",
    "has_header",
    "merge_headers",
    "requires_no_body",
    "strip_to_entity_headers",
]
