"""Header filtering and manipulation utilities for http-actions.

This module provides functions for:
- Deciding whether a response may carry a body
- Stripping headers from body-less responses
- Case-insensitive header lookup and merging
- Building the transport-envelope key for a header name
"""

from collections.abc import Iterable, Mapping

from http_actions.constants import HEAD, HTTP_STATUSES_WITHOUT_BODY

# Headers that survive on responses that cannot carry a body (RFC 2616 entity headers)
ENTITY_HEADERS = {
    "allow",
    "content-encoding",
    "content-language",
    "content-location",
    "content-md5",
    "content-range",
    "expires",
    "last-modified",
}


def requires_no_body(status: int, method: str | None = None) -> bool:
    """Return True if a response must be sent without a body.

    Example:
        >>> requires_no_body(304)
        True
        >>> requires_no_body(200, "HEAD")
        True
        >>> requires_no_body(200, "GET")
        False
    """
    return status in HTTP_STATUSES_WITHOUT_BODY or (method or "").upper() == HEAD


def strip_to_entity_headers(
    headers: Mapping[str, str],
    keep: Iterable[str] | None = None,
) -> dict[str, str]:
    """Drop every header that is not an entity header.

    Args:
        headers: Response headers
        keep: Additional header names to retain (case-insensitive)

    Returns:
        Filtered headers dictionary, original casing preserved

    Example:
        >>> strip_to_entity_headers({"Content-Type": "text/html", "Expires": "0"})
        {'Expires': '0'}
    """
    allowed = ENTITY_HEADERS | {name.lower() for name in keep or ()}
    return {key: value for key, value in headers.items() if key.lower() in allowed}


def get_header_value(headers: Mapping[str, str], name: str) -> str | None:
    """Look a header up case-insensitively.

    Example:
        >>> get_header_value({"content-type": "text/plain"}, "Content-Type")
        'text/plain'
    """
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def has_header(headers: Mapping[str, str], name: str) -> bool:
    """Return True if the header is present, whatever its casing."""
    return get_header_value(headers, name) is not None


def merge_headers(
    headers: dict[str, str],
    extra: Mapping[str, str | None],
    overwrite: bool = False,
) -> dict[str, str]:
    """Copy headers from ``extra`` into ``headers`` in place.

    Existing headers (compared case-insensitively) are kept unless
    ``overwrite`` is set. None values are skipped.

    Returns:
        The updated ``headers`` mapping
    """
    for name, value in extra.items():
        if value is None:
            continue
        existing = [key for key in headers if key.lower() == name.lower()]
        if existing and not overwrite:
            continue
        for key in existing:
            del headers[key]
        headers[name] = value
    return headers


def env_header_key(name: str) -> str:
    """Return the envelope key for an HTTP header.

    Example:
        >>> env_header_key("If-None-Match")
        'HTTP_IF_NONE_MATCH'
    """
    return "HTTP_" + name.upper().replace("-", "_")
