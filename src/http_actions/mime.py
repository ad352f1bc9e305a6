"""MIME types, Accept-header negotiation and format resolution.

This module implements content negotiation for actions:

- Parsing an ``Accept`` header into weighted media ranges
- Picking the best server-supported media type for that header
- Answering whether a single concrete type is acceptable
- Mapping between format names (``"json"``) and MIME types
- Resolving the response content type from every available hint

Negotiation rules:

1. Each ``Accept`` entry becomes ``(media_range, q)``; ``q`` defaults to 1.0.
   Malformed entries (no ``/``, unparsable or out-of-range ``q``) are dropped.
2. Every candidate is scored with its most specific matching range.
   The score is ``q - 10 * wildcards`` so an exact match always outranks a
   ``type/*`` match, which always outranks ``*/*``, whatever the q-values.
3. A candidate whose most specific range has ``q=0`` is not acceptable.
4. Equal scores are broken by the candidate's position in the server list;
   earlier wins.

Examples:
    >>> best_q_match(
    ...     "application/json;q=0.6,application/xml;q=0.9,*/*;q=0.8",
    ...     ["application/json", "application/xml", "text/html"],
    ... )
    'application/xml'
    >>> best_q_match("*/*", ["text/html", "application/json"])
    'text/html'
    >>> accepts("text/*;q=0.5", "text/csv")
    True
"""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from http_actions.constants import DEFAULT_ACCEPT, DEFAULT_CONTENT_TYPE
from http_actions.exceptions import UnknownFormatError

if TYPE_CHECKING:
    from http_actions.config import ActionConfig

# Most common MIME types used for responses, in declaration order
TYPES: dict[str, str] = {
    "txt": "text/plain",
    "html": "text/html",
    "json": "application/json",
    "manifest": "text/cache-manifest",
    "atom": "application/atom+xml",
    "avi": "video/x-msvideo",
    "bmp": "image/bmp",
    "bz": "application/x-bzip",
    "bz2": "application/x-bzip2",
    "chm": "application/vnd.ms-htmlhelp",
    "css": "text/css",
    "csv": "text/csv",
    "flv": "video/x-flv",
    "gif": "image/gif",
    "gz": "application/x-gzip",
    "h264": "video/h264",
    "ico": "image/vnd.microsoft.icon",
    "ics": "text/calendar",
    "jpg": "image/jpeg",
    "js": "application/javascript",
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "mp3": "audio/mpeg",
    "mp4a": "audio/mp4",
    "mpg": "video/mpeg",
    "oga": "audio/ogg",
    "ogg": "application/ogg",
    "ogv": "video/ogg",
    "pdf": "application/pdf",
    "pgp": "application/pgp-encrypted",
    "png": "image/png",
    "psd": "image/vnd.adobe.photoshop",
    "rss": "application/rss+xml",
    "rtf": "application/rtf",
    "sh": "application/x-sh",
    "svg": "image/svg+xml",
    "swf": "application/x-shockwave-flash",
    "tar": "application/x-tar",
    "torrent": "application/x-bittorrent",
    "tsv": "text/tab-separated-values",
    "uri": "text/uri-list",
    "vcs": "text/x-vcalendar",
    "wav": "audio/x-wav",
    "webm": "video/webm",
    "wmv": "video/x-ms-wmv",
    "woff": "application/font-woff",
    "woff2": "application/font-woff2",
    "wsdl": "application/wsdl+xml",
    "xhtml": "application/xhtml+xml",
    "xml": "application/xml",
    "xslt": "application/xslt+xml",
    "yml": "text/yaml",
    "zip": "application/zip",
}

# Format mapping every configuration starts with
DEFAULT_FORMATS: dict[str, str] = {
    "application/octet-stream": "all",
    "*/*": "all",
    "text/html": "html",
}

MIME_SEPARATOR = "/"
MIME_WILDCARD = "*"
WILDCARD_PENALTY = 10


def parse_accept(header: str | None) -> list[tuple[str, float]]:
    """Parse an Accept header into ``(media_range, quality)`` pairs.

    Order is preserved. Entries that cannot be parsed are dropped.

    Args:
        header: Raw Accept header value. None is treated as ``*/*``.

    Returns:
        List of lowercase media ranges with their q-values.

    Example:
        >>> parse_accept("text/html, application/json;q=0.5, bogus, */*;q=x")
        [('text/html', 1.0), ('application/json', 0.5)]
    """
    if header is None:
        header = DEFAULT_ACCEPT

    ranges: list[tuple[str, float]] = []
    for entry in header.split(","):
        media_range, *params = (part.strip() for part in entry.split(";"))
        media_range = media_range.lower()

        if media_range == MIME_WILDCARD:
            media_range = DEFAULT_ACCEPT
        if media_range.count(MIME_SEPARATOR) != 1:
            continue
        kind, subtype = media_range.split(MIME_SEPARATOR)
        if not kind or not subtype or (kind == MIME_WILDCARD and subtype != MIME_WILDCARD):
            continue

        quality = 1.0
        malformed = False
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() != "q":
                continue
            try:
                quality = float(value.strip())
            except ValueError:
                malformed = True
                break
            if not 0.0 <= quality <= 1.0:
                malformed = True
                break

        if not malformed:
            ranges.append((media_range, quality))

    return ranges


def _essence(mime_type: str) -> str:
    # "Text/HTML; charset=utf-8" -> "text/html"
    return mime_type.split(";", 1)[0].strip().lower()


def wildcards(media_range: str) -> int:
    """Count wildcard segments in a media range (0, 1 or 2)."""
    return media_range.split(MIME_SEPARATOR, 1).count(MIME_WILDCARD)


def mime_matches(media_range: str, mime_type: str) -> bool:
    """Return True if a concrete MIME type falls within a media range.

    Example:
        >>> mime_matches("text/*", "text/csv")
        True
        >>> mime_matches("application/json", "application/xml")
        False
    """
    media_range = _essence(media_range)
    mime_type = _essence(mime_type)

    if media_range == DEFAULT_ACCEPT:
        return True

    range_type, _, range_subtype = media_range.partition(MIME_SEPARATOR)
    kind, _, subtype = mime_type.partition(MIME_SEPARATOR)

    if range_type != kind:
        return False
    return range_subtype == MIME_WILDCARD or range_subtype == subtype


class RequestMimeWeight:
    """Score of one server-supported MIME type against the Accept header.

    Attributes:
        mime_type: The server-supported MIME type being scored.
        media_range: The most specific Accept entry that matched it.
        quality: That entry's q-value.
        position: Index of ``mime_type`` in the server's declared list.
        priority: ``quality - 10 * wildcards(media_range)``.
    """

    def __init__(self, mime_type: str, media_range: str, quality: float, position: int) -> None:
        self.mime_type = mime_type
        self.media_range = media_range
        self.quality = quality
        self.position = position
        self.priority = quality - WILDCARD_PENALTY * wildcards(media_range)

    def outranks(self, other: "RequestMimeWeight") -> bool:
        """Return True if this weight beats ``other``."""
        if self.priority != other.priority:
            return self.priority > other.priority
        return self.position < other.position


def _weigh(
    ranges: Sequence[tuple[str, float]], mime_type: str, position: int
) -> RequestMimeWeight | None:
    best: RequestMimeWeight | None = None
    for media_range, quality in ranges:
        if not mime_matches(media_range, mime_type):
            continue
        weight = RequestMimeWeight(mime_type, media_range, quality, position)
        if best is None or weight.priority > best.priority:
            best = weight

    if best is None or best.quality <= 0.0:
        return None
    return best


def best_q_match(header: str | None, available: Iterable[str] | None = None) -> str | None:
    """Return the best server-supported MIME type for an Accept header.

    Args:
        header: Raw Accept header (None means ``*/*``).
        available: Server-supported MIME types in declaration order.
            Defaults to the built-in table.

    Returns:
        The winning MIME type, or None when nothing is acceptable.
    """
    if available is None:
        available = TYPES.values()

    ranges = parse_accept(header)
    winner: RequestMimeWeight | None = None
    for position, mime_type in enumerate(available):
        weight = _weigh(ranges, mime_type, position)
        if weight is not None and (winner is None or weight.outranks(winner)):
            winner = weight

    return winner.mime_type if winner else None


def accepts(header: str | None, mime_type: str) -> bool:
    """Return True if a concrete MIME type is acceptable per the Accept header."""
    return _weigh(parse_accept(header), mime_type, 0) is not None


def content_type_with_charset(content_type: str, charset: str) -> str:
    """Append a charset parameter to a content type.

    Example:
        >>> content_type_with_charset("text/html", "utf-8")
        'text/html; charset=utf-8'
    """
    return f"{content_type}; charset={charset}"


def format_for(mime_type: str) -> str | None:
    """Return the built-in format name for a MIME type, if any."""
    mime_type = _essence(mime_type)
    for name, candidate in TYPES.items():
        if candidate == mime_type:
            return name
    return None


def detect_format(content_type: str | None, config: "ActionConfig") -> str | None:
    """Detect the format name of a content type.

    Configured formats take precedence over the built-in table.

    Example:
        >>> detect_format("text/html; charset=utf-8", ActionConfig())
        'html'
    """
    if content_type is None:
        return None

    mime_type = _essence(content_type)
    return config.format_for(mime_type) or format_for(mime_type)


def format_to_mime_type(format: str | None, config: "ActionConfig") -> str | None:
    """Return the MIME type for a format name.

    Args:
        format: Format name such as "json". None yields None.
        config: Configuration providing custom formats.

    Returns:
        The MIME type, or None when ``format`` is None.

    Raises:
        UnknownFormatError: If the format is unknown.
    """
    if format is None:
        return None

    mime_type = config.mime_type_for(format) or TYPES.get(str(format))
    if mime_type is None:
        raise UnknownFormatError(format)
    return mime_type


def restrict_mime_types(config: "ActionConfig", accepted_formats: Sequence[str]) -> list[str] | None:
    """Translate accepted format names into supported MIME types.

    Returns None when no formats are given or none of them is supported,
    meaning every configured MIME type is accepted.

    Raises:
        UnknownFormatError: If any of the formats is unknown.
    """
    if not accepted_formats:
        return None

    supported = config.mime_types
    mime_types = [format_to_mime_type(name, config) for name in accepted_formats]
    restricted = [mime for mime in mime_types if mime in supported]
    return restricted or None


def accepted_mime_type(
    content_type: str | None,
    accepted_mime_types: Sequence[str],
    default_content_type: str | None = None,
) -> bool:
    """Return True if a request Content-Type is one of the accepted types.

    A request without a Content-Type is checked as ``default_content_type``
    and passes when there is no default either.
    """
    content_type = content_type or default_content_type
    if not content_type:
        return True
    return any(mime_matches(accepted, content_type) for accepted in accepted_mime_types)


def path_extension_format(path: str | None, config: "ActionConfig") -> str | None:
    """Return the format hinted by a path extension such as ``/books.json``.

    Only extensions that name a known format are considered.
    """
    if not path:
        return None

    last_segment = path.rstrip("/").rsplit("/", 1)[-1]
    if "." not in last_segment:
        return None

    extension = last_segment.rsplit(".", 1)[-1].lower()
    if config.mime_type_for(extension) or extension in TYPES:
        return extension
    return None


def resolve_content_type(
    config: "ActionConfig",
    accept: str | None,
    accepted_mime_types: Sequence[str],
    explicit_format: str | None = None,
    path: str | None = None,
    restricted: bool = False,
) -> str:
    """Resolve the response content type from every available hint.

    Precedence: explicit format > path extension > Accept negotiation
    (only when a header other than ``*/*`` was sent) > default response
    format > default request format > first accepted type (when the action
    restricts its formats) > ``application/octet-stream``.

    Args:
        config: Action configuration.
        accept: Raw Accept header or None.
        accepted_mime_types: Candidate MIME types in declaration order.
        explicit_format: Format forced by the caller (e.g. the router).
        path: Request path, used for extension hints.
        restricted: Whether ``accepted_mime_types`` comes from an explicit
            accepted-formats restriction.

    Returns:
        A MIME type without charset.

    Raises:
        UnknownFormatError: If an explicit or default format is unknown.
    """
    if explicit_format is not None:
        return format_to_mime_type(explicit_format, config)  # type: ignore[return-value]

    extension = path_extension_format(path, config)
    if extension is not None:
        mime_type = format_to_mime_type(extension, config)
        if mime_type in accepted_mime_types:
            return mime_type  # type: ignore[return-value]

    if accept is not None and accept.strip() != DEFAULT_ACCEPT:
        negotiated = best_q_match(accept, accepted_mime_types)
        if negotiated is not None:
            return negotiated

    default = format_to_mime_type(config.default_response_format, config) or format_to_mime_type(
        config.default_request_format, config
    )
    if default is not None:
        return default

    if restricted and accepted_mime_types:
        return accepted_mime_types[0]

    return DEFAULT_CONTENT_TYPE
