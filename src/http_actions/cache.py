"""HTTP caching headers: Cache-Control, Expires and conditional GET.

Directives are given as positional names (``"public"``, ``"no_store"``)
and keyword values (``max_age=600``). Underscores become dashes on the
wire. Unknown directives are dropped, and ``private`` suppresses
``public``.

Examples:
    >>> cache_control_headers("public", max_age=600)
    {'Cache-Control': 'public, max-age=600'}
    >>> cache_control_headers("public", "private", "bogus")
    {'Cache-Control': 'private'}
"""

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any

from http_actions.constants import HTTP_IF_MODIFIED_SINCE, HTTP_IF_NONE_MATCH

CACHE_CONTROL = "Cache-Control"
EXPIRES = "Expires"
ETAG = "ETag"
LAST_MODIFIED = "Last-Modified"

VALUE_DIRECTIVES = ("max_age", "s_maxage", "min_fresh", "max_stale")

NON_VALUE_DIRECTIVES = (
    "public",
    "private",
    "no_cache",
    "no_store",
    "no_transform",
    "must_revalidate",
    "proxy_revalidate",
)


def _wire_name(name: str) -> str:
    return name.replace("_", "-")


def _normalize(name: str) -> str:
    return name.strip().lower().replace("-", "_")


def cache_control_directives(*names: str, **values: Any) -> list[str]:
    """Render Cache-Control directives in the order they were given.

    Example:
        >>> cache_control_directives("no-cache", "must_revalidate", max_age=0)
        ['no-cache', 'must-revalidate', 'max-age=0']
    """
    directives: dict[str, Any] = {}
    for name in names:
        key = _normalize(name)
        if key in NON_VALUE_DIRECTIVES:
            directives[key] = None
    for name, value in values.items():
        key = _normalize(name)
        if key in VALUE_DIRECTIVES and value is not None:
            directives[key] = int(value)

    if "private" in directives:
        directives.pop("public", None)

    return [
        _wire_name(key) if value is None else f"{_wire_name(key)}={value}"
        for key, value in directives.items()
    ]


def cache_control_headers(*names: str, **values: Any) -> dict[str, str]:
    """Return a Cache-Control header, or nothing when no directive survives."""
    directives = cache_control_directives(*names, **values)
    if not directives:
        return {}
    return {CACHE_CONTROL: ", ".join(directives)}


def http_date(moment: datetime) -> str:
    """Format a datetime as an HTTP date; naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return format_datetime(moment.astimezone(UTC), usegmt=True)


def expires_headers(amount: int, *names: str, now: datetime | None = None, **values: Any) -> dict[str, str]:
    """Return Expires plus a Cache-Control header carrying ``max-age=amount``.

    Example:
        >>> sorted(expires_headers(60, "public"))
        ['Cache-Control', 'Expires']
    """
    moment = (now or datetime.now(UTC)) + timedelta(seconds=int(amount))
    return {
        EXPIRES: http_date(moment),
        **cache_control_headers(*names, **{**values, "max_age": amount}),
    }


class CacheDirectives:
    """Class-level Cache-Control or Expires declaration.

    Stored on an action definition and rendered at finalization, unless
    the handler already set the header.
    """

    __slots__ = ("names", "values", "expires_in")

    def __init__(self, *names: str, expires_in: int | None = None, **values: Any) -> None:
        self.names = names
        self.values = values
        self.expires_in = expires_in

    @property
    def header(self) -> str:
        return CACHE_CONTROL if self.expires_in is None else EXPIRES

    def headers(self) -> dict[str, str]:
        if self.expires_in is None:
            return cache_control_headers(*self.names, **self.values)
        return expires_headers(self.expires_in, *self.names, **self.values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CacheDirectives):
            return NotImplemented
        return (self.names, self.values, self.expires_in) == (other.names, other.values, other.expires_in)

    def __repr__(self) -> str:
        return f"CacheDirectives(names={self.names!r}, values={self.values!r}, expires_in={self.expires_in!r})"


class ConditionalGet:
    """ETag and Last-Modified validation against the request's conditional headers.

    Args:
        env: Transport envelope.
        etag: Current entity tag of the resource.
        last_modified: Last modification time of the resource.
    """

    def __init__(
        self,
        env: Mapping[str, Any],
        etag: str | None = None,
        last_modified: datetime | None = None,
    ) -> None:
        self.etag = etag
        self.last_modified = last_modified
        self.if_none_match = env.get(HTTP_IF_NONE_MATCH)
        self.if_modified_since = env.get(HTTP_IF_MODIFIED_SINCE)

    def etag_fresh(self) -> bool:
        if not self.if_none_match or self.etag is None:
            return False
        candidates = [tag.strip() for tag in self.if_none_match.split(",")]
        return self.etag in candidates or "*" in candidates

    def last_modified_fresh(self) -> bool:
        if not self.if_modified_since or self.last_modified is None:
            return False
        try:
            since = parsedate_to_datetime(self.if_modified_since)
        except (TypeError, ValueError):
            return False
        if since.tzinfo is None:
            since = since.replace(tzinfo=UTC)
        modified = self.last_modified
        if modified.tzinfo is None:
            modified = modified.replace(tzinfo=UTC)
        return int(since.timestamp()) >= int(modified.timestamp())

    def fresh(self) -> bool:
        """Return True if the client's cached copy is still valid."""
        return self.etag_fresh() or self.last_modified_fresh()

    def headers(self) -> dict[str, str]:
        """Validator headers to send with the response."""
        headers: dict[str, str] = {}
        if self.etag is not None:
            headers[ETAG] = self.etag
        if self.last_modified is not None:
            headers[LAST_MODIFIED] = http_date(self.last_modified)
        return headers
