"""Per-request cookie jar with dirty tracking.

The jar is hydrated lazily from the inbound ``Cookie`` header. Only names
written during the request (set or removed) are emitted as ``Set-Cookie``
headers when the jar is finished; reading never marks a cookie dirty.

The session cookie belongs to the session layer and is never emitted by
the jar.

Examples:
    >>> jar = CookieJar({"HTTP_COOKIE": "foo=bar; theme=dark"})
    >>> jar["foo"]
    'bar'
    >>> jar["greeting"] = "hello world"
    >>> jar.set("token", "abc", max_age=300, http_only=True)
    >>> jar.remove("theme")
    >>> headers = {}
    >>> jar.finish(headers)
    >>> sorted(headers["Set-Cookie"].split("\\n"))[0]
    'greeting=hello%20world'
"""

from collections.abc import Iterator, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import quote, unquote

from http_actions.cache import http_date
from http_actions.constants import HTTP_COOKIE, SESSION, SET_COOKIE
from http_actions.models import CookieOptions

COOKIE_SEPARATORS = (";", ",")
EXPIRED = "Thu, 01 Jan 1970 00:00:00 GMT"

CookieValue = str | CookieOptions | Mapping[str, Any] | None


def parse_cookie_header(header: str | None) -> dict[str, str]:
    """Parse a ``Cookie`` header into a name to value mapping.

    Pairs are separated by ``;`` or ``,``; names and values are URL-decoded.
    The first occurrence of a name wins.

    Example:
        >>> parse_cookie_header("a=1; b=hello%20world, a=2")
        {'a': '1', 'b': 'hello world'}
    """
    cookies: dict[str, str] = {}
    if not header:
        return cookies

    normalized = header
    for separator in COOKIE_SEPARATORS[1:]:
        normalized = normalized.replace(separator, COOKIE_SEPARATORS[0])

    for pair in normalized.split(COOKIE_SEPARATORS[0]):
        name, _, value = pair.strip().partition("=")
        if not name:
            continue
        name = unquote(name.strip())
        if name not in cookies:
            cookies[name] = unquote(value.strip())
    return cookies


def serialize_cookie(name: str, options: CookieOptions) -> str:
    """Render one ``Set-Cookie`` header value.

    Example:
        >>> serialize_cookie("foo", CookieOptions(value="bar", path="/", http_only=True))
        'foo=bar; path=/; HttpOnly'
    """
    parts = [f"{quote(name, safe='')}={quote(options.value or '', safe='')}"]
    if options.domain:
        parts.append(f"domain={options.domain}")
    if options.path:
        parts.append(f"path={options.path}")
    if options.max_age is not None:
        parts.append(f"max-age={options.max_age}")
    if options.expires is not None:
        parts.append(f"expires={http_date(options.expires)}")
    if options.secure:
        parts.append("secure")
    if options.http_only:
        parts.append("HttpOnly")
    if options.same_site:
        parts.append(f"SameSite={options.same_site}")
    return "; ".join(parts)


def serialize_removal(name: str, domain: str | None = None, path: str | None = None) -> str:
    """Render a ``Set-Cookie`` value that makes the client drop a cookie.

    Example:
        >>> serialize_removal("foo")
        'foo=; max-age=0; expires=Thu, 01 Jan 1970 00:00:00 GMT'
    """
    parts = [f"{quote(name, safe='')}="]
    if domain:
        parts.append(f"domain={domain}")
    if path:
        parts.append(f"path={path}")
    parts.extend(["max-age=0", f"expires={EXPIRED}"])
    return "; ".join(parts)


def append_set_cookie(headers: dict[str, str], value: str) -> None:
    """Add a ``Set-Cookie`` value; multiple values are joined with newlines."""
    existing = headers.get(SET_COOKIE)
    headers[SET_COOKIE] = f"{existing}\n{value}" if existing else value


class CookieJar:
    """Cookies of one request.

    Args:
        env: Transport envelope holding the ``Cookie`` header.
        default_options: Options merged under every written cookie.
        session_key: Name of the session cookie, never emitted.
    """

    def __init__(
        self,
        env: Mapping[str, Any],
        default_options: Mapping[str, Any] | None = None,
        session_key: str = SESSION,
    ) -> None:
        self._env = env
        self._default_options = dict(default_options or {})
        self._session_key = session_key
        self._cookies: dict[str, CookieValue] | None = None
        self._changes: list[str] = []

    @property
    def _store(self) -> dict[str, CookieValue]:
        if self._cookies is None:
            self._cookies = dict(parse_cookie_header(self._env.get(HTTP_COOKIE)))
        return self._cookies

    def __getitem__(self, name: str) -> str | None:
        """Return the current value of a cookie, or None."""
        value = self._store.get(name)
        if isinstance(value, CookieOptions):
            return value.value
        if isinstance(value, Mapping):
            stored = value.get("value")
            return None if stored is None else str(stored)
        return value

    def get(self, name: str, default: str | None = None) -> str | None:
        value = self[name]
        return default if value is None else value

    def __setitem__(self, name: str, value: CookieValue) -> None:
        """Write a cookie. ``value`` may be a string, an options mapping,
        a :class:`CookieOptions` or None (removal)."""
        if name not in self._changes:
            self._changes.append(name)
        self._store[name] = value

    def set(self, name: str, value: str | None = None, **options: Any) -> None:
        """Write a cookie with attributes.

        Example:
            >>> jar = CookieJar({})
            >>> jar.set("token", "abc", path="/", max_age=60)
        """
        self[name] = {"value": value, **options} if options else value

    def remove(self, name: str) -> None:
        """Mark a cookie for removal on the client."""
        self[name] = None

    def __contains__(self, name: object) -> bool:
        return self._store.get(name) is not None  # type: ignore[call-overload]

    def __iter__(self) -> Iterator[str]:
        return iter([name for name, value in self._store.items() if value is not None])

    def to_dict(self) -> dict[str, str]:
        """Return the current cookie values."""
        return {name: self[name] for name in self}  # type: ignore[misc]

    @property
    def changed(self) -> list[str]:
        """Names written during this request, in write order."""
        return [name for name in self._changes if name != self._session_key]

    def options_for(self, value: str | CookieOptions | Mapping[str, Any]) -> CookieOptions:
        """Merge default options under a written value.

        ``expires`` is derived from ``max_age`` when only the latter is given.
        """
        if isinstance(value, CookieOptions):
            explicit = value.model_dump(exclude_unset=True)
        elif isinstance(value, Mapping):
            explicit = dict(value)
        else:
            explicit = {"value": value}

        if explicit.get("max_age") is not None and "expires" not in explicit:
            explicit["expires"] = datetime.now(UTC) + timedelta(seconds=explicit["max_age"])

        return CookieOptions(**{**self._default_options, **explicit})

    def finish(self, headers: dict[str, str]) -> None:
        """Emit ``Set-Cookie`` headers for every cookie written this request."""
        if not self._changes:
            return

        for name in self.changed:
            value = self._store.get(name)
            options = self.options_for({"value": None} if value is None else value)
            if options.value is None:
                append_set_cookie(headers, serialize_removal(name, options.domain, options.path))
            else:
                append_set_cookie(headers, serialize_cookie(name, options))
