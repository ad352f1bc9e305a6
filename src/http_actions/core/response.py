"""Mutable response built up during an action call.

The response holds the status, headers, body chunks and exposures of one
call, plus the per-request cookie jar, session and flash. It is
serialized by the lifecycle controller at finalization; body suppression
for no-body statuses and HEAD requests happens there, not on assignment.

Examples:
    Inside a handler::

        def handle(self, request, response):
            response.status = 201
            response.format = "json"
            response.body = json.dumps({"id": 23})
            response.cookies["last_seen"] = "23"
            response["book"] = book            # exposure
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from http_actions import mime
from http_actions import status as status_table
from http_actions.cache import ConditionalGet, cache_control_headers, expires_headers
from http_actions.config import ActionConfig
from http_actions.constants import CONTENT_TYPE_HEADER, LOCATION, SESSION
from http_actions.core.cookie_jar import CookieJar
from http_actions.core.flash import FLASH_KEY, Flash
from http_actions.core.halt import halt
from http_actions.core.request import Request
from http_actions.exceptions import MissingSessionError
from http_actions.utils.headers import get_header_value, merge_headers

Body = str | bytes | Iterable[str | bytes] | None


class Response:
    """Response of one action call.

    Args:
        env: Transport envelope; the session lives in it.
        request: The request being answered.
        config: Application configuration.
        content_type: Negotiated MIME type (without charset).
        sessions_enabled: Whether ``session`` and ``flash`` are available.
    """

    def __init__(
        self,
        env: dict[str, Any],
        request: Request,
        config: ActionConfig,
        content_type: str,
        sessions_enabled: bool = False,
    ) -> None:
        self.env = env
        self.request = request
        self.config = config
        self.sessions_enabled = sessions_enabled
        self.charset = config.default_charset
        self.exposures: dict[str, Any] = {}
        self.headers: dict[str, str] = merge_headers({}, config.default_headers)

        self._status = 200
        self._body: list[bytes] = []
        self._content_type = content_type
        self._format = mime.detect_format(content_type, config)
        self._cookies: CookieJar | None = None
        self._flash: Flash | None = None

    @property
    def status(self) -> int:
        return self._status

    @status.setter
    def status(self, value: int | str) -> None:
        self._status = status_table.code_for(value)

    @property
    def body(self) -> list[bytes]:
        """Body as a list of byte chunks."""
        return self._body

    @body.setter
    def body(self, value: Body) -> None:
        self._body = []
        if value is None:
            return
        if isinstance(value, (str, bytes)):
            value = [value]
        for chunk in value:
            self.write(chunk)

    def write(self, chunk: str | bytes) -> None:
        """Append a chunk to the body, encoding text with the response charset."""
        if isinstance(chunk, str):
            chunk = chunk.encode(self.charset)
        if chunk:
            self._body.append(chunk)

    @property
    def content_type(self) -> str:
        return self._content_type

    @property
    def format(self) -> str | None:
        """Format name of the response content type, if it has one."""
        return self._format

    @format.setter
    def format(self, value: str) -> None:
        """Set the response format by name, e.g. ``response.format = "json"``.

        Raises:
            UnknownFormatError: If the format is unknown.
        """
        self._content_type = mime.format_to_mime_type(value, self.config)  # type: ignore[assignment]
        self._format = str(value)
        self.headers[CONTENT_TYPE_HEADER] = mime.content_type_with_charset(self._content_type, self.charset)

    def __getitem__(self, key: str) -> Any:
        return self.exposures[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.exposures[key] = value

    def get_header(self, name: str) -> str | None:
        return get_header_value(self.headers, name)

    @property
    def session(self) -> dict[str, Any]:
        """Session of the current request.

        Raises:
            MissingSessionError: If sessions are disabled.
        """
        if not self.sessions_enabled:
            raise MissingSessionError("Response.session")
        session = self.env.get(SESSION)
        if session is None:
            session = self.env[SESSION] = {}
        return session

    @property
    def cookies(self) -> CookieJar:
        if self._cookies is None:
            self._cookies = CookieJar(self.env, self.config.cookies, self.config.session_key)
        return self._cookies

    @property
    def flash(self) -> Flash:
        """Flash of the current request.

        Raises:
            MissingSessionError: If sessions are disabled.
        """
        if not self.sessions_enabled:
            raise MissingSessionError("Response.flash")
        if self._flash is None:
            self._flash = Flash(self.session.get(FLASH_KEY))
        return self._flash

    def redirect_to(self, url: str, status: int | str = 302) -> None:
        """Set ``Location`` and halt.

        Raises:
            Halt: Always.
        """
        self.headers[LOCATION] = str(url)
        halt(status)

    def cache_control(self, *names: str, **values: Any) -> None:
        """Set the Cache-Control header, e.g. ``cache_control("public", max_age=600)``."""
        self.headers.update(cache_control_headers(*names, **values))

    def expires(self, amount: int, *names: str, **values: Any) -> None:
        """Set Expires ``amount`` seconds from now, with a matching max-age."""
        self.headers.update(expires_headers(amount, *names, **values))

    def fresh(self, etag: str | None = None, last_modified: datetime | None = None) -> None:
        """Send validators and halt with 304 when the client copy is fresh.

        Raises:
            Halt: With status 304 when ``If-None-Match`` or
                ``If-Modified-Since`` match.
        """
        conditional_get = ConditionalGet(self.env, etag=etag, last_modified=last_modified)
        self.headers.update(conditional_get.headers())
        if conditional_get.fresh():
            halt(304)

    def flush_state(self) -> None:
        """Write cookies into headers and rotate the flash into the session."""
        if self._cookies is not None:
            self._cookies.finish(self.headers)

        if not self.sessions_enabled:
            return

        flash = self.flash.sweep()
        if flash.now:
            self.session[FLASH_KEY] = flash.to_dict()
        else:
            self.session.pop(FLASH_KEY, None)

    def to_tuple(self) -> tuple[int, dict[str, str], list[bytes]]:
        return self._status, dict(self.headers), list(self._body)

    def __repr__(self) -> str:
        return f"Response(status={self._status!r}, content_type={self._content_type!r})"

