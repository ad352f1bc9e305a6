"""Read-only view of the inbound transport envelope.

The request exposes the method, headers, body and merged params of one
action call. Params are merged with increasing precedence: query string,
body (form-encoded or JSON object), then route params supplied by the
router under ``router.params``.

Examples:
    >>> request = Request({
    ...     "REQUEST_METHOD": "GET",
    ...     "QUERY_STRING": "page=2&tag=a&tag=b",
    ...     "router.params": {"id": "23"},
    ... })
    >>> dict(request.params)
    {'page': '2', 'tag': ['a', 'b'], 'id': '23'}
"""

import json
import secrets
from collections.abc import Mapping
from functools import cached_property
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qs

from http_actions.config import ActionConfig
from http_actions.constants import (
    BODY,
    CONTENT_LENGTH,
    CONTENT_TYPE,
    DEFAULT_REQUEST_METHOD,
    HEAD,
    HTTP_ACCEPT,
    INPUT,
    PATH_INFO,
    QUERY_STRING,
    REQUEST_ID,
    REQUEST_METHOD,
    ROUTER_PARAMS,
)
from http_actions.observability.logging import get_logger
from http_actions.utils.headers import env_header_key

logger = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _flatten(parsed: Mapping[str, list[str]]) -> dict[str, Any]:
    # Repeated keys keep every value; single keys are unwrapped
    return {key: values[0] if len(values) == 1 else list(values) for key, values in parsed.items()}


def parse_query(query: str | None) -> dict[str, Any]:
    """Parse a query string, keeping blank values.

    Example:
        >>> parse_query("a=1&b=&a=2")
        {'a': ['1', '2'], 'b': ''}
    """
    if not query:
        return {}
    return _flatten(parse_qs(query, keep_blank_values=True))


class Request:
    """One inbound request.

    Args:
        env: Transport envelope.
        config: Application configuration, used for request ids.
    """

    def __init__(self, env: dict[str, Any], config: ActionConfig | None = None) -> None:
        self._env = env
        self._config = config or ActionConfig()

    @property
    def env(self) -> Mapping[str, Any]:
        return MappingProxyType(self._env)

    @property
    def method(self) -> str:
        return str(self._env.get(REQUEST_METHOD, DEFAULT_REQUEST_METHOD)).upper()

    @property
    def is_head(self) -> bool:
        return self.method == HEAD

    @property
    def path(self) -> str:
        return self._env.get(PATH_INFO, "") or "/"

    @property
    def query_string(self) -> str:
        return self._env.get(QUERY_STRING, "") or ""

    @property
    def content_type(self) -> str | None:
        return self._env.get(CONTENT_TYPE) or None

    @property
    def media_type(self) -> str | None:
        """Content type without parameters, lowercased."""
        if self.content_type is None:
            return None
        return self.content_type.split(";", 1)[0].strip().lower()

    @property
    def accept(self) -> str | None:
        return self._env.get(HTTP_ACCEPT)

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Return a request header by its HTTP name.

        Example:
            >>> Request({"HTTP_X_API_KEY": "s3cret"}).get_header("X-Api-Key")
            's3cret'
        """
        if name.lower() == "content-type":
            return self.content_type or default
        if name.lower() == "content-length":
            return self._env.get(CONTENT_LENGTH, default)
        return self._env.get(env_header_key(name), default)

    @property
    def body(self) -> bytes:
        """Raw request body, read once from the input stream and memoized in the envelope."""
        data = self._env.get(BODY)
        if data is None:
            data = self._read_input()
            self._env[BODY] = data
        return data

    def _read_input(self) -> bytes:
        stream = self._env.get(INPUT)
        if stream is None:
            return b""

        length = self._env.get(CONTENT_LENGTH)
        try:
            size = int(length) if length not in (None, "") else -1
        except ValueError:
            size = -1

        data = stream.read(size) if size >= 0 else stream.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        return data or b""

    @cached_property
    def params(self) -> Mapping[str, Any]:
        """Query, body and route params merged into a read-only mapping."""
        merged: dict[str, Any] = {}
        merged.update(parse_query(self.query_string))
        merged.update(self._body_params())
        merged.update(self._env.get(ROUTER_PARAMS) or {})
        return MappingProxyType(merged)

    def _body_params(self) -> dict[str, Any]:
        media_type = self.media_type
        if media_type is None:
            return {}

        if media_type == FORM_CONTENT_TYPE:
            return _flatten(parse_qs(self.body.decode("utf-8", "replace"), keep_blank_values=True))

        if media_type == "application/json" or media_type.endswith("+json"):
            if not self.body:
                return {}
            try:
                payload = json.loads(self.body)
            except ValueError:
                logger.debug("request.malformed_json", path=self.path, size=len(self.body))
                return {}
            return payload if isinstance(payload, dict) else {}

        return {}

    @property
    def id(self) -> str:
        """Random hex id, generated on first access and memoized in the envelope."""
        request_id = self._env.get(REQUEST_ID)
        if request_id is None:
            request_id = secrets.token_hex(self._config.request_id_length)
            self._env[REQUEST_ID] = request_id
        return request_id

    def __repr__(self) -> str:
        return f"Request(method={self.method!r}, path={self.path!r})"
