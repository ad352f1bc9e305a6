"""ASGI adapter for Starlette and FastAPI applications.

This module exposes an action as an ASGI endpoint. For each request the
adapter:

1. Converts the Starlette request into a transport envelope
2. Loads the session from a session store (when the action uses sessions)
3. Runs the action in a worker thread
4. Saves the session and emits the session cookie
5. Converts the ``(status, headers, body)`` triple into a Starlette response

Unhandled exceptions raised by the action propagate to the ASGI server,
whose error middleware produces the 500 response.

Examples:
    Starlette routing::

        from starlette.applications import Starlette
        from starlette.routing import Route

        from http_actions.adapters.asgi import ActionEndpoint
        from http_actions.storage.memory import MemorySessionStore

        store = MemorySessionStore()
        app = Starlette(
            routes=[
                Route("/books/{id}", ActionEndpoint(ShowBook(), session_store=store)),
            ]
        )

    FastAPI mounting::

        app = FastAPI()
        app.router.routes.append(Route("/books/{id}", ActionEndpoint(ShowBook())))
"""

import io
import secrets
import sys
from typing import Any

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from http_actions.constants import (
    CONTENT_LENGTH,
    CONTENT_TYPE,
    ERRORS,
    INPUT,
    PATH_INFO,
    QUERY_STRING,
    REQUEST_METHOD,
    ROUTER_PARAMS,
    SESSION,
    SET_COOKIE,
)
from http_actions.core.action import Action
from http_actions.core.cookie_jar import serialize_cookie, serialize_removal
from http_actions.models import CookieOptions
from http_actions.observability.logging import get_logger
from http_actions.storage.base import SessionStore
from http_actions.utils.headers import env_header_key

logger = get_logger(__name__)

# Two weeks
DEFAULT_SESSION_TTL_SECONDS = 1209600


class ActionEndpoint:
    """ASGI application running one action.

    Attributes:
        action: The action instance (shared across requests)
        session_store: Store used to persist sessions, if any
        session_ttl_seconds: Lifetime of saved sessions and of the session cookie
    """

    def __init__(
        self,
        action: Action,
        session_store: SessionStore | None = None,
        session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
    ) -> None:
        self.action = action
        self.session_store = session_store
        self.session_ttl_seconds = session_ttl_seconds

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point."""
        request = StarletteRequest(scope, receive)
        env = await self._build_env(request)

        session_id = await self._load_session(request, env)
        status, headers, body = await run_in_threadpool(self.action, env)
        session_cookie = await self._save_session(session_id, env)

        response = self._convert_response(status, headers, body, session_cookie)
        await response(scope, receive, send)

    async def _build_env(self, request: StarletteRequest) -> dict[str, Any]:
        """Convert a Starlette request into a transport envelope.

        Args:
            request: Starlette request object

        Returns:
            Envelope with method, path, query, headers, body stream and route params
        """
        body = await request.body()

        env: dict[str, Any] = {
            REQUEST_METHOD: request.method,
            PATH_INFO: request.url.path,
            QUERY_STRING: request.url.query or "",
            INPUT: io.BytesIO(body),
            ERRORS: sys.stderr,
            ROUTER_PARAMS: dict(request.path_params),
        }

        for name, value in request.headers.items():
            lowered = name.lower()
            if lowered == "content-type":
                env[CONTENT_TYPE] = value
            elif lowered == "content-length":
                env[CONTENT_LENGTH] = value
            else:
                key = env_header_key(name)
                # Repeated headers are folded the way CGI does it
                env[key] = f"{env[key]},{value}" if key in env else value

        return env

    async def _load_session(self, request: StarletteRequest, env: dict[str, Any]) -> str | None:
        """Put the stored session into the envelope and return its id."""
        if self.session_store is None or not self.action.sessions_active:
            return None

        session_id = request.cookies.get(self.action.config.session_key)
        if not session_id:
            return None

        record = await self.session_store.load(session_id)
        if record is None:
            logger.debug("session.missing", session_id=session_id[:8])
            return None

        env[SESSION] = record.data
        logger.debug("session.loaded", session_id=session_id[:8], keys=len(record.data))
        return session_id

    async def _save_session(self, session_id: str | None, env: dict[str, Any]) -> str | None:
        """Persist the session after the call.

        Returns:
            Set-Cookie value for the session cookie, or None when unchanged.
        """
        if self.session_store is None or not self.action.sessions_active:
            return None

        key = self.action.config.session_key
        data = env.get(SESSION) or {}

        if not data:
            if session_id is None:
                return None
            await self.session_store.delete(session_id)
            logger.debug("session.deleted", session_id=session_id[:8])
            return serialize_removal(key, path="/")

        if session_id is None:
            session_id = secrets.token_urlsafe(32)

        await self.session_store.save(session_id, data, self.session_ttl_seconds)
        logger.debug("session.saved", session_id=session_id[:8], keys=len(data))

        return serialize_cookie(
            key,
            CookieOptions(
                value=session_id,
                path="/",
                max_age=self.session_ttl_seconds,
                http_only=True,
                same_site="Lax",
            ),
        )

    def _convert_response(
        self,
        status: int,
        headers: dict[str, str],
        body: list[bytes],
        session_cookie: str | None,
    ) -> Response:
        """Convert the action's triple into a Starlette Response.

        Multi-line ``Set-Cookie`` values become separate headers.
        """
        response = Response(content=b"".join(body), status_code=status)

        for name, value in headers.items():
            if name.lower() == SET_COOKIE.lower():
                for line in value.split("\n"):
                    if line:
                        response.headers.append(SET_COOKIE, line)
            else:
                response.headers[name] = value

        if session_cookie is not None:
            response.headers.append(SET_COOKIE, session_cookie)

        return response
