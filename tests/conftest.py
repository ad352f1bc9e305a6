"""
Pytest configuration and shared fixtures for http_actions tests.
"""

import io
from collections.abc import Callable
from typing import Any

import pytest

from http_actions.config import ActionConfig
from http_actions.utils.headers import env_header_key


def build_env(
    method: str = "GET",
    path: str = "/",
    query: str = "",
    headers: dict[str, str] | None = None,
    body: bytes = b"",
    content_type: str | None = None,
    params: dict[str, Any] | None = None,
    session: dict[str, Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a transport envelope the way a server adapter would."""
    env: dict[str, Any] = {
        "REQUEST_METHOD": method,
        "PATH_INFO": path,
        "QUERY_STRING": query,
        "wsgi.input": io.BytesIO(body),
        "wsgi.errors": io.StringIO(),
    }
    if body:
        env["CONTENT_LENGTH"] = str(len(body))
    if content_type is not None:
        env["CONTENT_TYPE"] = content_type
    if params is not None:
        env["router.params"] = params
    if session is not None:
        env["http_actions.session"] = session
    for name, value in (headers or {}).items():
        env[env_header_key(name)] = value
    env.update(extra)
    return env


@pytest.fixture
def make_env() -> Callable[..., dict[str, Any]]:
    """Provide the envelope builder."""
    return build_env


@pytest.fixture
def config() -> ActionConfig:
    """Provide a default configuration."""
    return ActionConfig()


@pytest.fixture
def session_config() -> ActionConfig:
    """Provide a configuration with sessions enabled."""
    return ActionConfig(sessions_enabled=True)
