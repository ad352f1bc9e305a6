"""Configuration module for http-actions.

This module provides the ActionConfig class: the application-wide settings
every action falls back to (formats, charset, default headers, cookie
defaults, exception policy, sessions).

Example:
    Basic usage with defaults:

        >>> config = ActionConfig()
        >>> config.default_charset
        'utf-8'

    Custom configuration:

        >>> config = ActionConfig(
        ...     default_response_format="json",
        ...     default_headers={"X-Frame-Options": "DENY"},
        ...     cookies={"path": "/", "http_only": True},
        ...     sessions_enabled=True,
        ... )

    Registering a custom format:

        >>> config = ActionConfig().add_format("jsonapi", "application/vnd.api+json")
        >>> config.format_for("application/vnd.api+json")
        'jsonapi'

    Loading from environment:

        >>> import os
        >>> os.environ['HTTP_ACTIONS_DEFAULT_RESPONSE_FORMAT'] = 'json'
        >>> os.environ['HTTP_ACTIONS_SESSIONS_ENABLED'] = 'true'
        >>> config = ActionConfig.from_env()
"""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

from http_actions.constants import DEFAULT_CHARSET, SESSION
from http_actions.mime import DEFAULT_FORMATS, TYPES

COOKIE_OPTION_NAMES = {"domain", "path", "max_age", "expires", "secure", "http_only", "same_site"}

TRUE_VALUES = {"1", "true", "yes", "on"}


def _split_pairs(value: str, separator: str = "=") -> dict[str, str]:
    # "a=b, c=d" -> {"a": "b", "c": "d"}
    pairs: dict[str, str] = {}
    for item in value.split(","):
        if not item.strip():
            continue
        key, _, val = item.partition(separator)
        pairs[key.strip()] = val.strip()
    return pairs


class ActionConfig(BaseModel):
    """Application-wide configuration for actions.

    This immutable configuration class is shared by every action of an
    application. Per-action declarations take precedence over it.

    Attributes:
        formats: Custom MIME type to format name mapping. Custom entries take
            precedence over the built-in MIME table.
        default_request_format: Format assumed for requests when nothing
            else can be negotiated.
        default_response_format: Format used for responses when the client
            sends no specific Accept header.
        default_charset: Charset appended to the Content-Type header.
            Default is "utf-8".
        default_headers: Headers copied onto every response. Entries whose
            value is None are dropped.
        cookies: Default cookie options merged under per-cookie options.
            Accepted keys: domain, path, max_age, expires, secure,
            http_only, same_site.
        handled_exceptions: Application-wide exception policy. Maps an
            exception class to a status code or a handler method name.
            Action-level entries override these.
        sessions_enabled: Enable ``session`` and ``flash``. Default is False.
        session_key: Name of the cookie that carries the session. The cookie
            jar never emits it.
        request_id_length: Bytes of randomness in generated request ids
            (1-64). Default is 16.

    Note:
        This class is immutable (frozen=True). ``add_format`` and
        ``handle_exception`` return new instances.
    """

    formats: dict[str, str] = Field(
        default_factory=dict,
        description="Custom MIME type to format name mapping",
    )
    default_request_format: str | None = Field(
        default=None,
        description="Format assumed for requests when nothing else matches",
    )
    default_response_format: str | None = Field(
        default=None,
        description="Format used for responses when Accept is missing or */*",
    )
    default_charset: str = Field(
        default=DEFAULT_CHARSET,
        description="Charset appended to the response Content-Type",
    )
    default_headers: dict[str, str | None] = Field(
        default_factory=dict,
        description="Headers copied onto every response",
    )
    cookies: dict[str, Any] = Field(
        default_factory=dict,
        description="Default cookie options",
    )
    handled_exceptions: dict[Any, int | str] = Field(
        default_factory=dict,
        description="Application-wide exception class to status/handler mapping",
    )
    sessions_enabled: bool = Field(
        default=False,
        description="Enable session and flash support",
    )
    session_key: str = Field(
        default=SESSION,
        description="Name of the cookie carrying the session",
    )
    request_id_length: int = Field(
        default=16,
        description="Bytes of randomness in generated request ids (1-64)",
    )

    model_config = {"frozen": True}

    @field_validator("formats", mode="before")
    @classmethod
    def validate_formats(cls, v: Any) -> dict[str, str]:
        """Validate and normalize the custom formats mapping.

        MIME types are lowercased; format names are stored as strings.

        Raises:
            ValueError: If a key is not a MIME type.

        Example:
            >>> ActionConfig(formats={"Application/VND.API+json": "jsonapi"}).formats
            {'application/vnd.api+json': 'jsonapi'}
        """
        if isinstance(v, str):
            v = _split_pairs(v)

        if not isinstance(v, Mapping):
            raise ValueError("formats must be a mapping of MIME type to format name")

        normalized: dict[str, str] = {}
        for mime_type, name in v.items():
            if "/" not in str(mime_type):
                raise ValueError(f"Invalid MIME type in formats: {mime_type!r}")
            normalized[str(mime_type).strip().lower()] = str(name)
        return normalized

    @field_validator("default_charset")
    @classmethod
    def validate_default_charset(cls, v: str) -> str:
        """Validate the charset is not blank."""
        if not v.strip():
            raise ValueError("default_charset must not be empty")
        return v.strip()

    @field_validator("default_headers", mode="before")
    @classmethod
    def validate_default_headers(cls, v: Any) -> dict[str, str | None]:
        """Accept a mapping or a "Name=value,Name=value" string."""
        if isinstance(v, str):
            v = _split_pairs(v)
        if not isinstance(v, Mapping):
            raise ValueError("default_headers must be a mapping")
        return {str(name): (None if value is None else str(value)) for name, value in v.items()}

    @field_validator("cookies")
    @classmethod
    def validate_cookies(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Validate default cookie option names.

        Raises:
            ValueError: If an unknown option is given.
        """
        unknown = set(v) - COOKIE_OPTION_NAMES
        if unknown:
            raise ValueError(
                f"Unknown cookie options: {', '.join(sorted(unknown))}. "
                f"Valid options are: {', '.join(sorted(COOKIE_OPTION_NAMES))}"
            )
        return v

    @field_validator("handled_exceptions")
    @classmethod
    def validate_handled_exceptions(cls, v: dict[Any, int | str]) -> dict[Any, int | str]:
        """Validate that every key is an exception class.

        Raises:
            ValueError: If a key is not a BaseException subclass.
        """
        for kind in v:
            if not (isinstance(kind, type) and issubclass(kind, BaseException)):
                raise ValueError(f"handled_exceptions keys must be exception classes, got {kind!r}")
        return v

    @field_validator("request_id_length")
    @classmethod
    def validate_request_id_length(cls, v: int) -> int:
        """Validate the request id length is within 1-64 bytes."""
        if not (1 <= v <= 64):
            raise ValueError(f"request_id_length must be between 1 and 64, got {v}")
        return v

    def format_for(self, mime_type: str) -> str | None:
        """Return the configured format name for a MIME type.

        Custom formats are consulted first, then the default mapping
        (``text/html`` -> html, ``*/*`` -> all). The built-in MIME table is
        not consulted here; see :func:`http_actions.mime.detect_format`.
        """
        return self.formats.get(mime_type) or DEFAULT_FORMATS.get(mime_type)

    def mime_type_for(self, format: str) -> str | None:
        """Return the configured MIME type for a format name, if any."""
        name = str(format)
        for mapping in (self.formats, DEFAULT_FORMATS):
            for mime_type, candidate in mapping.items():
                if candidate == name:
                    return mime_type
        return None

    @property
    def mime_types(self) -> list[str]:
        """Every MIME type the application can respond with, in negotiation order.

        Custom formats come first, followed by the built-in table.
        """
        ordered = dict.fromkeys(self.formats)
        ordered.update(dict.fromkeys(TYPES.values()))
        ordered.pop("*/*", None)
        return list(ordered)

    def add_format(self, name: str, mime_type: str) -> "ActionConfig":
        """Return a copy of this configuration with a custom format registered.

        Example:
            >>> config = ActionConfig().add_format("custom", "application/custom")
            >>> config.mime_type_for("custom")
            'application/custom'
        """
        return self.model_copy(update={"formats": {**self.formats, mime_type.lower(): str(name)}})

    def handle_exception(self, mapping: Mapping[Any, int | str]) -> "ActionConfig":
        """Return a copy of this configuration with exception mappings added.

        Later mappings override earlier ones for the same exception class.
        """
        self.validate_handled_exceptions(dict(mapping))
        return self.model_copy(
            update={"handled_exceptions": {**self.handled_exceptions, **mapping}}
        )

    @classmethod
    def from_env(cls, prefix: str = "HTTP_ACTIONS_") -> "ActionConfig":
        """Create configuration from environment variables.

        Variable names are uppercase field names with the prefix. Mappings
        (``FORMATS``, ``DEFAULT_HEADERS``) use ``key=value`` pairs separated
        by commas. ``handled_exceptions`` and ``cookies`` cannot be set from
        the environment.

        Args:
            prefix: Prefix for environment variable names.

        Returns:
            ActionConfig populated from environment variables.

        Example:
            >>> import os
            >>> os.environ['HTTP_ACTIONS_FORMATS'] = 'application/vnd.api+json=jsonapi'
            >>> os.environ['HTTP_ACTIONS_REQUEST_ID_LENGTH'] = '8'
            >>> config = ActionConfig.from_env()
            >>> config.request_id_length
            8
        """
        config_dict: dict[str, Any] = {}

        field_types = {
            "formats": dict,
            "default_request_format": str,
            "default_response_format": str,
            "default_charset": str,
            "default_headers": dict,
            "sessions_enabled": bool,
            "session_key": str,
            "request_id_length": int,
        }

        for field_name, field_type in field_types.items():
            env_value = os.environ.get(f"{prefix}{field_name.upper()}")
            if env_value is None:
                continue

            if field_type is int:
                config_dict[field_name] = int(env_value)
            elif field_type is bool:
                config_dict[field_name] = env_value.strip().lower() in TRUE_VALUES
            else:
                # dict fields accept "key=value" strings in their validators
                config_dict[field_name] = env_value

        return cls(**config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ActionConfig":
        """Create configuration from a dictionary.

        Raises:
            ValidationError: If the dictionary contains invalid values.
        """
        return cls(**config_dict)
