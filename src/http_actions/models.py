"""Core type definitions and models for http-actions.

This module provides the data structures shared across the package:
lifecycle states and outcomes of an action call, cookie options, and the
session record persisted by session stores.

Examples:
    Describing a cookie::

        from http_actions.models import CookieOptions

        options = CookieOptions(value="bar", path="/", max_age=300, http_only=True)

    Creating a session record::

        from datetime import UTC, datetime, timedelta
        from http_actions.models import SessionRecord

        record = SessionRecord(
            session_id="3f1c0d",
            data={"user_id": 23},
            created_at=datetime.now(UTC),
            expires_at=datetime.now(UTC) + timedelta(days=14),
        )
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

SAME_SITE_VALUES = {"strict": "Strict", "lax": "Lax", "none": "None"}


class LifecycleState(str, Enum):
    """States an action call moves through.

    Attributes:
        CONSTRUCTING: Request and response are being built.
        BEFORE_CALLBACKS: The before chain is running.
        HANDLING: The action handler is running.
        AFTER_CALLBACKS: The after chain is running.
        RECOVERING: An exception is being matched against the exception policy.
        HALTED: A halt was caught; its status and body are pending.
        FINALIZING: The response is being assembled for the wire.
        DONE: The serialized response has been returned.
    """

    CONSTRUCTING = "CONSTRUCTING"
    BEFORE_CALLBACKS = "BEFORE_CALLBACKS"
    HANDLING = "HANDLING"
    AFTER_CALLBACKS = "AFTER_CALLBACKS"
    RECOVERING = "RECOVERING"
    HALTED = "HALTED"
    FINALIZING = "FINALIZING"
    DONE = "DONE"


class Outcome(str, Enum):
    """How an action call ended.

    Attributes:
        COMPLETED: Every stage ran without halting.
        HALTED: A halt (or redirect) cut the pipeline short.
        RECOVERED: An exception matched the exception policy.
        ERROR: An exception matched nothing and escaped the call.
    """

    COMPLETED = "completed"
    HALTED = "halted"
    RECOVERED = "recovered"
    ERROR = "error"


class CookieOptions(BaseModel):
    """Value and attributes of one outgoing cookie.

    Attributes:
        value: Cookie value. None marks the cookie for removal.
        domain: Domain attribute.
        path: Path attribute.
        max_age: Max-Age attribute in seconds.
        expires: Expires attribute. Derived from ``max_age`` when omitted.
        secure: Emit the Secure flag.
        http_only: Emit the HttpOnly flag.
        same_site: SameSite attribute (Strict, Lax or None).
    """

    value: str | None = None
    domain: str | None = None
    path: str | None = None
    max_age: int | None = Field(default=None, description="Max-Age in seconds")
    expires: datetime | None = None
    secure: bool = False
    http_only: bool = False
    same_site: str | None = None

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v: Any) -> str | None:
        """Coerce non-string values to strings, keeping None as removal."""
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @field_validator("same_site")
    @classmethod
    def validate_same_site(cls, v: str | None) -> str | None:
        """Normalize the SameSite attribute.

        Raises:
            ValueError: If the value is not Strict, Lax or None.
        """
        if v is None:
            return v
        try:
            return SAME_SITE_VALUES[v.lower()]
        except KeyError:
            raise ValueError(f"same_site must be one of Strict, Lax, None, got {v!r}") from None


class SessionRecord(BaseModel):
    """A persisted session.

    Attributes:
        session_id: Opaque identifier carried by the session cookie.
        data: Session contents.
        created_at: When the session was first saved.
        expires_at: When the session should be dropped by cleanup.
    """

    session_id: str = Field(..., min_length=1, max_length=255)
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    expires_at: datetime

    @field_validator("expires_at")
    @classmethod
    def validate_expires_after_created(cls, v: datetime, info: Any) -> datetime:
        """Validate that expires_at is after created_at.

        Raises:
            ValueError: If expires_at is not after created_at.
        """
        if "created_at" in info.data and v <= info.data["created_at"]:
            raise ValueError("expires_at must be after created_at")
        return v
