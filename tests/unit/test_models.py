"""Unit tests for core models and type definitions.

This module tests:
- LifecycleState and Outcome enum values
- CookieOptions validation
- SessionRecord validation
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from http_actions.models import CookieOptions, LifecycleState, Outcome, SessionRecord


class TestLifecycleState:
    """Tests for LifecycleState enum."""

    def test_enum_members(self) -> None:
        """Test that enum has every lifecycle state in order."""
        assert [state.value for state in LifecycleState] == [
            "CONSTRUCTING",
            "BEFORE_CALLBACKS",
            "HANDLING",
            "AFTER_CALLBACKS",
            "RECOVERING",
            "HALTED",
            "FINALIZING",
            "DONE",
        ]

    def test_enum_string_comparison(self) -> None:
        """Test that enum values can be compared with strings."""
        assert LifecycleState.HANDLING == "HANDLING"


class TestOutcome:
    """Tests for Outcome enum."""

    def test_enum_values(self) -> None:
        """Test that outcomes use lowercase metric labels."""
        assert {outcome.value for outcome in Outcome} == {"completed", "halted", "recovered", "error"}


class TestCookieOptions:
    """Tests for CookieOptions model."""

    def test_defaults(self) -> None:
        """Test that flags default to off."""
        options = CookieOptions(value="bar")

        assert options.secure is False
        assert options.http_only is False
        assert options.path is None
        assert options.same_site is None

    def test_value_coerced_to_string(self) -> None:
        """Test that non-string values are stored as strings."""
        assert CookieOptions(value=23).value == "23"

    def test_none_value_marks_removal(self) -> None:
        """Test that None is kept for removals."""
        assert CookieOptions(value=None).value is None

    @pytest.mark.parametrize(("given", "expected"), [("lax", "Lax"), ("STRICT", "Strict"), ("none", "None")])
    def test_same_site_normalized(self, given: str, expected: str) -> None:
        """Test that SameSite values are normalized."""
        assert CookieOptions(value="x", same_site=given).same_site == expected

    def test_same_site_invalid(self) -> None:
        """Test that unknown SameSite values are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            CookieOptions(value="x", same_site="sometimes")

        assert "same_site must be one of" in str(exc_info.value)

    def test_frozen(self) -> None:
        """Test that options cannot be modified."""
        options = CookieOptions(value="x")

        with pytest.raises(ValidationError):
            options.value = "y"  # type: ignore[misc]

    def test_unknown_attribute_rejected(self) -> None:
        """Test that misspelled cookie attributes are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            CookieOptions(value="x", httponly=True)  # type: ignore[call-arg]

        assert "httponly" in str(exc_info.value)


class TestSessionRecord:
    """Tests for SessionRecord model."""

    def test_valid_record(self) -> None:
        """Test creating a valid session record."""
        now = datetime.now(UTC)
        record = SessionRecord(
            session_id="3f1c0d",
            data={"user_id": 23},
            created_at=now,
            expires_at=now + timedelta(days=14),
        )

        assert record.data == {"user_id": 23}

    def test_expires_before_created(self) -> None:
        """Test that expires_at must be after created_at."""
        now = datetime.now(UTC)

        with pytest.raises(ValidationError) as exc_info:
            SessionRecord(session_id="abc", created_at=now, expires_at=now)

        assert "expires_at must be after created_at" in str(exc_info.value)

    def test_empty_session_id(self) -> None:
        """Test that an empty session id is rejected."""
        now = datetime.now(UTC)

        with pytest.raises(ValidationError):
            SessionRecord(session_id="", created_at=now, expires_at=now + timedelta(seconds=1))
