"""Scenario 3: Content Negotiation

This module tests how an action picks its response content type:
- Accept negotiation among the action's accepted formats
- Quality values, wildcard penalties and q=0 exclusions
- Explicit format and path extension overrides
- Configured defaults when the client accepts anything
- 406 and 415 from the accept filter
"""

import pytest

from http_actions import Action, ActionConfig, UnknownFormatError


class Books(Action):
    """Action answering in JSON or HTML."""

    accepted_formats = ("json", "html")

    def handle(self, request, response):
        response.body = response.format


class Anything(Action):
    """Action without a format restriction."""

    def handle(self, request, response):
        response.body = response.content_type


@pytest.mark.parametrize(
    ("accept", "expected"),
    [
        ("application/json", "json"),
        ("text/html", "html"),
        ("text/html,application/json;q=0.9", "html"),
        ("text/html;q=0.5,application/json", "json"),
        ("application/json;q=0, */*", "html"),
        ("text/*, application/json;q=0.1", "json"),
        ("*/*", "json"),
    ],
)
def test_accept_negotiation(make_env, accept: str, expected: str) -> None:
    """Test that the best accepted format is chosen."""
    status, headers, body = Books()(make_env(headers={"Accept": accept}))

    assert status == 200
    assert body == [expected.encode()]


def test_missing_accept_uses_first_accepted_format(make_env) -> None:
    """Test that the first accepted format is the fallback."""
    _, headers, body = Books()(make_env())

    assert body == [b"json"]
    assert headers["Content-Type"] == "application/json; charset=utf-8"


def test_explicit_format_wins(make_env) -> None:
    """Test that a router-provided format beats the Accept header."""
    env = make_env(headers={"Accept": "application/json"}, **{"http_actions.format": "html"})

    _, headers, body = Books()(env)

    assert body == [b"html"]
    assert headers["Content-Type"] == "text/html; charset=utf-8"


def test_path_extension_beats_accept(make_env) -> None:
    """Test that /books.html answers HTML."""
    env = make_env(path="/books.html", headers={"Accept": "application/json"})

    assert Books()(env)[2] == [b"html"]


def test_path_extension_outside_accepted_formats_is_ignored(make_env) -> None:
    """Test that an extension the action does not accept is not used."""
    env = make_env(path="/books.csv", headers={"Accept": "text/html"})

    assert Books()(env)[2] == [b"html"]


def test_configured_default_response_format(make_env) -> None:
    """Test that the default format answers */* requests."""
    config = ActionConfig(default_response_format="json")

    _, headers, body = Anything(config)(make_env(headers={"Accept": "*/*"}))

    assert body == [b"application/json"]
    assert headers["Content-Type"] == "application/json; charset=utf-8"


def test_unrestricted_negotiation(make_env) -> None:
    """Test negotiation across every configured type."""
    env = make_env(headers={"Accept": "application/xml;q=0.5, text/csv"})

    assert Anything()(env)[2] == [b"text/csv"]


def test_custom_format(make_env) -> None:
    """Test that a registered format takes part in negotiation."""
    config = ActionConfig().add_format("jsonapi", "application/vnd.api+json")

    class Resources(Action):
        accepted_formats = ("jsonapi",)

        def handle(self, request, response):
            response.body = response.format

    env = make_env(headers={"Accept": "application/vnd.api+json"})
    _, headers, body = Resources(config)(env)

    assert body == [b"jsonapi"]
    assert headers["Content-Type"] == "application/vnd.api+json; charset=utf-8"


def test_not_acceptable(make_env) -> None:
    """Test that an Accept header matching no accepted format halts with 406."""
    status, _, body = Books()(make_env(headers={"Accept": "text/plain"}))

    assert status == 406
    assert body == [b"Not Acceptable"]


def test_unsupported_media_type(make_env) -> None:
    """Test that a request body in an unaccepted type halts with 415."""
    env = make_env(method="POST", body=b"<book/>", content_type="application/xml")

    assert Books()(env)[0] == 415


def test_handler_sets_format(make_env) -> None:
    """Test that the handler can switch the response format."""

    class Export(Action):
        def handle(self, request, response):
            response.format = "csv"
            response.body = "id,title\n"

    _, headers, _ = Export()(make_env())

    assert headers["Content-Type"] == "text/csv; charset=utf-8"


def test_unknown_format_in_handler_escapes(make_env) -> None:
    """Test that an unknown format is a configuration error."""

    class Export(Action):
        def handle(self, request, response):
            response.format = "spreadsheet"

    with pytest.raises(UnknownFormatError):
        Export()(make_env())


def test_exposures_include_params_and_format(make_env) -> None:
    """Test that params and format are exposed after the call."""
    seen = {}

    class Show(Action):
        accepted_formats = ("json",)
        after_callbacks = ("remember",)

        def remember(self, request, response):
            seen["response"] = response

    Show()(make_env(query="page=2"))
    response = seen["response"]

    assert dict(response["params"]) == {"page": "2"}
    assert response["format"] == "json"
