"""Unit tests for MIME negotiation and format resolution."""

import pytest

from http_actions import mime
from http_actions.config import ActionConfig
from http_actions.exceptions import UnknownFormatError

SUPPORTED = ["application/json", "application/xml", "text/html"]


class TestParseAccept:
    """Tests for parse_accept function."""

    def test_default_quality(self):
        """Should default q to 1.0."""
        assert mime.parse_accept("text/html") == [("text/html", 1.0)]

    def test_drops_malformed_entries(self):
        """Should drop entries without a slash or with a bad q-value."""
        parsed = mime.parse_accept("text/html, application/json;q=0.5, bogus, */*;q=x")

        assert parsed == [("text/html", 1.0), ("application/json", 0.5)]

    def test_out_of_range_quality_is_dropped(self):
        """Should drop entries whose q is outside 0..1."""
        assert mime.parse_accept("text/html;q=1.5, text/plain;q=-1") == []

    def test_absent_header_accepts_everything(self):
        """Should treat a missing header as */*."""
        assert mime.parse_accept(None) == [("*/*", 1.0)]

    def test_bare_wildcard(self):
        """Should read a bare * as */*."""
        assert mime.parse_accept("*") == [("*/*", 1.0)]

    def test_rejects_wildcard_type_with_concrete_subtype(self):
        """Should drop */html, which is not a valid media range."""
        assert mime.parse_accept("*/html") == []

    def test_ignores_other_parameters(self):
        """Should keep q while ignoring other parameters."""
        assert mime.parse_accept("text/html;level=1;q=0.7") == [("text/html", 0.7)]

    def test_lowercases_ranges(self):
        """Should compare media ranges case-insensitively."""
        assert mime.parse_accept("Text/HTML") == [("text/html", 1.0)]


class TestBestQMatch:
    """Tests for best_q_match function."""

    def test_explicit_quality_ordering(self):
        """Should pick the highest q among exact matches."""
        header = "application/json;q=0.6,application/xml;q=0.9,*/*;q=0.8"

        assert mime.best_q_match(header, SUPPORTED) == "application/xml"

    def test_browser_accept_header(self):
        """Should pick text/html for a typical browser header."""
        header = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

        assert mime.best_q_match(header, SUPPORTED) == "text/html"

    def test_exact_match_beats_wildcard_with_higher_quality(self):
        """Should rank exact matches above wildcard matches whatever the q-values."""
        assert mime.best_q_match("text/html;q=0.1, */*;q=1", ["application/json", "text/html"]) == "text/html"

    def test_subtype_wildcard_beats_full_wildcard(self):
        """Should rank type/* above */*."""
        header = "*/*;q=1, text/*;q=0.2"

        assert mime.best_q_match(header, ["application/json", "text/csv"]) == "text/csv"

    def test_exact_beats_subtype_wildcard(self):
        """Should rank an exact match above type/*."""
        header = "text/*;q=0.5, text/csv;q=0.1"

        assert mime.best_q_match(header, ["text/html", "text/csv"]) == "text/csv"

    def test_absent_header_picks_first_declared(self):
        """Should return the first declared type when no header is sent."""
        assert mime.best_q_match(None, SUPPORTED) == "application/json"

    def test_full_wildcard_picks_first_declared(self):
        """Should return the first declared type for */*."""
        assert mime.best_q_match("*/*", ["text/html", "application/json"]) == "text/html"

    def test_ties_go_to_declaration_order(self):
        """Should break equal scores by the server's declared order."""
        header = "application/json, application/xml"

        assert mime.best_q_match(header, ["application/xml", "application/json"]) == "application/xml"
        assert mime.best_q_match(header, ["application/json", "application/xml"]) == "application/json"

    def test_zero_quality_excludes(self):
        """Should never pick a type whose most specific range has q=0."""
        assert mime.best_q_match("application/json;q=0", ["application/json"]) is None
        assert (
            mime.best_q_match("application/json;q=0, */*", ["application/json", "text/html"])
            == "text/html"
        )

    def test_no_match(self):
        """Should return None when nothing is acceptable."""
        assert mime.best_q_match("image/png", ["text/html"]) is None

    def test_defaults_to_builtin_table(self):
        """Should negotiate against the built-in table when no list is given."""
        assert mime.best_q_match("*/*") == "text/plain"
        assert mime.best_q_match("application/pdf") == "application/pdf"

    def test_repeated_negotiation_is_stable(self):
        """Should give the same answer when asked twice."""
        header = "application/json;q=0.6,application/xml;q=0.9,*/*;q=0.8"

        first = mime.best_q_match(header, SUPPORTED)
        second = mime.best_q_match(header, SUPPORTED)

        assert first == second


class TestAccepts:
    """Tests for accepts function."""

    def test_subtype_wildcard(self):
        """Should accept types covered by type/*."""
        assert mime.accepts("text/*;q=0.5", "text/csv") is True

    def test_mismatch(self):
        """Should reject types not covered by the header."""
        assert mime.accepts("application/json", "text/html") is False

    def test_absent_header(self):
        """Should accept anything when no header is sent."""
        assert mime.accepts(None, "application/zip") is True

    def test_zero_quality(self):
        """Should reject types whose most specific range has q=0."""
        assert mime.accepts("text/html;q=0", "text/html") is False
        assert mime.accepts("*/*, text/html;q=0", "text/html") is False
        assert mime.accepts("*/*, text/html;q=0", "text/plain") is True


class TestMimeMatches:
    """Tests for mime_matches function."""

    def test_ignores_parameters_and_case(self):
        """Should compare essences case-insensitively."""
        assert mime.mime_matches("text/html", "Text/HTML; charset=utf-8") is True

    def test_wildcards(self):
        """Should honor */* and type/*."""
        assert mime.mime_matches("*/*", "application/json") is True
        assert mime.mime_matches("application/*", "application/json") is True
        assert mime.mime_matches("text/*", "application/json") is False


class TestFormats:
    """Tests for format and MIME type conversion."""

    def test_content_type_with_charset(self):
        """Should append the charset parameter."""
        assert mime.content_type_with_charset("text/html", "utf-8") == "text/html; charset=utf-8"

    def test_detect_format(self, config):
        """Should detect formats from content types."""
        assert mime.detect_format("text/html; charset=utf-8", config) == "html"
        assert mime.detect_format("application/json", config) == "json"
        assert mime.detect_format("*/*", config) == "all"
        assert mime.detect_format(None, config) is None
        assert mime.detect_format("application/x-unknown", config) is None

    def test_detect_custom_format(self):
        """Should prefer configured formats."""
        config = ActionConfig(formats={"application/vnd.api+json": "jsonapi"})

        assert mime.detect_format("application/vnd.api+json", config) == "jsonapi"

    def test_format_to_mime_type(self, config):
        """Should map format names to MIME types."""
        assert mime.format_to_mime_type("json", config) == "application/json"
        assert mime.format_to_mime_type("html", config) == "text/html"
        assert mime.format_to_mime_type("all", config) == "application/octet-stream"
        assert mime.format_to_mime_type(None, config) is None

    def test_unknown_format_raises(self, config):
        """Should raise UnknownFormatError for unknown names."""
        with pytest.raises(UnknownFormatError) as exc_info:
            mime.format_to_mime_type("jsonx", config)

        assert exc_info.value.format == "jsonx"
        assert "jsonx" in exc_info.value.message

    def test_restrict_mime_types(self, config):
        """Should translate accepted formats, keeping their order."""
        assert mime.restrict_mime_types(config, ()) is None
        assert mime.restrict_mime_types(config, ("json", "html")) == ["application/json", "text/html"]

    def test_restrict_custom_format(self):
        """Should accept formats registered on the configuration."""
        config = ActionConfig().add_format("custom", "application/custom")

        assert mime.restrict_mime_types(config, ("custom",)) == ["application/custom"]

    def test_restrict_unknown_format_raises(self, config):
        """Should raise for unknown accepted formats."""
        with pytest.raises(UnknownFormatError):
            mime.restrict_mime_types(config, ("jsonx",))

    def test_accepted_mime_type(self):
        """Should compare request Content-Type against accepted types."""
        accepted = ["application/json"]

        assert mime.accepted_mime_type("application/json; charset=utf-8", accepted) is True
        assert mime.accepted_mime_type("text/xml", accepted) is False
        assert mime.accepted_mime_type(None, accepted) is True
        assert mime.accepted_mime_type(None, accepted, "text/html") is False
        assert mime.accepted_mime_type(None, accepted, "application/json") is True

    def test_path_extension_format(self, config):
        """Should read known formats from the last path segment."""
        assert mime.path_extension_format("/books.json", config) == "json"
        assert mime.path_extension_format("/books", config) is None
        assert mime.path_extension_format("/v1.2/books", config) is None
        assert mime.path_extension_format("/books.nope", config) is None
        assert mime.path_extension_format(None, config) is None


class TestResolveContentType:
    """Tests for resolve_content_type precedence."""

    def test_explicit_format_wins(self, config):
        """Should prefer an explicit format over everything else."""
        resolved = mime.resolve_content_type(
            config,
            accept="text/html",
            accepted_mime_types=config.mime_types,
            explicit_format="json",
            path="/books.xml",
        )

        assert resolved == "application/json"

    def test_path_extension_beats_accept(self, config):
        """Should prefer the path extension over the Accept header."""
        resolved = mime.resolve_content_type(
            config, accept="text/html", accepted_mime_types=config.mime_types, path="/books.json"
        )

        assert resolved == "application/json"

    def test_accept_negotiation(self, config):
        """Should negotiate a specific Accept header."""
        resolved = mime.resolve_content_type(
            config, accept="application/json", accepted_mime_types=config.mime_types
        )

        assert resolved == "application/json"

    def test_wildcard_accept_uses_default_response_format(self):
        """Should fall back to the default response format for */*."""
        config = ActionConfig(default_response_format="json")

        resolved = mime.resolve_content_type(config, accept="*/*", accepted_mime_types=config.mime_types)

        assert resolved == "application/json"

    def test_default_request_format(self):
        """Should use the default request format after the response one."""
        config = ActionConfig(default_request_format="xml")

        resolved = mime.resolve_content_type(config, accept=None, accepted_mime_types=config.mime_types)

        assert resolved == "application/xml"

    def test_first_accepted_type_when_restricted(self, config):
        """Should fall back to the first accepted type of a restricted action."""
        resolved = mime.resolve_content_type(
            config,
            accept=None,
            accepted_mime_types=["application/json", "text/html"],
            restricted=True,
        )

        assert resolved == "application/json"

    def test_octet_stream_fallback(self, config):
        """Should fall back to application/octet-stream."""
        resolved = mime.resolve_content_type(config, accept=None, accepted_mime_types=config.mime_types)

        assert resolved == "application/octet-stream"

    def test_unknown_default_format_raises(self):
        """Should raise when the default format is unknown."""
        config = ActionConfig(default_response_format="jsonx")

        with pytest.raises(UnknownFormatError):
            mime.resolve_content_type(config, accept=None, accepted_mime_types=config.mime_types)
