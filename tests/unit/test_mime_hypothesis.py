"""Property-based tests for MIME negotiation using Hypothesis."""

from hypothesis import given
from hypothesis import strategies as st

from http_actions import mime

mime_type_strategy = st.sampled_from(list(mime.TYPES.values()))
available_strategy = st.lists(mime_type_strategy, min_size=1, max_size=8, unique=True)
quality_strategy = st.integers(min_value=0, max_value=1000).map(lambda i: i / 1000)
positive_quality_strategy = st.integers(min_value=1, max_value=1000).map(lambda i: i / 1000)

accept_entry_strategy = st.one_of(
    st.tuples(mime_type_strategy, quality_strategy),
    st.tuples(st.sampled_from(["*/*", "text/*", "application/*", "image/*"]), quality_strategy),
).map(lambda entry: f"{entry[0]};q={entry[1]:.3f}")

accept_header_strategy = st.lists(accept_entry_strategy, min_size=1, max_size=6).map(", ".join)


@given(header=st.text(max_size=200))
def test_parse_never_raises(header):
    """Should drop malformed entries instead of raising."""
    for media_range, quality in mime.parse_accept(header):
        assert "/" in media_range
        assert 0.0 <= quality <= 1.0


@given(header=accept_header_strategy, available=available_strategy)
def test_negotiation_is_deterministic(header, available):
    """Should yield the same result for the same inputs."""
    assert mime.best_q_match(header, available) == mime.best_q_match(header, list(available))


@given(header=accept_header_strategy, available=available_strategy)
def test_result_is_supported_and_acceptable(header, available):
    """Should only return a declared type that the header accepts."""
    result = mime.best_q_match(header, available)

    if result is not None:
        assert result in available
        assert mime.accepts(header, result)
    else:
        assert not any(mime.accepts(header, candidate) for candidate in available)


@given(exact=positive_quality_strategy, wildcard=quality_strategy)
def test_exact_match_outranks_wildcard(exact, wildcard):
    """Should rank an exact match above */* whatever the q-values."""
    header = f"*/*;q={wildcard:.3f}, text/html;q={exact:.3f}"

    assert mime.best_q_match(header, ["application/json", "text/html"]) == "text/html"
