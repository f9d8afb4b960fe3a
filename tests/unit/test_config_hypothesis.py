"""Property-based tests for ConformanceConfig using Hypothesis.

This test suite uses property-based testing to generate diverse inputs
and verify invariants hold across all valid and invalid configurations.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from booking_conformance.config import ConformanceConfig

# Strategy for valid request timeouts (1 to 300)
valid_timeout_strategy = st.integers(min_value=1, max_value=300)

# Strategy for invalid request timeouts
invalid_timeout_strategy = st.one_of(
    st.integers(max_value=0),
    st.integers(min_value=301, max_value=10000),
)

# Strategy for unit ids without separators or surrounding whitespace
unit_id_strategy = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz0123456789-_",
    min_size=1,
    max_size=20,
)

host_strategy = st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=20)


@given(timeout=valid_timeout_strategy)
def test_valid_timeouts_accepted(timeout: int) -> None:
    assert ConformanceConfig(request_timeout_seconds=timeout).request_timeout_seconds == timeout


@given(timeout=invalid_timeout_strategy)
def test_invalid_timeouts_rejected(timeout: int) -> None:
    with pytest.raises(ValidationError):
        ConformanceConfig(request_timeout_seconds=timeout)


@given(unit_ids=st.lists(unit_id_strategy, min_size=1, max_size=10))
def test_unit_ids_list_and_string_agree(unit_ids: list[str]) -> None:
    """A comma-separated string parses to the same list as the list itself."""
    from_list = ConformanceConfig(unit_ids=unit_ids).unit_ids
    from_string = ConformanceConfig(unit_ids=", ".join(unit_ids)).unit_ids
    assert from_list == from_string == unit_ids


@given(
    scheme=st.sampled_from(["http", "https"]),
    host=host_strategy,
    slashes=st.integers(min_value=0, max_value=3),
)
def test_base_url_never_ends_with_slash(scheme: str, host: str, slashes: int) -> None:
    url = f"{scheme}://{host}.example" + "/" * slashes
    config = ConformanceConfig(target_base_url=url)
    assert not config.target_base_url.endswith("/")
    assert config.target_base_url == f"{scheme}://{host}.example"
