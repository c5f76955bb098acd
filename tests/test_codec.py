"""Test rule <-> row encoding."""

import pytest

from casbin_sqladapter.codec import (
    COLUMNS,
    MAX_FIELDS,
    decode_row,
    encode_rule,
    is_absent,
    policy_line,
)
from casbin_sqladapter.errors import ArityError, codes


class TestEncode:
    def test_pads_with_empty_strings(self) -> None:
        row = encode_rule("p", ["alice", "data1", "read"])
        assert row == ("p", "alice", "data1", "read", "", "", "")

    def test_pads_with_none_when_nullable(self) -> None:
        row = encode_rule("g", ["alice", "admin"], nullable=True)
        assert row == ("g", "alice", "admin", None, None, None, None)

    def test_row_is_always_seven_columns(self) -> None:
        for n in range(MAX_FIELDS + 1):
            assert len(encode_rule("p", ["x"] * n)) == len(COLUMNS)

    def test_six_fields_accepted(self) -> None:
        row = encode_rule("p", ["a", "b", "c", "d", "e", "f"])
        assert row == ("p", "a", "b", "c", "d", "e", "f")

    def test_seven_fields_rejected(self) -> None:
        with pytest.raises(ArityError) as exc_info:
            encode_rule("p", ["a", "b", "c", "d", "e", "f", "g"])
        assert exc_info.value.code == codes.ARITY_MISMATCH


class TestDecode:
    def test_trims_trailing_absent_fields(self) -> None:
        assert decode_row(("p", "alice", "data1", "read", "", "", "")) == (
            "p",
            ["alice", "data1", "read"],
        )

    def test_stops_at_first_absent_field(self) -> None:
        """Fields after a gap are dropped even when they hold values."""
        assert decode_row(("p", "alice", "", "read", "x", "", "")) == ("p", ["alice"])

    def test_null_is_absent(self) -> None:
        assert decode_row(("p", "alice", None, None, None, None, None)) == ("p", ["alice"])

    def test_empty_string_is_a_value_when_nullable(self) -> None:
        row = ("p", "alice", "", None, None, None, None)
        assert decode_row(row, nullable=True) == ("p", ["alice", ""])

    def test_no_fields(self) -> None:
        assert decode_row(("p", "", "", "", "", "", "")) == ("p", [])


@pytest.mark.parametrize("nullable", [False, True])
@pytest.mark.parametrize("arity", range(MAX_FIELDS + 1))
def test_round_trip(arity: int, nullable: bool) -> None:
    rule = [f"v{i}" for i in range(arity)]
    assert decode_row(encode_rule("p", rule, nullable=nullable), nullable=nullable) == ("p", rule)


def test_is_absent() -> None:
    assert is_absent(None, nullable=True)
    assert is_absent("", nullable=False)
    assert not is_absent("", nullable=True)
    assert not is_absent("x", nullable=False)


def test_policy_line() -> None:
    assert policy_line("p", ["alice", "data1", "read"]) == "p, alice, data1, read"
    assert policy_line("g", []) == "g"
