"""Test Filter construction."""

import pytest

from casbin_sqladapter.errors import InvalidFilterError
from casbin_sqladapter.filters import Filter


def test_default_filter_is_empty() -> None:
    assert Filter().is_empty


def test_columns_in_table_order() -> None:
    flt = Filter(ptype=["p"], v5=["z"])
    assert flt.columns() == (["p"], [], [], [], [], [], ["z"])
    assert not flt.is_empty


def test_from_mapping() -> None:
    flt = Filter.from_mapping({"ptype": ("p",), "v0": ["alice", "bob"]})
    assert flt.ptype == ["p"]
    assert flt.v0 == ["alice", "bob"]
    assert flt.v1 == []


def test_from_mapping_wraps_single_string() -> None:
    assert Filter.from_mapping({"v0": "alice"}).v0 == ["alice"]


def test_from_mapping_rejects_unknown_fields() -> None:
    with pytest.raises(InvalidFilterError, match="v6"):
        Filter.from_mapping({"v6": ["x"]})


def test_single_string_is_one_candidate() -> None:
    flt = Filter(ptype="p", v0="alice")
    assert flt.ptype == ["p"]
    assert flt.v0 == ["alice"]


def test_tuple_candidates_become_lists() -> None:
    assert Filter(v1=("data1", "data2")).v1 == ["data1", "data2"]
