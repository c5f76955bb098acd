"""Test dynamic statement construction and placeholder rebinding."""

import pytest

from casbin_sqladapter.builder import (
    delete_by_field_range,
    delete_by_fields,
    delete_row,
    field_range_predicate,
    rebind,
    select_filtered,
    update_row,
)
from casbin_sqladapter.codec import encode_rule
from casbin_sqladapter.dialects import Dialect, ParamStyle, build_statements
from casbin_sqladapter.errors import ArgumentError, ArityError, EmptyPredicateError, codes
from casbin_sqladapter.filters import Filter

COLS = "p_type, v0, v1, v2, v3, v4, v5"


@pytest.fixture
def stmts():
    return build_statements(Dialect.GENERIC, "casbin_rule")


class TestDeleteByFields:
    def test_constrains_non_empty_fields(self, stmts) -> None:
        sql, args = delete_by_fields(stmts, "p", ["alice", "data1", "read"])
        assert sql == (
            "DELETE FROM casbin_rule WHERE p_type = ? AND v0 = ? AND v1 = ? AND v2 = ?"
        )
        assert args == ["p", "alice", "data1", "read"]

    def test_empty_fields_are_unconstrained(self, stmts) -> None:
        sql, args = delete_by_fields(stmts, "p", ["alice", "", "read"])
        assert sql == "DELETE FROM casbin_rule WHERE p_type = ? AND v0 = ? AND v2 = ?"
        assert args == ["p", "alice", "read"]

    def test_type_only_deletes_partition(self, stmts) -> None:
        sql, args = delete_by_fields(stmts, "p", [])
        assert sql == "DELETE FROM casbin_rule WHERE p_type = ?"
        assert args == ["p"]

    def test_no_criteria_rejected(self, stmts) -> None:
        with pytest.raises(EmptyPredicateError) as exc_info:
            delete_by_fields(stmts, "", ["", ""])
        assert exc_info.value.code == codes.EMPTY_PREDICATE

    def test_too_many_fields(self, stmts) -> None:
        with pytest.raises(ArityError):
            delete_by_fields(stmts, "p", ["a"] * 7)


class TestDeleteByFieldRange:
    def test_offset_maps_to_columns(self, stmts) -> None:
        sql, args = delete_by_field_range(stmts, "p", 1, ["data1", "read"])
        assert sql == "DELETE FROM casbin_rule WHERE p_type = ? AND v1 = ? AND v2 = ?"
        assert args == ["p", "data1", "read"]

    def test_skips_empty_values(self, stmts) -> None:
        sql, args = delete_by_field_range(stmts, "g", 0, ["", "admin"])
        assert sql == "DELETE FROM casbin_rule WHERE p_type = ? AND v1 = ?"
        assert args == ["g", "admin"]

    def test_values_past_last_column_ignored(self, stmts) -> None:
        sql, args = delete_by_field_range(stmts, "p", 5, ["x", "y", "z"])
        assert sql == "DELETE FROM casbin_rule WHERE p_type = ? AND v5 = ?"
        assert args == ["p", "x"]

    @pytest.mark.parametrize("index", [-1, 6])
    def test_index_out_of_range(self, stmts, index: int) -> None:
        with pytest.raises(ArgumentError) as exc_info:
            delete_by_field_range(stmts, "p", index, ["x"])
        assert exc_info.value.code == codes.FIELD_INDEX_OUT_OF_RANGE


class TestSelectFiltered:
    def test_empty_filter_is_select_all(self, stmts) -> None:
        sql, args = select_filtered(stmts, Filter())
        assert sql == stmts.select_all
        assert args == []

    def test_single_value_uses_equality(self, stmts) -> None:
        sql, args = select_filtered(stmts, Filter(v0=["alice"]))
        assert sql == f"SELECT {COLS} FROM casbin_rule WHERE v0 = ?"
        assert args == ["alice"]

    def test_in_list_and_separators(self, stmts) -> None:
        flt = Filter(ptype=["p"], v0=["bob", "data2_admin"], v2=["read", "write"])
        sql, args = select_filtered(stmts, flt)
        assert sql == (
            f"SELECT {COLS} FROM casbin_rule "
            "WHERE p_type = ? AND v0 IN (?, ?) AND v2 IN (?, ?)"
        )
        assert args == ["p", "bob", "data2_admin", "read", "write"]
        assert " AND AND " not in sql
        assert not sql.rstrip().endswith("AND")

    def test_duplicate_candidates_collapsed(self, stmts) -> None:
        sql, args = select_filtered(stmts, Filter(v0=["alice", "alice"]))
        assert sql.endswith("WHERE v0 = ?")
        assert args == ["alice"]

    def test_bare_string_candidate_is_one_value(self, stmts) -> None:
        sql, args = select_filtered(stmts, Filter(v0="alice"))
        assert sql.endswith("WHERE v0 = ?")
        assert args == ["alice"]

    def test_empty_candidate_matches_null_when_nullable(self) -> None:
        stmts = build_statements(Dialect.ORACLE, "casbin_rule")
        sql, args = select_filtered(stmts, Filter(v0=["alice"], v3=[""]), nullable=True)
        assert sql.endswith("WHERE v0 = ? AND v3 IS NULL")
        assert args == ["alice"]

    def test_empty_candidate_mixed_with_values_when_nullable(self) -> None:
        stmts = build_statements(Dialect.ORACLE, "casbin_rule")
        sql, args = select_filtered(stmts, Filter(v3=["", "x", "y"]), nullable=True)
        assert sql.endswith("WHERE (v3 IN (?, ?) OR v3 IS NULL)")
        assert args == ["x", "y"]

    def test_empty_candidate_is_a_value_otherwise(self, stmts) -> None:
        sql, args = select_filtered(stmts, Filter(v3=[""]))
        assert sql.endswith("WHERE v3 = ?")
        assert args == [""]


class TestExactMatch:
    def test_update_row_args_order(self, stmts) -> None:
        old = encode_rule("p", ["alice", "data1", "read"])
        new = encode_rule("p", ["alice", "data1", "write"])
        sql, args = update_row(stmts, old, new)
        assert sql.startswith(
            "UPDATE casbin_rule SET p_type = ?, v0 = ?, v1 = ?, v2 = ?, v3 = ?, v4 = ?, v5 = ? WHERE "
        )
        assert sql.endswith("p_type = ? AND v0 = ? AND v1 = ? AND v2 = ? AND v3 = ? AND v4 = ? AND v5 = ?")
        assert args == [*new, *old]

    def test_null_columns_use_is_null(self) -> None:
        stmts = build_statements(Dialect.ORACLE, "casbin_rule")
        sql, args = delete_row(stmts, encode_rule("g", ["alice", "admin"], nullable=True))
        assert sql == (
            "DELETE FROM CASBIN_RULE WHERE p_type = ? AND v0 = ? AND v1 = ? "
            "AND v2 IS NULL AND v3 IS NULL AND v4 IS NULL AND v5 IS NULL"
        )
        assert args == ["g", "alice", "admin"]


def test_field_range_predicate() -> None:
    clause, args = field_range_predicate("p", 0, ["alice", "data1", "read"])
    assert clause == "p_type = ? AND v0 = ? AND v1 = ? AND v2 = ?"
    assert args == ["p", "alice", "data1", "read"]


class TestRebind:
    SQL = "SELECT 1 FROM t WHERE a = ? AND b IN (?, ?)"

    def test_qmark_unchanged(self) -> None:
        assert rebind(ParamStyle.QMARK, self.SQL, [1, 2, 3]) == (self.SQL, [1, 2, 3])

    def test_dollar(self) -> None:
        sql, args = rebind(ParamStyle.DOLLAR, self.SQL, [1, 2, 3])
        assert sql == "SELECT 1 FROM t WHERE a = $1 AND b IN ($2, $3)"
        assert args == [1, 2, 3]

    def test_format(self) -> None:
        sql, _ = rebind(ParamStyle.FORMAT, self.SQL, [1, 2, 3])
        assert sql == "SELECT 1 FROM t WHERE a = %s AND b IN (%s, %s)"

    def test_named_returns_dict(self) -> None:
        sql, args = rebind(ParamStyle.NAMED, self.SQL, ["x", "y", "z"])
        assert sql == "SELECT 1 FROM t WHERE a = :arg1 AND b IN (:arg2, :arg3)"
        assert args == {"arg1": "x", "arg2": "y", "arg3": "z"}

    def test_no_placeholders(self) -> None:
        assert rebind(ParamStyle.DOLLAR, "DELETE FROM t", []) == ("DELETE FROM t", [])

    def test_count_mismatch(self) -> None:
        with pytest.raises(ArgumentError, match="placeholders"):
            rebind(ParamStyle.QMARK, self.SQL, [1])
