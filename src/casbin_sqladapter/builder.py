"""Runtime construction of variable-shape statements.

Builders return ``(sql, args)`` pairs written with driver-neutral ``?``
placeholders. :func:`rebind` turns them into the dialect's native syntax once
the final argument list is known, which matters for IN-lists whose length
depends on the filter.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from casbin_sqladapter.codec import COLUMNS, FIELD_COLUMNS, MAX_FIELDS, Row
from casbin_sqladapter.dialects import ParamStyle, Statements
from casbin_sqladapter.errors import (
    ArgumentError,
    ArityError,
    EmptyPredicateError,
    codes,
)
from casbin_sqladapter.filters import Filter

Query = tuple[str, list]


def _field_clauses(field_index: int, field_values: Sequence[str]) -> tuple[list[str], list]:
    clauses: list[str] = []
    args: list = []
    for offset, value in enumerate(field_values):
        position = field_index + offset
        if position >= MAX_FIELDS:
            break
        # An empty value leaves the column unconstrained.
        if value:
            clauses.append(f"{FIELD_COLUMNS[position].name} = ?")
            args.append(value)
    return clauses, args


def _check_field_index(field_index: int) -> None:
    if field_index < 0 or field_index >= MAX_FIELDS:
        raise ArgumentError(
            f"field index {field_index} out of range 0..{MAX_FIELDS - 1}",
            code=codes.FIELD_INDEX_OUT_OF_RANGE,
        )


def field_range_predicate(ptype: str, field_index: int, field_values: Sequence[str]) -> Query:
    """Predicate ``p_type = ? AND v{i} = ? ...`` for values starting at column ``field_index``.

    Raises EmptyPredicateError when neither the type nor any field constrains
    the match.
    """
    _check_field_index(field_index)
    clauses, args = _field_clauses(field_index, field_values)
    if not ptype and not clauses:
        raise EmptyPredicateError("no criteria supplied: refusing to match every row")
    return " AND ".join([f"{COLUMNS[0].name} = ?", *clauses]), [ptype, *args]


def delete_by_fields(statements: Statements, ptype: str, rule: Sequence[str]) -> Query:
    """DELETE constrained by the type and every non-empty field of ``rule``."""
    if len(rule) > MAX_FIELDS:
        raise ArityError(f"rule has {len(rule)} fields, at most {MAX_FIELDS} can be matched")
    return delete_by_field_range(statements, ptype, 0, rule)


def delete_by_field_range(
    statements: Statements, ptype: str, field_index: int, field_values: Sequence[str]
) -> Query:
    """DELETE constrained by the type and by values mapped onto columns from ``field_index``."""
    _check_field_index(field_index)
    clauses, args = _field_clauses(field_index, field_values)
    if not ptype and not clauses:
        raise EmptyPredicateError("no criteria supplied: refusing to delete every row")
    sql = statements.delete_by_type + "".join(f" AND {c}" for c in clauses)
    return sql, [ptype, *args]


def exact_match(row: Row) -> Query:
    """Predicate matching every column of ``row``; None matches NULL."""
    clauses: list[str] = []
    args: list = []
    for col, value in zip(COLUMNS, row, strict=True):
        if value is None:
            clauses.append(f"{col.name} IS NULL")
        else:
            clauses.append(f"{col.name} = ?")
            args.append(value)
    return " AND ".join(clauses), args


def delete_row(statements: Statements, row: Row) -> Query:
    clause, args = exact_match(row)
    return statements.delete_where + clause, args


def update_row(statements: Statements, old_row: Row, new_row: Row) -> Query:
    """UPDATE setting ``new_row`` on the rows exactly matching ``old_row``."""
    clause, where_args = exact_match(old_row)
    return statements.update_row + clause, [*new_row, *where_args]


def _candidate_clause(column: str, values: list[str]) -> str:
    if len(values) == 1:
        return f"{column} = ?"
    return f"{column} IN ({', '.join('?' for _ in values)})"


def select_filtered(statements: Statements, flt: Filter, *, nullable: bool = False) -> Query:
    """SELECT the rows accepted by ``flt``; an empty filter selects everything.

    In nullable dialects a ``''`` candidate on a V-column matches NULL, since
    that is how an absent field is stored there.
    """
    clauses: list[str] = []
    args: list = []
    for col, candidates in zip(COLUMNS, flt.columns(), strict=True):
        if not candidates:
            continue
        values = list(dict.fromkeys(candidates))
        match_null = nullable and col.position > 0 and "" in values
        if match_null:
            values = [v for v in values if v != ""]

        if not values:
            clauses.append(f"{col.name} IS NULL")
        elif match_null:
            clauses.append(f"({_candidate_clause(col.name, values)} OR {col.name} IS NULL)")
        else:
            clauses.append(_candidate_clause(col.name, values))
        args.extend(values)

    if not clauses:
        return statements.select_all, []
    return statements.select_where + " AND ".join(clauses), args


def select_by_field_range(
    statements: Statements, ptype: str, field_index: int, field_values: Sequence[str]
) -> Query:
    clause, args = field_range_predicate(ptype, field_index, field_values)
    return statements.select_where + clause, args


_MARKERS: dict[ParamStyle, Callable[[int], str]] = {
    ParamStyle.QMARK: lambda i: "?",
    ParamStyle.DOLLAR: lambda i: f"${i}",
    ParamStyle.FORMAT: lambda i: "%s",
    ParamStyle.NAMED: lambda i: f":arg{i}",
}


def rebind(style: ParamStyle, sql: str, args: Sequence) -> tuple[str, list | dict]:
    """Rewrite ``?`` placeholders into ``style``, left to right.

    Named styles return the arguments as ``{"arg1": ..., "arg2": ...}``.
    """
    parts = sql.split("?")
    if len(parts) - 1 != len(args):
        raise ArgumentError(
            f"statement has {len(parts) - 1} placeholders but {len(args)} arguments"
        )
    if style is ParamStyle.QMARK:
        return sql, list(args)

    marker = _MARKERS[style]
    pieces = [parts[0]]
    for i, part in enumerate(parts[1:], start=1):
        pieces.append(marker(i))
        pieces.append(part)
    text = "".join(pieces)

    if style is ParamStyle.NAMED:
        return text, {f"arg{i}": value for i, value in enumerate(args, start=1)}
    return text, list(args)
