"""Mapping between casbin rules and fixed-width table rows.

A row is a 7-tuple ``(p_type, v0, v1, v2, v3, v4, v5)``. Fields beyond a
rule's arity hold the dialect's absent marker: ``None`` for dialects with
nullable columns, ``''`` otherwise. Decoding stops at the first absent field,
so rules cannot contain gaps.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from casbin_sqladapter.errors import ArityError

MAX_FIELDS = 6


@dataclass(frozen=True)
class Column:
    name: str
    position: int


COLUMNS: tuple[Column, ...] = (
    Column("p_type", 0),
    Column("v0", 1),
    Column("v1", 2),
    Column("v2", 3),
    Column("v3", 4),
    Column("v4", 5),
    Column("v5", 6),
)
FIELD_COLUMNS = COLUMNS[1:]

Row = tuple[str | None, ...]


def absent_value(nullable: bool) -> str | None:
    return None if nullable else ""


def is_absent(value: object, *, nullable: bool) -> bool:
    """Whether a stored column value means "no field".

    In nullable dialects only NULL is absent and ``''`` is a real value; in the
    others ``''`` is overloaded to mean absence.
    """
    if value is None:
        return True
    return not nullable and value == ""


def encode_rule(ptype: str, rule: Sequence[str], *, nullable: bool = False) -> Row:
    """Encode a rule as a full 7-column row."""
    if len(rule) > MAX_FIELDS:
        raise ArityError(
            f"rule has {len(rule)} fields, at most {MAX_FIELDS} can be stored: {list(rule)!r}"
        )
    absent = absent_value(nullable)
    return (ptype, *rule, *([absent] * (MAX_FIELDS - len(rule))))


def decode_row(row: Sequence[object], *, nullable: bool = False) -> tuple[str, list[str]]:
    """Decode a stored row into ``(ptype, rule)``.

    Reading stops at the first absent field; later columns are dropped even
    when they hold values.
    """
    ptype = row[0]
    rule: list[str] = []
    for value in row[1 : MAX_FIELDS + 1]:
        if is_absent(value, nullable=nullable):
            break
        rule.append(str(value))
    return str(ptype), rule


def policy_line(ptype: str, rule: Sequence[str]) -> str:
    """Render a rule in casbin's CSV policy-line format."""
    return ", ".join([ptype, *rule])
