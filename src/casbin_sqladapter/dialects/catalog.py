"""Statement templates per dialect.

All templates use driver-neutral ``?`` placeholders; they are rewritten into
the dialect's native syntax by :func:`casbin_sqladapter.builder.rebind` right
before execution. Templates ending in ``WHERE `` are prefixes that callers
complete with a predicate.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from casbin_sqladapter.codec import COLUMNS
from casbin_sqladapter.dialects._base import Dialect
from casbin_sqladapter.dialects.naming import TableName, resolve_table_name

_PTYPE_SIZE = 32
_FIELD_SIZE = 255

COLUMN_LIST = ", ".join(col.name for col in COLUMNS)


@dataclass(frozen=True)
class Statements:
    dialect: Dialect
    table: TableName
    create_table: tuple[str, ...]
    table_exists: str
    insert_row: str
    delete_all: str
    clear_table: str
    delete_by_type: str
    delete_where: str
    update_row: str
    select_all: str
    select_where: str


def _column_defs(dialect: Dialect) -> list[str]:
    traits = dialect.traits
    defs = []
    for col in COLUMNS:
        size = _PTYPE_SIZE if col.position == 0 else _FIELD_SIZE
        decl = f"{col.name} {traits.text_type}({size})"
        if not traits.nullable:
            decl += " NOT NULL DEFAULT ''"
        elif col.position == 0:
            decl += " NOT NULL"
        defs.append(decl)
    return defs


def _create_table(dialect: Dialect, table: TableName) -> tuple[str, ...]:
    traits = dialect.traits
    if_not_exists = "IF NOT EXISTS " if traits.if_not_exists else ""
    defs = _column_defs(dialect)
    index_cols = "p_type, v0, v1"

    if dialect is Dialect.MYSQL:
        defs.append(f"INDEX {table.index} ({index_cols})")
        body = ",\n    ".join(defs)
        return (
            f"CREATE TABLE {if_not_exists}{table.qualified}\n(\n    {body}\n)"
            " ENGINE = InnoDB DEFAULT CHARSET = utf8mb4",
        )

    body = ",\n    ".join(defs)
    return (
        f"CREATE TABLE {if_not_exists}{table.qualified}\n(\n    {body}\n)",
        f"CREATE INDEX {if_not_exists}{table.index} ON {table.qualified} ({index_cols})",
    )


@lru_cache(maxsize=64)
def build_statements(dialect: Dialect, table_name: str | None = None) -> Statements:
    """Return the complete statement set for ``dialect`` and ``table_name``."""
    table = resolve_table_name(table_name, dialect)
    t = table.qualified
    placeholders = ", ".join("?" for _ in COLUMNS)
    assignments = ", ".join(f"{col.name} = ?" for col in COLUMNS)

    if dialect.traits.transactional_truncate:
        clear_table = f"TRUNCATE TABLE {t}"
    else:
        clear_table = f"DELETE FROM {t}"

    return Statements(
        dialect=dialect,
        table=table,
        create_table=_create_table(dialect, table),
        table_exists=f"SELECT 1 FROM {t} WHERE 1 = 0",
        insert_row=f"INSERT INTO {t} ({COLUMN_LIST}) VALUES ({placeholders})",
        delete_all=f"DELETE FROM {t}",
        clear_table=clear_table,
        delete_by_type=f"DELETE FROM {t} WHERE {COLUMNS[0].name} = ?",
        delete_where=f"DELETE FROM {t} WHERE ",
        update_row=f"UPDATE {t} SET {assignments} WHERE ",
        select_all=f"SELECT {COLUMN_LIST} FROM {t}",
        select_where=f"SELECT {COLUMN_LIST} FROM {t} WHERE ",
    )
