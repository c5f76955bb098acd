"""Supported SQL dialects and the traits that make them differ."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Dialect(enum.Enum):
    GENERIC = "generic"
    SQLITE = "sqlite"
    DUCKDB = "duckdb"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLSERVER = "sqlserver"
    ORACLE = "oracle"

    @property
    def traits(self) -> DialectTraits:
        return _TRAITS[self]


class ParamStyle(enum.Enum):
    """Bind placeholder syntax, named after PEP 249 ``paramstyle`` values."""

    QMARK = "qmark"  # ?
    DOLLAR = "dollar"  # $1
    FORMAT = "format"  # %s
    NAMED = "named"  # :arg1, bound from a dict


@dataclass(frozen=True)
class DialectTraits:
    param_style: ParamStyle
    # Absent V-columns are stored as NULL instead of ''.
    nullable: bool = False
    # TRUNCATE can run inside a transaction and be rolled back.
    transactional_truncate: bool = False
    # Statement that opens a transaction, when the driver does not do it implicitly.
    begin_sql: str | None = None
    # The driver opens transactions implicitly (PEP 249 default); begin_sql is
    # only needed when the connection was switched to autocommit.
    implicit_transactions: bool = True
    # A failed statement leaves the session unusable until rollback.
    abort_on_error: bool = False
    # The connection object executes statements itself; cursor() would open a
    # second connection with its own transaction.
    connection_is_cursor: bool = False
    # Unquoted identifiers are folded to upper case by the backend.
    upper_case_identifiers: bool = False
    if_not_exists: bool = False
    sqlglot_dialect: str | None = None
    text_type: str = "varchar"
    ping_sql: str = "SELECT 1"


_TRAITS: dict[Dialect, DialectTraits] = {
    Dialect.GENERIC: DialectTraits(param_style=ParamStyle.QMARK),
    Dialect.SQLITE: DialectTraits(
        param_style=ParamStyle.QMARK,
        begin_sql="BEGIN",
        implicit_transactions=False,
        if_not_exists=True,
        sqlglot_dialect="sqlite",
    ),
    Dialect.DUCKDB: DialectTraits(
        param_style=ParamStyle.DOLLAR,
        begin_sql="BEGIN TRANSACTION",
        implicit_transactions=False,
        connection_is_cursor=True,
        if_not_exists=True,
        sqlglot_dialect="duckdb",
    ),
    Dialect.POSTGRES: DialectTraits(
        param_style=ParamStyle.FORMAT,
        transactional_truncate=True,
        begin_sql="BEGIN",
        abort_on_error=True,
        if_not_exists=True,
        sqlglot_dialect="postgres",
    ),
    Dialect.MYSQL: DialectTraits(
        param_style=ParamStyle.FORMAT,
        begin_sql="START TRANSACTION",
        if_not_exists=True,
        sqlglot_dialect="mysql",
    ),
    Dialect.SQLSERVER: DialectTraits(
        param_style=ParamStyle.QMARK,
        begin_sql="BEGIN TRANSACTION",
        sqlglot_dialect="tsql",
        text_type="nvarchar",
    ),
    Dialect.ORACLE: DialectTraits(
        param_style=ParamStyle.NAMED,
        nullable=True,
        upper_case_identifiers=True,
        sqlglot_dialect="oracle",
        text_type="nvarchar2",
        ping_sql="SELECT 1 FROM DUAL",
    ),
}
