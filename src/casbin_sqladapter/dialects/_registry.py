"""Dialect detection from the driver that produced a connection."""

from __future__ import annotations

from casbin_sqladapter.dialects._base import Dialect
from casbin_sqladapter.errors import ConfigurationError, codes

_DRIVER_MAP: dict[str, Dialect] = {
    "sqlite3": Dialect.SQLITE,
    "duckdb": Dialect.DUCKDB,
    "psycopg": Dialect.POSTGRES,
    "psycopg2": Dialect.POSTGRES,
    "pymysql": Dialect.MYSQL,
    "MySQLdb": Dialect.MYSQL,
    "pyodbc": Dialect.SQLSERVER,
    "oracledb": Dialect.ORACLE,
    "cx_Oracle": Dialect.ORACLE,
}


def driver_name(conn: object) -> str:
    """Top-level module of the connection's class, e.g. ``psycopg`` or ``sqlite3``."""
    module = type(conn).__module__ or ""
    # DuckDB >= 1.1 defines its classes in the private ``_duckdb`` extension.
    return module.split(".", 1)[0].lstrip("_")


def detect_dialect(conn: object, *, strict: bool = False) -> Dialect:
    """Resolve the dialect for a DB-API connection.

    Unknown drivers fall back to ``Dialect.GENERIC`` unless ``strict`` is set,
    in which case a ConfigurationError is raised.
    """
    name = driver_name(conn)
    dialect = _DRIVER_MAP.get(name)
    if dialect is not None:
        return dialect
    if strict:
        known = ", ".join(sorted(_DRIVER_MAP))
        raise ConfigurationError(
            f"No dialect registered for driver '{name}'. Known drivers: {known}",
            code=codes.UNKNOWN_DRIVER,
        )
    return Dialect.GENERIC
