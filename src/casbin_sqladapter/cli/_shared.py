"""Shared helpers: --db parsing, lazy driver loading, error reporting."""

from __future__ import annotations

import contextlib
import importlib
import json
from collections.abc import Iterator
from typing import Any

import click

from casbin_sqladapter.adapter import Adapter
from casbin_sqladapter.errors import AdapterError
from casbin_sqladapter.errors.render import render_json, render_text

# db type -> (driver module, required connection param, pip extra)
_DRIVERS: dict[str, tuple[str, str, str | None]] = {
    "sqlite": ("sqlite3", "path", None),
    "duckdb": ("duckdb", "path", "duckdb"),
    "postgres": ("psycopg", "dsn", "postgres"),
}

db_option = click.option(
    "--db",
    "db",
    required=True,
    help="Connection as 'type:key=val', e.g. sqlite:path=policy.db or postgres:dsn=postgresql://...",
)
table_option = click.option("--table", "table", default=None, help="Policy table name.")
format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
)


def parse_db(value: str) -> tuple[str, dict[str, str]]:
    """Split a --db value into its database type and key=value params."""
    db_type, _, params_str = value.partition(":")
    if db_type not in _DRIVERS:
        valid = ", ".join(_DRIVERS)
        raise click.BadParameter(
            f"Unknown database type '{db_type}'. Valid: {valid}", param_hint="'--db'"
        )

    params: dict[str, str] = {}
    if params_str:
        for part in params_str.split(","):
            if "=" not in part:
                raise click.BadParameter(
                    f"Expected key=value pair, got '{part}'", param_hint="'--db'"
                )
            k, v = part.split("=", 1)
            params[k.strip()] = v.strip()

    required = _DRIVERS[db_type][1]
    if db_type == "postgres" and required not in params:
        raise click.BadParameter("postgres requires dsn=...", param_hint="'--db'")
    return db_type, params


def open_connection(db_type: str, params: dict[str, str]) -> Any:
    """Import the driver lazily and open a connection."""
    module_name, key, extra = _DRIVERS[db_type]
    try:
        driver = importlib.import_module(module_name)
    except ImportError as e:
        raise click.ClickException(
            f"Missing driver for {db_type}. "
            f"Install with: pip install 'casbin-sqladapter[{extra}]'"
        ) from e

    if db_type == "postgres":
        return driver.connect(params[key])
    return driver.connect(params.get(key, ":memory:"))


def report(err: AdapterError, output_format: str = "text") -> None:
    """Print an adapter error to stderr and exit 1."""
    if output_format == "json":
        click.echo(json.dumps({"error": render_json(err)}, indent=2), err=True)
    else:
        click.echo(render_text(err), err=True)
    raise SystemExit(1)


@contextlib.contextmanager
def open_adapter(db: str, table: str | None, output_format: str = "text") -> Iterator[Adapter]:
    """Yield an Adapter on a fresh connection; the connection is closed on exit."""
    db_type, params = parse_db(db)
    conn = open_connection(db_type, params)
    try:
        try:
            yield Adapter(conn, table)
        except AdapterError as e:
            report(e, output_format)
    finally:
        conn.close()
