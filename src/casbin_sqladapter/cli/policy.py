"""Policy commands: init, dump, import, remove, clear."""

from __future__ import annotations

import csv
from pathlib import Path

import click

from casbin_sqladapter.cli._output import format_rules
from casbin_sqladapter.cli._shared import db_option, format_option, open_adapter, table_option
from casbin_sqladapter.filters import Filter


def read_policy_csv(path: Path) -> list[tuple[str, list[str]]]:
    """Parse a casbin policy CSV (``p, alice, data1, read``); blanks and ``#`` lines are skipped."""
    rules: list[tuple[str, list[str]]] = []
    with open(path, newline="") as f:
        for fields in csv.reader(f, skipinitialspace=True):
            fields = [v.strip() for v in fields]
            if not fields or not fields[0] or fields[0].startswith("#"):
                continue
            rules.append((fields[0], fields[1:]))
    return rules


@click.command()
@db_option
@table_option
def init(db: str, table: str | None) -> None:
    """Create the policy table if it does not exist."""
    with open_adapter(db, table) as adapter:
        click.echo(f"Table {adapter.table_name} ready ({adapter.dialect.value}).")


_FILTER_COLUMNS = ("ptype", "v0", "v1", "v2", "v3", "v4", "v5")


def _filter_options(fn):
    for name in reversed(_FILTER_COLUMNS):
        fn = click.option(
            f"--{name}", name, multiple=True, help=f"Keep rules whose {name} is one of these."
        )(fn)
    return fn


@click.command()
@db_option
@table_option
@format_option
@_filter_options
def dump(db: str, table: str | None, output_format: str, **columns: tuple[str, ...]) -> None:
    """Print the stored rules, optionally filtered by column values.

    \b
    Examples:
      casbin-sqladapter dump --db sqlite:path=policy.db
      casbin-sqladapter dump --db sqlite:path=policy.db --ptype p --v0 alice --v0 bob
    """
    selected = {k: list(v) for k, v in columns.items() if v}
    flt = Filter.from_mapping(selected) if selected else None
    with open_adapter(db, table, output_format) as adapter:
        rules = adapter.load_rules(flt)
    click.echo(format_rules(rules, output_format=output_format))


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@db_option
@table_option
def import_cmd(csv_file: Path, db: str, table: str | None) -> None:
    """Replace the stored rules with the rules of a casbin policy CSV."""
    rules = read_policy_csv(csv_file)
    with open_adapter(db, table) as adapter:
        adapter.save_rules(rules)
    click.echo(f"Imported {len(rules)} rules from {csv_file}.")


@click.command()
@click.argument("ptype")
@click.argument("field_index", type=int)
@click.argument("values", nargs=-1)
@db_option
@table_option
def remove(ptype: str, field_index: int, values: tuple[str, ...], db: str, table: str | None) -> None:
    """Remove rules of PTYPE whose fields from FIELD_INDEX on match VALUES.

    \b
    Examples:
      casbin-sqladapter remove p 0 alice --db sqlite:path=policy.db
      casbin-sqladapter remove g 1 admin --db sqlite:path=policy.db
    """
    with open_adapter(db, table) as adapter:
        adapter.remove_filtered_policy(ptype[:1], ptype, field_index, *values)
    click.echo(f"Removed {ptype} rules matching {list(values)} from field {field_index}.")


@click.command()
@db_option
@table_option
@click.confirmation_option(prompt="Delete every stored rule?")
def clear(db: str, table: str | None) -> None:
    """Delete every stored rule."""
    with open_adapter(db, table) as adapter:
        adapter.clear_policy()
    click.echo(f"Cleared {adapter.table_name}.")
