"""CLI entry point: `casbin-sqladapter`."""

from __future__ import annotations

import click

from casbin_sqladapter.cli.policy import clear, dump, import_cmd, init, remove


@click.group()
@click.version_option(package_name="casbin-sqladapter")
def main() -> None:
    """casbin-sqladapter: inspect and manage casbin policies stored in SQL."""


main.add_command(init)
main.add_command(dump)
main.add_command(import_cmd)
main.add_command(remove)
main.add_command(clear)
