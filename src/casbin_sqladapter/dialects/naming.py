"""Table-name validation and per-dialect normalization.

Identifiers cannot be bound as parameters, so the table name is spliced into
every statement. Only one or two dotted plain identifiers are accepted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import sqlglot
from sqlglot import exp
from sqlglot.optimizer.normalize_identifiers import normalize_identifiers

from casbin_sqladapter.dialects._base import Dialect
from casbin_sqladapter.errors import ConfigurationError, codes

DEFAULT_TABLE_NAME = "casbin_rule"

_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
_TABLE_NAME_RE = re.compile(rf"^{_IDENTIFIER}(\.{_IDENTIFIER})?$")


@dataclass(frozen=True)
class TableName:
    qualified: str  # as spliced into statements, e.g. "authz.casbin_rule"
    index: str  # name of the (p_type, v0, v1) index


def resolve_table_name(name: str | None, dialect: Dialect) -> TableName:
    """Validate ``name`` and render it for ``dialect``.

    Empty or None falls back to DEFAULT_TABLE_NAME. Dialects that fold unquoted
    identifiers to upper case get an upper-cased name.
    """
    name = (name or DEFAULT_TABLE_NAME).strip()
    if not _TABLE_NAME_RE.match(name):
        raise ConfigurationError(
            f"invalid table name {name!r}: expected [schema.]table made of letters, digits and '_'",
            code=codes.INVALID_TABLE_NAME,
        )

    traits = dialect.traits
    try:
        table = exp.to_table(name, dialect=traits.sqlglot_dialect)
    except sqlglot.errors.ParseError as e:
        raise ConfigurationError(
            f"invalid table name {name!r}: {e}", code=codes.INVALID_TABLE_NAME
        ) from e

    if table.alias or not table.name:
        raise ConfigurationError(
            f"invalid table name {name!r}", code=codes.INVALID_TABLE_NAME
        )

    if traits.upper_case_identifiers:
        table = normalize_identifiers(table, dialect=traits.sqlglot_dialect)

    index = f"idx_{table.name}_p_type_v0_v1"
    if traits.upper_case_identifiers:
        index = index.upper()

    return TableName(qualified=table.sql(dialect=traits.sqlglot_dialect), index=index)
