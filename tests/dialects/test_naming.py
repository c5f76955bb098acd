"""Test table-name validation and normalization."""

import pytest

from casbin_sqladapter.dialects import DEFAULT_TABLE_NAME, Dialect, resolve_table_name
from casbin_sqladapter.errors import ConfigurationError, codes


def test_default_name() -> None:
    table = resolve_table_name(None, Dialect.SQLITE)
    assert table.qualified == DEFAULT_TABLE_NAME
    assert table.index == "idx_casbin_rule_p_type_v0_v1"


def test_empty_name_uses_default() -> None:
    assert resolve_table_name("", Dialect.POSTGRES).qualified == DEFAULT_TABLE_NAME


def test_name_kept_as_given() -> None:
    assert resolve_table_name("Policies", Dialect.POSTGRES).qualified == "Policies"


def test_schema_qualified() -> None:
    table = resolve_table_name("authz.rules", Dialect.POSTGRES)
    assert table.qualified == "authz.rules"
    assert table.index == "idx_rules_p_type_v0_v1"


def test_oracle_upper_cases() -> None:
    table = resolve_table_name("casbin_rule", Dialect.ORACLE)
    assert table.qualified == "CASBIN_RULE"
    assert table.index == "IDX_CASBIN_RULE_P_TYPE_V0_V1"


@pytest.mark.parametrize(
    "name",
    [
        "casbin_rule; DROP TABLE users",
        "casbin rule",
        "a.b.c",
        "1table",
        "rules--",
        "'rules'",
    ],
)
def test_rejects_unsafe_names(name: str) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        resolve_table_name(name, Dialect.GENERIC)
    assert exc_info.value.code == codes.INVALID_TABLE_NAME
