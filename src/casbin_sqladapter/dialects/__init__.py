"""SQL dialects: detection, table naming, and statement catalogs."""

from casbin_sqladapter.dialects._base import Dialect, DialectTraits, ParamStyle
from casbin_sqladapter.dialects._registry import detect_dialect, driver_name
from casbin_sqladapter.dialects.catalog import Statements, build_statements
from casbin_sqladapter.dialects.naming import DEFAULT_TABLE_NAME, TableName, resolve_table_name

__all__ = [
    "DEFAULT_TABLE_NAME",
    "Dialect",
    "DialectTraits",
    "ParamStyle",
    "Statements",
    "TableName",
    "build_statements",
    "detect_dialect",
    "driver_name",
    "resolve_table_name",
]
