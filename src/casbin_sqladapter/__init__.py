"""Casbin policy storage in SQL tables over DB-API connections."""

from casbin_sqladapter.adapter import Adapter
from casbin_sqladapter.dialects import DEFAULT_TABLE_NAME, Dialect
from casbin_sqladapter.errors import (
    AdapterError,
    ArgumentError,
    ArityError,
    ConfigurationError,
    EmptyPredicateError,
    InvalidFilterError,
    StatementError,
    TransactionError,
)
from casbin_sqladapter.filters import Filter

__all__ = [
    "DEFAULT_TABLE_NAME",
    "Adapter",
    "AdapterError",
    "ArgumentError",
    "ArityError",
    "ConfigurationError",
    "Dialect",
    "EmptyPredicateError",
    "Filter",
    "InvalidFilterError",
    "StatementError",
    "TransactionError",
]
