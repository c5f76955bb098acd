"""Error taxonomy: codes, exception types, and rendering."""

from casbin_sqladapter.errors.codes import ErrorCode
from casbin_sqladapter.errors.types import (
    AdapterError,
    ArgumentError,
    ArityError,
    ConfigurationError,
    EmptyPredicateError,
    InvalidFilterError,
    StatementError,
    TransactionError,
)

__all__ = [
    "AdapterError",
    "ArgumentError",
    "ArityError",
    "ConfigurationError",
    "EmptyPredicateError",
    "ErrorCode",
    "InvalidFilterError",
    "StatementError",
    "TransactionError",
]
