"""Stable, searchable error code registry.

Ranges:
- S01xx: Configuration (construction-time failures)
- S02xx: Arguments (rejected before any SQL is issued)
- S03xx: Statements (the driver rejected a statement)
- S04xx: Transactions (multi-step operations)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorCode:
    value: int

    def __str__(self) -> str:
        return f"S{self.value:04d}"


# Configuration (S01xx)
NO_CONNECTION = ErrorCode(101)
PING_FAILED = ErrorCode(102)
UNKNOWN_DRIVER = ErrorCode(103)
INVALID_TABLE_NAME = ErrorCode(104)
CREATE_TABLE_FAILED = ErrorCode(105)

# Arguments (S02xx)
ARITY_MISMATCH = ErrorCode(201)
EMPTY_PREDICATE = ErrorCode(202)
INVALID_FILTER = ErrorCode(203)
FIELD_INDEX_OUT_OF_RANGE = ErrorCode(204)

# Statements (S03xx)
STATEMENT_FAILED = ErrorCode(301)

# Transactions (S04xx)
TRANSACTION_ROLLED_BACK = ErrorCode(401)
ROLLBACK_FAILED = ErrorCode(402)
