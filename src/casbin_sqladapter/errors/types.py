"""Exception hierarchy raised by the adapter.

Every error carries a stable ``code`` from :mod:`casbin_sqladapter.errors.codes`.
Argument errors are raised before any SQL reaches the connection, statement
errors wrap the driver exception that rejected a single statement, and
transaction errors describe which step of a multi-statement operation failed
and whether the rollback that followed succeeded.
"""

from __future__ import annotations

from casbin_sqladapter.errors import codes
from casbin_sqladapter.errors.codes import ErrorCode


class AdapterError(Exception):
    """Base class for every error raised by the adapter."""

    code: ErrorCode = codes.STATEMENT_FAILED

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code

    @property
    def message(self) -> str:
        return str(self)


class ConfigurationError(AdapterError):
    """Construction failed; no adapter was returned."""

    code = codes.NO_CONNECTION


class ArgumentError(AdapterError):
    code = codes.FIELD_INDEX_OUT_OF_RANGE


class ArityError(ArgumentError):
    code = codes.ARITY_MISMATCH


class EmptyPredicateError(ArgumentError):
    code = codes.EMPTY_PREDICATE


class InvalidFilterError(ArgumentError):
    code = codes.INVALID_FILTER


class StatementError(AdapterError):
    """The driver rejected a statement issued for ``action``."""

    code = codes.STATEMENT_FAILED

    def __init__(self, action: str, cause: BaseException) -> None:
        super().__init__(f"{action} failed: {cause}")
        self.action = action
        self.cause = cause


class TransactionError(AdapterError):
    """A step of a transactional operation failed.

    When ``rollback_error`` is set the rollback failed as well and the table
    is in an unknown state; ``state_unknown`` reports that case.
    """

    def __init__(
        self,
        step: str,
        cause: BaseException,
        rollback_error: BaseException | None = None,
    ) -> None:
        message = f"{step} failed: {cause}"
        if rollback_error is not None:
            message += f"; rollback failed: {rollback_error}"
        code = codes.ROLLBACK_FAILED if rollback_error is not None else codes.TRANSACTION_ROLLED_BACK
        super().__init__(message, code=code)
        self.step = step
        self.cause = cause
        self.rollback_error = rollback_error

    @property
    def state_unknown(self) -> bool:
        return self.rollback_error is not None
