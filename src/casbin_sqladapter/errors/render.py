"""Render adapter errors for terminal (text) and machine (JSON) output."""

from __future__ import annotations

from casbin_sqladapter.errors.types import AdapterError, StatementError, TransactionError


def render_json(err: AdapterError) -> dict:
    d: dict = {
        "code": str(err.code),
        "kind": type(err).__name__,
        "message": err.message,
    }
    if isinstance(err, StatementError):
        d["action"] = err.action
    if isinstance(err, TransactionError):
        d["step"] = err.step
        d["state_unknown"] = err.state_unknown
    return d


def render_text(err: AdapterError) -> str:
    line = f"error[{err.code}]: {err.message}"
    if isinstance(err, TransactionError) and err.state_unknown:
        line += "\n  = note: rollback failed, verify the table contents manually"
    return line
