"""Statement execution over a caller-owned DB-API connection.

Multi-statement writes run inside one transaction: the first failing step
short-circuits the rest, the transaction is rolled back, and a single
TransactionError names the step. If the rollback fails too, both errors are
reported and ``state_unknown`` is set.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from casbin_sqladapter.builder import rebind
from casbin_sqladapter.codec import Row
from casbin_sqladapter.dialects import Statements
from casbin_sqladapter.errors import StatementError, TransactionError

# (step name, sql, args)
Step = tuple[str, str, Sequence]


class Transaction:
    """Handle passed to the body of :meth:`TransactionalExecutor.transaction`."""

    def __init__(self, executor: TransactionalExecutor) -> None:
        self._executor = executor
        self.cursor: Any = None
        self.step = "begin"

    def execute(self, step: str, sql: str, args: Sequence = ()) -> int:
        self.step = step
        self._executor.execute(self.cursor, sql, args)
        return getattr(self.cursor, "rowcount", -1)


class TransactionalExecutor:
    def __init__(self, conn: Any, statements: Statements) -> None:
        self._conn = conn
        self._statements = statements
        self._traits = statements.dialect.traits

    def _open_cursor(self) -> Any:
        if self._traits.connection_is_cursor:
            return self._conn
        return self._conn.cursor()

    def _close_cursor(self, cur: Any) -> None:
        if cur is not None and cur is not self._conn:
            cur.close()

    @contextlib.contextmanager
    def cursor(self) -> Iterator[Any]:
        cur = self._open_cursor()
        try:
            yield cur
        finally:
            self._close_cursor(cur)

    def execute(self, cur: Any, sql: str, args: Sequence = ()) -> None:
        text, params = rebind(self._traits.param_style, sql, args)
        if params:
            cur.execute(text, params)
        else:
            cur.execute(text)

    def query(self, action: str, sql: str, args: Sequence = ()) -> list[tuple]:
        """Run a SELECT and return all rows as tuples."""
        try:
            with self.cursor() as cur:
                self.execute(cur, sql, args)
                rows = cur.fetchall()
        except Exception as e:
            self.recover(action, e)
            raise StatementError(action, e) from e
        return [tuple(row) for row in rows]

    def recover(self, action: str, cause: Exception) -> None:
        """Clear the aborted session state some backends keep after a failed statement."""
        if not self._traits.abort_on_error:
            return
        try:
            self._conn.rollback()
        except Exception as rollback_error:
            raise TransactionError(action, cause, rollback_error) from cause

    @property
    def autocommit(self) -> bool:
        """Whether the connection commits every statement on its own."""
        value = getattr(self._conn, "autocommit", None)
        if callable(value):
            # pymysql and MySQLdb expose autocommit(flag) as a setter.
            getter = getattr(self._conn, "get_autocommit", None)
            return bool(getter()) if callable(getter) else False
        return value is True

    def _begin(self, cur: Any) -> bool:
        """Open a transaction when the driver has not. Returns True if begin_sql was sent."""
        begin_sql = self._traits.begin_sql
        if begin_sql is None:
            return False
        if self._traits.implicit_transactions and not self.autocommit:
            return False
        if getattr(self._conn, "in_transaction", False):
            return False
        self.execute(cur, begin_sql)
        return True

    # A transaction opened with begin_sql is closed with SQL too: in autocommit
    # mode some drivers turn commit() and rollback() into no-ops.
    def _commit(self, cur: Any, explicit: bool) -> None:
        if explicit:
            self.execute(cur, "COMMIT")
        else:
            self._conn.commit()

    def _rollback(self, cur: Any, explicit: bool) -> None:
        if explicit:
            self.execute(cur, "ROLLBACK")
        else:
            self._conn.rollback()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Commit when the body returns, roll back when any step raises."""
        tx = Transaction(self)
        cur = None
        explicit = False
        try:
            cur = tx.cursor = self._open_cursor()
            explicit = self._begin(cur)
            yield tx
            tx.step = "commit"
            self._commit(cur, explicit)
        except Exception as e:
            try:
                self._rollback(cur, explicit)
            except Exception as rollback_error:
                raise TransactionError(tx.step, e, rollback_error) from e
            raise TransactionError(tx.step, e) from e
        finally:
            self._close_cursor(cur)

    def run(self, action: str, sql: str, args: Sequence = ()) -> int:
        """Execute and commit one write statement.

        Returns the affected row count, or -1 when the driver does not report it.
        """
        cur = None
        explicit = False
        try:
            cur = self._open_cursor()
            explicit = self._begin(cur)
            self.execute(cur, sql, args)
            count = getattr(cur, "rowcount", -1)
            self._commit(cur, explicit)
        except Exception as e:
            try:
                self._rollback(cur, explicit)
            except Exception as rollback_error:
                raise TransactionError(action, e, rollback_error) from e
            raise StatementError(action, e) from e
        finally:
            self._close_cursor(cur)
        return count

    def run_batch(self, steps: Iterable[Step]) -> int:
        """Execute ``steps`` in one transaction. Returns the summed reported row counts."""
        total = 0
        with self.transaction() as tx:
            for step, sql, args in steps:
                total += max(tx.execute(step, sql, args), 0)
        return total

    def replace_all(self, rows: Iterable[Row]) -> None:
        """Clear the table and insert ``rows``, all or nothing."""
        with self.transaction() as tx:
            tx.execute("clear table", self._statements.clear_table)
            for i, row in enumerate(rows, start=1):
                tx.execute(f"insert row {i}", self._statements.insert_row, row)

    def delete_then_insert(self, predicate: str, args: Sequence, rows: Iterable[Row]) -> None:
        """Delete the rows matching ``predicate`` and insert ``rows``, all or nothing."""
        with self.transaction() as tx:
            tx.execute("delete", self._statements.delete_where + predicate, args)
            for i, row in enumerate(rows, start=1):
                tx.execute(f"insert row {i}", self._statements.insert_row, row)
