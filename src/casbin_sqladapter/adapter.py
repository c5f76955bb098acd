"""Casbin storage adapter over a caller-owned DB-API connection."""

from __future__ import annotations

import contextlib
import time
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from casbin import persist

from casbin_sqladapter import auditlog
from casbin_sqladapter.builder import (
    delete_by_field_range,
    delete_by_fields,
    delete_row,
    field_range_predicate,
    select_filtered,
    update_row,
)
from casbin_sqladapter.codec import decode_row, encode_rule, policy_line
from casbin_sqladapter.dialects import Dialect, build_statements, detect_dialect
from casbin_sqladapter.errors import (
    AdapterError,
    ArityError,
    ConfigurationError,
    InvalidFilterError,
    StatementError,
    codes,
)
from casbin_sqladapter.executor import TransactionalExecutor
from casbin_sqladapter.filters import Filter


def _error_text(error: Exception | None) -> str | None:
    if error is None:
        return None
    if isinstance(error, AdapterError):
        return error.message
    return f"{type(error).__name__}: {error}"


def _affected(count: int) -> int | None:
    """Row count for the audit log; drivers report -1 when unknown."""
    return count if count >= 0 else None


class Adapter(persist.Adapter):
    """Loads and stores casbin policy rules in a single SQL table.

    ``conn`` must be an open DB-API connection; the adapter never closes it.
    The dialect is detected from the connection's driver. The table is created
    on construction when missing. Set ``strict`` to reject drivers without a
    registered dialect instead of falling back to generic SQL, and ``audit``
    to record every write in the JSONL audit log.
    """

    def __init__(
        self,
        conn: Any,
        table_name: str | None = None,
        *,
        strict: bool = False,
        audit: bool = False,
    ) -> None:
        if conn is None:
            raise ConfigurationError("db connection is None", code=codes.NO_CONNECTION)

        self._conn = conn
        self._dialect = detect_dialect(conn, strict=strict)
        self._nullable = self._dialect.traits.nullable
        self._statements = build_statements(self._dialect, table_name)
        self._executor = TransactionalExecutor(conn, self._statements)
        self._audit = audit
        self._filtered = False

        self._ping()
        if not self._table_exists():
            self._create_table()

    # -- Properties ---------------------------------------------------------------

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def table_name(self) -> str:
        return self._statements.table.qualified

    # -- Setup ----------------------------------------------------------------------

    def _ping(self) -> None:
        try:
            self._executor.query("ping", self._dialect.traits.ping_sql)
        except AdapterError as e:
            raise ConfigurationError(
                f"database is not reachable: {e}", code=codes.PING_FAILED
            ) from e

    def _table_exists(self) -> bool:
        try:
            self._executor.query("check table", self._statements.table_exists)
        except StatementError:
            return False
        return True

    def _create_table(self) -> None:
        try:
            with self._executor.transaction() as tx:
                for i, sql in enumerate(self._statements.create_table, start=1):
                    tx.execute(f"create table statement {i}", sql)
        except AdapterError as e:
            raise ConfigurationError(
                f"cannot create table {self.table_name}: {e}",
                code=codes.CREATE_TABLE_FAILED,
            ) from e

    # -- Helpers --------------------------------------------------------------------

    def _encode(self, ptype: str, rule: Sequence[str]) -> tuple:
        return encode_rule(ptype, rule, nullable=self._nullable)

    def _load_rules(self, rules: Iterable[tuple[str, list[str]]], model: Any) -> None:
        for ptype, rule in rules:
            persist.load_policy_line(policy_line(ptype, rule), model)

    @contextlib.contextmanager
    def _audited(self, action: str, ptype: str | None, rule_count: int | None) -> Iterator[dict]:
        """Time the enclosed write and log it; the body may overwrite ``entry["rule_count"]``."""
        entry: dict[str, Any] = {"rule_count": rule_count}
        if not self._audit:
            yield entry
            return

        t0 = time.monotonic()
        error: Exception | None = None
        try:
            yield entry
        except Exception as e:
            error = e
            raise
        finally:
            auditlog.log_change(
                action=action,
                table=self.table_name,
                dialect=self._dialect.value,
                ptype=ptype,
                rule_count=entry["rule_count"],
                duration_ms=(time.monotonic() - t0) * 1000,
                error_code=str(error.code) if isinstance(error, AdapterError) else None,
                error=_error_text(error),
            )

    # -- Loading --------------------------------------------------------------------

    def load_rules(self, filter: Any = None) -> list[tuple[str, list[str]]]:
        """Return stored ``(ptype, rule)`` pairs, restricted by ``filter`` when given.

        ``filter`` is None, a :class:`Filter`, or a mapping accepted by
        :meth:`Filter.from_mapping`. Row order is not guaranteed.
        """
        if filter is None:
            rows = self._executor.query("load policy", self._statements.select_all)
        else:
            if isinstance(filter, Mapping):
                filter = Filter.from_mapping(filter)
            if not isinstance(filter, Filter):
                raise InvalidFilterError(f"invalid filter type: {type(filter).__name__}")
            sql, args = select_filtered(self._statements, filter, nullable=self._nullable)
            rows = self._executor.query("load filtered policy", sql, args)
        return [decode_row(row, nullable=self._nullable) for row in rows]

    def load_policy(self, model: Any) -> None:
        """Load every stored rule into ``model``."""
        self._load_rules(self.load_rules(), model)
        self._filtered = False

    def load_filtered_policy(self, model: Any, filter: Any) -> None:
        """Load the rules accepted by ``filter`` into ``model``; None loads everything."""
        if filter is None:
            self.load_policy(model)
            return
        self._load_rules(self.load_rules(filter), model)
        self._filtered = True

    def is_filtered(self) -> bool:
        return self._filtered

    # -- Saving ---------------------------------------------------------------------

    def save_policy(self, model: Any) -> None:
        """Replace the stored rules with every "p" and "g" rule held by ``model``."""
        rules: list[tuple[str, list[str]]] = []
        for sec in ("p", "g"):
            for ptype, assertion in model.model.get(sec, {}).items():
                rules.extend((ptype, rule) for rule in assertion.policy)
        self.save_rules(rules)

    def save_rules(self, rules: Iterable[tuple[str, Sequence[str]]]) -> None:
        """Replace the stored rules with ``(ptype, rule)`` pairs, all or nothing."""
        rows = [self._encode(ptype, rule) for ptype, rule in rules]
        with self._audited("save policy", None, len(rows)):
            self._executor.replace_all(rows)

    def clear_policy(self) -> None:
        """Delete every stored rule."""
        with self._audited("clear policy", None, None) as entry:
            entry["rule_count"] = _affected(
                self._executor.run("clear policy", self._statements.delete_all)
            )

    # -- Single-rule and batch writes -----------------------------------------------

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> None:
        row = self._encode(ptype, rule)
        with self._audited("add policy", ptype, 1):
            self._executor.run("add policy", self._statements.insert_row, row)

    def add_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> None:
        rows = [self._encode(ptype, rule) for rule in rules]
        steps = [
            (f"insert row {i}", self._statements.insert_row, row)
            for i, row in enumerate(rows, start=1)
        ]
        with self._audited("add policies", ptype, len(rows)):
            self._executor.run_batch(steps)

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> None:
        """Remove rows of ``ptype`` matching every non-empty field of ``rule``.

        Empty fields do not constrain the match, so ``[]`` removes the whole type.
        """
        sql, args = delete_by_fields(self._statements, ptype, rule)
        with self._audited("remove policy", ptype, None) as entry:
            entry["rule_count"] = _affected(self._executor.run("remove policy", sql, args))

    def remove_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> None:
        """Remove each rule by exact whole-row match, all or nothing."""
        steps = []
        for i, rule in enumerate(rules, start=1):
            sql, args = delete_row(self._statements, self._encode(ptype, rule))
            steps.append((f"delete row {i}", sql, args))
        with self._audited("remove policies", ptype, None) as entry:
            entry["rule_count"] = self._executor.run_batch(steps)

    def remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *field_values: str
    ) -> None:
        """Remove rows of ``ptype`` whose fields from ``field_index`` on match ``field_values``."""
        sql, args = delete_by_field_range(self._statements, ptype, field_index, field_values)
        with self._audited("remove filtered policy", ptype, None) as entry:
            entry["rule_count"] = _affected(
                self._executor.run("remove filtered policy", sql, args)
            )

    # -- Updates --------------------------------------------------------------------

    def update_policy(
        self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> None:
        sql, args = update_row(
            self._statements, self._encode(ptype, old_rule), self._encode(ptype, new_rule)
        )
        with self._audited("update policy", ptype, None) as entry:
            entry["rule_count"] = _affected(self._executor.run("update policy", sql, args))

    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> None:
        if len(old_rules) != len(new_rules):
            raise ArityError(
                f"update needs as many new rules as old ones: {len(old_rules)} != {len(new_rules)}"
            )
        steps = []
        for i, (old_rule, new_rule) in enumerate(zip(old_rules, new_rules), start=1):
            sql, args = update_row(
                self._statements, self._encode(ptype, old_rule), self._encode(ptype, new_rule)
            )
            steps.append((f"update row {i}", sql, args))
        with self._audited("update policies", ptype, None) as entry:
            entry["rule_count"] = self._executor.run_batch(steps)

    def update_filtered_policies(
        self,
        sec: str,
        ptype: str,
        new_rules: Sequence[Sequence[str]],
        field_index: int,
        *field_values: str,
    ) -> list[list[str]]:
        """Replace the rules matched by ``field_values`` with ``new_rules``.

        Returns the rules that were replaced, read before the replacement.
        """
        new_rows = [self._encode(ptype, rule) for rule in new_rules]
        predicate, args = field_range_predicate(ptype, field_index, field_values)

        rows = self._executor.query(
            "select filtered policies", self._statements.select_where + predicate, args
        )
        old_rules = [decode_row(row, nullable=self._nullable)[1] for row in rows]

        with self._audited("update filtered policies", ptype, len(new_rows)):
            self._executor.delete_then_insert(predicate, args, new_rows)
        return old_rules
