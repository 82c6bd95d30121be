"""Rule repositories: the read interface the engine depends on, plus
an in-memory implementation and a SQLite-backed store.

Uses stdlib sqlite3 only.
"""

from __future__ import annotations

import abc
import json
import logging
import math
import sqlite3
from pathlib import Path
from typing import Any, Iterable, Sequence

from pydantic import TypeAdapter

from ratecard.matching.validation import RuleValidationError, find_overlaps, validate_rule
from ratecard.models.rule import QuantityRange, Rule, Scope, ScopeValue, TariffPayload

logger = logging.getLogger(__name__)

_PAYLOAD_ADAPTER: TypeAdapter[Any] = TypeAdapter(TariffPayload)

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS rules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL DEFAULT '',
    client TEXT,
    operation_type TEXT,
    product_type TEXT,
    min_tons REAL NOT NULL DEFAULT 0,
    max_tons REAL,
    base_minutes REAL,
    unit_of_measure TEXT NOT NULL DEFAULT '',
    payload TEXT
);

CREATE INDEX IF NOT EXISTS idx_rules_client ON rules(client);
CREATE INDEX IF NOT EXISTS idx_rules_name ON rules(name);
"""


class RuleRepository(abc.ABC):
    """Read-only source of rules.

    The engine calls :meth:`list_all` once per resolution and never writes.
    """

    @abc.abstractmethod
    def list_all(self) -> list[Rule]:
        """Return every rule, in the order used for tie-breaks."""


class InMemoryRuleRepository(RuleRepository):
    """Repository over a fixed list of rules."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules = list(rules)

    def list_all(self) -> list[Rule]:
        return list(self._rules)


class RuleDatabase(RuleRepository):
    """SQLite-backed rule store.

    Wildcard scope dimensions are stored as NULL and an unbounded upper
    range as a NULL ``max_tons``.  Rules are listed by insertion id, which
    makes the in-tier tie-break deterministic.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.  Use ``':memory:'`` for
        in-memory databases (useful for testing).
    strict:
        If *True*, reject malformed rules and rules whose range overlaps an
        existing rule with the same scope.
    """

    def __init__(self, db_path: str | Path = ":memory:", *, strict: bool = False) -> None:
        self._db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self.strict = strict

    @property
    def conn(self) -> sqlite3.Connection:
        """Lazy-initialise and return the database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(self._db_path)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA_SQL)
            self._conn.commit()
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # -- Writes --------------------------------------------------------------

    def add_rule(self, rule: Rule) -> int:
        """Insert a rule and return its new id."""
        return self.add_rules([rule])[0]

    def add_rules(self, rules: Sequence[Rule]) -> list[int]:
        """Insert several rules in one transaction.

        Either every rule is stored or none is.  Returns the new ids in
        input order.
        """
        if self.strict:
            self._check(rules)

        ids: list[int] = []
        with self.conn:
            for rule in rules:
                cur = self.conn.execute(
                    """\
                    INSERT INTO rules (name, client, operation_type, product_type,
                                       min_tons, max_tons, base_minutes,
                                       unit_of_measure, payload)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    self._rule_to_params(rule),
                )
                ids.append(cur.lastrowid)  # type: ignore[arg-type]
        logger.info("Stored %d rule(s).", len(ids))
        return ids

    def update_rule(self, rule_id: int, updates: dict[str, Any]) -> None:
        """Update specific fields of a rule.

        Scope keys accept legacy wildcard tokens (``'TODOS'``), which are
        stored as NULL.  In strict mode the updated rule is checked like a
        new one before anything is written.
        """
        if self.strict:
            current = self.get_rule(rule_id)
            if current is not None:
                merged = self._apply_updates(current, updates)
                others = [r for r in self.list_all() if r.id != rule_id]
                self._check([merged], existing=others)

        allowed = {
            "name", "client", "operation_type", "product_type", "min_tons",
            "max_tons", "base_minutes", "unit_of_measure", "payload",
        }
        sets: list[str] = []
        vals: list[Any] = []
        for key, val in updates.items():
            if key not in allowed:
                continue
            if key in ("client", "operation_type", "product_type"):
                val = Scope(**{key: val}).dimension(key).value
            elif key == "max_tons" and val is not None and math.isinf(val):
                val = None
            elif key == "payload" and val is not None:
                val = json.dumps(_PAYLOAD_ADAPTER.dump_python(
                    _PAYLOAD_ADAPTER.validate_python(val), mode="json"))
            sets.append(f"{key} = ?")
            vals.append(val)

        if not sets:
            return

        vals.append(rule_id)
        with self.conn:
            self.conn.execute(
                f"UPDATE rules SET {', '.join(sets)} WHERE id = ?",
                vals,
            )

    def delete_rules(self, rule_ids: Sequence[int]) -> int:
        """Delete several rules atomically.  Returns the number deleted."""
        if not rule_ids:
            return 0
        placeholders = ", ".join("?" for _ in rule_ids)
        with self.conn:
            cur = self.conn.execute(
                f"DELETE FROM rules WHERE id IN ({placeholders})", list(rule_ids)
            )
        return cur.rowcount

    def delete_rule(self, rule_id: int) -> bool:
        """Delete a rule by id. Returns True if a row was deleted."""
        return self.delete_rules([rule_id]) > 0

    # -- Queries -------------------------------------------------------------

    def get_rule(self, rule_id: int) -> Rule | None:
        """Fetch a single rule by id."""
        cur = self.conn.execute("SELECT * FROM rules WHERE id = ?", (rule_id,))
        row = cur.fetchone()
        if row is None:
            return None
        return self._row_to_rule(row)

    def list_all(self) -> list[Rule]:
        cur = self.conn.execute("SELECT * FROM rules ORDER BY id")
        return [self._row_to_rule(row) for row in cur.fetchall()]

    def count(self) -> int:
        """Return total number of rules."""
        cur = self.conn.execute("SELECT COUNT(*) FROM rules")
        return cur.fetchone()[0]

    # -- Internal ------------------------------------------------------------

    def _check(self, rules: Sequence[Rule], existing: Sequence[Rule] | None = None) -> None:
        for rule in rules:
            validate_rule(rule)
        if existing is None:
            existing = self.list_all()
        incoming = {id(rule) for rule in rules}
        overlaps = [
            pair for pair in find_overlaps([*existing, *rules])
            if id(pair[0]) in incoming or id(pair[1]) in incoming
        ]
        if overlaps:
            first, second = overlaps[0]
            scope = second.scope
            raise RuleValidationError(
                f"Range [{second.range.min}, {second.range.max}] overlaps "
                f"[{first.range.min}, {first.range.max}] for scope "
                f"{scope.client}/{scope.operation_type}/{scope.product_type}."
            )

    @staticmethod
    def _apply_updates(rule: Rule, updates: dict[str, Any]) -> Rule:
        """Return *rule* with the column-style *updates* applied."""
        scope = rule.scope.model_dump()
        rng = rule.range.model_dump()
        fields: dict[str, Any] = {}
        for key, val in updates.items():
            if key in ("client", "operation_type", "product_type"):
                scope[key] = val
            elif key == "min_tons":
                rng["min"] = val
            elif key == "max_tons":
                rng["max"] = math.inf if val is None else val
            elif key in ("name", "base_minutes", "unit_of_measure", "payload"):
                fields[key] = val
        return Rule.model_validate({
            **rule.model_dump(exclude={"scope", "range", *fields}),
            "scope": scope,
            "range": rng,
            **fields,
        })

    @staticmethod
    def _rule_to_params(rule: Rule) -> tuple[Any, ...]:
        payload = None
        if rule.payload is not None:
            payload = rule.payload.model_dump_json()
        return (
            rule.name,
            rule.scope.client.value,
            rule.scope.operation_type.value,
            rule.scope.product_type.value,
            rule.range.min,
            None if math.isinf(rule.range.max) else rule.range.max,
            rule.base_minutes,
            rule.unit_of_measure,
            payload,
        )

    @staticmethod
    def _row_to_rule(row: sqlite3.Row) -> Rule:
        """Convert a database row to a Rule model."""
        payload = None
        if row["payload"]:
            payload = _PAYLOAD_ADAPTER.validate_json(row["payload"])
        return Rule(
            id=row["id"],
            name=row["name"],
            scope=Scope(
                client=ScopeValue(value=row["client"]),
                operation_type=ScopeValue(value=row["operation_type"]),
                product_type=ScopeValue(value=row["product_type"]),
            ),
            range=QuantityRange(
                min=row["min_tons"],
                max=math.inf if row["max_tons"] is None else row["max_tons"],
            ),
            base_minutes=row["base_minutes"],
            unit_of_measure=row["unit_of_measure"],
            payload=payload,
        )
