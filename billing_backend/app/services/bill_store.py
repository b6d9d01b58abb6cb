"""
SQLite-backed document store for bill records.

``BillStore`` is the only component that touches the database.  It
exposes the four primitives the analytics engine needs: inserting a
document, reading every document, projecting the numeric fields of
an optionally filtered subset, and counting documents per provider.

All methods are synchronous and open a fresh connection per call, so
a single store can be shared by concurrent requests running in worker
threads.  Any ``sqlite3.Error`` is re-raised as ``StorageError``.
"""

from __future__ import annotations

import json
import logging
import math
import sqlite3
from typing import Any, Dict, List, Mapping, Optional, Tuple

from billing_backend.app.core.db import get_connection, get_cursor, init_db
from billing_backend.app.core.errors import StorageError

logger = logging.getLogger(__name__)

_MISSING = object()


def _key(value: Any) -> Optional[str]:
    """Canonical JSON text used for exact, type-aware matching."""
    if value is _MISSING:
        return None
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def _number(value: Optional[float]) -> float:
    # SQLite stores NaN as NULL.
    return math.nan if value is None else float(value)


def _json_safe(value: Any) -> Any:
    # The document column must stay valid JSON, which has no NaN/Infinity.
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


class BillStore:
    """Persistent collection of bill documents."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def initialize(self) -> None:
        """Create the schema, applying any pending migrations."""
        try:
            init_db(self.db_path)
        except (sqlite3.Error, OSError) as exc:
            raise StorageError(f"Could not open bill store at {self.db_path}: {exc}") from exc
        logger.info("Bill store ready at %s", self.db_path)

    def ping(self) -> None:
        """Run a trivial query; raises ``StorageError`` if the store is unusable."""
        conn = None
        try:
            conn = get_connection(self.db_path)
            conn.execute("SELECT 1 FROM bills LIMIT 1").fetchall()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        finally:
            if conn is not None:
                conn.close()

    def insert_one(self, record: Mapping[str, Any]) -> int:
        """Persist ``record`` and return its generated identifier.

        ``unitsConsumed`` and ``totalAmount`` are expected to be floats
        already; non-finite values are kept in their columns and
        written as ``null`` inside the JSON document.
        """
        units = record.get("unitsConsumed")
        amount = record.get("totalAmount")
        document = dict(record)
        document["unitsConsumed"] = _json_safe(units)
        document["totalAmount"] = _json_safe(amount)
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute(
                    """
                    INSERT INTO bills (provider, city, units_consumed, total_amount, document)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        _key(record.get("provider", _MISSING)),
                        _key(record.get("city", _MISSING)),
                        units,
                        amount,
                        json.dumps(document),
                    ),
                )
                bill_id = cursor.lastrowid
        except (sqlite3.Error, TypeError, ValueError) as exc:
            raise StorageError(f"Insert failed: {exc}") from exc
        logger.info("Stored bill %s", bill_id)
        return bill_id

    def find_all(self) -> List[Dict[str, Any]]:
        """Return every bill as a dictionary, oldest first."""
        rows = self._fetch(
            "SELECT id, units_consumed, total_amount, document FROM bills ORDER BY id"
        )
        return [self._row_to_bill(row) for row in rows]

    def find_measurements(
        self,
        provider: Any = _MISSING,
        city: Any = _MISSING,
    ) -> List[Tuple[float, float]]:
        """Return ``(unitsConsumed, totalAmount)`` pairs.

        When ``provider`` and/or ``city`` are given only bills whose
        stored value is exactly equal (same type, same case) are
        included.
        """
        clauses: List[str] = []
        params: List[Any] = []
        if provider is not _MISSING:
            clauses.append("provider = ?")
            params.append(_key(provider))
        if city is not _MISSING:
            clauses.append("city = ?")
            params.append(_key(city))
        query = "SELECT units_consumed, total_amount FROM bills"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        rows = self._fetch(query, tuple(params))
        return [(_number(row["units_consumed"]), _number(row["total_amount"])) for row in rows]

    def count_by_provider(self) -> List[Tuple[Any, int]]:
        """Group bills by provider and count each group."""
        rows = self._fetch(
            "SELECT provider, COUNT(*) AS bill_count FROM bills GROUP BY provider"
        )
        return [
            (json.loads(row["provider"]) if row["provider"] is not None else None, row["bill_count"])
            for row in rows
        ]

    def _fetch(self, query: str, params: Tuple[Any, ...] = ()) -> List[sqlite3.Row]:
        conn = None
        try:
            conn = get_connection(self.db_path)
            return conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Query failed: {exc}") from exc
        finally:
            if conn is not None:
                conn.close()

    @staticmethod
    def _row_to_bill(row: sqlite3.Row) -> Dict[str, Any]:
        bill = json.loads(row["document"])
        bill["unitsConsumed"] = _number(row["units_consumed"])
        bill["totalAmount"] = _number(row["total_amount"])
        bill["id"] = row["id"]
        return bill
