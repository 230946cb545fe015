"""
In-memory record store for testing without a Supabase project.
"""

import copy
import json
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.exceptions import RecordStoreError

DATA_FILE = Path(__file__).parent / "mock_store_data.json"


def _as_text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _matches(row: Dict[str, Any], column: str, expression: str) -> bool:
    operator, _, operand = expression.partition(".")
    value = _as_text(row.get(column))

    if operator == "eq":
        return value == operand
    if operator == "neq":
        return value != operand
    if operator == "in":
        options = operand.strip("()").split(",") if operand.strip("()") else []
        return value in options

    raise RecordStoreError(f"Unsupported filter operator: {expression}")


class MockRecordStore:
    """
    Record store double that evaluates PostgREST filters over dict rows.

    Supports the ``eq``, ``neq`` and ``in`` operators used by the
    application, plus ``order`` and ``limit``. Tables are seeded either from
    a dict or from the bundled ``mock_store_data.json``.
    """

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = copy.deepcopy(tables) if tables else {}
        self.calls: List[tuple] = []

    @classmethod
    def from_json(cls, data_file: Path = DATA_FILE) -> "MockRecordStore":
        """Load tables from a JSON file mapping table name -> rows."""
        if not data_file.exists():
            return cls()

        with open(data_file, "r", encoding="utf-8") as f:
            return cls(json.load(f))

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, str]] = None,
        columns: str = "*",
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self.calls.append(("select", table, dict(filters or {})))
        rows = self._filter(table, filters or {})

        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda r: _as_text(r.get(column)), reverse=direction == "desc")
        if limit is not None:
            rows = rows[:limit]

        return [copy.deepcopy(r) for r in rows]

    def insert(self, table: str, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        self.calls.append(("insert", table, dict(record)))
        row = dict(record)
        row.setdefault("id", str(uuid.uuid4()))
        self.tables.setdefault(table, []).append(row)
        return [copy.deepcopy(row)]

    def update(self, table: str, changes: Dict[str, Any], filters: Dict[str, str]) -> List[Dict[str, Any]]:
        if not filters:
            raise ValueError("Refusing to update without filters")
        self.calls.append(("update", table, dict(filters)))

        updated = []
        for row in self._filter(table, filters):
            row.update(changes)
            updated.append(copy.deepcopy(row))
        return updated

    def _filter(self, table: str, filters: Dict[str, str]) -> List[Dict[str, Any]]:
        return [
            row for row in self.tables.get(table, [])
            if all(_matches(row, column, expr) for column, expr in filters.items())
        ]
