# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Record store capability and its in-process implementations.

Records are plain dicts keyed by an integer ``id``. Every operation touches a
single record and is atomic with respect to other callers of the same store.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from copy import deepcopy
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from cashtracker.core import config


class StoreError(Exception):
    """The store could not complete an operation."""


class DuplicateError(StoreError):
    """A record with the same value in a unique field already exists."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _matches(rec: Dict[str, Any], criteria: Dict[str, Any]) -> bool:
    return all(rec.get(k) == v for k, v in criteria.items())


class RecordStore(ABC):
    @abstractmethod
    def get(self, table: str, record_id: int) -> Optional[Dict[str, Any]]:
        """Return the record with ``record_id`` or None."""

    @abstractmethod
    def find_one(self, table: str, **criteria: Any) -> Optional[Dict[str, Any]]:
        """Return the first record whose fields equal ``criteria``, or None."""

    @abstractmethod
    def find_all(self, table: str, **criteria: Any) -> List[Dict[str, Any]]:
        """Return every matching record, ordered by id."""

    @abstractmethod
    def create(self, table: str, values: Dict[str, Any], *, unique: Tuple[str, ...] = ()) -> Dict[str, Any]:
        """Insert a record, assigning ``id`` and timestamps. Returns the stored copy.

        Raises:
            DuplicateError: if a record already holds the same value in one of
                the ``unique`` fields. The check and the insert are one step.
        """

    @abstractmethod
    def update(self, table: str, record_id: int, values: Dict[str, Any]) -> Dict[str, Any]:
        """Merge ``values`` into an existing record.

        Raises:
            StoreError: if the record does not exist.
        """

    @abstractmethod
    def delete(self, table: str, record_id: int) -> bool:
        """Remove a record. Returns False if it was not there."""


class MemoryStore(RecordStore):
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables: Dict[str, Dict[int, Dict[str, Any]]] = {}
        self._sequences: Dict[str, int] = {}

    def _table(self, table: str) -> Dict[int, Dict[str, Any]]:
        return self._tables.setdefault(table, {})

    def _changed(self) -> None:
        """Hook called after every mutation while the lock is held."""

    def get(self, table, record_id):
        with self._lock:
            rec = self._table(table).get(int(record_id))
            return deepcopy(rec) if rec is not None else None

    def find_one(self, table, **criteria):
        with self._lock:
            for rid in sorted(self._table(table)):
                rec = self._table(table)[rid]
                if _matches(rec, criteria):
                    return deepcopy(rec)
        return None

    def find_all(self, table, **criteria):
        with self._lock:
            rows = self._table(table)
            return [deepcopy(rows[rid]) for rid in sorted(rows) if _matches(rows[rid], criteria)]

    def create(self, table, values, *, unique=()):
        with self._lock:
            rows = self._table(table)
            for field in unique:
                if any(rec.get(field) == values.get(field) for rec in rows.values()):
                    raise DuplicateError(f"{table}.{field} already holds {values.get(field)!r}")
            next_id = self._sequences.get(table, 0) + 1
            self._sequences[table] = next_id
            ts = _now()
            rec = {**deepcopy(values), "id": next_id, "created_at": ts, "updated_at": ts}
            self._table(table)[next_id] = rec
            self._changed()
            return deepcopy(rec)

    def update(self, table, record_id, values):
        with self._lock:
            rows = self._table(table)
            rid = int(record_id)
            if rid not in rows:
                raise StoreError(f"{table}#{rid} does not exist")
            changes = {k: v for k, v in deepcopy(values).items() if k not in ("id", "created_at")}
            rows[rid] = {**rows[rid], **changes, "updated_at": _now()}
            self._changed()
            return deepcopy(rows[rid])

    def delete(self, table, record_id):
        with self._lock:
            removed = self._table(table).pop(int(record_id), None)
            if removed is None:
                return False
            self._changed()
            return True


class YamlStore(MemoryStore):
    """MemoryStore persisted to a YAML document.

    The file is rewritten after each mutation and re-read whenever its mtime
    moves, so a second process (e.g. ``scripts/create_account.py``) sees the
    same data.
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._mtime = 0.0
        self._reload()

    def _reload(self) -> None:
        try:
            mtime = self.path.stat().st_mtime if self.path.exists() else 0.0
        except OSError as e:
            raise StoreError(f"cannot stat {self.path}: {e}") from e
        if not mtime or mtime == self._mtime:
            return
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"cannot read {self.path}: {e}") from e

        tables: Dict[str, Dict[int, Dict[str, Any]]] = {}
        for name, rows in (raw.get("tables") or {}).items():
            tables[str(name)] = {int(r["id"]): dict(r) for r in (rows or []) if isinstance(r, dict) and "id" in r}
        self._tables = tables
        self._sequences = {str(k): int(v) for k, v in (raw.get("sequences") or {}).items()}
        self._mtime = mtime

    @contextmanager
    def _transaction(self):
        """Run a mutation; if the file cannot be written, undo it in memory."""
        with self._lock:
            self._reload()
            tables, sequences = deepcopy(self._tables), dict(self._sequences)
            try:
                yield
            except StoreError:
                self._tables, self._sequences = tables, sequences
                raise

    def _changed(self) -> None:
        doc = {
            "version": 1,
            "sequences": dict(self._sequences),
            "tables": {name: [rows[rid] for rid in sorted(rows)] for name, rows in self._tables.items()},
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(doc, sort_keys=False, allow_unicode=True), encoding="utf-8")
            self._mtime = self.path.stat().st_mtime
        except OSError as e:
            raise StoreError(f"cannot write {self.path}: {e}") from e

    def get(self, table, record_id):
        with self._lock:
            self._reload()
            return super().get(table, record_id)

    def find_one(self, table, **criteria):
        with self._lock:
            self._reload()
            return super().find_one(table, **criteria)

    def find_all(self, table, **criteria):
        with self._lock:
            self._reload()
            return super().find_all(table, **criteria)

    def create(self, table, values, *, unique=()):
        with self._transaction():
            return super().create(table, values, unique=unique)

    def update(self, table, record_id, values):
        with self._transaction():
            return super().update(table, record_id, values)

    def delete(self, table, record_id):
        with self._transaction():
            return super().delete(table, record_id)


def open_store() -> RecordStore:
    backend = config.store_backend()
    if backend == "yaml":
        return YamlStore(config.data_path())
    if backend == "memory":
        return MemoryStore()
    raise RuntimeError(f"Unknown CASHTRACKER_STORE '{backend}' (expected 'memory' or 'yaml')")
