# -*- coding: utf-8 -*-
"""
Calculation Store

Persistence collaborator for computed records. The engine only ever asks
a store to ``create(collection, record)`` and return the new identifier.

Backends:
    - InMemoryCalculationStore: thread-safe dict of collections (default)
    - SQLiteCalculationStore: single ``calculation_records`` table, JSON
      payloads, stdlib ``sqlite3``

Author: Carbon Impact Team
Date: October 2026
"""

import json
import logging
import sqlite3
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional

from carbon_impact.config import CarbonImpactConfig
from carbon_impact.exceptions import PersistenceError
from carbon_impact.coercion import finite_or_none

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


class CalculationStore(ABC):
    """Abstract persistence collaborator."""

    @abstractmethod
    def create(self, collection: str, record: Mapping[str, Any]) -> str:
        """Persist ``record`` into ``collection`` and return its identifier.

        Raises:
            PersistenceError: If the write fails.
        """

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def list(self, collection: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def count(self, collection: Optional[str] = None) -> int:
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources."""


class InMemoryCalculationStore(CalculationStore):
    """Dict-backed store, one ordered dict per collection."""

    def __init__(self) -> None:
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def create(self, collection: str, record: Mapping[str, Any]) -> str:
        record_id = _new_id()
        document = dict(record)
        document["id"] = record_id
        document["createdAt"] = _utcnow_iso()
        with self._lock:
            self._collections.setdefault(collection, {})[record_id] = document
        logger.debug("Stored %s/%s", collection, record_id)
        return record_id

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self._collections.get(collection, {}).get(record_id)
        return dict(document) if document is not None else None

    def list(self, collection: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(d) for d in self._collections.get(collection, {}).values()]

    def count(self, collection: Optional[str] = None) -> int:
        with self._lock:
            if collection is not None:
                return len(self._collections.get(collection, {}))
            return sum(len(c) for c in self._collections.values())


class SQLiteCalculationStore(CalculationStore):
    """SQLite-backed store.

    One connection is shared across threads and serialized with a lock,
    so ``":memory:"`` databases behave like a single database.
    """

    def __init__(self, database: str = "carbon_impact.db", timeout: int = 30) -> None:
        self.database = database
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(
                database, timeout=timeout, check_same_thread=False,
            )
            self._initialize_database()
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"Failed to open calculation store at {database}",
                cause=exc,
            ) from exc

    def _initialize_database(self) -> None:
        with self._transaction() as cursor:
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS calculation_records (
                    id TEXT PRIMARY KEY,
                    collection TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL
                )
            ''')
            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_calculation_records_collection
                ON calculation_records (collection)
            ''')
        logger.info("Calculation store initialized at %s", self.database)

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            cursor = self._conn.cursor()
            try:
                yield cursor
                self._conn.commit()
            except sqlite3.Error:
                self._conn.rollback()
                raise
            finally:
                cursor.close()

    def create(self, collection: str, record: Mapping[str, Any]) -> str:
        record_id = _new_id()
        created_at = _utcnow_iso()
        payload = json.dumps(finite_or_none(dict(record)), default=str)
        try:
            with self._transaction() as cursor:
                cursor.execute(
                    "INSERT INTO calculation_records (id, collection, payload, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (record_id, collection, payload, created_at),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"Failed to persist record to {collection}",
                collection=collection,
                cause=exc,
            ) from exc
        return record_id

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        rows = self._query(
            "SELECT id, payload, created_at FROM calculation_records "
            "WHERE collection = ? AND id = ?",
            (collection, record_id),
            collection,
        )
        return self._to_document(rows[0]) if rows else None

    def list(self, collection: str) -> List[Dict[str, Any]]:
        rows = self._query(
            "SELECT id, payload, created_at FROM calculation_records "
            "WHERE collection = ? ORDER BY rowid",
            (collection,),
            collection,
        )
        return [self._to_document(row) for row in rows]

    def count(self, collection: Optional[str] = None) -> int:
        if collection is None:
            rows = self._query("SELECT COUNT(*) FROM calculation_records", (), None)
        else:
            rows = self._query(
                "SELECT COUNT(*) FROM calculation_records WHERE collection = ?",
                (collection,),
                collection,
            )
        return int(rows[0][0])

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _query(self, sql: str, params: tuple, collection: Optional[str]) -> List[tuple]:
        try:
            with self._transaction() as cursor:
                cursor.execute(sql, params)
                return cursor.fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(
                "Failed to read calculation store",
                collection=collection,
                cause=exc,
            ) from exc

    @staticmethod
    def _to_document(row: tuple) -> Dict[str, Any]:
        document = json.loads(row[1])
        document["id"] = row[0]
        document["createdAt"] = row[2]
        return document


def create_store(config: CarbonImpactConfig) -> CalculationStore:
    """Build the store selected by ``config.storage_backend``."""
    if config.storage_backend == "sqlite":
        return SQLiteCalculationStore(config.database_path)
    return InMemoryCalculationStore()


__all__ = [
    "CalculationStore",
    "InMemoryCalculationStore",
    "SQLiteCalculationStore",
    "create_store",
]
