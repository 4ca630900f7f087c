"""Embedded object stores with scoped write transactions."""

from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, ContextManager, Protocol, TypeVar

from pydantic_core import PydanticSerializationError

from ..core.errors import ObjectStoreError
from ..mapping.mapper import type_adapter

T = TypeVar("T")
DEFAULT_PRIMARY_KEY = "id"
logger = logging.getLogger("mappable_httpx")


def type_name_of(target_type: type) -> str:
    return f"{target_type.__module__}.{target_type.__qualname__}"


def primary_key_of(obj: object) -> str | None:
    """Return the upsert key of ``obj`` or ``None`` when it has none."""

    attribute = getattr(type(obj), "__primary_key__", DEFAULT_PRIMARY_KEY)
    value = getattr(obj, attribute, None)
    if value is None:
        return None
    return str(value)


class WriteTransaction(Protocol):
    def add(self, obj: object) -> str:
        """Stage ``obj`` for upsert and return its key."""


class ObjectStore(Protocol):
    """Persistence handle accepted by the mapping context."""

    def write(self) -> ContextManager[WriteTransaction]:
        """Open a write transaction committed when the block exits cleanly."""

    def count(self, target_type: type | None = None) -> int:
        """Count stored objects, optionally of one type."""

    def get(self, target_type: type[T], key: object) -> T | None:
        """Load a fresh copy of one stored object."""

    def all(self, target_type: type[T]) -> list[T]:
        """Load fresh copies of every stored object of ``target_type``."""

    def close(self) -> None:
        """Release the underlying resources."""


class _StagedTransaction:
    def __init__(self) -> None:
        self.rows: dict[tuple[str, str], bytes] = {}

    def add(self, obj: object) -> str:
        key = primary_key_of(obj) or uuid.uuid4().hex
        try:
            payload = type_adapter(type(obj)).dump_json(obj)
        except (PydanticSerializationError, TypeError) as exc:
            raise ObjectStoreError(f"cannot serialize object type={type(obj).__name__}") from exc
        self.rows[(type_name_of(type(obj)), key)] = payload
        return key


class _ObjectStoreBase(ABC):
    """Common transaction flow shared by concrete object stores."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._in_write = False
        self._closed = False

    @contextmanager
    def write(self) -> Iterator[_StagedTransaction]:
        with self._lock:
            if self._closed:
                raise ObjectStoreError("object store is closed")
            if self._in_write:
                raise ObjectStoreError("write transaction already in progress")
            self._in_write = True
            try:
                self._begin_locked()
                transaction = _StagedTransaction()
                try:
                    yield transaction
                except BaseException:
                    self._rollback_locked()
                    logger.warning("write transaction rolled back staged=%s", len(transaction.rows))
                    raise
                self._commit_locked(transaction.rows)
                logger.debug("write transaction committed rows=%s", len(transaction.rows))
            finally:
                self._in_write = False

    def count(self, target_type: type | None = None) -> int:
        type_name = type_name_of(target_type) if target_type is not None else None
        with self._lock:
            return self._count_locked(type_name)

    def get(self, target_type: type[T], key: object) -> T | None:
        with self._lock:
            payload = self._read_locked(type_name_of(target_type), str(key))
        if payload is None:
            return None
        return type_adapter(target_type).validate_json(payload)

    def all(self, target_type: type[T]) -> list[T]:
        with self._lock:
            payloads = self._read_all_locked(type_name_of(target_type))
        adapter = type_adapter(target_type)
        return [adapter.validate_json(payload) for payload in payloads]

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._close_locked()
            self._closed = True

    @abstractmethod
    def _begin_locked(self) -> None: ...

    @abstractmethod
    def _commit_locked(self, rows: dict[tuple[str, str], bytes]) -> None: ...

    @abstractmethod
    def _rollback_locked(self) -> None: ...

    @abstractmethod
    def _count_locked(self, type_name: str | None) -> int: ...

    @abstractmethod
    def _read_locked(self, type_name: str, key: str) -> bytes | None: ...

    @abstractmethod
    def _read_all_locked(self, type_name: str) -> list[bytes]: ...

    def _close_locked(self) -> None:
        return None


class MemoryObjectStore(_ObjectStoreBase):
    """Process-local object store."""

    def __init__(self) -> None:
        super().__init__()
        self._items: dict[tuple[str, str], bytes] = {}

    def _begin_locked(self) -> None:
        return None

    def _commit_locked(self, rows: dict[tuple[str, str], bytes]) -> None:
        self._items.update(rows)

    def _rollback_locked(self) -> None:
        return None

    def _count_locked(self, type_name: str | None) -> int:
        if type_name is None:
            return len(self._items)
        return sum(1 for stored_type, _ in self._items if stored_type == type_name)

    def _read_locked(self, type_name: str, key: str) -> bytes | None:
        return self._items.get((type_name, key))

    def _read_all_locked(self, type_name: str) -> list[bytes]:
        return [
            payload
            for (stored_type, _), payload in self._items.items()
            if stored_type == type_name
        ]


class SqliteObjectStore(_ObjectStoreBase):
    """SQLite-backed object store with one row per object."""

    def __init__(self, path: str | Path = ":memory:") -> None:
        super().__init__()
        self._path = str(path) if str(path) == ":memory:" else str(Path(path).resolve())
        try:
            self._conn = sqlite3.connect(
                self._path,
                isolation_level=None,
                check_same_thread=False,
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS objects ("
                "type_name TEXT NOT NULL, "
                "key TEXT NOT NULL, "
                "payload BLOB NOT NULL, "
                "PRIMARY KEY (type_name, key))"
            )
        except sqlite3.Error as exc:
            raise ObjectStoreError(f"cannot open object store path={self._path}") from exc

    def _begin_locked(self) -> None:
        self._execute("BEGIN IMMEDIATE")

    def _commit_locked(self, rows: dict[tuple[str, str], bytes]) -> None:
        try:
            self._conn.executemany(
                "INSERT INTO objects (type_name, key, payload) VALUES (?, ?, ?) "
                "ON CONFLICT (type_name, key) DO UPDATE SET payload = excluded.payload",
                [(type_name, key, payload) for (type_name, key), payload in rows.items()],
            )
            self._conn.execute("COMMIT")
        except sqlite3.Error as exc:
            self._rollback_locked()
            raise ObjectStoreError("commit failed") from exc

    def _rollback_locked(self) -> None:
        if self._conn.in_transaction:
            self._execute("ROLLBACK")

    def _count_locked(self, type_name: str | None) -> int:
        if type_name is None:
            row = self._execute("SELECT COUNT(*) FROM objects").fetchone()
        else:
            row = self._execute(
                "SELECT COUNT(*) FROM objects WHERE type_name = ?",
                (type_name,),
            ).fetchone()
        return int(row[0])

    def _read_locked(self, type_name: str, key: str) -> bytes | None:
        row = self._execute(
            "SELECT payload FROM objects WHERE type_name = ? AND key = ?",
            (type_name, key),
        ).fetchone()
        return bytes(row[0]) if row is not None else None

    def _read_all_locked(self, type_name: str) -> list[bytes]:
        rows = self._execute(
            "SELECT payload FROM objects WHERE type_name = ? ORDER BY rowid",
            (type_name,),
        ).fetchall()
        return [bytes(row[0]) for row in rows]

    def _close_locked(self) -> None:
        self._conn.close()

    def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise ObjectStoreError(f"sqlite statement failed path={self._path}") from exc


__all__ = [
    "DEFAULT_PRIMARY_KEY",
    "primary_key_of",
    "type_name_of",
    "WriteTransaction",
    "ObjectStore",
    "MemoryObjectStore",
    "SqliteObjectStore",
]
