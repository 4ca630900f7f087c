"""Embedded object persistence."""

from .object_store import MemoryObjectStore, ObjectStore, SqliteObjectStore, WriteTransaction

__all__ = ["ObjectStore", "WriteTransaction", "MemoryObjectStore", "SqliteObjectStore"]
