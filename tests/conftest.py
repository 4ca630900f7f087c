from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for path in (ROOT, SRC):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from mappable_httpx.persistence.object_store import (  # noqa: E402
    MemoryObjectStore,
    SqliteObjectStore,
)


@pytest.fixture
def memory_store():
    store = MemoryObjectStore()
    yield store
    store.close()


@pytest.fixture
def sqlite_store(tmp_path: Path):
    store = SqliteObjectStore(tmp_path / "objects.db")
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def object_store(request: pytest.FixtureRequest, tmp_path: Path):
    if request.param == "memory":
        store = MemoryObjectStore()
    else:
        store = SqliteObjectStore(tmp_path / "objects.db")
    yield store
    store.close()
