from datetime import datetime

import pytest

from booklib.core.storage import KeyValueStorage, Persistence
from booklib.core.store import Store

FIXED_NOW = datetime(2026, 10, 17, 15, 4, 5)
FIXED_NOW_TEXT = "10/17/2026, 3:04:05 PM"


@pytest.fixture
def storage(tmp_path):
    kv = KeyValueStorage(tmp_path / "booklib.db")
    yield kv
    kv.close()


@pytest.fixture
def errors():
    return []


@pytest.fixture
def persistence(storage, errors):
    return Persistence(storage, on_error=lambda op, key, exc: errors.append((op, key, exc)))


@pytest.fixture
def store(persistence):
    s = Store(persistence, now=lambda: FIXED_NOW)
    s.initialize()
    return s
