"""Root conftest — shared test configuration and store fixtures.

Invariants:
    - Tests never touch ./data/: every store lives in pytest's tmp_path
    - Every opened store is closed (engine disposed) after the test

Design Decisions:
    - File-backed SQLite over :memory: so reopening a store sees the same data
"""

import os

import pytest

from certvault.infrastructure.certificate_store import CertificateStore

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'vault' / 'certify_vault.db'}"


@pytest.fixture
async def store(database_url):
    store = CertificateStore(database_url)
    await store.open()
    yield store
    await store.close()
