"""Certificate Store — durable SQLite persistence behind the vault.

Invariants:
    - insert is durable across close/reopen
    - remove is durable and idempotent
    - duplicate ids → DuplicateKeyError, other write faults → WriteFailedError
    - unreachable storage → StoreUnavailableError
    - vault_meta guards against foreign or newer databases

Design Decisions:
    - Faults injected by dropping tables through the store's own engine:
      exercises the real SQLAlchemy → VaultError mapping
"""

from datetime import date

import pytest
from sqlalchemy import text

from certvault.core.domain_types import Certificate, CertificateId
from certvault.core.errors import (
    DuplicateKeyError, StoreUnavailableError, WriteFailedError,
)
from certvault.infrastructure.certificate_store import CertificateStore


def _cert(cid: str, name: str = "AWS SA", image: str | None = None) -> Certificate:
    return Certificate(
        id=CertificateId(cid), name=name, issuer="Amazon",
        expiry_date=date(2025, 1, 1), image=image,
    )


async def test_empty_store_returns_empty_list(store):
    assert await store.get_all() == []


async def test_open_is_idempotent(store):
    manager = store.manager
    await store.open()
    assert store.manager is manager


async def test_open_creates_parent_directory(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'nested' / 'dir' / 'v.db'}"
    s = CertificateStore(url)
    await s.open()
    assert (tmp_path / "nested" / "dir" / "v.db").exists()
    await s.close()


async def test_insert_survives_reopen(database_url):
    first = CertificateStore(database_url)
    await first.insert(_cert("c1", image="data:image/png;base64,AAAA"))
    await first.close()

    second = CertificateStore(database_url)
    records = await second.get_all()
    await second.close()

    assert records == [_cert("c1", image="data:image/png;base64,AAAA")]


async def test_get_all_returns_insertion_order(store):
    for n in range(3):
        await store.insert(_cert(f"id-{n}", name=f"Cert {n}"))
    assert [c.name for c in await store.get_all()] == ["Cert 0", "Cert 1", "Cert 2"]


async def test_duplicate_id_rejected(store):
    await store.insert(_cert("dup"))
    with pytest.raises(DuplicateKeyError) as exc:
        await store.insert(_cert("dup", name="Other"))
    assert exc.value.context.certificate_id == "dup"
    assert [c.name for c in await store.get_all()] == ["AWS SA"]


async def test_remove_is_durable(database_url):
    first = CertificateStore(database_url)
    await first.insert(_cert("a"))
    await first.insert(_cert("b"))
    await first.remove(CertificateId("a"))
    await first.close()

    second = CertificateStore(database_url)
    assert [c.id for c in await second.get_all()] == ["b"]
    await second.close()


async def test_remove_absent_id_is_noop(store):
    await store.insert(_cert("keep"))
    await store.remove(CertificateId("missing"))
    await store.remove(CertificateId("missing"))
    assert [c.id for c in await store.get_all()] == ["keep"]


async def test_operations_reopen_after_close(store):
    await store.close()
    assert not store.is_open
    await store.insert(_cert("x"))
    assert store.is_open


async def test_insert_fault_maps_to_write_failed(store):
    async with store.manager.engine.begin() as conn:
        await conn.execute(text("DROP TABLE certificates"))
    with pytest.raises(WriteFailedError) as exc:
        await store.insert(_cert("x"))
    assert exc.value.operation == "insert"


async def test_remove_fault_maps_to_write_failed(store):
    async with store.manager.engine.begin() as conn:
        await conn.execute(text("DROP TABLE certificates"))
    with pytest.raises(WriteFailedError) as exc:
        await store.remove(CertificateId("x"))
    assert exc.value.operation == "remove"


async def test_read_fault_maps_to_store_unavailable(store):
    async with store.manager.engine.begin() as conn:
        await conn.execute(text("DROP TABLE certificates"))
    with pytest.raises(StoreUnavailableError):
        await store.get_all()


async def test_unreadable_rows_are_skipped(store):
    await store.insert(_cert("good"))
    async with store.manager.engine.begin() as conn:
        await conn.execute(text(
            "INSERT INTO certificates (id, name, issuer, expiry_date, created_at) "
            "VALUES ('bad', 'Broken', '', 'not-a-date', '2030-01-01 00:00:00')"
        ))
    assert [c.id for c in await store.get_all()] == ["good"]


async def test_inaccessible_location_is_store_unavailable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    s = CertificateStore(f"sqlite+aiosqlite:///{blocker / 'v.db'}")
    with pytest.raises(StoreUnavailableError):
        await s.open()
    assert not s.is_open


async def test_newer_schema_version_refused(database_url):
    first = CertificateStore(database_url, schema_version=2)
    await first.open()
    await first.close()

    older_code = CertificateStore(database_url, schema_version=1)
    with pytest.raises(StoreUnavailableError) as exc:
        await older_code.open()
    assert "newer" in exc.value.message


async def test_older_schema_version_upgraded(database_url):
    first = CertificateStore(database_url, schema_version=1)
    await first.insert(_cert("kept"))
    await first.close()

    newer_code = CertificateStore(database_url, schema_version=2)
    assert [c.id for c in await newer_code.get_all()] == ["kept"]
    async with newer_code.manager.engine.connect() as conn:
        result = await conn.execute(
            text("SELECT value FROM vault_meta WHERE key = 'schema_version'"),
        )
        assert result.scalar_one() == "2"
    await newer_code.close()


async def test_foreign_vault_name_refused(database_url):
    other = CertificateStore(database_url, vault_name="some_other_app")
    await other.open()
    await other.close()

    with pytest.raises(StoreUnavailableError):
        await CertificateStore(database_url).open()


async def test_health_check(store, tmp_path):
    assert await store.health_check() is True
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    broken = CertificateStore(f"sqlite+aiosqlite:///{blocker / 'v.db'}")
    assert await broken.health_check() is False
