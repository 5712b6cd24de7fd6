"""Certificate Store — durable local persistence for the vault (SQLite via aiosqlite).

Invariants:
    - open() is idempotent; every other operation opens first, so a store that
      was unavailable at startup is retried on the next call
    - open() creates the certificates table keyed by id if missing
    - vault_meta records vault_name and schema_version; a newer schema or a
      foreign vault name fails with StoreUnavailableError
    - insert() is durable once it returns; duplicate id → DuplicateKeyError
    - remove() of an absent id is a successful no-op
    - get_all() never partially fails: undecodable rows are skipped and logged

Design Decisions:
    - One engine per store (shared by all operations), one transaction per write
    - asyncio.Lock only around open(): two concurrent first calls must not
      build two engines; writes are serialized by SQLite itself
"""

import asyncio
import logging
from datetime import date
from pathlib import Path

from sqlalchemy import delete, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from certvault.core.domain_types import (
    Certificate, CertificateId, SCHEMA_VERSION, VAULT_NAME,
)
from certvault.core.errors import StoreUnavailableError, VaultError
from certvault.db.base import Base
from certvault.infrastructure.database import DatabaseSessionManager
from certvault.models.certificate import CertificateModel
from certvault.models.vault_meta import VaultMeta

logger = logging.getLogger(__name__)


def _to_domain(row: CertificateModel) -> Certificate:
    if not row.name:
        raise ValueError("empty name")
    return Certificate(
        id=CertificateId(row.id),
        name=row.name,
        issuer=row.issuer or "",
        expiry_date=date.fromisoformat(row.expiry_date),
        image=row.image,
    )


class CertificateStore:
    """Durable certificate collection backed by a single local database."""

    def __init__(
        self,
        database_url: str,
        vault_name: str = VAULT_NAME,
        schema_version: int = SCHEMA_VERSION,
        echo: bool = False,
    ):
        self.database_url = database_url
        self.vault_name = vault_name
        self.schema_version = schema_version
        self.echo = echo
        self._manager: DatabaseSessionManager | None = None
        self._open_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._manager is not None

    @property
    def manager(self) -> DatabaseSessionManager:
        if self._manager is None:
            raise StoreUnavailableError("Store is not open")
        return self._manager

    async def open(self) -> None:
        """Connect to the vault database, creating its tables on first use."""
        if self._manager is not None:
            return
        async with self._open_lock:
            if self._manager is not None:
                return
            try:
                self._ensure_parent_dir()
                manager = DatabaseSessionManager(self.database_url, echo=self.echo)
            except (OSError, SQLAlchemyError) as e:
                logger.error(f"Cannot prepare vault database: {e}")
                raise StoreUnavailableError("Local storage is not accessible") from e
            try:
                async with manager.engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
                await self._check_identity(manager)
            except SQLAlchemyError as e:
                await manager.dispose()
                logger.error(f"Cannot open vault database: {e}")
                raise StoreUnavailableError("Could not open local database") from e
            except VaultError:
                await manager.dispose()
                raise
            self._manager = manager
            logger.info(
                f"Vault '{self.vault_name}' opened (schema v{self.schema_version})",
                extra={"operation": "open"},
            )

    def _ensure_parent_dir(self) -> None:
        url = make_url(self.database_url)
        if url.get_backend_name() != "sqlite":
            return
        database = url.database
        if not database or database == ":memory:" or database.startswith("file:"):
            return
        Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    async def _check_identity(self, manager: DatabaseSessionManager) -> None:
        """Record or verify vault_name and schema_version in vault_meta."""
        async with manager.session("open") as db:
            result = await db.execute(select(VaultMeta))
            meta = {row.key: row.value for row in result.scalars().all()}

            stored_name = meta.get("vault_name")
            if stored_name is not None and stored_name != self.vault_name:
                raise StoreUnavailableError(
                    f"Database belongs to vault '{stored_name}', not '{self.vault_name}'",
                )
            try:
                stored_version = int(meta.get("schema_version", "0"))
            except ValueError:
                raise StoreUnavailableError("Unreadable schema version")
            if stored_version > self.schema_version:
                raise StoreUnavailableError(
                    f"Database schema v{stored_version} is newer than supported "
                    f"v{self.schema_version}",
                )

            if stored_name is None:
                db.add(VaultMeta(key="vault_name", value=self.vault_name))
            if stored_version < self.schema_version:
                await db.merge(
                    VaultMeta(key="schema_version", value=str(self.schema_version)),
                )
                if stored_version:
                    logger.info(
                        f"Vault schema upgraded v{stored_version} -> v{self.schema_version}",
                    )
            await db.commit()

    async def get_all(self) -> list[Certificate]:
        """Return every stored certificate in stable (created_at, id) order."""
        await self.open()
        async with self.manager.session("get_all") as db:
            result = await db.execute(
                select(CertificateModel).order_by(
                    CertificateModel.created_at, CertificateModel.id,
                ),
            )
            rows = result.scalars().all()

        certificates = []
        for row in rows:
            try:
                certificates.append(_to_domain(row))
            except ValueError as e:
                logger.warning(
                    f"Skipping unreadable certificate row: {e}",
                    extra={"certificate_id": row.id, "operation": "get_all"},
                )
        return certificates

    async def insert(self, certificate: Certificate) -> Certificate:
        """Durably write one new certificate."""
        await self.open()
        async with self.manager.session("insert", certificate.id) as db:
            db.add(CertificateModel(**certificate.to_record()))
            await db.commit()
        logger.info(
            "Certificate stored",
            extra={"certificate_id": certificate.id, "operation": "insert"},
        )
        return certificate

    async def remove(self, certificate_id: CertificateId) -> None:
        """Durably delete a certificate. Absent ids are a no-op."""
        await self.open()
        async with self.manager.session("remove", certificate_id) as db:
            await db.execute(
                delete(CertificateModel).where(CertificateModel.id == certificate_id),
            )
            await db.commit()
        logger.info(
            "Certificate removed",
            extra={"certificate_id": certificate_id, "operation": "remove"},
        )

    async def health_check(self) -> bool:
        """Readiness probe: True when the database is open and answering."""
        try:
            await self.open()
        except VaultError:
            return False
        return await self.manager.health_check()

    async def close(self) -> None:
        if self._manager is not None:
            await self._manager.dispose()
            self._manager = None
