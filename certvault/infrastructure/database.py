"""Database Session Manager — async engine with automatic rollback and error mapping.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to VaultError subclasses (core/errors.py):
      IntegrityError → DuplicateKeyError; other faults → WriteFailedError for
      writes, StoreUnavailableError for reads and open
    - SQLite connections run with WAL journal and synchronous=FULL

Design Decisions:
    - Operation name passed to session(): the same fault means "write failed"
      during insert but "store unavailable" during get_all
    - expire_on_commit=False: prevents lazy-load issues in async context
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)

from certvault.core.errors import (
    DuplicateKeyError, ErrorContext, StoreUnavailableError, VaultError,
    WriteFailedError,
)

logger = logging.getLogger(__name__)

WRITE_OPERATIONS = frozenset({"insert", "remove"})


def _storage_fault(
    message: str, operation: str, certificate_id: str | None,
) -> VaultError:
    ctx = ErrorContext(certificate_id=certificate_id, operation=operation)
    if operation in WRITE_OPERATIONS:
        return WriteFailedError(message, operation, ctx)
    return StoreUnavailableError(message, ctx)


def _enable_sqlite_durability(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=FULL")
    cursor.close()


class DatabaseSessionManager:
    """Manages async database sessions with rollback, error mapping, and health checks."""

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = create_async_engine(
            database_url, echo=echo, pool_pre_ping=True,
        )
        if self.engine.dialect.name == "sqlite":
            event.listen(
                self.engine.sync_engine, "connect", _enable_sqlite_durability,
            )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(
        self, operation: str = "query", certificate_id: str | None = None,
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback and VaultError mapping on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(
                f"DB integrity error during {operation}: {e}",
                extra={"operation": operation, "certificate_id": certificate_id},
            )
            if operation == "insert":
                raise DuplicateKeyError(certificate_id) from e
            raise _storage_fault(
                "Integrity constraint violated", operation, certificate_id,
            ) from e
        except OperationalError as e:
            await session.rollback()
            logger.error(
                f"DB operational error during {operation}: {e}",
                extra={"operation": operation, "certificate_id": certificate_id},
            )
            raise _storage_fault(
                "Connection or operational error", operation, certificate_id,
            ) from e
        except DBAPIError as e:
            await session.rollback()
            logger.error(
                f"DB driver error during {operation}: {e}",
                extra={"operation": operation, "certificate_id": certificate_id},
            )
            raise _storage_fault(
                "Database driver error", operation, certificate_id,
            ) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(
                f"SQLAlchemy error during {operation}: {e}",
                extra={"operation": operation, "certificate_id": certificate_id},
            )
            raise _storage_fault(
                "Database operation failed", operation, certificate_id,
            ) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
