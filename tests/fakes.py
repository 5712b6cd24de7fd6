"""Test Doubles — controllable binary sources and a failure-injecting store.

Invariants:
    - FakeSource counts read() calls so tests can assert "never read"
    - FailingStore wraps a real CertificateStore and raises on demand per operation
    - GatedStore holds the next get_all() snapshot until released

Design Decisions:
    - Flat fake classes (no inheritance): simple, explicit, easy to debug
    - FailingStore delegates to a real store so successful paths stay durable
"""

import asyncio

from certvault.core.errors import StoreUnavailableError, WriteFailedError


class FakeSource:
    """In-memory BinarySource with a configurable declared size."""

    def __init__(
        self,
        data: bytes = b"\x89PNG\r\n\x1a\n",
        size: int | None = None,
        content_type: str | None = "image/png",
        filename: str | None = "cert.png",
        error: Exception | None = None,
    ):
        self.data = data
        self.size = len(data) if size is None else size
        self.content_type = content_type
        self.filename = filename
        self.error = error
        self.reads = 0

    async def read(self) -> bytes:
        self.reads += 1
        if self.error is not None:
            raise self.error
        return self.data


class FailingStore:
    """CertificateRepository that fails selected operations."""

    def __init__(self, inner=None, fail_open=False, fail_insert=False, fail_remove=False):
        self.inner = inner
        self.fail_open = fail_open
        self.fail_insert = fail_insert
        self.fail_remove = fail_remove
        self.inserted = []
        self.removed = []

    async def open(self) -> None:
        if self.fail_open:
            raise StoreUnavailableError("storage access denied")
        if self.inner is not None:
            await self.inner.open()

    async def get_all(self):
        await self.open()
        return await self.inner.get_all() if self.inner is not None else []

    async def insert(self, certificate):
        if self.fail_insert:
            raise WriteFailedError("disk full", "insert")
        self.inserted.append(certificate)
        if self.inner is not None:
            await self.inner.insert(certificate)
        return certificate

    async def remove(self, certificate_id) -> None:
        if self.fail_remove:
            raise WriteFailedError("database locked", "remove")
        self.removed.append(certificate_id)
        if self.inner is not None:
            await self.inner.remove(certificate_id)

    async def health_check(self) -> bool:
        if self.fail_open:
            return False
        return await self.inner.health_check() if self.inner is not None else True


class GatedStore:
    """Delegating store whose next get_all() reads, then waits for release."""

    def __init__(self, inner):
        self.inner = inner
        self.gate_next = False
        self.held = asyncio.Event()
        self.release = asyncio.Event()

    async def open(self) -> None:
        await self.inner.open()

    async def get_all(self):
        snapshot = await self.inner.get_all()
        if self.gate_next:
            self.gate_next = False
            self.held.set()
            await self.release.wait()
        return snapshot

    async def insert(self, certificate):
        return await self.inner.insert(certificate)

    async def remove(self, certificate_id) -> None:
        await self.inner.remove(certificate_id)

    async def health_check(self) -> bool:
        return await self.inner.health_check()
