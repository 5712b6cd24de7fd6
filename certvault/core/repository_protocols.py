"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, FastAPI's UploadFile satisfies
      BinarySource without an adapter
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves
"""

from typing import Protocol

from certvault.core.domain_types import Certificate, CertificateId


class CertificateRepository(Protocol):
    """Contract for durable certificate persistence — implemented by shell."""
    async def open(self) -> None: ...
    async def get_all(self) -> list[Certificate]: ...
    async def insert(self, certificate: Certificate) -> Certificate: ...
    async def remove(self, certificate_id: CertificateId) -> None: ...
    async def health_check(self) -> bool: ...


class BinarySource(Protocol):
    """Contract for a user-selected file: declared metadata plus an async read."""
    size: int | None
    content_type: str | None
    filename: str | None

    async def read(self) -> bytes: ...


class AttachmentEncoding(Protocol):
    """Contract for turning a BinarySource into an inline string."""
    async def encode(self, source: BinarySource) -> str: ...
