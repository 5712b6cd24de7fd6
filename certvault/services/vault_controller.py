"""Vault Controller — orchestrates validation, attachment encoding and the store.

Invariants:
    - Only this controller mutates VaultState.certificates
    - Durability before visibility: append only after insert() returns,
      discard only after remove() returns; failures leave the list untouched
    - Validation runs before any IO; an invalid submission never touches the store
    - Every id handed to insert() is fresh for this session (re-drawn on collision)
    - Startup load failure is recorded on the state, never raised
    - A load that overlaps a create or remove keeps that mutation visible

Design Decisions:
    - Sequential awaits (encode → insert → mutate) instead of callbacks
    - No controller mutex: each list mutation is one synchronous step after an
      await, and SQLite serializes conflicting writes
    - Singleton controller initialized in the FastAPI lifespan, exposed through
      get_vault() for dependency injection (same pattern as a db manager)
"""

import logging
from collections.abc import Callable, Mapping
from datetime import date, datetime, timezone
from uuid import uuid4

from certvault.config import Settings
from certvault.core.classify_status import classify_expiry, days_until_expiry
from certvault.core.domain_types import Certificate, CertificateId, CertificateStatus
from certvault.core.errors import DuplicateKeyError, VaultError
from certvault.core.repository_protocols import (
    AttachmentEncoding, BinarySource, CertificateRepository,
)
from certvault.core.validate_certificate import (
    parse_expiry_date, validate_certificate_fields,
)
from certvault.core.vault_state import VaultState
from certvault.core.vault_stats import compute_vault_stats
from certvault.infrastructure.attachment_encoder import AttachmentEncoder
from certvault.infrastructure.certificate_store import CertificateStore

logger = logging.getLogger(__name__)

_MAX_ID_ATTEMPTS = 8


def new_certificate_id() -> CertificateId:
    return CertificateId(str(uuid4()))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class VaultController:
    """Owns the in-memory certificate list and keeps it in step with the store."""

    def __init__(
        self,
        store: CertificateRepository,
        encoder: AttachmentEncoding | None = None,
        id_factory: Callable[[], CertificateId] = new_certificate_id,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.encoder = encoder or AttachmentEncoder()
        self.state = VaultState()
        self._id_factory = id_factory
        self._clock = clock

    @property
    def certificates(self) -> list[Certificate]:
        return list(self.state.certificates)

    async def start(self) -> VaultState:
        """Open the store and load every record. Failure leaves an empty vault."""
        try:
            await self.store.open()
            await self.load_all()
        except VaultError as e:
            self.state.certificates = []
            self.state.load_error = e
            logger.error(
                f"Vault load failed, starting empty: {e.message}",
                extra={"error_code": e.code, "operation": "load"},
            )
        return self.state

    async def load_all(self) -> list[Certificate]:
        """Re-read the store and replace the in-memory list."""
        since = self.state.begin_load()
        try:
            certificates = await self.store.get_all()
            self.state.replace_all(certificates, since=since)
        finally:
            self.state.end_load()
        logger.info(f"Vault loaded with {len(certificates)} certificate(s)")
        return self.certificates

    async def create(
        self, fields: Mapping, file: BinarySource | None = None,
    ) -> Certificate:
        """Validate, encode the optional attachment, persist, then show."""
        draft = validate_certificate_fields(fields)

        self.state.pending_creates += 1
        try:
            image = await self.encoder.encode(file) if file is not None else None
            certificate = Certificate(
                id=self._issue_id(),
                name=draft.name,
                issuer=draft.issuer,
                expiry_date=draft.expiry_date,
                image=image,
            )
            await self.store.insert(certificate)
        except VaultError as e:
            logger.error(
                f"Certificate creation aborted: {e.message}",
                extra={"error_code": e.code, "operation": "create"},
            )
            raise
        finally:
            self.state.pending_creates -= 1

        self.state.append(certificate)
        return certificate

    async def remove(self, certificate_id: CertificateId) -> None:
        """Delete from the store, then hide. Never optimistic."""
        self.state.pending_removes += 1
        try:
            await self.store.remove(certificate_id)
        except VaultError as e:
            logger.error(
                f"Certificate removal failed: {e.message}",
                extra={
                    "error_code": e.code, "operation": "remove",
                    "certificate_id": certificate_id,
                },
            )
            raise
        finally:
            self.state.pending_removes -= 1

        self.state.discard(certificate_id)

    def classify(
        self, expiry_date: date | str, now: date | datetime | None = None,
    ) -> CertificateStatus:
        if isinstance(expiry_date, str):
            expiry_date = parse_expiry_date(expiry_date)
        return classify_expiry(expiry_date, now or self._clock())

    def days_remaining(self, expiry_date: date, now: date | datetime | None = None) -> int:
        return days_until_expiry(expiry_date, now or self._clock())

    def stats(self, now: date | datetime | None = None) -> dict:
        return compute_vault_stats(self.state.certificates, now or self._clock())

    def now(self) -> datetime:
        return self._clock()

    def _issue_id(self) -> CertificateId:
        for _ in range(_MAX_ID_ATTEMPTS):
            certificate_id = self._id_factory()
            if not self.state.knows_id(certificate_id):
                self.state.issued_ids.add(certificate_id)
                return certificate_id
            logger.warning(
                "Certificate id collision, drawing a new id",
                extra={"certificate_id": certificate_id},
            )
        raise DuplicateKeyError(certificate_id)


# Singleton (initialized on startup)
vault_controller: VaultController | None = None


def init_vault(settings: Settings) -> VaultController:
    global vault_controller
    store = CertificateStore(settings.database_url, echo=settings.database_echo)
    encoder = AttachmentEncoder(max_bytes=settings.max_attachment_bytes)
    vault_controller = VaultController(store, encoder)
    return vault_controller


def get_vault() -> VaultController:
    """FastAPI dependency for the vault controller."""
    if not vault_controller:
        raise RuntimeError("Vault not initialized")
    return vault_controller
