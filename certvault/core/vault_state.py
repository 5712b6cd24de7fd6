"""Vault State — in-memory certificate list owned by the vault controller.

Invariants:
    - certificates holds only records the store has confirmed (durability before visibility)
    - Insertion order is preserved; append adds to the end, never twice per id
    - Each mutation is a single synchronous step, atomic relative to the event loop
    - A load snapshot never undoes an append or discard that finished while
      the store was being read: those mutations are replayed over the snapshot
    - pending_* counters track in-flight durable operations for the UI

Design Decisions:
    - Pure dataclass, no IO: the controller awaits the store, then calls a mutator
    - load_error records a failed startup load instead of raising (vault stays usable)
    - Mutations are journaled only while a load is in flight; the journal is
      cleared when the last load finishes
"""

from dataclasses import dataclass, field

from certvault.core.domain_types import Certificate, CertificateId


@dataclass
class VaultState:
    """Explicit UI state for the vault (pure dataclass, no IO)."""

    certificates: list[Certificate] = field(default_factory=list)
    issued_ids: set[CertificateId] = field(default_factory=set)

    # === In-flight durable operations ===
    pending_creates: int = 0
    pending_removes: int = 0

    # === Startup ===
    loaded: bool = False
    load_error: Exception | None = None

    # === Load/mutation interleaving ===
    revision: int = 0
    loads_in_flight: int = 0
    journal: list[tuple[int, str, Certificate | CertificateId]] = field(
        default_factory=list, repr=False,
    )

    @property
    def is_busy(self) -> bool:
        return self.pending_creates > 0 or self.pending_removes > 0

    def begin_load(self) -> int:
        """Mark a store read as started. Returns the revision it starts from."""
        self.loads_in_flight += 1
        return self.revision

    def end_load(self) -> None:
        self.loads_in_flight -= 1
        if self.loads_in_flight == 0:
            self.journal.clear()

    def replace_all(
        self, certificates: list[Certificate], since: int | None = None,
    ) -> None:
        """Install a store snapshot, replaying mutations newer than `since`."""
        merged = list(certificates)
        if since is not None:
            for revision, kind, payload in self.journal:
                if revision <= since:
                    continue
                if kind == "append":
                    merged = _with_appended(merged, payload)
                else:
                    merged = [c for c in merged if c.id != payload]
        self.certificates = merged
        self.issued_ids.update(c.id for c in certificates)
        self.loaded = True
        self.load_error = None

    def append(self, certificate: Certificate) -> None:
        self.certificates = _with_appended(self.certificates, certificate)
        self._record("append", certificate)

    def discard(self, certificate_id: CertificateId) -> None:
        self.certificates = [
            c for c in self.certificates if c.id != certificate_id
        ]
        self._record("discard", certificate_id)

    def knows_id(self, certificate_id: CertificateId) -> bool:
        return certificate_id in self.issued_ids or any(
            c.id == certificate_id for c in self.certificates
        )

    def _record(self, kind: str, payload: Certificate | CertificateId) -> None:
        self.revision += 1
        if self.loads_in_flight:
            self.journal.append((self.revision, kind, payload))


def _with_appended(
    certificates: list[Certificate], certificate: Certificate,
) -> list[Certificate]:
    if any(c.id == certificate.id for c in certificates):
        return list(certificates)
    return [*certificates, certificate]
