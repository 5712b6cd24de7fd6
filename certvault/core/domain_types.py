"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - CertificateId wraps the UUID text used as primary key, never a bare str in domain logic
    - Certificate is immutable (no update operation exists; change = delete + recreate)
    - image is explicitly optional: None means "no attachment", never ""
    - All valid statuses encoded as an Enum, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - Frozen dataclass for Certificate: the store and the in-memory list can share
      instances without defensive copies
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

CertificateId = NewType("CertificateId", str)


# ─── Vault Identity & Limits ─────────────────────────────────────

VAULT_NAME = "certify_vault"
SCHEMA_VERSION = 1

MAX_ATTACHMENT_BYTES = 100 * 1024 * 1024   # 100 MiB
EXPIRING_WINDOW_DAYS = 30


# ─── Enums ───────────────────────────────────────────────────────

class CertificateStatus(str, Enum):
    """Lifecycle status derived from expiry date and current time."""
    ACTIVE = "ACTIVE"
    EXPIRING = "EXPIRING"
    EXPIRED = "EXPIRED"

    @property
    def color(self) -> str:
        return STATUS_COLORS[self]


STATUS_COLORS: dict[CertificateStatus, str] = {
    CertificateStatus.EXPIRED: "#FF3B3B",
    CertificateStatus.EXPIRING: "#FFD700",
    CertificateStatus.ACTIVE: "#00E676",
}


# ─── Entities ────────────────────────────────────────────────────

@dataclass(frozen=True)
class CertificateDraft:
    """Validated user submission, before an id is assigned."""
    name: str
    issuer: str
    expiry_date: date


@dataclass(frozen=True)
class Certificate:
    """A tracked credential record — the sole persisted entity."""
    id: CertificateId
    name: str
    issuer: str
    expiry_date: date
    image: str | None = None

    def to_record(self) -> dict:
        """Persisted record shape (expiry date as ISO string)."""
        return {
            "id": self.id,
            "name": self.name,
            "issuer": self.issuer,
            "expiry_date": self.expiry_date.isoformat(),
            "image": self.image,
        }
