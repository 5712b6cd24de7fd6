"""Certificate Schemas — response shapes for the vault dashboard.

Invariants:
    - status, status_color and days_remaining are derived at response time, never stored
    - image is the inline data URL or None
"""

from datetime import date

from pydantic import BaseModel

from certvault.core.domain_types import Certificate, CertificateStatus


class CertificateResponse(BaseModel):
    """One certificate with its derived lifecycle status."""
    id: str
    name: str
    issuer: str
    expiry_date: date
    image: str | None = None
    status: CertificateStatus
    status_color: str
    days_remaining: int

    @classmethod
    def from_domain(
        cls, certificate: Certificate, status: CertificateStatus, days_remaining: int,
    ) -> "CertificateResponse":
        return cls(
            id=certificate.id,
            name=certificate.name,
            issuer=certificate.issuer,
            expiry_date=certificate.expiry_date,
            image=certificate.image,
            status=status,
            status_color=status.color,
            days_remaining=days_remaining,
        )


class VaultStatsResponse(BaseModel):
    """Dashboard counts: active includes EXPIRING records."""
    total: int
    active: int
    expired: int


class CertificateListResponse(BaseModel):
    certificates: list[CertificateResponse]
    stats: VaultStatsResponse
    store_available: bool = True
