"""Vault Stats — pure computation of dashboard counts from the certificate list.

Invariants:
    - expired counts records classified EXPIRED at the given now
    - active = total - expired (EXPIRING records still count as active)
    - Never raises: an empty vault yields all zeros

Design Decisions:
    - Pure function over the list, not a method on VaultState (state is ownership, stats are presentation)
"""

from collections.abc import Iterable
from datetime import date, datetime

from certvault.core.classify_status import classify_expiry
from certvault.core.domain_types import Certificate, CertificateStatus


def count_expired(certificates: Iterable[Certificate], now: date | datetime) -> int:
    return sum(
        1 for c in certificates
        if classify_expiry(c.expiry_date, now) is CertificateStatus.EXPIRED
    )


def compute_vault_stats(certificates: list[Certificate], now: date | datetime) -> dict:
    """Compute summary counts for the dashboard. Pure, no IO."""
    expired = count_expired(certificates, now)
    return {
        "total": len(certificates),
        "active": len(certificates) - expired,
        "expired": expired,
    }
