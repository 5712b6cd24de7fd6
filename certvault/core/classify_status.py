"""Status Classifier — pure mapping from expiry date + now to a lifecycle status.

Invariants:
    - diff_days = ceil((expiry - now) / 1 day), expiry read as midnight UTC
    - diff_days < 0 → EXPIRED; 0 <= diff_days < 30 → EXPIRING; >= 30 → ACTIVE
    - diff_days == 0 (expires today) is EXPIRING, never EXPIRED
    - Deterministic: now is always passed in, never read from the clock

Design Decisions:
    - Naive datetimes are treated as UTC; a bare date for now means midnight UTC
    - timedelta arithmetic (not float seconds) so whole-day offsets divide exactly
"""

import math
from datetime import date, datetime, time, timedelta, timezone

from certvault.core.domain_types import CertificateStatus, EXPIRING_WINDOW_DAYS

_ONE_DAY = timedelta(days=1)


def _as_utc(moment: date | datetime) -> datetime:
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            return moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(timezone.utc)
    return datetime.combine(moment, time.min, tzinfo=timezone.utc)


def days_until_expiry(expiry_date: date, now: date | datetime) -> int:
    """Whole days until expiry, rounded up. Negative once the date has passed."""
    return math.ceil((_as_utc(expiry_date) - _as_utc(now)) / _ONE_DAY)


def classify_expiry(expiry_date: date, now: date | datetime) -> CertificateStatus:
    """Classify a certificate's expiry date relative to now. Pure, no IO."""
    diff_days = days_until_expiry(expiry_date, now)
    if diff_days < 0:
        return CertificateStatus.EXPIRED
    if diff_days < EXPIRING_WINDOW_DAYS:
        return CertificateStatus.EXPIRING
    return CertificateStatus.ACTIVE
