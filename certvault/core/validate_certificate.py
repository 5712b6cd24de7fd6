"""Certificate Validation — boundary checks on submitted form fields.

Invariants:
    - name and expiry_date must be non-empty after stripping whitespace
    - expiry_date must be an ISO calendar date (YYYY-MM-DD) or a date instance
    - issuer is optional; absent or None becomes ""
    - Raises FieldValidationError before any IO happens

Design Decisions:
    - Accepts a plain Mapping: form posts, CLI dicts and tests share one entry point
    - Both "expiry_date" and "expiryDate" keys accepted (UI form field naming)
"""

from collections.abc import Mapping
from datetime import date, datetime

from certvault.core.domain_types import CertificateDraft
from certvault.core.errors import FieldValidationError


def _text(fields: Mapping, key: str) -> str:
    value = fields.get(key)
    if value is None:
        return ""
    return str(value).strip()


def parse_expiry_date(raw) -> date:
    """Coerce a date, datetime or ISO string into a date. Raises FieldValidationError."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = "" if raw is None else str(raw).strip()
    if not text:
        raise FieldValidationError("Expiry date is required", "expiry_date")
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise FieldValidationError(
            f"Expiry date '{text}' is not an ISO date (YYYY-MM-DD)", "expiry_date",
        )


def validate_certificate_fields(fields: Mapping) -> CertificateDraft:
    """Validate submitted fields into a draft. Pure, no IO."""
    name = _text(fields, "name")
    if not name:
        raise FieldValidationError("Certificate name is required", "name")
    expiry_date = parse_expiry_date(
        fields.get("expiry_date", fields.get("expiryDate")),
    )
    return CertificateDraft(
        name=name, issuer=_text(fields, "issuer"), expiry_date=expiry_date,
    )
