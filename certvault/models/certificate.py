"""Certificate ORM — persists one tracked credential per row.

Invariants:
    - id is the primary key, assigned by the vault controller (never by the DB)
    - name and expiry_date are non-nullable
    - expiry_date stored as ISO date text (YYYY-MM-DD), matching the record shape
    - image is nullable inline data URL text

Design Decisions:
    - String expiry_date over Date column: an unreadable value is skipped by
      get_all instead of failing the whole query
    - created_at is store-assigned and only used for stable get_all ordering
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from certvault.db.base import Base


class CertificateModel(Base):
    """Certificate row — the durable copy of a domain Certificate."""
    __tablename__ = "certificates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    issuer: Mapped[str] = mapped_column(Text, nullable=False, default="")
    expiry_date: Mapped[str] = mapped_column(String(10), nullable=False)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
