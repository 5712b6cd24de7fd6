"""Vault Meta ORM — key/value identity of the local database.

Invariants:
    - Holds exactly the keys "vault_name" and "schema_version" once opened
    - Written by CertificateStore.open(), never by the controller
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from certvault.db.base import Base


class VaultMeta(Base):
    """Database identity entry."""
    __tablename__ = "vault_meta"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[str] = mapped_column(String(200), nullable=False)
