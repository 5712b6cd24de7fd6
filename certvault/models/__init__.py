"""ORM Models — SQLAlchemy declarative models for the vault tables.

Invariants:
    - All models inherit from Base (db/base.py)
    - certificates is the only record collection; vault_meta holds database identity

Design Decisions:
    - One file per table for locality
    - All models imported here so Base.metadata is complete before create_all runs
"""

from certvault.models.certificate import CertificateModel  # noqa: F401
from certvault.models.vault_meta import VaultMeta  # noqa: F401
