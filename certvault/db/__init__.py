"""Database Infrastructure — SQLAlchemy declarative base for the local vault.

Invariants:
    - All ORM models inherit from db/base.py Base
    - All sessions are async (AsyncSession over aiosqlite)

Design Decisions:
    - aiosqlite driver: the vault is a single local file, no server process
"""
