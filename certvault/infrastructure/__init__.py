"""Infrastructure Layer — IO adapters: SQLite store, attachment reader, logging.

Invariants:
    - Every fault crossing this layer is a VaultError subclass
    - No module here mutates the in-memory vault state
"""
