"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (clock passed in, never read)

Design Decisions:
    - Functional core separated from imperative shell: the vault controller
      awaits the store and the attachment reader around these pure steps
"""
