"""Services Layer — the imperative shell that awaits IO around the pure core.

Invariants:
    - Services call core/ for decisions and infrastructure/ for IO
    - Routes never touch the store directly; they go through the vault controller
"""
