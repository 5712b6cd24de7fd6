"""Pydantic Schemas — response contracts for the dashboard API.

Invariants:
    - Schemas describe what leaves the system; form input is validated by the controller
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
