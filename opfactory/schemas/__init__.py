"""Pydantic Schemas: request and payload validation at system boundaries.

Invariants:
    - Schemas validate at system boundary (HTTP bodies, operation payloads)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
