"""Core Layer: pure dispatch primitives and domain rules, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure and deterministic

Design Decisions:
    - Functional core separated from the imperative shell (services/, api/)
"""
