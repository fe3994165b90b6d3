"""Infrastructure Layer: database sessions, caches and logging setup.

Invariants:
    - Infrastructure never imports from services/ or api/
"""
