"""Services Layer: operation dispatchers and their handler sets.

Invariants:
    - Dispatchers map handler ids to handlers with an explicit dict (no auto-discovery)
    - Handler classes hold the DB session; dispatchers hold batch control flow

Design Decisions:
    - One handler file per family for locality
"""
