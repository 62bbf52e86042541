"""Core Layer: pure domain rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (clock is passed in where needed)

Design Decisions:
    - Functional core separated from imperative shell: coordinators in services/
      read rows, ask core/ what is allowed, then write (ADR: impureim sandwich)
"""
