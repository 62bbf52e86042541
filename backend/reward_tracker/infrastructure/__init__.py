"""Infrastructure Layer: database session management and observability.

Invariants:
    - The only layer that talks to SQLAlchemy engines and logging handlers directly

Design Decisions:
    - Imperative shell around the pure core (ADR: impureim sandwich)
"""
