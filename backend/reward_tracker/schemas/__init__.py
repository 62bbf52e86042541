"""Pydantic Schemas: request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Update schemas distinguish absent fields from explicit nulls (exclude_unset)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - Business rules (status codes, balance floor, e-mail uniqueness) are NOT checked
      here; the services own them so non-HTTP callers get the same guarantees
"""
