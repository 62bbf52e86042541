"""Services Layer: coordinators, ledger, and entity services.

Invariants:
    - Every mutating operation runs inside exactly one unit_of_work transaction
    - Validation that needs no store access happens before the transaction starts
    - Services never swallow store errors; unit_of_work surfaces them as DatabaseError

Design Decisions:
    - One class per component (Ledger, StatusTransitionCoordinator,
      ReferralInviteCoordinator, RankingReader) constructed per request around the
      request's AsyncSession (ADR: no in-process shared mutable state)
"""
