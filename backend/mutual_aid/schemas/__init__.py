"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas validate shape at the system boundary; authorization and status
      rules stay in core/ (a schema never decides who may do what)

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
