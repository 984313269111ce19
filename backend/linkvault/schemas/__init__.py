"""Pydantic Schemas - request/response validation for API endpoints and the facade.

Invariants:
    - Schemas validate at the system boundary (user input), before any store call
    - Domain enums from core/ used for enum fields

Design Decisions:
    - Separate from core entities: schemas are input contracts, entities are
      what the store holds
"""
