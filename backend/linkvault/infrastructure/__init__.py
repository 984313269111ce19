"""Infrastructure Layer - database access, the remote document store, logging.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Every SQLAlchemy failure is mapped to a LinkVaultError before leaving this layer

Design Decisions:
    - Store adapter behind a Protocol so the sync engine can run against test doubles
"""
