"""Services Layer - identity, sync engine, mutations, vault gate.

Invariants:
    - Services receive their collaborators (store, identity, db) as constructor
      arguments, never as module-level imports
    - Only the sync engine writes the in-memory folders/links collections

Design Decisions:
    - One class per concern; Workspace bundles them for the HTTP layer
"""
