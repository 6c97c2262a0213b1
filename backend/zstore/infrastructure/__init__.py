"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All external failures mapped to typed errors (core/errors.py)

Design Decisions:
    - Thin wrappers over raw clients (ADR: ExMA single responsibility)
"""
