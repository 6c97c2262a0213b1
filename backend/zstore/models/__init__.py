"""ORM Models — persistence shapes for the policy store.

Invariants:
    - Models are read-only from the request path; only operators and tests write them
"""
