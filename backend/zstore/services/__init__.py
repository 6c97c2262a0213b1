"""Services Layer — orchestrates IO around the pure core.

Invariants:
    - Collaborators (policy store, chat platform) injected at construction, never imported as globals
"""
