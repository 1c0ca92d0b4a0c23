"""
Movie Store - transactional inventory core

Purchase, rental and return of movies with:
- Atomic stock mutations
- Append-only ledger of stock-affecting events
- Locked check-then-act invariants (no overselling, one open rental per actor)
- Typed outcomes instead of exceptions at the boundary
"""

__version__ = "0.1.0"
