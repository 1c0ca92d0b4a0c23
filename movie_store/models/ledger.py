"""
Module: movie_store.models.ledger
Responsibility: ORM persistence for ledger entries, the append-only record of
    every stock-affecting financial event (purchase, rental, late penalty).
Architecture position: Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only: UPDATE and DELETE are rejected by the ORM listeners in
      db/immutability.py.
    - One entry per completed action.  A late return adds its own PENALTY
      entry; the RENTAL entry it settles is left untouched.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from movie_store.db.base import Base, UUIDString


class LedgerReason(str, Enum):
    """Why money moved."""

    PURCHASE = "purchase"
    RENTAL = "rental"
    PENALTY = "penalty"


class LedgerEntry(Base):
    """Immutable record of one stock-affecting event."""

    __tablename__ = "movie_transactions"

    __table_args__ = (
        Index("idx_ledger_movie", "movie_id"),
        Index("idx_ledger_actor", "actor_id"),
        Index("idx_ledger_reason", "reason"),
    )

    reason: Mapped[LedgerReason] = mapped_column(String(10), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    actor_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    movie_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("movies.id"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<LedgerEntry {self.reason} {self.amount} actor={self.actor_id}>"
