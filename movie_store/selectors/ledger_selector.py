"""
LedgerSelector -- read access to ledger entries (reporting, reconciliation, tests).
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from movie_store.models.ledger import LedgerEntry, LedgerReason
from movie_store.selectors.base import BaseSelector


@dataclass(frozen=True)
class LedgerEntryRecord:
    id: UUID
    reason: LedgerReason
    amount: Decimal
    actor_id: int
    movie_id: UUID
    created_at: datetime


class LedgerSelector(BaseSelector[LedgerEntry]):

    def entries(
        self,
        movie_id: UUID | None = None,
        actor_id: int | None = None,
        reason: LedgerReason | None = None,
    ) -> list[LedgerEntryRecord]:
        """Entries matching the given filters, oldest first."""
        query = select(LedgerEntry)
        if movie_id is not None:
            query = query.where(LedgerEntry.movie_id == movie_id)
        if actor_id is not None:
            query = query.where(LedgerEntry.actor_id == actor_id)
        if reason is not None:
            query = query.where(LedgerEntry.reason == LedgerReason(reason).value)
        query = query.order_by(LedgerEntry.created_at, LedgerEntry.id)

        return [
            LedgerEntryRecord(
                id=row.id,
                reason=LedgerReason(row.reason),
                amount=Decimal(row.amount),
                actor_id=row.actor_id,
                movie_id=row.movie_id,
                created_at=row.created_at,
            )
            for row in self.session.execute(query).scalars()
        ]

    def count(self, movie_id: UUID | None = None) -> int:
        query = select(func.count()).select_from(LedgerEntry)
        if movie_id is not None:
            query = query.where(LedgerEntry.movie_id == movie_id)
        return self.session.execute(query).scalar_one()

    def total(self, actor_id: int, reason: LedgerReason | None = None) -> Decimal:
        """Sum charged to an actor, optionally for one reason."""
        query = select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(
            LedgerEntry.actor_id == actor_id
        )
        if reason is not None:
            query = query.where(LedgerEntry.reason == LedgerReason(reason).value)
        return Decimal(self.session.execute(query).scalar_one())
