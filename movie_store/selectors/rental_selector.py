"""
RentalSelector -- read access to rental records.
"""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import select

from movie_store.models.rental import Rental
from movie_store.selectors.base import BaseSelector


@dataclass(frozen=True)
class RentalRecord:
    id: UUID
    movie_id: UUID
    actor_id: int
    created_at: datetime
    expected_return_date: date
    returned_at: datetime | None

    @property
    def is_open(self) -> bool:
        return self.returned_at is None


def _to_record(row: Rental) -> RentalRecord:
    return RentalRecord(
        id=row.id,
        movie_id=row.movie_id,
        actor_id=row.actor_id,
        created_at=row.created_at,
        expected_return_date=row.expected_return_date,
        returned_at=row.returned_at,
    )


class RentalSelector(BaseSelector[Rental]):

    def open_rentals(
        self,
        movie_id: UUID | None = None,
        actor_id: int | None = None,
    ) -> list[RentalRecord]:
        query = select(Rental).where(Rental.returned_at.is_(None))
        if movie_id is not None:
            query = query.where(Rental.movie_id == movie_id)
        if actor_id is not None:
            query = query.where(Rental.actor_id == actor_id)
        query = query.order_by(Rental.created_at, Rental.id)
        return [_to_record(r) for r in self.session.execute(query).scalars()]

    def history(self, movie_id: UUID, actor_id: int) -> list[RentalRecord]:
        """All rentals of one movie by one actor, open or returned."""
        query = (
            select(Rental)
            .where(Rental.movie_id == movie_id, Rental.actor_id == actor_id)
            .order_by(Rental.created_at, Rental.id)
        )
        return [_to_record(r) for r in self.session.execute(query).scalars()]

    def overdue(self, today: date) -> list[RentalRecord]:
        """Open rentals whose expected return date is before ``today``."""
        query = (
            select(Rental)
            .where(
                Rental.returned_at.is_(None),
                Rental.expected_return_date < today,
            )
            .order_by(Rental.expected_return_date, Rental.id)
        )
        return [_to_record(r) for r in self.session.execute(query).scalars()]
