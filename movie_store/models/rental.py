"""
Module: movie_store.models.rental
Responsibility: ORM persistence for the loan of one movie to one actor.
Architecture position: Models.  May import from db/base.py and exceptions.

Invariants enforced:
    - At most one open rental (returned_at IS NULL) per (movie, actor).  The
      orchestrator checks under the movie row lock; the partial unique index
      ``ux_rentals_open_movie_actor`` rejects anything that slips past.
    - A closed rental is never reopened and rentals are never deleted
      (db/immutability.py).
"""

from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import BigInteger, Date, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from movie_store.db.base import Base, UUIDString
from movie_store.exceptions import RentalAlreadyClosedError

if TYPE_CHECKING:
    from movie_store.models.movie import Movie


class Rental(Base):
    """A movie on loan to an actor until ``expected_return_date``."""

    __tablename__ = "rentals"

    __table_args__ = (
        Index(
            "ux_rentals_open_movie_actor",
            "movie_id",
            "actor_id",
            unique=True,
            postgresql_where=text("returned_at IS NULL"),
            sqlite_where=text("returned_at IS NULL"),
        ),
        Index("idx_rentals_actor", "actor_id"),
    )

    movie_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("movies.id"),
        nullable=False,
    )

    actor_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Due date; lateness is judged at date precision.
    expected_return_date: Mapped[date] = mapped_column(Date, nullable=False)

    returned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    movie: Mapped["Movie"] = relationship(back_populates="rentals")

    @property
    def is_open(self) -> bool:
        return self.returned_at is None

    def close(self, returned_at: datetime) -> None:
        """Mark the rental returned.

        Raises:
            RentalAlreadyClosedError: The rental was already returned.
        """
        if not self.is_open:
            raise RentalAlreadyClosedError(rental_id=str(self.id))
        self.returned_at = returned_at

    def is_late(self, today: date) -> bool:
        """True when the due date is strictly before ``today``."""
        return self.expected_return_date < today

    def __repr__(self) -> str:
        state = "open" if self.is_open else "returned"
        return f"<Rental movie={self.movie_id} actor={self.actor_id} {state}>"
