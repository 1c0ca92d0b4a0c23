"""
Module: movie_store.models.movie
Responsibility: ORM persistence for the inventory item (a movie title with a
    stock count, an availability flag and two prices).
Architecture position: Models.  May import from db/base.py and exceptions.

Invariants enforced:
    - stock >= 0 (pre-check in take_one(), flush-time listener in
      db/immutability.py, CHECK constraint in the database).
    - availability is False whenever stock == 0, and a return always sets it
      back to True.
    - Movies are never deleted by the store (db/immutability.py).
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from movie_store.db.base import TimestampedBase
from movie_store.exceptions import OutOfStockError

if TYPE_CHECKING:
    from movie_store.models.rental import Rental


class Movie(TimestampedBase):
    """
    Inventory item.

    ``availability`` is persisted independently of ``stock`` (catalog screens
    filter on it) but only buy / rent / return move either value, through
    ``take_one()`` and ``put_back_one()``.
    """

    __tablename__ = "movies"

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_movies_stock_non_negative"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    availability: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    sale_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    rental_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    rentals: Mapped[list["Rental"]] = relationship(back_populates="movie")

    def take_one(self) -> None:
        """Remove one unit from stock (buy or rent).

        Raises:
            OutOfStockError: No unit left.  Callers check first; reaching this
                means the check was skipped.
        """
        if self.stock <= 0:
            raise OutOfStockError(movie_id=str(self.id))
        self.stock -= 1
        if self.stock == 0 and self.availability:
            self.availability = False

    def put_back_one(self) -> None:
        """Add one unit back to stock (return)."""
        self.stock += 1
        if not self.availability:
            self.availability = True

    def snapshot(self) -> dict[str, Any]:
        """Current values of the tracked fields."""
        return {
            "title": self.title,
            "stock": self.stock,
            "availability": self.availability,
            "sale_price": self.sale_price,
            "rental_price": self.rental_price,
        }

    def __repr__(self) -> str:
        return f"<Movie {self.title!r} stock={self.stock} available={self.availability}>"
