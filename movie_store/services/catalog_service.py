"""
CatalogService -- administrative edits of the movie catalog.

Responsibility:
    Creates movies and edits their descriptive fields (title, sale price,
    rental price).  Every edit of a tracked field produces a ``FieldChange``
    that is handed to the change sink in the same transaction.

Non-goals:
    - Never touches ``stock`` or ``availability`` after creation; those move
      only through ``MovieStore``.
    - Does NOT commit (flush-only, see ``BaseService``).
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from movie_store.domain.changes import CATALOG_TRACKED_FIELDS, FieldChange, diff_fields
from movie_store.domain.clock import Clock
from movie_store.exceptions import MovieNotFoundError
from movie_store.logging_config import get_logger
from movie_store.models.movie import Movie
from movie_store.services.base import BaseService
from movie_store.services.change_recorder import ChangeRecorder, ChangeSink

logger = get_logger("services.catalog")


class CatalogService(BaseService[Movie]):

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        change_sink: ChangeSink | None = None,
    ):
        super().__init__(session, clock)
        self._changes = change_sink or ChangeRecorder(session, self.clock)

    def add_movie(
        self,
        title: str,
        stock: int,
        sale_price: Decimal,
        rental_price: Decimal,
    ) -> Movie:
        """Create a movie; availability starts as ``stock > 0``.

        Raises:
            ValueError: Negative stock or price.
        """
        if stock < 0:
            raise ValueError(f"Stock must not be negative: {stock}")
        if Decimal(sale_price) < 0 or Decimal(rental_price) < 0:
            raise ValueError("Prices must not be negative")

        movie = Movie(
            title=title,
            stock=stock,
            availability=stock > 0,
            sale_price=Decimal(sale_price),
            rental_price=Decimal(rental_price),
        )
        self.session.add(movie)
        self.session.flush()
        logger.info(
            "movie_added",
            extra={"movie_id": str(movie.id), "title": title, "stock": stock},
        )
        return movie

    def update_details(
        self,
        movie_id: UUID,
        actor_id: int,
        *,
        title: str | None = None,
        sale_price: Decimal | None = None,
        rental_price: Decimal | None = None,
    ) -> list[FieldChange]:
        """Apply the given field edits and record one change per modified field.

        Fields passed as ``None`` are left alone.  Returns the recorded
        changes (empty when every value was already current).

        Raises:
            MovieNotFoundError: No movie with ``movie_id``.
            ValueError: A negative price.
        """
        movie = self.session.get(Movie, movie_id)
        if movie is None:
            raise MovieNotFoundError(movie_id=str(movie_id))

        requested = {
            "title": title,
            "sale_price": None if sale_price is None else Decimal(sale_price),
            "rental_price": None if rental_price is None else Decimal(rental_price),
        }
        requested = {k: v for k, v in requested.items() if v is not None}
        for name in ("sale_price", "rental_price"):
            if name in requested and requested[name] < 0:
                raise ValueError(f"{name} must not be negative")

        before = movie.snapshot()
        changes = diff_fields(movie.id, actor_id, before, requested, CATALOG_TRACKED_FIELDS)
        for change in changes:
            setattr(movie, change.field, change.new_value)

        self.session.flush()
        self._changes.record(changes)

        if changes:
            logger.info(
                "movie_details_updated",
                extra={
                    "movie_id": str(movie.id),
                    "actor_id": actor_id,
                    "fields": [c.field for c in changes],
                },
            )
        return changes
