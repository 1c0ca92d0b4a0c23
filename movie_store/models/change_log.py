"""
Module: movie_store.models.change_log
Responsibility: ORM persistence for field-level change history of movies
    (who changed which field, from what, to what).
Architecture position: Models.  May import from db/base.py only.

Values are stored as text so one table can hold changes of any field type.
Rows are append-only (db/immutability.py).
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from movie_store.db.base import Base, UUIDString


class MovieChangeLog(Base):
    __tablename__ = "movie_logs"

    __table_args__ = (
        Index("idx_movie_logs_movie", "movie_id"),
    )

    movie_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("movies.id"),
        nullable=False,
    )

    actor_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    field: Mapped[str] = mapped_column(String(50), nullable=False)

    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
