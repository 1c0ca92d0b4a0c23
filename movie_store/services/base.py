"""
BaseService -- abstract base for the flush-only services.

Services receive a SQLAlchemy ``Session`` from their caller and persist with
``session.flush()`` -- never ``session.commit()``.  The caller (``MovieStore``
or a test harness) owns commit and rollback, so that several services can
take part in one atomic transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from movie_store.db.base import Base
from movie_store.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for flush-only services.

    Guarantees:
        - Never calls ``session.commit()`` or ``session.rollback()``.

    Non-goals:
        - Query-only helpers belong in ``movie_store/selectors/``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
