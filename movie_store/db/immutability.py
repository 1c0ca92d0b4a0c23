"""
ORM-level integrity guards.

SQLAlchemy fires events before UPDATE/DELETE statements reach the database.
The listeners registered here reject any flush that would break a store
invariant; the exception aborts the flush and the caller's transaction is
rolled back, so the database is never modified.

    session.flush()
         |
         v
    [before_flush]   --> _check_movie_stock()        --> StockInvariantError
         |
         v
    [before_update]  --> _check_*_immutability()     --> ImmutabilityViolationError
         |
         v
    [before_delete]  --> _block_delete()             --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Protected entities:

    Entity          | Rule
    ----------------|--------------------------------------------------
    LedgerEntry     | never updated, never deleted
    MovieChangeLog  | never updated, never deleted
    Rental          | never deleted; frozen once returned_at is set
    Movie           | never deleted; stock >= 0; stock == 0 -> not available

Registered once at startup:

    from movie_store.db.immutability import register_immutability_listeners
    register_immutability_listeners()

Tests that need to bypass the guards call
``unregister_immutability_listeners()`` and re-register afterwards.
"""

from sqlalchemy import event
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import get_history

from movie_store.exceptions import ImmutabilityViolationError, StockInvariantError
from movie_store.logging_config import get_logger

logger = get_logger("db.immutability")


def _violation(entity_type: str, entity_id, operation: str, reason: str):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
            "reason": reason,
        },
    )
    return ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


def _check_movie_stock(session, flush_context, instances):
    """Reject a flush that leaves a movie with an inconsistent stock."""
    from movie_store.models.movie import Movie

    for obj in list(session.new) + list(session.dirty):
        if not isinstance(obj, Movie):
            continue
        if obj.stock is None:
            continue
        if obj.stock < 0 or (obj.stock == 0 and obj.availability):
            logger.error(
                "stock_invariant_blocked",
                extra={
                    "movie_id": str(obj.id),
                    "stock": obj.stock,
                    "availability": obj.availability,
                },
            )
            raise StockInvariantError(
                movie_id=str(obj.id),
                stock=obj.stock,
                availability=bool(obj.availability),
            )


def _check_ledger_immutability(mapper, connection, target):
    raise _violation("LedgerEntry", target.id, "UPDATE", "ledger entries are append-only")


def _check_change_log_immutability(mapper, connection, target):
    raise _violation("MovieChangeLog", target.id, "UPDATE", "change log is append-only")


def _check_rental_immutability(mapper, connection, target):
    """Allow open -> returned exactly once; freeze the row afterwards."""
    history = get_history(target, "returned_at")
    previous = history.deleted[0] if history.deleted else None
    if previous is None and not history.has_changes() and target.returned_at is not None:
        previous = target.returned_at
    if previous is not None:
        raise _violation("Rental", target.id, "UPDATE", "rental already returned")


def _block_delete(entity_type: str):
    def _listener(mapper, connection, target):
        raise _violation(entity_type, target.id, "DELETE", f"{entity_type} rows are never deleted")

    return _listener


_delete_guards: dict = {}


def _targets():
    from movie_store.models.change_log import MovieChangeLog
    from movie_store.models.ledger import LedgerEntry
    from movie_store.models.movie import Movie
    from movie_store.models.rental import Rental

    return Movie, Rental, LedgerEntry, MovieChangeLog


def register_immutability_listeners() -> None:
    """Register all ORM guards (idempotent)."""
    Movie, Rental, LedgerEntry, MovieChangeLog = _targets()

    if not event.contains(Session, "before_flush", _check_movie_stock):
        event.listen(Session, "before_flush", _check_movie_stock)

    update_guards = (
        (LedgerEntry, _check_ledger_immutability),
        (MovieChangeLog, _check_change_log_immutability),
        (Rental, _check_rental_immutability),
    )
    for model, fn in update_guards:
        if not event.contains(model, "before_update", fn):
            event.listen(model, "before_update", fn)

    for model in (Movie, Rental, LedgerEntry, MovieChangeLog):
        fn = _delete_guards.setdefault(model, _block_delete(model.__name__))
        if not event.contains(model, "before_delete", fn):
            event.listen(model, "before_delete", fn)

    logger.debug("immutability_listeners_registered")


def unregister_immutability_listeners() -> None:
    """Remove all ORM guards. FOR TESTING ONLY."""
    Movie, Rental, LedgerEntry, MovieChangeLog = _targets()

    if event.contains(Session, "before_flush", _check_movie_stock):
        event.remove(Session, "before_flush", _check_movie_stock)

    update_guards = (
        (LedgerEntry, _check_ledger_immutability),
        (MovieChangeLog, _check_change_log_immutability),
        (Rental, _check_rental_immutability),
    )
    for model, fn in update_guards:
        if event.contains(model, "before_update", fn):
            event.remove(model, "before_update", fn)

    for model, fn in _delete_guards.items():
        if event.contains(model, "before_delete", fn):
            event.remove(model, "before_delete", fn)

    logger.debug("immutability_listeners_unregistered")
