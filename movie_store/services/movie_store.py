"""
MovieStore -- the transaction orchestrator for buy, rent and return.

Responsibility:
    Runs each operation as one atomic unit against the movie, its rentals
    and the ledger, scoped to one already-authenticated actor, and reports
    the result as a ``TransactionOutcome``.

Architecture position:
    Services -- imperative shell.  Composes LedgerService and a ChangeSink
    (both flush-only) and owns the transaction boundary.

Invariants enforced:
    - Atomicity: every operation commits all of its writes or none.  Any
      exception inside the unit rolls back and yields the generic failure.
    - Race-free check-then-act: the movie row is locked before the stock
      check, the duplicate-rental check and the open-rental lookup, and the
      lock is held until commit or rollback.
    - stock never goes negative; availability is False whenever stock == 0
      and True after every return.
    - At most one open rental per (actor, movie).
    - Lateness is judged at date precision: a rental is late when its
      expected return date is strictly before today.

Failure modes:
    None escape.  Business rejections (no stock, duplicate rental, rental
    not found, unknown movie) and infrastructure errors (lock timeout,
    constraint violation, driver error) all come back as outcomes.

Usage:
    store = MovieStore(session, clock=SystemClock())
    outcome = store.rent(movie_id, actor_id=7)
    if not outcome.is_success:
        show(outcome.message)
"""

import time
from typing import Callable
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from movie_store.config import StoreSettings, get_settings
from movie_store.domain.changes import INVENTORY_TRACKED_FIELDS, diff_fields
from movie_store.domain.clock import Clock, SystemClock
from movie_store.domain.outcome import (
    CODE_DUPLICATE_RENTAL,
    CODE_LATE_RETURN_PENALTY,
    CODE_RENTAL_NOT_FOUND,
    MSG_ALREADY_RENTED,
    MSG_LATE_PENALTY,
    MSG_MOVIE_NOT_FOUND,
    MSG_RENTAL_NOT_FOUND,
    StoreOperation,
    TransactionOutcome,
)
from movie_store.exceptions import MovieNotFoundError
from movie_store.logging_config import LogContext, get_logger
from movie_store.models.ledger import LedgerEntry, LedgerReason
from movie_store.models.movie import Movie
from movie_store.models.rental import Rental
from movie_store.services.change_recorder import ChangeRecorder, ChangeSink
from movie_store.services.ledger_service import LedgerService

logger = get_logger("services.movie_store")

_Body = Callable[[UUID, int], TransactionOutcome]


class MovieStore:
    """
    Orchestrates buy / rent / return.

    By default each call commits on success and rolls back otherwise.  The
    commit or rollback applies to the whole session, so any uncommitted work
    the caller left pending on it is committed with a success and discarded
    with a rejection or failure.

    With ``auto_commit=False`` the call runs inside a SAVEPOINT of the
    caller's transaction instead: success releases the savepoint, anything
    else rolls back to it, pending caller work is left alone, and the caller
    decides when to commit.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        settings: StoreSettings | None = None,
        change_sink: ChangeSink | None = None,
        auto_commit: bool = True,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._settings = settings or get_settings()
        self._auto_commit = auto_commit

        self._ledger = LedgerService(session, self._clock)
        self._changes = change_sink or ChangeRecorder(session, self._clock)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def buy(self, movie_id: UUID, actor_id: int) -> TransactionOutcome:
        """Sell one unit of the movie to the actor."""
        return self._execute(StoreOperation.BUY, movie_id, actor_id, self._do_buy)

    def rent(self, movie_id: UUID, actor_id: int) -> TransactionOutcome:
        """Lend one unit of the movie to the actor for the loan period."""
        return self._execute(StoreOperation.RENT, movie_id, actor_id, self._do_rent)

    def return_movie(self, movie_id: UUID, actor_id: int) -> TransactionOutcome:
        """Close the actor's open rental of the movie, charging a penalty if late."""
        return self._execute(StoreOperation.RETURN, movie_id, actor_id, self._do_return)

    # ------------------------------------------------------------------
    # Transaction scope
    # ------------------------------------------------------------------

    def _execute(
        self,
        operation: StoreOperation,
        movie_id: UUID,
        actor_id: int,
        body: _Body,
    ) -> TransactionOutcome:
        name = operation.value
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=str(actor_id),
            movie_id=str(movie_id),
            operation=name,
        ):
            logger.info(f"{name}_started")
            t0 = time.monotonic()
            savepoint = None if self._auto_commit else self._session.begin_nested()
            try:
                outcome = body(movie_id, actor_id)
                if outcome.commits:
                    self._commit(savepoint)
                else:
                    self._rollback(savepoint)
            except Exception as exc:
                self._rollback(savepoint, quiet=True)
                logger.error(
                    f"{name}_failed",
                    extra={
                        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                        "retryable": isinstance(exc, (OperationalError, IntegrityError)),
                    },
                    exc_info=True,
                )
                return TransactionOutcome.failure(operation, movie_id, actor_id)

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            if outcome.is_success:
                logger.info(
                    f"{name}_completed",
                    extra={
                        "status": outcome.status.value,
                        "code": outcome.code,
                        "duration_ms": duration_ms,
                        "ledger_entry_ids": [str(i) for i in outcome.ledger_entry_ids],
                    },
                )
            else:
                logger.warning(
                    f"{name}_rejected",
                    extra={
                        "status": outcome.status.value,
                        "code": outcome.code,
                        "duration_ms": duration_ms,
                    },
                )
            return outcome

    def _commit(self, savepoint) -> None:
        if savepoint is not None:
            savepoint.commit()
        else:
            self._session.commit()

    def _rollback(self, savepoint, quiet: bool = False) -> None:
        try:
            if savepoint is not None:
                if savepoint.is_active:
                    savepoint.rollback()
            else:
                self._session.rollback()
        except SQLAlchemyError:
            if not quiet:
                raise
            # Reported by the caller as the operation failure.
            logger.warning("rollback_failed", exc_info=True)

    # ------------------------------------------------------------------
    # Operation bodies (run inside the transaction scope)
    # ------------------------------------------------------------------

    def _do_buy(self, movie_id: UUID, actor_id: int) -> TransactionOutcome:
        op = StoreOperation.BUY
        movie = self._lock_movie(movie_id)
        if movie is None:
            return self._movie_not_found(op, movie_id, actor_id)
        if movie.stock <= 0:
            return TransactionOutcome.no_stock(op, movie_id, actor_id)

        entry = self._take_one(movie, actor_id, LedgerReason.PURCHASE, movie.sale_price)
        return TransactionOutcome.success(op, movie_id, actor_id, (entry.id,))

    def _do_rent(self, movie_id: UUID, actor_id: int) -> TransactionOutcome:
        op = StoreOperation.RENT
        movie = self._lock_movie(movie_id)
        if movie is None:
            return self._movie_not_found(op, movie_id, actor_id)

        # An actor already holding the title is told so even when it is the
        # last copy (stock is then 0).
        if self._open_rental(movie_id, actor_id) is not None:
            return TransactionOutcome.failure(
                op,
                movie_id,
                actor_id,
                code=CODE_DUPLICATE_RENTAL,
                message=MSG_ALREADY_RENTED,
            )
        if movie.stock <= 0:
            return TransactionOutcome.no_stock(op, movie_id, actor_id)

        entry = self._take_one(movie, actor_id, LedgerReason.RENTAL, movie.rental_price)
        rental = Rental(
            movie_id=movie.id,
            actor_id=actor_id,
            created_at=self._clock.now(),
            expected_return_date=self._clock.today() + self._settings.loan_period,
        )
        self._session.add(rental)
        self._session.flush()

        logger.debug(
            "rental_opened",
            extra={
                "rental_id": str(rental.id),
                "expected_return_date": rental.expected_return_date,
            },
        )
        return TransactionOutcome.success(op, movie_id, actor_id, (entry.id,))

    def _do_return(self, movie_id: UUID, actor_id: int) -> TransactionOutcome:
        op = StoreOperation.RETURN
        movie = self._lock_movie(movie_id)
        if movie is None:
            return self._movie_not_found(op, movie_id, actor_id)

        rental = self._open_rental(movie_id, actor_id)
        if rental is None:
            return TransactionOutcome.failure(
                op,
                movie_id,
                actor_id,
                code=CODE_RENTAL_NOT_FOUND,
                message=MSG_RENTAL_NOT_FOUND,
            )

        before = movie.snapshot()
        movie.put_back_one()
        rental.close(self._clock.now())
        self._changes.record(
            diff_fields(movie.id, actor_id, before, movie.snapshot(), INVENTORY_TRACKED_FIELDS)
        )

        penalty: LedgerEntry | None = None
        if rental.is_late(self._clock.today()):
            penalty = self._ledger.record(
                reason=LedgerReason.PENALTY,
                amount=self._settings.late_penalty,
                actor_id=actor_id,
                movie_id=movie.id,
            )

        self._session.flush()

        if penalty is not None:
            logger.info(
                "late_return_penalized",
                extra={
                    "rental_id": str(rental.id),
                    "expected_return_date": rental.expected_return_date,
                    "penalty": str(self._settings.late_penalty),
                },
            )
            return TransactionOutcome.warning(
                op,
                movie_id,
                actor_id,
                code=CODE_LATE_RETURN_PENALTY,
                message=MSG_LATE_PENALTY,
                ledger_entry_ids=(penalty.id,),
            )
        return TransactionOutcome.success(op, movie_id, actor_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_movie(self, movie_id: UUID) -> Movie | None:
        """Load the movie with a row lock held until the transaction ends."""
        return self._session.execute(
            select(Movie)
            .where(Movie.id == movie_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _open_rental(self, movie_id: UUID, actor_id: int) -> Rental | None:
        # Callers hold the movie row lock, which serializes every writer of
        # this movie's rentals.
        return self._session.execute(
            select(Rental)
            .where(
                Rental.movie_id == movie_id,
                Rental.actor_id == actor_id,
                Rental.returned_at.is_(None),
            )
            .order_by(Rental.created_at)
            .execution_options(populate_existing=True)
        ).scalars().first()

    def _take_one(
        self,
        movie: Movie,
        actor_id: int,
        reason: LedgerReason,
        amount,
    ) -> LedgerEntry:
        """Decrement stock, adjust availability and write the ledger entry."""
        before = movie.snapshot()
        movie.take_one()
        entry = self._ledger.record(
            reason=reason,
            amount=amount,
            actor_id=actor_id,
            movie_id=movie.id,
        )
        self._changes.record(
            diff_fields(movie.id, actor_id, before, movie.snapshot(), INVENTORY_TRACKED_FIELDS)
        )
        return entry

    @staticmethod
    def _movie_not_found(op: StoreOperation, movie_id: UUID, actor_id: int) -> TransactionOutcome:
        return TransactionOutcome.failure(
            op,
            movie_id,
            actor_id,
            code=MovieNotFoundError.code,
            message=MSG_MOVIE_NOT_FOUND,
        )
