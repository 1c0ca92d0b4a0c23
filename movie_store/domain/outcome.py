"""
Outcome values returned by every ``MovieStore`` operation.

An outcome is a transient, immutable value: the tagged status, a stable
machine-readable ``code`` and the human-readable ``message`` the boundary
layer shows to the actor.  Nothing raised inside the store crosses the
boundary; every path ends in one of these.
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from movie_store.exceptions import OutOfStockError


class OutcomeStatus(str, Enum):
    """Tag of a store operation result."""

    SUCCESS = "success"
    SUCCESS_WITH_WARNING = "success_with_warning"
    FAILURE = "failure"
    NO_STOCK = "no_stock"


class StoreOperation(str, Enum):
    BUY = "buy"
    RENT = "rent"
    RETURN = "return"


# Messages shown to the actor.
MSG_NO_STOCK = "There is no stock for this movie"
MSG_ALREADY_RENTED = "This movie is already rented"
MSG_RENTAL_NOT_FOUND = "Not rental found"
MSG_MOVIE_NOT_FOUND = "Movie not found"
MSG_LATE_PENALTY = "You were penalized for late return"
MSG_GENERIC_FAILURE = "something went wrong"

CODE_OK = "OK"
CODE_LATE_RETURN_PENALTY = "LATE_RETURN_PENALTY"
CODE_DUPLICATE_RENTAL = "DUPLICATE_RENTAL"
CODE_RENTAL_NOT_FOUND = "RENTAL_NOT_FOUND"
CODE_TRANSACTION_FAILED = "TRANSACTION_FAILED"


@dataclass(frozen=True)
class TransactionOutcome:
    """Result of a buy, rent or return."""

    status: OutcomeStatus
    operation: StoreOperation
    movie_id: UUID
    actor_id: int
    code: str = CODE_OK
    message: str | None = None
    ledger_entry_ids: tuple[UUID, ...] = field(default_factory=tuple)

    @property
    def is_success(self) -> bool:
        """True for plain success and success-with-warning."""
        return self.status in (
            OutcomeStatus.SUCCESS,
            OutcomeStatus.SUCCESS_WITH_WARNING,
        )

    @property
    def has_warning(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS_WITH_WARNING

    @property
    def commits(self) -> bool:
        """Whether the transaction behind this outcome should be committed."""
        return self.is_success

    @classmethod
    def success(
        cls,
        operation: StoreOperation,
        movie_id: UUID,
        actor_id: int,
        ledger_entry_ids: tuple[UUID, ...] = (),
    ) -> "TransactionOutcome":
        return cls(
            status=OutcomeStatus.SUCCESS,
            operation=operation,
            movie_id=movie_id,
            actor_id=actor_id,
            ledger_entry_ids=ledger_entry_ids,
        )

    @classmethod
    def warning(
        cls,
        operation: StoreOperation,
        movie_id: UUID,
        actor_id: int,
        code: str,
        message: str,
        ledger_entry_ids: tuple[UUID, ...] = (),
    ) -> "TransactionOutcome":
        return cls(
            status=OutcomeStatus.SUCCESS_WITH_WARNING,
            operation=operation,
            movie_id=movie_id,
            actor_id=actor_id,
            code=code,
            message=message,
            ledger_entry_ids=ledger_entry_ids,
        )

    @classmethod
    def no_stock(
        cls,
        operation: StoreOperation,
        movie_id: UUID,
        actor_id: int,
    ) -> "TransactionOutcome":
        return cls(
            status=OutcomeStatus.NO_STOCK,
            operation=operation,
            movie_id=movie_id,
            actor_id=actor_id,
            code=OutOfStockError.code,
            message=MSG_NO_STOCK,
        )

    @classmethod
    def failure(
        cls,
        operation: StoreOperation,
        movie_id: UUID,
        actor_id: int,
        code: str = CODE_TRANSACTION_FAILED,
        message: str = MSG_GENERIC_FAILURE,
    ) -> "TransactionOutcome":
        return cls(
            status=OutcomeStatus.FAILURE,
            operation=operation,
            movie_id=movie_id,
            actor_id=actor_id,
            code=code,
            message=message,
        )
