"""
LedgerService -- append-only recording of stock-affecting events.

Responsibility:
    Writes one ``LedgerEntry`` per purchase, rental or late-return penalty,
    as part of the caller's ongoing transaction.

Invariants enforced:
    - Entries are only ever inserted; the ORM guards in db/immutability.py
      reject updates and deletes.
    - Amounts are non-negative Decimals.
    - The entry id is assigned before flush so the caller can report it.

Non-goals:
    - Does NOT commit; an entry becomes visible only when the caller commits.
    - No read API (see ``selectors/ledger_selector.py``).
"""

from decimal import Decimal
from uuid import UUID, uuid4

from movie_store.logging_config import get_logger
from movie_store.models.ledger import LedgerEntry, LedgerReason
from movie_store.services.base import BaseService

logger = get_logger("services.ledger")


class LedgerService(BaseService[LedgerEntry]):

    def record(
        self,
        reason: LedgerReason,
        amount: Decimal,
        actor_id: int,
        movie_id: UUID,
    ) -> LedgerEntry:
        """
        Append one ledger entry.

        Raises:
            ValueError: ``amount`` is negative.
        """
        amount = Decimal(amount)
        if amount < 0:
            raise ValueError(f"Ledger amount must not be negative: {amount}")

        entry = LedgerEntry(
            id=uuid4(),
            reason=LedgerReason(reason).value,
            amount=amount,
            actor_id=actor_id,
            movie_id=movie_id,
            created_at=self.clock.now(),
        )
        self.session.add(entry)
        self.session.flush()

        logger.info(
            "ledger_entry_recorded",
            extra={
                "ledger_entry_id": str(entry.id),
                "reason": entry.reason,
                "amount": str(amount),
            },
        )
        return entry
