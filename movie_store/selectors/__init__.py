"""Read-only query selectors returning frozen DTOs."""

from movie_store.selectors.ledger_selector import LedgerEntryRecord, LedgerSelector
from movie_store.selectors.rental_selector import RentalRecord, RentalSelector

__all__ = [
    "LedgerEntryRecord",
    "LedgerSelector",
    "RentalRecord",
    "RentalSelector",
]
