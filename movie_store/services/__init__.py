"""Services: the transaction orchestrator and the flush-only collaborators it composes."""

from movie_store.services.catalog_service import CatalogService
from movie_store.services.change_recorder import ChangeRecorder, ChangeSink
from movie_store.services.ledger_service import LedgerService
from movie_store.services.movie_store import MovieStore

__all__ = [
    "CatalogService",
    "ChangeRecorder",
    "ChangeSink",
    "LedgerService",
    "MovieStore",
]
