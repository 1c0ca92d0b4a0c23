"""ORM models for the movie store."""

from movie_store.models.change_log import MovieChangeLog
from movie_store.models.ledger import LedgerEntry, LedgerReason
from movie_store.models.movie import Movie
from movie_store.models.rental import Rental

__all__ = [
    "LedgerEntry",
    "LedgerReason",
    "Movie",
    "MovieChangeLog",
    "Rental",
]
