"""
Typed exception hierarchy for the movie store.

Every error carries a ``code`` class attribute (machine-readable, stable
across message rewording) and stores its context as attributes, so that
logs and callers never need to parse message strings.

    MovieStoreError (base)
    |
    +-- ConfigurationError
    |
    +-- InventoryError
    |   +-- MovieNotFoundError
    |   +-- OutOfStockError
    |   +-- StockInvariantError
    |
    +-- RentalError
    |   +-- RentalAlreadyClosedError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

Business rejections (duplicate rental, missing rental) never raise: they are
returned as outcome values by ``MovieStore`` with the codes defined in
``movie_store.domain.outcome``.  ``OutOfStockError`` and ``MovieNotFoundError``
are raised by ``Movie.take_one()`` and ``CatalogService`` and share their
codes with the matching outcomes.  Invariant violations (``StockInvariantError``,
``RentalAlreadyClosedError``, ``ImmutabilityViolationError``) are raised by the
models and the flush-time ORM listeners and abort the surrounding transaction.
"""


class MovieStoreError(Exception):
    """Base exception for all movie store errors."""

    code: str = "MOVIE_STORE_ERROR"


class ConfigurationError(MovieStoreError):
    """Configuration file or value is invalid."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for {key}: {reason}")


# Inventory-related exceptions


class InventoryError(MovieStoreError):
    """Base exception for inventory errors."""

    code: str = "INVENTORY_ERROR"


class MovieNotFoundError(InventoryError):
    """Movie with the given ID does not exist."""

    code: str = "MOVIE_NOT_FOUND"

    def __init__(self, movie_id: str):
        self.movie_id = movie_id
        super().__init__(f"Movie not found: {movie_id}")


class OutOfStockError(InventoryError):
    """No unit of the movie is left to sell or rent."""

    code: str = "NO_STOCK"

    def __init__(self, movie_id: str):
        self.movie_id = movie_id
        super().__init__(f"Movie {movie_id} is out of stock")


class StockInvariantError(InventoryError):
    """Stock and availability would end up inconsistent or negative."""

    code: str = "STOCK_INVARIANT_VIOLATION"

    def __init__(self, movie_id: str, stock: int, availability: bool):
        self.movie_id = movie_id
        self.stock = stock
        self.availability = availability
        super().__init__(
            f"Stock invariant violated on movie {movie_id}: "
            f"stock={stock}, availability={availability}"
        )


# Rental-related exceptions


class RentalError(MovieStoreError):
    """Base exception for rental errors."""

    code: str = "RENTAL_ERROR"


class RentalAlreadyClosedError(RentalError):
    """A returned rental cannot be reopened or returned again."""

    code: str = "RENTAL_ALREADY_CLOSED"

    def __init__(self, rental_id: str):
        self.rental_id = rental_id
        super().__init__(f"Rental {rental_id} is already closed")


# Immutability-related exceptions


class ImmutabilityError(MovieStoreError):
    """Base exception for immutability errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify or delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
