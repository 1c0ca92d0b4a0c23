"""
Typed settings consumed by the movie store.

``StoreSettings`` is the only configuration object services receive.  It is
frozen so a running orchestrator can never observe a half-applied change.
"""

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal


@dataclass(frozen=True)
class StoreSettings:
    """Business and storage settings.

    Attributes:
        loan_period_days: Days between rental creation and expected return.
        late_penalty: Amount charged once when a rental comes back late.
        database_url: SQLAlchemy URL of the transactional store.
        lock_timeout_seconds: Upper bound on waiting for a row/database lock.
        echo_sql: Log every SQL statement (debugging only).
    """

    loan_period_days: int = 14
    late_penalty: Decimal = Decimal("5.00")
    database_url: str = "sqlite:///movie_store.db"
    lock_timeout_seconds: int = 10
    echo_sql: bool = False

    @property
    def loan_period(self) -> timedelta:
        return timedelta(days=self.loan_period_days)
