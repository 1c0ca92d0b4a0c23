"""
Tests for MovieStore.return_movie(), including the date-grain lateness rule.
"""

from decimal import Decimal

from movie_store.config import StoreSettings
from movie_store.domain.outcome import MSG_LATE_PENALTY, MSG_RENTAL_NOT_FOUND, OutcomeStatus
from movie_store.models.ledger import LedgerReason
from movie_store.services.movie_store import MovieStore


class TestReturnSuccess:

    def test_on_time_return_restores_stock(
        self,
        store,
        make_movie,
        load_movie,
        ledger_selector,
        rental_selector,
        deterministic_clock,
        test_actor_id,
    ):
        movie_id = make_movie(stock=1)
        assert store.rent(movie_id, test_actor_id).is_success
        deterministic_clock.advance_days(3)

        outcome = store.return_movie(movie_id, test_actor_id)

        assert outcome.status == OutcomeStatus.SUCCESS
        assert outcome.message is None
        movie = load_movie(movie_id)
        assert movie.stock == 1
        assert movie.availability is True

        (rental,) = rental_selector.history(movie_id, test_actor_id)
        assert rental.returned_at is not None
        assert [e.reason for e in ledger_selector.entries(movie_id=movie_id)] == [LedgerReason.RENTAL]

    def test_return_on_due_date_is_not_late(self, store, make_movie, ledger_selector, deterministic_clock):
        movie_id = make_movie(stock=1)
        assert store.rent(movie_id, 1).is_success
        deterministic_clock.advance_days(14)

        outcome = store.return_movie(movie_id, 1)

        assert outcome.status == OutcomeStatus.SUCCESS
        assert ledger_selector.entries(movie_id=movie_id, reason=LedgerReason.PENALTY) == []

    def test_return_late_in_the_due_day_is_not_late(
        self, store, make_movie, ledger_selector, deterministic_clock
    ):
        """Lateness is compared at date precision, not timestamp precision."""
        movie_id = make_movie(stock=1)
        assert store.rent(movie_id, 1).is_success
        # 14 days and 11 hours later: past the rent timestamp + 14 days, same due date.
        deterministic_clock.advance(14 * 86400 + 11 * 3600)

        assert store.return_movie(movie_id, 1).status == OutcomeStatus.SUCCESS
        assert ledger_selector.entries(movie_id=movie_id, reason=LedgerReason.PENALTY) == []

    def test_return_day_after_due_date_is_penalized(
        self, store, make_movie, load_movie, ledger_selector, deterministic_clock, test_actor_id
    ):
        movie_id = make_movie(stock=1)
        assert store.rent(movie_id, test_actor_id).is_success
        deterministic_clock.advance_days(15)

        outcome = store.return_movie(movie_id, test_actor_id)

        assert outcome.status == OutcomeStatus.SUCCESS_WITH_WARNING
        assert outcome.is_success
        assert outcome.has_warning
        assert outcome.message == MSG_LATE_PENALTY
        movie = load_movie(movie_id)
        assert movie.stock == 1
        assert movie.availability is True

        penalties = ledger_selector.entries(movie_id=movie_id, reason=LedgerReason.PENALTY)
        assert len(penalties) == 1
        assert penalties[0].amount == Decimal("5.00")
        assert penalties[0].actor_id == test_actor_id
        assert outcome.ledger_entry_ids == (penalties[0].id,)
        assert ledger_selector.count(movie_id) == 2

    def test_penalty_amount_comes_from_settings(
        self, session, make_movie, ledger_selector, deterministic_clock
    ):
        movie_id = make_movie(stock=1)
        store = MovieStore(
            session,
            clock=deterministic_clock,
            settings=StoreSettings(late_penalty=Decimal("7.25")),
        )
        assert store.rent(movie_id, 1).is_success
        deterministic_clock.advance_days(30)

        assert store.return_movie(movie_id, 1).has_warning

        (penalty,) = ledger_selector.entries(movie_id=movie_id, reason=LedgerReason.PENALTY)
        assert penalty.amount == Decimal("7.25")
        assert ledger_selector.total(1) == Decimal("10.25")

    def test_return_when_stock_positive_keeps_availability(self, store, make_movie, load_movie):
        movie_id = make_movie(stock=2)
        assert store.rent(movie_id, 1).is_success

        assert store.return_movie(movie_id, 1).is_success

        movie = load_movie(movie_id)
        assert movie.stock == 2
        assert movie.availability is True


class TestReturnRejections:

    def test_return_without_rental_is_rejected(
        self, store, make_movie, load_movie, ledger_selector, test_actor_id
    ):
        movie_id = make_movie(stock=1)

        outcome = store.return_movie(movie_id, test_actor_id)

        assert outcome.status == OutcomeStatus.FAILURE
        assert outcome.code == "RENTAL_NOT_FOUND"
        assert outcome.message == MSG_RENTAL_NOT_FOUND
        assert load_movie(movie_id).stock == 1
        assert ledger_selector.count(movie_id) == 0

    def test_other_actors_rental_is_not_returned(self, store, make_movie, load_movie, rental_selector):
        movie_id = make_movie(stock=1)
        assert store.rent(movie_id, 1).is_success

        outcome = store.return_movie(movie_id, 2)

        assert outcome.code == "RENTAL_NOT_FOUND"
        assert load_movie(movie_id).stock == 0
        assert len(rental_selector.open_rentals(movie_id=movie_id, actor_id=1)) == 1

    def test_second_return_is_rejected(self, store, make_movie, load_movie):
        movie_id = make_movie(stock=1)
        assert store.rent(movie_id, 1).is_success
        assert store.return_movie(movie_id, 1).is_success

        assert store.return_movie(movie_id, 1).code == "RENTAL_NOT_FOUND"
        assert load_movie(movie_id).stock == 1
