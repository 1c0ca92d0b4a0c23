"""
Structured logging: record shape, context binding around store operations,
and handler installation.
"""

import json
import logging
import sys
import threading
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from movie_store.exceptions import StockInvariantError
from movie_store.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from movie_store.services.ledger_service import LedgerService


def _format(record_kwargs: dict | None = None, exc_info=None) -> dict:
    record = logging.LogRecord(
        "movie_store.test", logging.INFO, __file__, 1, "rent_completed", (), exc_info
    )
    for key, value in (record_kwargs or {}).items():
        setattr(record, key, value)
    return json.loads(StructuredFormatter().format(record))


class TestRecordShape:

    def test_base_fields(self):
        record = _format()

        assert record["message"] == "rent_completed"
        assert record["level"] == "INFO"
        assert record["logger"] == "movie_store.test"
        assert "ts" in record

    def test_store_values_are_serialized(self):
        entry_id = uuid4()

        record = _format({
            "ledger_entry_id": entry_id,
            "amount": Decimal("5.00"),
            "expected_return_date": date(2024, 3, 15),
        })

        assert record["ledger_entry_id"] == str(entry_id)
        assert record["amount"] == "5.00"
        assert record["expected_return_date"] == "2024-03-15"

    def test_store_exception_fields(self):
        try:
            raise StockInvariantError(movie_id="m-1", stock=0, availability=True)
        except StockInvariantError:
            record = _format(exc_info=sys.exc_info())

        assert record["exc_type"] == "StockInvariantError"
        assert record["exc_code"] == "STOCK_INVARIANT_VIOLATION"
        assert record["exc_movie_id"] == "m-1"
        assert record["exc_stock"] == 0
        assert record["exc_availability"] is True
        assert "traceback" in record

    def test_bound_context_is_merged(self):
        with LogContext.bind(correlation_id="c-1", operation="rent"):
            record = _format()

        assert record["correlation_id"] == "c-1"
        assert record["operation"] == "rent"
        assert "correlation_id" not in _format()


class TestLogContext:

    def test_nested_bind_restores_outer_values(self):
        with LogContext.bind(correlation_id="outer", actor_id="7"):
            with LogContext.bind(correlation_id="inner"):
                assert LogContext.get_all() == {"correlation_id": "inner", "actor_id": "7"}
            assert LogContext.get_all() == {"correlation_id": "outer", "actor_id": "7"}
        assert LogContext.get_all() == {}

    def test_none_values_are_ignored(self):
        with LogContext.bind(movie_id=None, operation="buy"):
            assert LogContext.get_all() == {"operation": "buy"}

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValueError):
            with LogContext.bind(user="alice"):
                pass

    def test_bindings_do_not_leak_across_threads(self):
        seen = {}

        def worker():
            seen["ctx"] = LogContext.get_all()

        with LogContext.bind(correlation_id="main-thread"):
            t = threading.Thread(target=worker)
            t.start()
            t.join()

        assert seen["ctx"] == {}


class TestOperationContext:
    """Fields MovieStore binds while an operation runs."""

    def test_fields_bound_during_operation(self, store, make_movie, monkeypatch):
        movie_id = make_movie(stock=1)
        seen = []
        original = LedgerService.record

        def spy(self, *args, **kwargs):
            seen.append(LogContext.get_all())
            return original(self, *args, **kwargs)

        monkeypatch.setattr(LedgerService, "record", spy)

        assert store.rent(movie_id, 7).is_success

        (ctx,) = seen
        assert ctx["operation"] == "rent"
        assert ctx["actor_id"] == "7"
        assert ctx["movie_id"] == str(movie_id)
        assert ctx["correlation_id"]
        assert LogContext.get_all() == {}

    def test_started_and_failed_events(self, captured_logs, store, make_movie, monkeypatch):
        movie_id = make_movie(stock=1)

        def fail(*args, **kwargs):
            raise StockInvariantError(movie_id=str(movie_id), stock=-1, availability=False)

        monkeypatch.setattr(LedgerService, "record", fail)

        store.buy(movie_id, 3)

        records = {r["message"]: r for r in captured_logs()}
        started, failed = records["buy_started"], records["buy_failed"]
        assert started["level"] == "INFO"
        assert failed["level"] == "ERROR"
        assert started["correlation_id"] == failed["correlation_id"]
        assert failed["actor_id"] == "3"
        assert failed["exc_code"] == "STOCK_INVARIANT_VIOLATION"
        assert failed["retryable"] is False
        assert isinstance(failed["duration_ms"], float)


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def _fresh(self):
        reset_logging()
        yield
        reset_logging()
        configure_logging(level=logging.DEBUG)

    @staticmethod
    def _structured_handlers():
        return [
            h for h in logging.getLogger("movie_store").handlers
            if isinstance(h.formatter, StructuredFormatter)
        ]

    def test_second_call_is_ignored(self):
        first = logging.StreamHandler(StringIO())
        second = logging.StreamHandler(StringIO())

        configure_logging(handler=first)
        configure_logging(handler=second)

        assert self._structured_handlers() == [first]

    def test_level_filters_and_logger_names(self):
        stream = StringIO()
        configure_logging(level=logging.INFO, stream=stream)

        get_logger("services.movie_store").debug("dropped")
        get_logger("services.movie_store").info("kept")

        lines = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert [(r["logger"], r["message"]) for r in lines] == [
            ("movie_store.services.movie_store", "kept"),
        ]

    def test_reset_allows_reconfiguration(self):
        first = logging.StreamHandler(StringIO())
        configure_logging(handler=first)
        reset_logging()
        second = logging.StreamHandler(StringIO())

        configure_logging(handler=second)

        assert self._structured_handlers() == [second]
