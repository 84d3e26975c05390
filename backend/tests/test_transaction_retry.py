# Overview: Pytest coverage for the optimistic transaction retry wrapper.

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from stockledger.errors import ConflictError, InsufficientStockError, StorageError
from stockledger.services.concurrency import run_in_transaction


def flaky(exc_factory, failures):
    calls = {"n": 0}

    def func():
        calls["n"] += 1
        if calls["n"] <= failures:
            raise exc_factory()
        return "done"

    return func, calls


class TestRunInTransaction:
    def test_stale_data_is_retried(self, ctx):
        func, calls = flaky(lambda: StaleDataError("stale"), 2)
        assert run_in_transaction(func, attempts=4, backoff_base=0) == "done"
        assert calls["n"] == 3

    def test_duplicate_key_is_retried(self, ctx):
        func, calls = flaky(lambda: IntegrityError("INSERT", {}, Exception("UNIQUE")), 1)
        assert run_in_transaction(func, attempts=2, backoff_base=0) == "done"
        assert calls["n"] == 2

    def test_conflict_after_last_attempt(self, ctx):
        func, calls = flaky(lambda: StaleDataError("stale"), 10)
        with pytest.raises(ConflictError) as exc:
            run_in_transaction(func, attempts=3, backoff_base=0)
        assert calls["n"] == 3
        assert isinstance(exc.value.__cause__, StaleDataError)

    def test_storage_error_after_last_attempt(self, ctx):
        func, calls = flaky(lambda: OperationalError("SELECT", {}, Exception("database is locked")), 10)
        with pytest.raises(StorageError):
            run_in_transaction(func, attempts=2, backoff_base=0)
        assert calls["n"] == 2

    def test_domain_errors_are_not_retried(self, ctx):
        func, calls = flaky(lambda: InsufficientStockError("SKU", 2, 1), 10)
        with pytest.raises(InsufficientStockError):
            run_in_transaction(func, attempts=5, backoff_base=0)
        assert calls["n"] == 1
