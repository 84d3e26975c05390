# Overview: Optimistic transaction wrapper; commits a unit of work and retries it on conflicts.

from __future__ import annotations

import logging
import random
import time

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..context import LedgerContext
from ..errors import ConflictError, StorageError
from ..extensions import db

log = logging.getLogger(__name__)

# Upper bound on a single backoff sleep, in seconds
MAX_BACKOFF = 1.0


def read_for_update(query):
    """
    Load rows that the current transaction is about to rewrite.

    populate_existing() refreshes any copy already in the identity map so the
    version_id we write against is the one just read.
    """
    return query.populate_existing()


def run_in_transaction(func, *, attempts: int = 4, backoff_base: float = 0.05):
    """
    Execute func() and commit, as one retryable transaction.

    func must do all of its reads before its writes and must not commit.
    The WHOLE callable is re-run on:
    - StaleDataError (versioned row changed underneath us)
    - IntegrityError (another transaction created the same key first)
    - OperationalError (store locked/unavailable)
    Backoff is exponential with random jitter. Past the last attempt the
    failure surfaces as ConflictError or StorageError. Any other exception
    (validation, not-found, insufficient stock) rolls back and propagates
    immediately.
    """
    for attempt in range(1, attempts + 1):
        try:
            result = func()
            db.session.commit()
            return result
        except (StaleDataError, IntegrityError) as exc:
            db.session.rollback()
            if attempt >= attempts:
                log.error("Transaction conflict persisted after %d attempts: %s", attempts, exc)
                raise ConflictError(
                    "Transaction aborted after repeated conflicts; please retry",
                    details={"attempts": attempts},
                ) from exc
            log.warning("Transaction conflict on attempt %d/%d, retrying", attempt, attempts)
        except OperationalError as exc:
            db.session.rollback()
            if attempt >= attempts:
                log.error("Storage failure after %d attempts: %s", attempts, exc)
                raise StorageError(
                    "Storage unavailable",
                    details={"attempts": attempts},
                ) from exc
            log.warning("Storage error on attempt %d/%d, retrying", attempt, attempts)
        except Exception:
            db.session.rollback()
            raise
        delay = min(backoff_base * (2 ** (attempt - 1)), MAX_BACKOFF)
        time.sleep(delay * (1 + random.random()))


def run_for(ctx: LedgerContext, func):
    """run_in_transaction with the retry policy carried by ctx."""
    return run_in_transaction(func, attempts=ctx.max_attempts, backoff_base=ctx.backoff_base)
