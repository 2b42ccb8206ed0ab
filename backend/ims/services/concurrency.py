# Overview: Service-layer helpers for locking, retries and commits.

from __future__ import annotations

import time

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..errors import BackendError


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). Once attempts are exhausted the
    failure is reported as BackendError.
    """
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise BackendError("Database is busy, please retry") from exc
            time.sleep(backoff_base * (2 ** attempt))


def commit_or_raise() -> None:
    """
    Commit the current unit of work.

    IntegrityError is re-raised for the caller to translate (e.g. duplicate
    username); concurrency errors propagate to run_with_retry; any other
    storage failure becomes BackendError. The session is rolled back first
    in every failure case.
    """
    try:
        db.session.commit()
    except (IntegrityError, OperationalError, StaleDataError):
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise BackendError("Storage operation failed") from exc
