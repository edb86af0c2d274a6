# Overview: Retry wrapper for order writes that race on a busy database.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Call ``func`` again when an order write loses a race.

    Order create/replace/patch flush the header and its service lines in one
    transaction. A locked SQLite file or a PostgreSQL deadlock surfaces as
    OperationalError; a concurrent delete of the same order as StaleDataError.
    Each retry starts from a rolled-back session, so ``func`` must redo all of
    its writes. The last failure propagates to the caller.
    """
    delay = backoff_base
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except (OperationalError, StaleDataError):
            db.session.rollback()
            if attempt == attempts:
                raise
            time.sleep(delay)
            delay *= 2
