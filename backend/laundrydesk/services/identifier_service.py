# Overview: Allocation of external order and expense identifiers.

"""
Identifier allocation.

External identifiers keep the ``ORD<millis>`` / ``EXP<millis>`` shape and
append a per-type database sequence number, so two documents created in the
same millisecond still get distinct identifiers.
"""

from __future__ import annotations

import time

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import DocumentSequence


ORDER_PREFIX = "ORD"
EXPENSE_PREFIX = "EXP"


def _allocate(document_type: str) -> int:
    stmt = (
        update(DocumentSequence)
        .where(DocumentSequence.document_type == document_type)
        .values(next_number=DocumentSequence.next_number + 1)
    )

    result = db.session.execute(stmt)
    if not result.rowcount:
        db.session.add(DocumentSequence(document_type=document_type, next_number=2))
        try:
            db.session.flush()
            return 1
        except IntegrityError:
            # Another request created the row first
            db.session.rollback()
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise

    db.session.flush()
    current = (
        db.session.query(DocumentSequence.next_number)
        .filter_by(document_type=document_type)
        .scalar()
    )
    return current - 1


def next_identifier(prefix: str, document_type: str, *, pad: int = 4) -> str:
    """
    Allocate the next identifier for ``document_type``.

    Must be called before anything else is added to the session; the insert
    race path rolls the session back.
    """
    sequence = _allocate(document_type)
    millis = int(time.time() * 1000)
    return f"{prefix}{millis}{sequence:0{pad}d}"


def next_order_number() -> str:
    return next_identifier(ORDER_PREFIX, "ORDER")


def next_expense_id() -> str:
    return next_identifier(EXPENSE_PREFIX, "EXPENSE")
