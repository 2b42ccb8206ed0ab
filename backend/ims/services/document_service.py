# Overview: Service-layer operations for document numbering.

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import DocumentSequence


ORDER_DOCUMENT_TYPE = "ORDER"
ORDER_PREFIX = "ORD"


class DocumentSequenceError(Exception):
    """Raised when document sequence operations fail."""
    pass


def _current_next_number(document_type: str) -> int:
    return (
        db.session.query(DocumentSequence.next_number)
        .filter_by(document_type=document_type)
        .scalar()
    )


def next_document_number(
    *,
    document_type: str,
    prefix: str,
    pad: int = 6,
) -> str:
    """
    Allocate the next document number for a document type.

    The increment is an UPDATE on the (document_type) row, so concurrent
    allocators serialize on that row. Nothing is committed here: the number
    belongs to the caller's transaction and is released if it rolls back.

    Call this before staging the document itself; the first-allocation race
    path rolls the session back.
    """
    if not document_type:
        raise DocumentSequenceError("document_type is required")

    stmt = (
        update(DocumentSequence)
        .where(DocumentSequence.document_type == document_type)
        .values(next_number=DocumentSequence.next_number + 1)
    )

    result = db.session.execute(stmt)
    if result.rowcount:
        db.session.flush()
        next_num = _current_next_number(document_type) - 1
    else:
        seq = DocumentSequence(document_type=document_type, next_number=2)
        db.session.add(seq)
        try:
            db.session.flush()
            next_num = 1
        except IntegrityError:
            # Another writer created the row first; take the next slot from it
            db.session.rollback()
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise
            db.session.flush()
            next_num = _current_next_number(document_type) - 1

    return f"{prefix}-{next_num:0{pad}d}"


def next_order_number() -> str:
    return next_document_number(document_type=ORDER_DOCUMENT_TYPE, prefix=ORDER_PREFIX)
