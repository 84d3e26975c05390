# Overview: Gapless per-day document numbers drawn from counter rows.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..constants import DocumentType
from ..context import LedgerContext
from ..errors import ValidationError
from ..extensions import db
from ..models import Counter
from .concurrency import read_for_update

"""
Sequence Invariants (authoritative)

- One Counter row per (namespace, "{document_type}_{YYYY-MM-DD}").
- Allocation reads the row by key (point read, never a scan); next is 1 when
  the row is absent, else count + 1.
- The counter write is staged in the SAME transaction as the document that
  carries the number. If two transactions race, the loser fails at commit
  (StaleDataError on the versioned update, IntegrityError on a duplicate
  insert) and its caller re-runs the whole transaction.
- Numbers are never decremented or reused, so suffixes for a day are exactly
  1..N.
"""

DOCUMENT_PREFIXES = {
    DocumentType.ORDERS.value: "",
    DocumentType.PURCHASES.value: "PUR-",
}

PAD = 4


class DocumentSequenceError(ValidationError):
    """Raised when document sequence operations fail."""
    pass


@dataclass
class Allocation:
    """A number read from a counter but not yet written back."""
    key: str
    document_type: str
    day: date
    number: int
    document_id: str
    counter: Counter | None


def counter_key(document_type: str, day: date) -> str:
    return f"{document_type}_{day.isoformat()}"


def format_document_id(document_type: str, day: date, number: int) -> str:
    if document_type not in DOCUMENT_PREFIXES:
        raise DocumentSequenceError(f"Unknown document type: {document_type}")
    return f"{DOCUMENT_PREFIXES[document_type]}{day.isoformat()}-{number:0{PAD}d}"


def plan_allocation(ctx: LedgerContext, document_type: str, on: date | None = None) -> Allocation:
    """Read phase: determine the next number without writing anything."""
    if isinstance(document_type, DocumentType):
        document_type = document_type.value
    if document_type not in DOCUMENT_PREFIXES:
        raise DocumentSequenceError(f"Unknown document type: {document_type}")

    day = on or ctx.today()
    key = counter_key(document_type, day)

    with db.session.no_autoflush:
        counter = read_for_update(
            db.session.query(Counter).filter_by(namespace=ctx.namespace, key=key)
        ).first()

    number = 1 if counter is None else counter.count + 1
    return Allocation(
        key=key,
        document_type=document_type,
        day=day,
        number=number,
        document_id=format_document_id(document_type, day, number),
        counter=counter,
    )


def apply_allocation(ctx: LedgerContext, allocation: Allocation) -> None:
    """Write phase: stage the counter increment in the current transaction."""
    if allocation.counter is None:
        db.session.add(Counter(namespace=ctx.namespace, key=allocation.key, count=allocation.number))
    else:
        allocation.counter.count = allocation.number


def allocate(ctx: LedgerContext, document_type: str, on: date | None = None) -> str:
    """
    Reserve the next document id inside the caller's transaction.

    Callers that perform other reads should use plan_allocation /
    apply_allocation to keep reads ahead of writes.
    """
    allocation = plan_allocation(ctx, document_type, on)
    apply_allocation(ctx, allocation)
    return allocation.document_id


def list_counters(ctx: LedgerContext) -> list[Counter]:
    return (
        db.session.query(Counter)
        .filter_by(namespace=ctx.namespace)
        .order_by(Counter.key.asc())
        .all()
    )
