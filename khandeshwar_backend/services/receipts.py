"""
Receipt number sequences.

Donations are numbered ``DON0001, DON0002, ...`` and rent income
``RENT0001, ...``. EMI and penalty lines collected together with a rent
payment reuse the rent number with an ``_EMI`` / ``_PENALTY`` suffix.
Numbers are handed out by ``allocate`` only; ``preview`` never advances
the sequence.
"""
import logging
import re

from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import ReceiptCounter, Transaction

log = logging.getLogger(__name__)

DONATION = "donation"
RENT = "rent"

PREFIXES = {DONATION: "DON", RENT: "RENT"}
WIDTH = 4

EMI_SUFFIX = "_EMI"
PENALTY_SUFFIX = "_PENALTY"


def format_receipt(kind: str, value: int) -> str:
    return f"{PREFIXES[kind]}{value:0{WIDTH}d}"


def sequence_value(kind: str, receipt_number: str):
    """Numeric part of ``receipt_number`` in ``kind``'s sequence, or None."""
    m = re.match(rf"^{PREFIXES[kind]}(\d+)", receipt_number or "")
    return int(m.group(1)) if m else None


def _highest_issued(kind: str) -> int:
    prefix = PREFIXES[kind]
    numbers = (
        db.session.query(Transaction.receipt_number)
        .filter(Transaction.receipt_number.like(f"{prefix}%"))
        .all()
    )
    values = [sequence_value(kind, n) for (n,) in numbers]
    return max([v for v in values if v is not None], default=0)


def _counter(kind: str, lock: bool = False) -> ReceiptCounter:
    counter = db.session.get(ReceiptCounter, kind, with_for_update=lock)
    if counter is None:
        # first use of this sequence: continue after anything already on file
        counter = ReceiptCounter(kind=kind, last_value=_highest_issued(kind))
        db.session.add(counter)
        db.session.flush()
    return counter


def _next_free(kind: str, last: int) -> int:
    value = last + 1
    while exists(format_receipt(kind, value)):
        value += 1
    return value


def preview(kind: str) -> str:
    """The number the next ``allocate(kind)`` would return."""
    counter = db.session.get(ReceiptCounter, kind)
    last = counter.last_value if counter else _highest_issued(kind)
    return format_receipt(kind, _next_free(kind, last))


def allocate(kind: str) -> str:
    """Reserve the next unused number. The caller commits."""
    counter = _counter(kind, lock=True)
    counter.last_value = _next_free(kind, counter.last_value)
    db.session.flush()
    number = format_receipt(kind, counter.last_value)
    log.info("Allocated receipt %s", number)
    return number


def exists(receipt_number: str) -> bool:
    return db.session.query(
        Transaction.query.filter_by(receipt_number=receipt_number).exists()
    ).scalar()


def belongs_to(kind: str, receipt_number: str) -> bool:
    return sequence_value(kind, receipt_number) is not None


def claim(kind: str, receipt_number: str) -> None:
    """Record a caller-supplied number so the sequence never re-issues it."""
    value = sequence_value(kind, receipt_number)
    if value is None:
        raise ValueError(f"{receipt_number} is not a {PREFIXES[kind]} receipt number")
    counter = _counter(kind, lock=True)
    if value > counter.last_value:
        counter.last_value = value
        db.session.flush()
