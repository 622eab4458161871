import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from khandeshwar_backend.errors import (
    DUPLICATE_SUBMISSION,
    RECEIPT_EXISTS,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import Transaction
from khandeshwar_backend.services import receipts

log = logging.getLogger(__name__)

# Fields a request may set directly on a Transaction row
WRITABLE_FIELDS = (
    'date', 'type', 'category', 'sub_category', 'description', 'amount',
    'donor_name', 'donor_contact', 'family_members', 'amount_per_person',
    'vendor', 'payee_name', 'payee_contact',
    'tenant_name', 'tenant_contact', 'agreement_id', 'shop_number', 'payment_method',
    'loan_id', 'emi_amount', 'penalty_id', 'penalty_amount',
)


def get_live(txn_id: str, txn_type=None) -> Transaction:
    q = Transaction.live().filter(Transaction.id == txn_id)
    if txn_type is not None:
        types = (txn_type,) if isinstance(txn_type, str) else tuple(txn_type)
        q = q.filter(Transaction.type.in_(types))
    txn = q.first()
    if txn is None:
        raise NotFoundError("Transaction not found")
    return txn


def _check_duplicates(idempotency_key, receipt_number):
    if idempotency_key and Transaction.query.filter_by(idempotency_key=idempotency_key).first():
        raise ConflictError(DUPLICATE_SUBMISSION)
    if receipt_number and receipts.exists(receipt_number):
        raise ConflictError(RECEIPT_EXISTS)


def record(fields: dict, receipt_kind=None, receipt_number=None, idempotency_key=None,
           commit=True) -> Transaction:
    """
    Insert one transaction.

    ``receipt_number`` is used verbatim when given (it must be unused);
    otherwise a number is allocated from ``receipt_kind`` when that is set.
    A repeated ``idempotency_key`` is rejected before anything is written.
    """
    if receipt_number and receipt_kind and not receipts.belongs_to(receipt_kind, receipt_number):
        prefix = receipts.PREFIXES[receipt_kind]
        raise ValidationError(details=[{
            "path": "receipt_number",
            "message": f"Receipt number must start with {prefix}",
        }])
    _check_duplicates(idempotency_key, receipt_number)

    if receipt_number and receipt_kind:
        receipts.claim(receipt_kind, receipt_number)
    elif receipt_kind:
        receipt_number = receipts.allocate(receipt_kind)

    txn = Transaction(
        receipt_number=receipt_number,
        idempotency_key=idempotency_key,
        **{k: v for k, v in fields.items() if k in WRITABLE_FIELDS},
    )
    db.session.add(txn)
    if not commit:
        db.session.flush()
        return txn
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # lost a race with a concurrent insert
        _check_duplicates(idempotency_key, receipt_number)
        raise ConflictError("Transaction conflicts with an existing record")

    log.info("Recorded %s %s (%s)", txn.type, txn.amount, txn.receipt_number or "no receipt")
    return txn


def update(txn: Transaction, fields: dict) -> Transaction:
    for key, value in fields.items():
        if key in WRITABLE_FIELDS and key != 'type':
            setattr(txn, key, value)
    db.session.commit()
    return txn


def soft_delete(txn: Transaction) -> None:
    txn.deleted_at = datetime.utcnow()
    db.session.commit()
    log.info("Soft deleted transaction %s", txn.id)


def bulk_import(rows) -> list:
    """Insert parsed CSV rows (no receipt numbers) in one commit."""
    created = []
    for row in rows:
        txn = Transaction(**{k: v for k, v in row.items() if k in WRITABLE_FIELDS})
        db.session.add(txn)
        created.append(txn)
    db.session.commit()
    log.info("Imported %d transactions", len(created))
    return created
