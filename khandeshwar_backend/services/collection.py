"""
Composite rent collection.

One collection books up to three RentIncome lines (rent, loan EMI, rent
penalty) under a single rent receipt number. The steps commit one after
another; when a step fails the earlier ones stay booked and the failure is
reported alongside what was done.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from khandeshwar_backend.constants import (
    EMI_CATEGORY,
    EMI_SUB_CATEGORY,
    PENALTY_CATEGORY,
    PENALTY_SUB_CATEGORY,
    RENT_CATEGORY,
    RENT_SUB_CATEGORY,
)
from khandeshwar_backend.errors import ApiError, BadRequestError, ConflictError
from khandeshwar_backend.extensions import db
from khandeshwar_backend.services import loans, penalties, receipts, transactions
from khandeshwar_backend.services.agreements import get_agreement
from khandeshwar_backend.utils.dates import add_months, today

log = logging.getLogger(__name__)


@dataclass
class CollectionResult:
    receipt_number: str
    transactions: list = field(default_factory=list)
    completed: list = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[ApiError] = None

    @property
    def ok(self):
        return self.error is None

    def serialize(self):
        return {
            'receipt_number': self.receipt_number,
            'transactions': [t.serialize() for t in self.transactions],
            'completed': list(self.completed),
            'failed_step': self.failed_step,
            'error': self.error.message if self.error else None,
        }


def _positive(value):
    return value is not None and Decimal(str(value)) > 0


def collect(data: dict) -> CollectionResult:
    agreement = get_agreement(data['agreement_id'])
    if agreement.status != 'Active':
        raise ConflictError("Rent can only be collected on an active agreement")

    paid_on = data.get('date') or today()
    tenant = agreement.tenant
    shop = agreement.shop

    rent_amount = data.get('rent_amount')
    if data.get('collect_rent') and rent_amount is None:
        rent_amount = agreement.monthly_rent

    loan = None
    emi_amount = None
    if data.get('collect_emi'):
        loan_id = data.get('loan_id') or agreement.active_loan_id
        if not loan_id:
            raise BadRequestError("Agreement has no active loan")
        loan = loans.get_loan(loan_id)
        if loan.agreement_id != agreement.id:
            raise BadRequestError("Loan does not belong to this agreement")
        emi_amount = data.get('emi_amount')
        if emi_amount is None:
            emi_amount = loan.monthly_emi

    penalty = None
    penalty_amount = None
    if data.get('collect_penalty'):
        if data.get('penalty_id'):
            penalty = penalties.get_penalty(data['penalty_id'])
            if penalty.agreement_id != agreement.id:
                raise BadRequestError("Penalty does not belong to this agreement")
        elif agreement.pending_penalties:
            penalty = min(agreement.pending_penalties, key=lambda p: p.due_date)
        else:
            raise BadRequestError("Agreement has no pending penalty")
        penalty_amount = data.get('penalty_amount')
        if penalty_amount is None:
            penalty_amount = penalty.penalty_amount

    steps = []
    if data.get('collect_rent') and _positive(rent_amount):
        steps.append('rent')
    if loan is not None and _positive(emi_amount):
        steps.append('emi')
    if penalty is not None and _positive(penalty_amount):
        steps.append('penalty')
    if not steps:
        raise BadRequestError("Nothing to collect")

    receipt = receipts.allocate(receipts.RENT)
    db.session.commit()
    result = CollectionResult(receipt_number=receipt)

    common = {
        'date': paid_on,
        'type': 'RentIncome',
        'tenant_name': tenant.name if tenant else None,
        'tenant_contact': tenant.phone if tenant else None,
        'agreement_id': agreement.id,
        'shop_number': shop.shop_number if shop else None,
        'payment_method': data.get('payment_method'),
    }

    for step in steps:
        try:
            if step == 'rent':
                txn = transactions.record(dict(
                    common,
                    category=RENT_CATEGORY,
                    sub_category=RENT_SUB_CATEGORY,
                    description=f"Monthly rent - Shop {common['shop_number']}",
                    amount=Decimal(str(rent_amount)),
                ), receipt_number=receipt)
                agreement.last_payment_date = paid_on
                agreement.next_due_date = add_months(paid_on, 1)
                db.session.commit()
            elif step == 'emi':
                if loan.status != 'Active':
                    raise ConflictError(f"Loan is {loan.status}")
                txn = transactions.record(dict(
                    common,
                    category=EMI_CATEGORY,
                    sub_category=EMI_SUB_CATEGORY,
                    description=f"Loan EMI payment - {common['tenant_name']}",
                    amount=Decimal(str(emi_amount)),
                    loan_id=loan.id,
                    emi_amount=Decimal(str(emi_amount)),
                ), receipt_number=receipt + receipts.EMI_SUFFIX)
                loans.apply_payment(loan, emi_amount, paid_on, transaction_id=txn.id)
            else:
                if penalty.status != 'Pending':
                    raise ConflictError("Penalty is already paid")
                txn = transactions.record(dict(
                    common,
                    category=PENALTY_CATEGORY,
                    sub_category=PENALTY_SUB_CATEGORY,
                    description=f"Rent penalty payment - {common['tenant_name']}",
                    amount=Decimal(str(penalty_amount)),
                    penalty_id=penalty.id,
                    penalty_amount=Decimal(str(penalty_amount)),
                ), receipt_number=receipt + receipts.PENALTY_SUFFIX)
                penalties.settle_penalty(penalty, paid_on)
        except ApiError as e:
            db.session.rollback()
            log.warning("Rent collection %s stopped at %s: %s", receipt, step, e.message)
            result.failed_step = step
            result.error = e
            break
        result.transactions.append(txn)
        result.completed.append(step)

    log.info("Rent collection %s on agreement %s: %s", receipt, agreement.id, result.completed)
    return result
