import logging
from decimal import ROUND_HALF_UP, Decimal

from khandeshwar_backend.errors import BadRequestError, ConflictError, NotFoundError
from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import Agreement, Loan, LoanPayment, Tenant
from khandeshwar_backend.utils.dates import add_months, today

log = logging.getLogger(__name__)


def calculate_emi(principal, monthly_rate, months) -> Decimal:
    """
    Standard amortised instalment ``P*r*(1+r)^N / ((1+r)^N - 1)`` with
    ``r = monthly_rate / 100``, rounded half-up to a whole currency unit.
    """
    p = Decimal(str(principal))
    r = Decimal(str(monthly_rate)) / 100
    n = int(months)
    if n <= 0:
        raise ValueError("months must be positive")
    if r == 0:
        emi = p / n
    else:
        growth = (1 + r) ** n
        emi = p * r * growth / (growth - 1)
    return emi.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def get_loan(loan_id: str) -> Loan:
    loan = db.session.get(Loan, loan_id)
    if loan is None:
        raise NotFoundError("Loan not found")
    return loan


def create_loan(data: dict) -> Loan:
    agreement = db.session.get(Agreement, data['agreement_id'])
    if agreement is None:
        raise NotFoundError("Agreement not found")
    tenant = db.session.get(Tenant, data['tenant_id'])
    if tenant is None:
        raise NotFoundError("Tenant not found")
    if agreement.tenant_id != tenant.id:
        raise BadRequestError("Agreement does not belong to this tenant")
    if agreement.status != 'Active':
        raise ConflictError("Loans can only be issued against an active agreement")

    principal = Decimal(str(data['loan_amount']))
    loan = Loan(
        tenant_id=tenant.id,
        agreement_id=agreement.id,
        tenant_name=tenant.name,
        loan_amount=principal,
        interest_rate=data['interest_rate'],
        disbursed_date=data['disbursed_date'],
        loan_duration=data['loan_duration'],
        monthly_emi=calculate_emi(principal, data['interest_rate'], data['loan_duration']),
        outstanding_balance=principal,
        total_repaid=Decimal('0'),
        status='Active',
        next_emi_date=add_months(data['disbursed_date'], 1),
    )
    db.session.add(loan)
    db.session.flush()
    agreement.active_loan_id = loan.id
    db.session.commit()
    log.info("Loan %s issued: %s at %s%% for %s months, EMI %s",
             loan.id, principal, loan.interest_rate, loan.loan_duration, loan.monthly_emi)
    return loan


def apply_payment(loan: Loan, amount=None, payment_date=None, transaction_id=None) -> Loan:
    """
    Reduce the outstanding balance (never below zero) and roll the next EMI
    date a month past the payment. A loan paid down to zero is Completed
    and released from its agreement.
    """
    if loan.status != 'Active':
        raise ConflictError(f"Loan is {loan.status}")

    amount = Decimal(str(amount)) if amount is not None else Decimal(loan.monthly_emi)
    if amount <= 0:
        raise BadRequestError("Payment amount must be positive")
    payment_date = payment_date or today()

    outstanding = Decimal(loan.outstanding_balance)
    if amount >= outstanding:
        payment_type = 'FullPayment'
    elif amount == Decimal(loan.monthly_emi):
        payment_type = 'EMI'
    else:
        payment_type = 'PartPayment'

    loan.outstanding_balance = max(Decimal('0'), outstanding - amount)
    loan.total_repaid = Decimal(loan.total_repaid or 0) + amount
    loan.last_payment_date = payment_date
    loan.next_emi_date = add_months(payment_date, 1)
    loan.payments.append(LoanPayment(
        payment_date=payment_date,
        amount=amount,
        payment_type=payment_type,
        transaction_id=transaction_id,
    ))

    if loan.outstanding_balance <= 0:
        _complete(loan)

    db.session.commit()
    log.info("Loan %s paid %s, outstanding %s", loan.id, amount, loan.outstanding_balance)
    return loan


def _complete(loan: Loan) -> None:
    loan.status = 'Completed'
    agreement = db.session.get(Agreement, loan.agreement_id)
    if agreement is not None and agreement.active_loan_id == loan.id:
        agreement.active_loan_id = None


def update_loan(loan: Loan, changes: dict) -> Loan:
    for key, value in changes.items():
        setattr(loan, key, value)
    if changes.get('status') == 'Completed':
        _complete(loan)
    elif changes.get('status') == 'Defaulted':
        log.warning("Loan %s marked as defaulted", loan.id)
    db.session.commit()
    return loan
