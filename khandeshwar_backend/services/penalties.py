import logging
from decimal import ROUND_HALF_UP, Decimal

from khandeshwar_backend.errors import ConflictError, NotFoundError
from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import Agreement, RentPenalty
from khandeshwar_backend.utils.dates import today

log = logging.getLogger(__name__)


def calculate_penalty(rent_amount, penalty_rate) -> Decimal:
    """``rent_amount * penalty_rate / 100`` to the paisa."""
    amount = Decimal(str(rent_amount)) * Decimal(str(penalty_rate)) / 100
    return amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def get_penalty(penalty_id: str) -> RentPenalty:
    penalty = db.session.get(RentPenalty, penalty_id)
    if penalty is None:
        raise NotFoundError("Penalty not found")
    return penalty


def create_penalty(data: dict) -> RentPenalty:
    agreement = db.session.get(Agreement, data['agreement_id'])
    if agreement is None:
        raise NotFoundError("Agreement not found")

    penalty = RentPenalty(
        agreement_id=agreement.id,
        tenant_name=agreement.tenant.name if agreement.tenant else None,
        rent_amount=data['rent_amount'],
        due_date=data['due_date'],
        penalty_rate=data['penalty_rate'],
        penalty_amount=calculate_penalty(data['rent_amount'], data['penalty_rate']),
        status='Pending',
        penalty_paid=False,
    )
    db.session.add(penalty)
    agreement.pending_penalties.append(penalty)
    db.session.commit()
    log.info("Penalty %s of %s raised on agreement %s", penalty.id, penalty.penalty_amount, agreement.id)
    return penalty


def settle_penalty(penalty: RentPenalty, paid_date=None) -> RentPenalty:
    if penalty.status == 'Paid':
        raise ConflictError("Penalty is already paid")

    penalty.status = 'Paid'
    penalty.penalty_paid = True
    penalty.penalty_paid_date = paid_date or today()

    agreement = db.session.get(Agreement, penalty.agreement_id)
    if agreement is not None and penalty in agreement.pending_penalties:
        agreement.pending_penalties.remove(penalty)

    db.session.commit()
    log.info("Penalty %s settled", penalty.id)
    return penalty


def delete_penalty(penalty: RentPenalty) -> None:
    if penalty.status == 'Paid':
        raise ConflictError("Paid penalties cannot be deleted")
    agreement = db.session.get(Agreement, penalty.agreement_id)
    if agreement is not None and penalty in agreement.pending_penalties:
        agreement.pending_penalties.remove(penalty)
    db.session.delete(penalty)
    db.session.commit()
