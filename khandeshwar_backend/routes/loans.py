from flask import Blueprint, request

from khandeshwar_backend.models import Loan
from khandeshwar_backend.schemas import LoanCreate, LoanPaymentRequest, LoanUpdate
from khandeshwar_backend.security import READ_ROLES, WRITE_ROLES, roles_required
from khandeshwar_backend.services import loans as loan_service

from .common import json_body, ok

bp = Blueprint("loans", __name__)


@bp.get("/loans")
@roles_required(*READ_ROLES)
def list_loans():
    q = Loan.query
    for arg in ("status", "agreement_id", "tenant_id"):
        if request.args.get(arg):
            q = q.filter(getattr(Loan, arg) == request.args[arg])
    return ok([l.serialize() for l in q.order_by(Loan.disbursed_date.desc()).all()])


@bp.get("/loans/<loan_id>")
@roles_required(*READ_ROLES)
def get_loan(loan_id):
    return ok(loan_service.get_loan(loan_id).serialize(include_payments=True))


@bp.post("/loans")
@roles_required(*WRITE_ROLES)
def create_loan():
    data = LoanCreate.model_validate(json_body())
    loan = loan_service.create_loan(data.model_dump())
    return ok(loan.serialize(), 201)


@bp.route("/loans/<loan_id>", methods=["PUT", "PATCH"])
@roles_required(*WRITE_ROLES)
def update_loan(loan_id):
    loan = loan_service.get_loan(loan_id)
    changes = {k: v for k, v in LoanUpdate.model_validate(json_body()).changes().items() if v is not None}
    return ok(loan_service.update_loan(loan, changes).serialize())


@bp.post("/loans/<loan_id>/pay")
@roles_required(*WRITE_ROLES)
def pay_loan(loan_id):
    loan = loan_service.get_loan(loan_id)
    data = LoanPaymentRequest.model_validate(json_body())
    loan = loan_service.apply_payment(loan, data.amount, data.payment_date)
    return ok(loan.serialize(include_payments=True))
