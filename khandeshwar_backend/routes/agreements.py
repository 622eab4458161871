from flask import Blueprint, request

from khandeshwar_backend.models import Agreement
from khandeshwar_backend.schemas import AgreementCreate, AgreementUpdate
from khandeshwar_backend.security import READ_ROLES, WRITE_ROLES, roles_required
from khandeshwar_backend.services import agreements as agreement_service

from .common import json_body, ok

bp = Blueprint("agreements", __name__)


@bp.get("/agreements")
@roles_required(*READ_ROLES)
def list_agreements():
    q = Agreement.query
    for arg in ("status", "shop_id", "tenant_id"):
        if request.args.get(arg):
            q = q.filter(getattr(Agreement, arg) == request.args[arg])
    rows = q.order_by(Agreement.agreement_date.desc()).all()
    return ok([a.serialize() for a in rows])


@bp.get("/agreements/<agreement_id>")
@roles_required(*READ_ROLES)
def get_agreement(agreement_id):
    return ok(agreement_service.get_agreement(agreement_id).serialize())


@bp.post("/agreements")
@roles_required(*WRITE_ROLES)
def create_agreement():
    data = AgreementCreate.model_validate(json_body())
    agreement, deposit_txn = agreement_service.create_agreement(data.model_dump())
    return ok(
        agreement.serialize(),
        201,
        deposit_transaction=deposit_txn.serialize() if deposit_txn else None,
    )


@bp.route("/agreements/<agreement_id>", methods=["PUT", "PATCH"])
@roles_required(*WRITE_ROLES)
def update_agreement(agreement_id):
    agreement = agreement_service.get_agreement(agreement_id)
    changes = {k: v for k, v in AgreementUpdate.model_validate(json_body()).changes().items()
               if v is not None or k == "last_payment_date"}
    agreement = agreement_service.update_agreement(agreement, changes)
    return ok(agreement.serialize())
