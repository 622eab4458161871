from flask import Blueprint

from khandeshwar_backend.models import Transaction
from khandeshwar_backend.schemas import DonationCreate
from khandeshwar_backend.security import READ_ROLES, WRITE_ROLES, roles_required
from khandeshwar_backend.services import receipts
from khandeshwar_backend.services import transactions as txn_service

from .common import idempotency_key, json_body, ok

bp = Blueprint("donations", __name__)

_NOT_STORED = {"receipt_number", "idempotency_key"}


@bp.get("/donations")
@roles_required(*READ_ROLES)
def list_donations():
    rows = (
        Transaction.live()
        .filter(Transaction.type == "Donation")
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .all()
    )
    return ok([t.serialize() for t in rows])


@bp.get("/donations/next-receipt-number")
@roles_required(*READ_ROLES)
def next_receipt_number():
    return ok({"receipt_number": receipts.preview(receipts.DONATION)})


@bp.get("/donations/<txn_id>")
@roles_required(*READ_ROLES)
def get_donation(txn_id):
    return ok(txn_service.get_live(txn_id, "Donation").serialize())


@bp.post("/donations")
@roles_required(*WRITE_ROLES)
def create_donation():
    body = json_body()
    data = DonationCreate.model_validate(body)
    fields = data.model_dump(exclude=_NOT_STORED)
    fields["type"] = "Donation"
    txn = txn_service.record(
        fields,
        receipt_kind=receipts.DONATION,
        receipt_number=data.receipt_number,
        idempotency_key=idempotency_key(body),
    )
    return ok(txn.serialize(), 201)


@bp.route("/donations/<txn_id>", methods=["PUT", "PATCH"])
@roles_required(*WRITE_ROLES)
def update_donation(txn_id):
    txn = txn_service.get_live(txn_id, "Donation")
    # re-validate the whole record so Vargani totals stay derived
    merged = dict(txn.serialize(), **json_body())
    data = DonationCreate.model_validate(merged)
    txn = txn_service.update(txn, data.model_dump(exclude=_NOT_STORED))
    return ok(txn.serialize())


@bp.delete("/donations/<txn_id>")
@roles_required(*WRITE_ROLES)
def delete_donation(txn_id):
    txn_service.soft_delete(txn_service.get_live(txn_id, "Donation"))
    return ok({"id": txn_id})
