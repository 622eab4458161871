from flask import Blueprint, jsonify, request

from khandeshwar_backend.models import Transaction
from khandeshwar_backend.schemas import RentCollectionRequest, RentPaymentCreate
from khandeshwar_backend.security import READ_ROLES, WRITE_ROLES, roles_required
from khandeshwar_backend.services import collection, receipts
from khandeshwar_backend.services import transactions as txn_service
from khandeshwar_backend.services.agreements import get_agreement

from .common import idempotency_key, json_body, ok

bp = Blueprint("rent", __name__)


@bp.get("/rent/next-receipt-number")
@roles_required(*READ_ROLES)
def next_receipt_number():
    return ok({"receipt_number": receipts.preview(receipts.RENT)})


@bp.post("/rent/collect")
@roles_required(*WRITE_ROLES)
def collect_rent():
    data = RentCollectionRequest.model_validate(json_body())
    result = collection.collect(data.model_dump())
    if result.ok:
        return ok(result.serialize(), 201)
    return jsonify({
        "success": False,
        "error": result.error.message,
        "data": result.serialize(),
    }), result.error.status_code


@bp.get("/rent/payments")
@roles_required(*READ_ROLES)
def list_rent_payments():
    q = Transaction.live().filter(Transaction.type == "RentIncome")
    if request.args.get("agreement_id"):
        q = q.filter(Transaction.agreement_id == request.args["agreement_id"])
    rows = q.order_by(Transaction.date.desc(), Transaction.created_at.desc()).all()
    return ok([t.serialize() for t in rows])


@bp.get("/rent/payments/<txn_id>")
@roles_required(*READ_ROLES)
def get_rent_payment(txn_id):
    return ok(txn_service.get_live(txn_id, "RentIncome").serialize())


@bp.post("/rent/payments")
@roles_required(*WRITE_ROLES)
def create_rent_payment():
    body = json_body()
    data = RentPaymentCreate.model_validate(body)
    fields = data.model_dump(exclude={"receipt_number", "idempotency_key"})
    fields["type"] = "RentIncome"

    if data.agreement_id:
        agreement = get_agreement(data.agreement_id)
        if agreement.tenant:
            fields["tenant_name"] = fields.get("tenant_name") or agreement.tenant.name
            fields["tenant_contact"] = fields.get("tenant_contact") or agreement.tenant.phone
        if agreement.shop:
            fields["shop_number"] = fields.get("shop_number") or agreement.shop.shop_number
    if not fields.get("description"):
        fields["description"] = f"Monthly rent - Shop {fields.get('shop_number') or ''}".rstrip()

    txn = txn_service.record(
        fields,
        receipt_kind=receipts.RENT,
        receipt_number=data.receipt_number,
        idempotency_key=idempotency_key(body),
    )
    return ok(txn.serialize(), 201)


@bp.delete("/rent/payments/<txn_id>")
@roles_required(*WRITE_ROLES)
def delete_rent_payment(txn_id):
    txn_service.soft_delete(txn_service.get_live(txn_id, "RentIncome"))
    return ok({"id": txn_id})
