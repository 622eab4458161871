from flask import Blueprint

from khandeshwar_backend.models import Transaction
from khandeshwar_backend.models.transaction import EXPENSE_TYPES
from khandeshwar_backend.schemas import ExpenseCreate
from khandeshwar_backend.security import READ_ROLES, WRITE_ROLES, roles_required
from khandeshwar_backend.services import transactions as txn_service

from .common import idempotency_key, json_body, ok

bp = Blueprint("expenses", __name__)

_NOT_STORED = {"receipt_number", "idempotency_key"}


@bp.get("/expenses")
@roles_required(*READ_ROLES)
def list_expenses():
    rows = (
        Transaction.live()
        .filter(Transaction.type.in_(EXPENSE_TYPES))
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .all()
    )
    return ok([t.serialize() for t in rows])


@bp.get("/expenses/<txn_id>")
@roles_required(*READ_ROLES)
def get_expense(txn_id):
    return ok(txn_service.get_live(txn_id, EXPENSE_TYPES).serialize())


@bp.post("/expenses")
@roles_required(*WRITE_ROLES)
def create_expense():
    body = json_body()
    data = ExpenseCreate.model_validate(body)
    txn = txn_service.record(
        data.model_dump(exclude=_NOT_STORED),
        receipt_number=data.receipt_number,
        idempotency_key=idempotency_key(body),
    )
    return ok(txn.serialize(), 201)


@bp.route("/expenses/<txn_id>", methods=["PUT", "PATCH"])
@roles_required(*WRITE_ROLES)
def update_expense(txn_id):
    txn = txn_service.get_live(txn_id, EXPENSE_TYPES)
    data = ExpenseCreate.model_validate(dict(txn.serialize(), **json_body()))
    fields = data.model_dump(exclude=_NOT_STORED)
    txn.type = fields.pop("type")
    return ok(txn_service.update(txn, fields).serialize())


@bp.delete("/expenses/<txn_id>")
@roles_required(*WRITE_ROLES)
def delete_expense(txn_id):
    txn_service.soft_delete(txn_service.get_live(txn_id, EXPENSE_TYPES))
    return ok({"id": txn_id})
