from flask import Blueprint, current_app, request

from khandeshwar_backend.models import RentPenalty
from khandeshwar_backend.schemas import PenaltyCreate, PenaltySettle
from khandeshwar_backend.security import READ_ROLES, WRITE_ROLES, roles_required
from khandeshwar_backend.services import penalties as penalty_service

from .common import json_body, ok

bp = Blueprint("penalties", __name__)


@bp.get("/penalties")
@roles_required(*READ_ROLES)
def list_penalties():
    q = RentPenalty.query
    for arg in ("status", "agreement_id"):
        if request.args.get(arg):
            q = q.filter(getattr(RentPenalty, arg) == request.args[arg])
    return ok([p.serialize() for p in q.order_by(RentPenalty.due_date.desc()).all()])


@bp.get("/penalties/<penalty_id>")
@roles_required(*READ_ROLES)
def get_penalty(penalty_id):
    return ok(penalty_service.get_penalty(penalty_id).serialize())


@bp.post("/penalties")
@roles_required(*WRITE_ROLES)
def create_penalty():
    data = PenaltyCreate.model_validate(json_body())
    return ok(penalty_service.create_penalty(data.model_dump()).serialize(), 201)


@bp.post("/penalties/<penalty_id>/settle")
@roles_required(*WRITE_ROLES)
def settle_penalty(penalty_id):
    penalty = penalty_service.get_penalty(penalty_id)
    data = PenaltySettle.model_validate(json_body())
    return ok(penalty_service.settle_penalty(penalty, data.paid_date).serialize())


@bp.delete("/penalties/<penalty_id>")
@roles_required(*WRITE_ROLES)
def delete_penalty(penalty_id):
    penalty_service.delete_penalty(penalty_service.get_penalty(penalty_id))
    current_app.logger.info("Penalty %s deleted", penalty_id)
    return ok({"id": penalty_id})
