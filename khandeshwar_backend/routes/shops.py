from flask import Blueprint, current_app, request
from sqlalchemy.exc import IntegrityError

from khandeshwar_backend.errors import ConflictError, NotFoundError
from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import Agreement, Shop
from khandeshwar_backend.schemas import ShopCreate, ShopUpdate
from khandeshwar_backend.security import READ_ROLES, WRITE_ROLES, roles_required

from .common import json_body, ok

bp = Blueprint("shops", __name__)


def _get_shop(shop_id):
    shop = db.session.get(Shop, shop_id)
    if shop is None:
        raise NotFoundError("Shop not found")
    return shop


def _commit_unique(shop_number):
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Shop number {shop_number} already exists")


@bp.get("/shops")
@roles_required(*READ_ROLES)
def list_shops():
    q = Shop.query
    if request.args.get("status"):
        q = q.filter(Shop.status == request.args["status"])
    return ok([s.serialize() for s in q.order_by(Shop.shop_number.asc()).all()])


@bp.get("/shops/<shop_id>")
@roles_required(*READ_ROLES)
def get_shop(shop_id):
    return ok(_get_shop(shop_id).serialize())


@bp.post("/shops")
@roles_required(*WRITE_ROLES)
def create_shop():
    data = ShopCreate.model_validate(json_body())
    shop = Shop(**data.model_dump())
    db.session.add(shop)
    _commit_unique(data.shop_number)
    current_app.logger.info("Shop %s created", shop.shop_number)
    return ok(shop.serialize(), 201)


@bp.route("/shops/<shop_id>", methods=["PUT", "PATCH"])
@roles_required(*WRITE_ROLES)
def update_shop(shop_id):
    shop = _get_shop(shop_id)
    changes = ShopUpdate.model_validate(json_body()).changes()

    # occupancy follows the agreement lifecycle
    status = changes.get("status")
    if status and status != shop.status and (status == "Occupied" or shop.status == "Occupied"):
        raise ConflictError("Shop occupancy is managed through agreements")

    for key, value in changes.items():
        if value is not None or key == "description":
            setattr(shop, key, value)
    _commit_unique(shop.shop_number)
    return ok(shop.serialize())


@bp.delete("/shops/<shop_id>")
@roles_required(*WRITE_ROLES)
def delete_shop(shop_id):
    shop = _get_shop(shop_id)
    if shop.status == "Occupied":
        raise ConflictError("Cannot delete an occupied shop")
    if Agreement.query.filter_by(shop_id=shop.id).first():
        raise ConflictError("Shop has agreement history and cannot be deleted")
    db.session.delete(shop)
    db.session.commit()
    current_app.logger.info("Shop %s deleted", shop.shop_number)
    return ok({"id": shop_id})
