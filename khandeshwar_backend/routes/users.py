from flask import Blueprint, current_app, request
from sqlalchemy.exc import IntegrityError

from khandeshwar_backend.errors import BadRequestError, ConflictError, NotFoundError
from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import User
from khandeshwar_backend.schemas import UserCreate, UserUpdate
from khandeshwar_backend.security import ADMIN_ROLES, current_user_id, roles_required

from .common import json_body, ok

bp = Blueprint("users", __name__)


def _get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _commit_unique():
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username or email already exists")


@bp.get("/users")
@roles_required(*ADMIN_ROLES)
def list_users():
    q = User.query
    if request.args.get("role"):
        q = q.filter(User.role == request.args["role"])
    if request.args.get("status"):
        q = q.filter(User.status == request.args["status"])
    return ok([u.serialize() for u in q.order_by(User.username.asc()).all()])


@bp.get("/users/<user_id>")
@roles_required(*ADMIN_ROLES)
def get_user(user_id):
    return ok(_get_user(user_id).serialize())


@bp.post("/users")
@roles_required(*ADMIN_ROLES)
def create_user():
    data = UserCreate.model_validate(json_body())
    user = User(
        username=data.username,
        email=data.email.lower(),
        role=data.role,
        status=data.status,
    )
    user.set_password(data.password)
    db.session.add(user)
    _commit_unique()
    current_app.logger.info("User %s created with role %s", user.username, user.role)
    return ok(user.serialize(), 201)


@bp.route("/users/<user_id>", methods=["PUT", "PATCH"])
@roles_required(*ADMIN_ROLES)
def update_user(user_id):
    user = _get_user(user_id)
    changes = UserUpdate.model_validate(json_body()).changes()

    if user.id == current_user_id() and changes.get("status") == "Inactive":
        raise BadRequestError("You cannot deactivate your own account")

    password = changes.pop("password", None)
    if password:
        user.set_password(password)
    if changes.get("email"):
        changes["email"] = changes["email"].lower()
    for key, value in changes.items():
        if value is not None:
            setattr(user, key, value)
    _commit_unique()
    return ok(user.serialize())


@bp.delete("/users/<user_id>")
@roles_required(*ADMIN_ROLES)
def delete_user(user_id):
    """Deactivate the user; user rows are never removed."""
    user = _get_user(user_id)
    if user.id == current_user_id():
        raise BadRequestError("You cannot deactivate your own account")
    user.status = "Inactive"
    db.session.commit()
    current_app.logger.info("User %s deactivated", user.username)
    return ok(user.serialize())
