# routes/auth.py
from datetime import datetime

from flask import Blueprint, current_app
from flask_jwt_extended import create_access_token, create_refresh_token, get_jwt_identity, jwt_required
from sqlalchemy import func

from khandeshwar_backend.errors import NotFoundError, UnauthorizedError
from khandeshwar_backend.extensions import db, limiter
from khandeshwar_backend.models import User
from khandeshwar_backend.schemas import LoginRequest
from khandeshwar_backend.security import current_user_id

from .common import json_body, ok

bp = Blueprint("auth", __name__)


def _login_limit():
    return current_app.config["LOGIN_RATE_LIMIT"]


def _tokens(user):
    access = create_access_token(
        identity=user.id,
        additional_claims={"role": user.role, "username": user.username},
    )
    return {"token": access, "refresh_token": create_refresh_token(identity=user.id)}


@bp.post("/auth/login")
# only failed attempts count against the limit
@limiter.limit(_login_limit, deduct_when=lambda response: response.status_code != 200)
def login():
    data = LoginRequest.model_validate(json_body())
    if data.email:
        user = User.query.filter(func.lower(User.email) == data.email.lower()).first()
    elif data.username:
        user = User.query.filter_by(username=data.username).first()
    else:
        raise UnauthorizedError("Invalid email or password")

    if not user or not user.check_password(data.password):
        current_app.logger.info("Failed login for %s", data.email or data.username)
        raise UnauthorizedError("Invalid email or password")
    if not user.is_active:
        raise UnauthorizedError("Account is inactive")

    user.last_login = datetime.utcnow()
    db.session.commit()

    current_app.logger.info("User %s logged in", user.username)
    return ok(dict(_tokens(user), user=user.serialize()))


@bp.post("/auth/refresh")
@jwt_required(refresh=True)
def refresh():
    user = db.session.get(User, get_jwt_identity())
    if user is None or not user.is_active:
        raise UnauthorizedError("Account is inactive")
    return ok(dict(_tokens(user), user=user.serialize()))


@bp.get("/auth/me")
@jwt_required()
def me():
    user = db.session.get(User, current_user_id())
    if user is None:
        raise NotFoundError("User not found")
    return ok(user.serialize())


@bp.post("/auth/logout")
@jwt_required()
def logout():
    # tokens are stateless; the client drops its stored copy
    return ok({"logged_out": True})
