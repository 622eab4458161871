# khandeshwar_backend/security.py
from functools import wraps

from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from .errors import ForbiddenError

ROLE_ADMIN = "Admin"
ROLE_TREASURER = "Treasurer"
ROLE_VIEWER = "Viewer"
ROLES = (ROLE_ADMIN, ROLE_TREASURER, ROLE_VIEWER)

READ_ROLES = ROLES
WRITE_ROLES = (ROLE_ADMIN, ROLE_TREASURER)
ADMIN_ROLES = (ROLE_ADMIN,)


def roles_required(*allowed):
    """Usage: @roles_required(*WRITE_ROLES)"""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            role = get_jwt().get("role")
            if role not in allowed:
                raise ForbiddenError(f"Role '{role}' is not allowed to perform this action")
            return fn(*args, **kwargs)
        return wrapper
    return deco


def current_user_id():
    return get_jwt_identity()


def current_role():
    return get_jwt().get("role")
