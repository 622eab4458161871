from flask import Blueprint, current_app, request

from khandeshwar_backend.errors import ConflictError, NotFoundError
from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import Tenant
from khandeshwar_backend.schemas import TenantCreate, TenantUpdate
from khandeshwar_backend.security import READ_ROLES, WRITE_ROLES, roles_required

from .common import json_body, ok

bp = Blueprint("tenants", __name__)


def _get_tenant(tenant_id):
    tenant = db.session.get(Tenant, tenant_id)
    if tenant is None:
        raise NotFoundError("Tenant not found")
    return tenant


@bp.get("/tenants")
@roles_required(*READ_ROLES)
def list_tenants():
    q = Tenant.query
    if request.args.get("status"):
        q = q.filter(Tenant.status == request.args["status"])
    return ok([t.serialize() for t in q.order_by(Tenant.name.asc()).all()])


@bp.get("/tenants/<tenant_id>")
@roles_required(*READ_ROLES)
def get_tenant(tenant_id):
    return ok(_get_tenant(tenant_id).serialize())


@bp.post("/tenants")
@roles_required(*WRITE_ROLES)
def create_tenant():
    data = TenantCreate.model_validate(json_body())
    tenant = Tenant(**data.model_dump())
    db.session.add(tenant)
    db.session.commit()
    current_app.logger.info("Tenant %s created", tenant.name)
    return ok(tenant.serialize(), 201)


@bp.route("/tenants/<tenant_id>", methods=["PUT", "PATCH"])
@roles_required(*WRITE_ROLES)
def update_tenant(tenant_id):
    tenant = _get_tenant(tenant_id)
    changes = TenantUpdate.model_validate(json_body()).changes()
    for key, value in changes.items():
        if value is not None or key in ("email", "id_proof"):
            setattr(tenant, key, value)
    db.session.commit()
    return ok(tenant.serialize())


@bp.delete("/tenants/<tenant_id>")
@roles_required(*WRITE_ROLES)
def delete_tenant(tenant_id):
    tenant = _get_tenant(tenant_id)
    if tenant.has_active_agreement:
        raise ConflictError("Cannot delete a tenant with an active agreement")
    if tenant.agreements:
        raise ConflictError("Tenant has agreement history and cannot be deleted")
    db.session.delete(tenant)
    db.session.commit()
    current_app.logger.info("Tenant %s deleted", tenant.name)
    return ok({"id": tenant_id})
