from decimal import Decimal

from flask import Blueprint

from khandeshwar_backend.models import Agreement, Loan, RentPenalty, Shop
from khandeshwar_backend.security import READ_ROLES, roles_required
from khandeshwar_backend.utils.reports import summarize

from .common import ok
from .transactions import live_transactions

bp = Blueprint("dashboard", __name__)


@bp.get("/dashboard")
@roles_required(*READ_ROLES)
def dashboard():
    txns = live_transactions()
    totals = summarize(txns).to_dict()

    shops = Shop.query.all()
    active_loans = Loan.query.filter_by(status="Active").all()
    pending = RentPenalty.query.filter_by(status="Pending").all()

    return ok({
        "total_donations": totals["total_donations"],
        "total_expenses": totals["total_expenses"],
        "total_rent_income": totals["total_rent_income"],
        "net_balance": totals["net_balance"],
        "transaction_count": totals["transaction_count"],
        "shops": {
            "total": len(shops),
            "occupied": sum(1 for s in shops if s.status == "Occupied"),
            "vacant": sum(1 for s in shops if s.status == "Vacant"),
            "maintenance": sum(1 for s in shops if s.status == "Maintenance"),
        },
        "active_agreements": Agreement.query.filter_by(status="Active").count(),
        "active_loans": len(active_loans),
        "loan_outstanding": float(sum((Decimal(l.outstanding_balance) for l in active_loans), Decimal("0"))),
        "pending_penalties": len(pending),
        "pending_penalty_amount": float(sum((Decimal(p.penalty_amount) for p in pending), Decimal("0"))),
        "recent_transactions": [t.serialize() for t in sorted(
            txns, key=lambda t: (t.date, t.created_at), reverse=True)[:5]],
    })
