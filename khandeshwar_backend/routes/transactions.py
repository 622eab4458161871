from flask import Blueprint, request

from khandeshwar_backend.errors import BadRequestError
from khandeshwar_backend.models import Transaction
from khandeshwar_backend.security import READ_ROLES, WRITE_ROLES, roles_required
from khandeshwar_backend.services import transactions as txn_service
from khandeshwar_backend.utils.csv_io import CsvImportError, parse_import
from khandeshwar_backend.utils.dates import parse_iso_date
from khandeshwar_backend.utils.reports import ReportFilters, filter_transactions

from .common import ok

bp = Blueprint("transactions", __name__)


def live_transactions():
    return (
        Transaction.live()
        .order_by(Transaction.date.asc(), Transaction.created_at.asc())
        .all()
    )


def request_filters() -> ReportFilters:
    try:
        return ReportFilters.from_args(request.args)
    except ValueError as e:
        raise BadRequestError(str(e))


@bp.get("/transactions")
@roles_required(*READ_ROLES)
def list_transactions():
    rows = filter_transactions(live_transactions(), request_filters())
    return ok([t.serialize() for t in rows])


def _uploaded_csv() -> str:
    if "file" in request.files:
        try:
            return request.files["file"].read().decode("utf-8-sig")
        except UnicodeDecodeError:
            raise BadRequestError("Invalid CSV format")
    data = request.get_json(silent=True)
    if isinstance(data, dict) and isinstance(data.get("csv"), str):
        return data["csv"]
    return request.get_data(as_text=True)


@bp.post("/transactions/import")
@roles_required(*WRITE_ROLES)
def import_transactions():
    try:
        result = parse_import(_uploaded_csv())
    except CsvImportError as e:
        raise BadRequestError(str(e))
    if not result.rows:
        raise BadRequestError("No valid transactions found")

    rows = [dict(r, date=parse_iso_date(r["date"])) for r in result.rows]
    created = txn_service.bulk_import(rows)
    return ok({"imported": len(created), "skipped": result.skipped,
               "transactions": [t.serialize() for t in created]}, 201)
