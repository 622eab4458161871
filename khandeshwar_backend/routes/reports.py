from datetime import date

from flask import Blueprint, Response, current_app, request

from khandeshwar_backend.errors import BadRequestError
from khandeshwar_backend.security import READ_ROLES, roles_required
from khandeshwar_backend.utils.csv_io import export_csv
from khandeshwar_backend.utils.labels import LANGUAGES
from khandeshwar_backend.utils.pdf import build_report_pdf
from khandeshwar_backend.utils.reports import REPORT_KINDS, filter_transactions, render_html, summarize

from .common import ok
from .transactions import live_transactions, request_filters

bp = Blueprint("reports", __name__)

CSV_FILENAMES = {
    "transactions": "transactions_filtered",
    "summary": "financial_summary_filtered",
    "categoryBreakdown": "category_breakdown_filtered",
    "monthly": "monthly_analysis_filtered",
}


@bp.get("/reports/summary")
@roles_required(*READ_ROLES)
def summary():
    filters = request_filters()
    rows = filter_transactions(live_transactions(), filters)
    return ok(summarize(rows).to_dict(), period=filters.period())


@bp.get("/reports/export")
@roles_required(*READ_ROLES)
def export():
    fmt = request.args.get("format", "csv")
    kind = request.args.get("report", "transactions")
    language = request.args.get("language", "en")
    if kind not in REPORT_KINDS:
        raise BadRequestError(f"Unknown report type: {kind}")
    if language not in LANGUAGES:
        raise BadRequestError(f"Unsupported language: {language}")

    filters = request_filters()
    rows = filter_transactions(live_transactions(), filters)
    stamp = date.today().isoformat()

    if fmt == "csv":
        filename = f"{CSV_FILENAMES[kind]}_{stamp}.csv"
        return Response(
            export_csv(kind, rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    if fmt == "pdf":
        pdf = build_report_pdf(
            kind, rows, filters,
            language=language,
            unicode_font=current_app.config.get("PDF_UNICODE_FONT"),
            temple_name=current_app.config.get("TEMPLE_NAME"),
        )
        filename = f"{kind}_{'marathi' if language == 'mr' else 'english'}_{stamp}.pdf"
        return Response(
            pdf,
            mimetype="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    if fmt == "html":
        return Response(render_html(kind, rows), mimetype="text/html")
    raise BadRequestError(f"Unsupported export format: {fmt}")
