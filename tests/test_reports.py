from datetime import date
from decimal import Decimal

import pytest

from khandeshwar_backend.utils.pdf import ReportPDF, build_report_pdf
from khandeshwar_backend.utils.reports import (
    ReportFilters,
    filter_transactions,
    format_amount,
    render_html,
    report_rows,
    summarize,
)

TXNS = [
    {"date": "2025-02-03", "type": "Donation", "category": "Annadan", "sub_category": None,
     "description": "Annadan seva", "amount": 1000.0},
    {"date": "2025-01-15", "type": "Donation", "category": "Vargani", "sub_category": None,
     "description": "Vargani - Patil family", "amount": 1500.0},
    {"date": "2025-01-20", "type": "Expense", "category": "Repairs", "sub_category": "roof",
     "description": "Roof repair, east side", "amount": 700.0},
    {"date": "2025-02-01", "type": "RentIncome", "category": "Bhade Jama", "sub_category": "bhade1Jama",
     "description": "Monthly rent - Shop A-010", "amount": 6000.0},
    {"date": "2025-02-10", "type": "Utilities", "category": "Electricity", "sub_category": None,
     "description": "Bill", "amount": 250.5},
]


def test_summary_totals():
    s = summarize(TXNS)
    assert s.total_donations == Decimal("2500")
    assert s.total_rent_income == Decimal("6000")
    assert s.total_expenses == Decimal("950.5")
    assert s.net_balance == Decimal("7549.5")
    assert s.category_income == {"Annadan": Decimal("1000"), "Vargani": Decimal("1500")}
    assert "Bhade Jama" not in s.category_income
    assert [m.label for m in s.monthly] == ["January 2025", "February 2025"]
    assert s.monthly[1].net == Decimal("6749.5")


def test_filters():
    assert len(filter_transactions(TXNS, ReportFilters(type="expenses"))) == 2
    assert len(filter_transactions(TXNS, ReportFilters(date_filter="month", month=1, year=2025))) == 2
    rng = ReportFilters(date_filter="range", from_date="2025-01-16", to_date="2025-02-02")
    assert [t["category"] for t in filter_transactions(TXNS, rng)] == ["Repairs", "Bhade Jama"]
    assert len(filter_transactions(TXNS, ReportFilters(sub_category="roof"))) == 1


def test_filters_from_args():
    f = ReportFilters.from_args({"type": "donations", "category": "all", "date_filter": "month",
                                 "month": "1", "year": "2025"})
    assert f.type == "donations"
    assert f.category is None
    assert f.period() == "January 2025"
    assert f.describe() == ["Type: donations", "Month: January 2025"]
    assert ReportFilters().period() is None
    with pytest.raises(ValueError):
        ReportFilters.from_args({"date_filter": "week"})
    with pytest.raises(ValueError):
        ReportFilters.from_args({"from_date": "01-01-2025"})


def test_report_rows():
    headers, rows = report_rows("summary", TXNS)
    assert headers == ["Metric", "Amount"]
    assert rows[0] == ["Total Donations", 2500]
    assert rows[3] == ["Net Balance", 7549.5]

    headers, rows = report_rows("monthly", TXNS)
    assert headers == ["Month", "Donations", "RentIncome", "Expenses", "Net"]
    assert rows[0] == ["January 2025", 1500, 0, 700, 800]

    headers, rows = report_rows("categoryBreakdown", TXNS)
    assert ["Repairs", "Expenses", 700] in rows
    with pytest.raises(ValueError):
        report_rows("weekly", TXNS)


def test_format_amount():
    assert format_amount(1234567) == "1,234,567"
    assert format_amount(Decimal("250.5")) == "250.50"


def test_html_is_escaped():
    html = render_html("transactions", [dict(TXNS[0], description="<b>seva</b>")])
    assert "&lt;b&gt;seva&lt;/b&gt;" in html
    assert html.startswith('<table class="report report-transactions">')


@pytest.mark.parametrize("kind", ["transactions", "summary", "categoryBreakdown", "monthly"])
def test_pdf_for_each_report(kind):
    filters = ReportFilters(type="all", date_filter="month", month=2, year=2025)
    pdf = build_report_pdf(kind, TXNS, filters, generated_on=date(2025, 3, 1))
    assert pdf.startswith(b"%PDF")


def test_marathi_pdf_without_font_falls_back():
    assert build_report_pdf("summary", TXNS, language="mr").startswith(b"%PDF")


def test_long_tables_continue_on_new_pages():
    pdf = ReportPDF()
    rows = [[str(i), "x" * 80] for i in range(60)]
    pdf.draw_table(50, ["No", "Text"], rows, [20, 150])
    assert pdf.page >= 2
    cut = pdf.fit("x" * 200, 20)
    assert cut.endswith("...")
    assert pdf.get_string_width(cut) <= 20


def test_unknown_pdf_report():
    with pytest.raises(ValueError):
        build_report_pdf("weekly", TXNS)


def _seed(client, headers):
    client.post("/api/donations", json={
        "date": "2025-01-05", "category": "Annadan", "description": "Seva, morning",
        "donor_name": "A", "amount": 1000,
    }, headers=headers["treasurer"])
    client.post("/api/expenses", json={
        "date": "2025-01-09", "category": "Repairs", "description": "Door", "amount": 400, "payee_name": "B",
    }, headers=headers["treasurer"])


def test_summary_endpoint(client, headers):
    _seed(client, headers)
    resp = client.get("/api/reports/summary", query_string={"date_filter": "month", "month": 1, "year": 2025},
                      headers=headers["viewer"])
    body = resp.get_json()
    assert body["data"]["net_balance"] == 600
    assert body["period"] == "January 2025"


def test_csv_export(client, headers):
    _seed(client, headers)
    resp = client.get("/api/reports/export", query_string={"format": "csv", "report": "transactions"},
                      headers=headers["viewer"])
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "transactions_filtered_" in resp.headers["Content-Disposition"]
    lines = resp.get_data(as_text=True).splitlines()
    assert lines[0] == "Date,Type,Category,SubCategory,Description,Amount"
    assert '2025-01-05,Donation,Annadan,,"Seva, morning",1000' in lines


def test_pdf_and_html_export(client, headers):
    _seed(client, headers)
    resp = client.get("/api/reports/export", query_string={"format": "pdf", "report": "monthly", "language": "mr"},
                      headers=headers["viewer"])
    assert resp.status_code == 200
    assert resp.get_data().startswith(b"%PDF")
    assert "monthly_marathi_" in resp.headers["Content-Disposition"]

    resp = client.get("/api/reports/export", query_string={"format": "html", "report": "summary"},
                      headers=headers["viewer"])
    assert "<td>Net Balance</td>" in resp.get_data(as_text=True)


def test_export_rejects_unknown_options(client, headers):
    for args in ({"report": "weekly"}, {"format": "xlsx"}, {"language": "fr"}):
        resp = client.get("/api/reports/export", query_string=args, headers=headers["viewer"])
        assert resp.status_code == 400


def test_dashboard(client, headers, make_agreement):
    make_agreement(security_deposit=1000)
    _seed(client, headers)
    data = client.get("/api/dashboard", headers=headers["viewer"]).get_json()["data"]
    assert data["total_rent_income"] == 1000
    assert data["shops"] == {"total": 1, "occupied": 1, "vacant": 0, "maintenance": 0}
    assert data["active_agreements"] == 1
    assert len(data["recent_transactions"]) == 3
