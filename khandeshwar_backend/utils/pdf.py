import logging
import math
from datetime import date

from fpdf import FPDF

from .labels import REPORT_TITLES, label
from .reports import amount_of, date_str, format_amount, summarize, value_of

log = logging.getLogger(__name__)

CURRENCY = "Rs. "
HEADER_COLOR = (66, 139, 202)
BAND_COLOR = (245, 245, 245)
TABLE_WIDTH = 170
PT_TO_MM = 0.3528

COLUMN_WIDTHS = {
    "transactions": [15, 25, 30, 30, 45, 25],
    "summary": [120, 50],
    "categoryBreakdown": [80, 50, 40],
    "monthly": [50, 30, 30, 30, 30],
}


def _money(value) -> str:
    return CURRENCY + format_amount(value)


class ReportPDF(FPDF):
    """A4 report with the temple letterhead and hand-drawn tables."""

    def __init__(self, language="en", unicode_font=None, temple_name=None):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.report_language = language
        self.temple_name = temple_name
        self.unicode_text = bool(unicode_font)
        if unicode_font:
            self.add_font("report", "", unicode_font)
            self.add_font("report", "B", unicode_font)
            self.report_font = "report"
        else:
            self.report_font = "helvetica"
        self.set_auto_page_break(False)
        self.add_page()

    def t(self, key):
        return label(key, self.report_language)

    def clean(self, s) -> str:
        s = "" if s is None else str(s)
        if self.unicode_text:
            return s
        # core fonts are latin-1 only
        return s.encode("latin-1", "replace").decode("latin-1")

    def use_font(self, size, bold=False):
        self.set_font(self.report_font, "B" if bold else "", size)

    def centered(self, y, s):
        s = self.clean(s)
        self.text((self.w - self.get_string_width(s)) / 2, y, s)

    def letterhead(self) -> float:
        y = 20
        self.use_font(16, bold=True)
        title = self.t("header.title")
        if self.report_language == "en" and self.temple_name:
            title = self.temple_name
        self.centered(y, title)
        y += 10
        self.use_font(12, bold=True)
        self.centered(y, self.t("header.subtitle"))
        return y + 20

    def fit(self, s, width) -> str:
        s = self.clean(s)
        text_width = self.get_string_width(s)
        if text_width <= width:
            return s
        keep = max(0, math.floor(len(s) * width / text_width) - 3)
        while keep > 0 and self.get_string_width(s[:keep] + "...") > width:
            keep -= 1
        return s[:keep] + "..."

    def draw_table(self, start_y, headers, rows, column_widths=None, table_width=TABLE_WIDTH,
                   font_size=9, cell_padding=3, header_color=HEADER_COLOR) -> float:
        """
        Draw a banded table centred on the page and return the y below it.

        Rows that run past the bottom margin continue on a new page. Cells
        too wide for their column are cut short with ``...``; amounts in the
        last column are right aligned.
        """
        widths = column_widths or [table_width / len(headers)] * len(headers)
        start_x = (self.w - table_width) / 2
        row_h = font_size * PT_TO_MM + cell_padding * 2
        y = start_y

        self.use_font(font_size, bold=True)
        self.set_draw_color(0, 0, 0)
        self.set_fill_color(*header_color)
        self.set_text_color(255, 255, 255)
        self.rect(start_x, y, table_width, row_h, style="DF")
        x = start_x
        for header, w in zip(headers, widths):
            self.text(x + cell_padding, y + row_h - cell_padding, self.fit(header, w - cell_padding * 2))
            x += w
        y += row_h

        self.use_font(font_size)
        self.set_text_color(0, 0, 0)
        for i, row in enumerate(rows):
            if i % 2 == 0:
                self.set_fill_color(*BAND_COLOR)
                self.rect(start_x, y, table_width, row_h, style="F")
            x = start_x
            for col, (cell, w) in enumerate(zip(row, widths)):
                self.rect(x, y, w, row_h)
                s = self.fit(cell, w - cell_padding * 2)
                if col == len(headers) - 1 and str(cell).startswith(CURRENCY):
                    self.text(x + w - cell_padding - self.get_string_width(s), y + row_h - cell_padding, s)
                else:
                    self.text(x + cell_padding, y + row_h - cell_padding, s)
                x += w
            y += row_h

            if y > self.h - 30 and i < len(rows) - 1:
                self.add_page()
                y = 20

        return y + 10


def _type_label(pdf, txn_type):
    if txn_type == "RentIncome":
        return pdf.t("reports.rentIncome")
    if txn_type == "Donation":
        return pdf.t("reports.donations")
    return pdf.t("reports.expenses")


def _transactions_body(pdf, y, txns):
    headers = [pdf.t(k) for k in ("reports.srNo", "common.date", "common.type",
                                  "donations.category", "common.description", "common.amount")]
    rows = []
    for i, t in enumerate(txns, start=1):
        description = value_of(t, "description") or ""
        if len(description) > 20:
            description = description[:20] + "..."
        rows.append([str(i), date_str(t), _type_label(pdf, value_of(t, "type")),
                     value_of(t, "category"), description, _money(amount_of(t))])
    y = pdf.draw_table(y, headers, rows, COLUMN_WIDTHS["transactions"])
    total = sum((amount_of(t) for t in txns), 0)
    pdf.use_font(10, bold=True)
    pdf.text(20, y + 5, pdf.clean(f"{pdf.t('reports.totalAmount')}: {_money(total)}"))


def _summary_body(pdf, y, txns):
    s = summarize(txns)
    rows = [
        [pdf.t("dashboard.totalDonations"), _money(s.total_donations)],
        [pdf.t("dashboard.totalRentIncome"), _money(s.total_rent_income)],
        [pdf.t("dashboard.totalExpenses"), _money(s.total_expenses)],
        [pdf.t("dashboard.netBalance"), _money(s.net_balance)],
    ]
    pdf.draw_table(y, [pdf.t("reports.overview"), pdf.t("common.amount")], rows,
                   COLUMN_WIDTHS["summary"], font_size=12, cell_padding=5)


def _category_body(pdf, y, txns):
    s = summarize(txns)
    rows = [[c, pdf.t("reports.donations"), _money(a)] for c, a in s.category_income.items()]
    rows += [[c, pdf.t("reports.expenses"), _money(a)] for c, a in s.category_expenses.items()]
    headers = [pdf.t("donations.category"), pdf.t("common.type"), pdf.t("common.amount")]
    pdf.draw_table(y, headers, rows, COLUMN_WIDTHS["categoryBreakdown"], font_size=11, cell_padding=4)


def _monthly_body(pdf, y, txns):
    s = summarize(txns)
    rows = [
        [m.label if len(m.label) <= 15 else m.label[:15] + "...",
         _money(m.donations), _money(m.rent_income), _money(m.expenses), _money(m.net)]
        for m in s.monthly
    ]
    headers = [pdf.t("reports.month"), pdf.t("reports.donations"), pdf.t("reports.rentIncome"),
               pdf.t("reports.expenses"), pdf.t("reports.net")]
    pdf.draw_table(y, headers, rows, COLUMN_WIDTHS["monthly"], font_size=10, cell_padding=3)


_BODIES = {
    "transactions": _transactions_body,
    "summary": _summary_body,
    "categoryBreakdown": _category_body,
    "monthly": _monthly_body,
}


def build_report_pdf(kind, txns, filters=None, language="en", unicode_font=None,
                     temple_name=None, generated_on=None) -> bytes:
    if kind not in _BODIES:
        raise ValueError(f"Unknown report type: {kind}")
    if language == "mr" and not unicode_font:
        log.warning("Marathi PDF requested but PDF_UNICODE_FONT is not set; using English labels")
        language = "en"

    pdf = ReportPDF(language=language, unicode_font=unicode_font, temple_name=temple_name)
    y = pdf.letterhead()

    pdf.use_font(14, bold=True)
    pdf.centered(y, pdf.t(REPORT_TITLES[kind]))
    y += 15

    pdf.use_font(10)
    generated_on = generated_on or date.today()
    pdf.text(20, y, pdf.clean(f"{pdf.t('reports.generatedOn')}: {generated_on.strftime('%d/%m/%Y')}"))
    y += 10

    if filters is not None and filters.active:
        pdf.text(20, y, pdf.clean(f"{pdf.t('reports.appliedFilters')}:"))
        y += 5
        for line in filters.describe():
            pdf.text(25, y, pdf.clean(f"- {line}"))
            y += 5
        y += 5

    period = filters.period() if filters is not None else None
    if period:
        pdf.text(20, y, pdf.clean(f"{pdf.t('reports.period')}: {period}"))
        y += 15
    else:
        y += 10

    _BODIES[kind](pdf, y, list(txns))
    return bytes(pdf.output())
