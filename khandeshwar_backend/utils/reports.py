"""
Report derivation over a list of transactions.

Works on model instances or plain dicts (as cached by the client), so the
same code backs ``/api/reports/*`` and ``DataStore`` reports. Everything
here is pure: no database, no Flask.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from html import escape
from typing import Optional

from .dates import month_label, parse_iso_date

EXPENSE_TYPES = ("Expense", "Utilities", "Salary")
TYPE_GROUPS = {
    "all": None,
    "donations": ("Donation",),
    "expenses": EXPENSE_TYPES,
    "rentIncome": ("RentIncome",),
}
REPORT_KINDS = ("transactions", "summary", "categoryBreakdown", "monthly")


def value_of(txn, name, default=None):
    if isinstance(txn, dict):
        return txn.get(name, default)
    return getattr(txn, name, default)


def amount_of(txn) -> Decimal:
    v = value_of(txn, "amount")
    return Decimal(str(v)) if v is not None else Decimal("0")


def date_str(txn) -> str:
    d = value_of(txn, "date")
    return d.isoformat() if isinstance(d, date) else str(d or "")


@dataclass
class ReportFilters:
    type: str = "all"
    category: Optional[str] = None
    sub_category: Optional[str] = None
    date_filter: str = "all"  # all | month | range
    month: Optional[int] = None
    year: Optional[int] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "ReportFilters":
        """Build from query args; ``"all"`` and blanks mean "no filter"."""
        def opt(name):
            v = (args.get(name) or "").strip()
            return None if v in ("", "all") else v

        def opt_int(name):
            v = opt(name)
            try:
                return int(v) if v is not None else None
            except ValueError:
                return None

        group = opt("type") or "all"
        if group not in TYPE_GROUPS:
            raise ValueError(f"Unknown transaction type filter: {group}")
        date_filter = opt("date_filter") or "all"
        if date_filter not in ("all", "month", "range"):
            raise ValueError(f"Unknown date filter: {date_filter}")
        from_date, to_date = opt("from_date"), opt("to_date")
        for d in (from_date, to_date):
            if d is not None:
                parse_iso_date(d)
        return cls(
            type=group,
            category=opt("category"),
            sub_category=opt("sub_category"),
            date_filter=date_filter,
            month=opt_int("month"),
            year=opt_int("year"),
            from_date=from_date,
            to_date=to_date,
        )

    @property
    def month_active(self):
        return self.date_filter == "month" and bool(self.month) and bool(self.year)

    @property
    def active(self):
        return (
            self.type != "all"
            or self.category is not None
            or self.sub_category is not None
            or self.date_filter != "all"
        )

    def period(self) -> Optional[str]:
        """``January 2025`` for a month filter, ``from to to`` for ranges, else None."""
        if self.month_active:
            return month_label(date(self.year, self.month, 1))
        if self.from_date or self.to_date or self.date_filter != "all":
            return f"{self.from_date or 'Start'} to {self.to_date or 'End'}"
        return None

    def describe(self) -> list:
        lines = []
        if self.type != "all":
            lines.append(f"Type: {self.type}")
        if self.category:
            lines.append(f"Category: {self.category}")
        if self.sub_category:
            lines.append(f"Sub-Category: {self.sub_category}")
        if self.month_active:
            lines.append(f"Month: {self.period()}")
        if self.date_filter == "range" and (self.from_date or self.to_date):
            lines.append(f"Date Range: {self.from_date or 'Start'} to {self.to_date or 'End'}")
        return lines


def filter_transactions(txns, filters: Optional[ReportFilters] = None) -> list:
    filters = filters or ReportFilters()
    types = TYPE_GROUPS.get(filters.type)
    out = []
    for t in txns:
        if types is not None and value_of(t, "type") not in types:
            continue
        if filters.category is not None and value_of(t, "category") != filters.category:
            continue
        if filters.sub_category is not None and value_of(t, "sub_category") != filters.sub_category:
            continue
        d = date_str(t)
        if filters.month_active:
            if d[:7] != f"{filters.year:04d}-{filters.month:02d}":
                continue
        elif filters.date_filter in ("range", "all"):
            # ISO dates compare correctly as strings
            if filters.from_date and d < filters.from_date:
                continue
            if filters.to_date and d > filters.to_date:
                continue
        out.append(t)
    return out


@dataclass
class MonthTotals:
    label: str
    donations: Decimal = Decimal("0")
    rent_income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")

    @property
    def net(self):
        return self.donations + self.rent_income - self.expenses


@dataclass
class Summary:
    total_donations: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    total_rent_income: Decimal = Decimal("0")
    category_income: dict = field(default_factory=dict)
    category_expenses: dict = field(default_factory=dict)
    monthly: list = field(default_factory=list)
    transaction_count: int = 0

    @property
    def net_balance(self):
        return self.total_donations + self.total_rent_income - self.total_expenses

    def to_dict(self):
        return {
            "total_donations": float(self.total_donations),
            "total_expenses": float(self.total_expenses),
            "total_rent_income": float(self.total_rent_income),
            "net_balance": float(self.net_balance),
            "category_income": {k: float(v) for k, v in self.category_income.items()},
            "category_expenses": {k: float(v) for k, v in self.category_expenses.items()},
            "monthly": [
                {
                    "month": m.label,
                    "donations": float(m.donations),
                    "rent_income": float(m.rent_income),
                    "expenses": float(m.expenses),
                    "net": float(m.net),
                }
                for m in self.monthly
            ],
            "transaction_count": self.transaction_count,
        }


def summarize(txns) -> Summary:
    s = Summary()
    months = {}
    for t in txns:
        amount = amount_of(t)
        kind = value_of(t, "type")
        category = value_of(t, "category")
        d = parse_iso_date(value_of(t, "date"))
        key = (d.year, d.month)
        if key not in months:
            months[key] = MonthTotals(label=month_label(d))
        bucket = months[key]

        if kind == "Donation":
            s.total_donations += amount
            s.category_income[category] = s.category_income.get(category, Decimal("0")) + amount
            bucket.donations += amount
        elif kind == "RentIncome":
            s.total_rent_income += amount
            bucket.rent_income += amount
        else:
            s.total_expenses += amount
            s.category_expenses[category] = s.category_expenses.get(category, Decimal("0")) + amount
            bucket.expenses += amount
        s.transaction_count += 1

    s.monthly = [months[k] for k in sorted(months)]
    return s


def format_amount(value) -> str:
    """``12,345`` / ``12,345.50``; whole amounts drop the decimals."""
    v = Decimal(str(value))
    if v == v.to_integral_value():
        return f"{int(v):,}"
    return f"{v:,.2f}"


def plain_amount(value):
    """Amount as written to CSV: integral values without a decimal part."""
    v = Decimal(str(value))
    if v == v.to_integral_value():
        return int(v)
    return float(v)


def report_rows(kind: str, txns) -> tuple:
    """Machine-readable ``(headers, rows)`` for the CSV export of ``kind``."""
    if kind == "transactions":
        headers = ["Date", "Type", "Category", "SubCategory", "Description", "Amount"]
        rows = [
            [date_str(t), value_of(t, "type"), value_of(t, "category"),
             value_of(t, "sub_category") or "", value_of(t, "description"), plain_amount(amount_of(t))]
            for t in txns
        ]
        return headers, rows

    s = summarize(txns)
    if kind == "summary":
        return ["Metric", "Amount"], [
            ["Total Donations", plain_amount(s.total_donations)],
            ["Total Rent Income", plain_amount(s.total_rent_income)],
            ["Total Expenses", plain_amount(s.total_expenses)],
            ["Net Balance", plain_amount(s.net_balance)],
        ]
    if kind == "categoryBreakdown":
        rows = [[c, "Donations", plain_amount(a)] for c, a in s.category_income.items()]
        rows += [[c, "Expenses", plain_amount(a)] for c, a in s.category_expenses.items()]
        return ["Category", "Type", "Amount"], rows
    if kind == "monthly":
        return ["Month", "Donations", "RentIncome", "Expenses", "Net"], [
            [m.label, plain_amount(m.donations), plain_amount(m.rent_income),
             plain_amount(m.expenses), plain_amount(m.net)]
            for m in s.monthly
        ]
    raise ValueError(f"Unknown report type: {kind}")


def render_html(kind: str, txns) -> str:
    headers, rows = report_rows(kind, txns)
    head = "".join(f"<th>{escape(str(h))}</th>" for h in headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{escape(str(c))}</td>" for c in row) + "</tr>"
        for row in rows
    )
    return f'<table class="report report-{kind}"><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>'
