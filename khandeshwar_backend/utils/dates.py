from datetime import date, datetime

from dateutil.relativedelta import relativedelta


def add_months(d: date, months: int = 1) -> date:
    """Calendar-month arithmetic; the day is clamped to the end of short months."""
    return d + relativedelta(months=months)


def today() -> date:
    return date.today()


def parse_iso_date(value):
    """Parse ``YYYY-MM-DD`` (or pass a date through). Returns None for blanks."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()


def month_label(d: date) -> str:
    """``January 2025`` style label used by monthly breakdowns."""
    return d.strftime("%B %Y")
