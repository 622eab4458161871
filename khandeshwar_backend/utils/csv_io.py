import csv
import io
import logging
import re
from datetime import datetime
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from .reports import report_rows

log = logging.getLogger(__name__)

TRANSACTION_TYPES = ("Donation", "Expense", "Utilities", "Salary", "RentIncome")
REQUIRED_HEADERS = ("date", "type", "category", "description", "amount")
# free text is kept exactly as written
VERBATIM_FIELDS = ("category", "description")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class CsvImportError(ValueError):
    pass


def to_csv(headers, rows) -> str:
    """Header line plus one line per row; fields holding a comma or quote are quoted."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if v is None else v for v in row])
    return buf.getvalue()


def export_csv(kind: str, txns) -> str:
    headers, rows = report_rows(kind, txns)
    return to_csv(headers, rows)


@dataclass
class ImportResult:
    rows: list = field(default_factory=list)
    skipped: int = 0


def _find_column(headers, name):
    # exact header first so "category" does not land on "subcategory"
    for i, h in enumerate(headers):
        if h == name:
            return i
    for i, h in enumerate(headers):
        if name in h:
            return i
    return None


def parse_amount(v):
    try:
        amount = Decimal(str(v).strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def _valid_date(v):
    if not _ISO_DATE.match(v):
        return False
    try:
        datetime.strptime(v, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def parse_import(text: str) -> ImportResult:
    """
    Best-effort import of transaction rows.

    Requires date, type, category, description and amount columns (matched
    case-insensitively). Rows with a blank required field, a date not in
    ``YYYY-MM-DD`` form, an unknown type or a non-numeric amount are skipped.
    """
    text = (text or "").lstrip("\ufeff").strip("\r\n")
    reader = csv.reader(io.StringIO(text))
    try:
        headers = [h.strip().lower() for h in next(reader)]
    except StopIteration:
        raise CsvImportError("Invalid CSV format")

    columns = {name: _find_column(headers, name) for name in REQUIRED_HEADERS}
    missing = [name for name, idx in columns.items() if idx is None]
    if missing:
        raise CsvImportError(f"Missing required columns: {', '.join(missing)}")
    sub_idx = next(
        (i for i, h in enumerate(headers) if h.replace("_", "").replace("-", "") == "subcategory"),
        None,
    )

    result = ImportResult()
    for values in reader:
        if not any(v.strip() for v in values):
            continue
        if len(values) < len(REQUIRED_HEADERS):
            result.skipped += 1
            continue
        cells = {name: (values[idx] if idx < len(values) else "") for name, idx in columns.items()}
        cells = {name: v if name in VERBATIM_FIELDS else v.strip() for name, v in cells.items()}
        amount = parse_amount(cells["amount"])
        if (not all(v.strip() for v in cells.values()) or amount is None
                or not _valid_date(cells["date"]) or cells["type"] not in TRANSACTION_TYPES):
            result.skipped += 1
            continue
        row = dict(cells, amount=amount)
        if sub_idx is not None and sub_idx < len(values) and values[sub_idx].strip():
            row["sub_category"] = values[sub_idx]
        result.rows.append(row)

    if result.skipped:
        log.info("CSV import skipped %d malformed rows", result.skipped)
    return result
