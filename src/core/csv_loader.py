"""Read transaction history from CSV exports.

Expects a header row with ``date``, ``amount``, ``merchant``, ``category``
and ``account`` columns (any order, any case). Amounts are signed dollars:
positive for money in, negative for money out.
"""

import csv
import io
import logging
from datetime import date, datetime
from pathlib import Path

from src.models.schemas import Transaction

logger = logging.getLogger("goal_forecast")

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y")


class TransactionFileError(Exception):
    """Raised when a transaction row cannot be read."""

    def __init__(self, row_number: int, reason: str):
        self.row_number = row_number
        self.reason = reason
        super().__init__(f"Row {row_number}: {reason}")


def parse_date(value: str, fallback: date) -> date:
    """Parse *value* with the supported formats, else return *fallback*."""
    s = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    logger.warning("Unrecognized transaction date %r, using %s", value, fallback.isoformat())
    return fallback


def parse_amount(value: str, row_number: int) -> float:
    s = value.strip().replace(",", "").replace("$", "")
    if not s:
        raise TransactionFileError(row_number, "missing amount")
    try:
        return float(s)
    except ValueError:
        raise TransactionFileError(row_number, f"invalid amount '{value}'") from None


def parse_transactions_csv(
    text: str,
    reference_date: date | None = None,
) -> list[Transaction]:
    """Parse CSV text into transactions.

    Blank rows are skipped. A missing or unreadable date falls back to
    *reference_date* (today by default); an unreadable amount raises
    :class:`TransactionFileError`.
    """
    today = reference_date or date.today()
    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames is None:
        return []

    transactions: list[Transaction] = []
    # Header is row 1
    for row_number, raw in enumerate(reader, start=2):
        row = {
            (k or "").strip().lower(): (v or "").strip()
            for k, v in raw.items()
            if isinstance(v, str) or v is None
        }
        if not any(row.values()):
            continue
        transactions.append(Transaction(
            date=parse_date(row.get("date", ""), today),
            amount=parse_amount(row.get("amount", ""), row_number),
            merchant=row.get("merchant", ""),
            category=row.get("category", ""),
            account=row.get("account", ""),
        ))
    return transactions


def load_transactions_csv(
    path: str | Path,
    reference_date: date | None = None,
) -> list[Transaction]:
    """Read and parse a CSV file of transactions."""
    text = Path(path).expanduser().read_text(encoding="utf-8-sig")
    return parse_transactions_csv(text, reference_date=reference_date)
