"""Heuristic parsing and resolution of savings goals.

Understands plain-English goals such as:

- "Save $5,000 by 2026-06-15"
- "Put aside 3k in 6 months"
- "$1200 for a trip within 180 days"
- "$2.5k by December 2026"

Amounts and deadlines are each extracted by an ordered list of matchers;
the first matcher that returns a value wins.
"""

from __future__ import annotations

import calendar
import math
import re
from abc import ABC, abstractmethod
from datetime import date, datetime

from src.models.results import ParsedGoal, ResolvedGoal
from src.models.schemas import GoalRequest, round_money


class GoalResolutionError(Exception):
    """Raised when neither structured fields nor goal text give a usable goal."""

    def __init__(self, detail: str, goal_text: str | None = None):
        self.detail = detail
        self.goal_text = goal_text
        message = detail
        if goal_text:
            message += f" (goal text: '{goal_text}')"
        super().__init__(message)


# --- Calendar helpers ---

_MONTH_NAMES = [name.lower() for name in calendar.month_name[1:]]
_MONTH_PATTERN = "|".join(_MONTH_NAMES)


def _month_number(name: str) -> int:
    return _MONTH_NAMES.index(name.lower()) + 1


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def add_months_end_of_month(start: date, months: int) -> date:
    """Last day of the month that is *months* after *start*."""
    index = start.month - 1 + months
    return last_day_of_month(start.year + index // 12, index % 12 + 1)


def months_between(start: date, end: date) -> int:
    """Whole months from *start* until *end*, rounding a partial month up.

    A later day-of-month counts as an extra month; the same day does not,
    so 2025-06-15 to 2026-06-15 is 12 months, not 13.
    Returns ``0`` when *end* is not after *start*.
    """
    if end <= start:
        return 0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day > start.day:
        months += 1
    return max(1, months)


# --- Amount matchers ---


class AmountMatcher(ABC):
    """Extracts a dollar amount from goal text, or ``None``."""

    pattern: re.Pattern[str]

    def extract(self, text: str) -> float | None:
        m = self.pattern.search(text)
        if not m:
            return None
        return self.convert(m)

    @abstractmethod
    def convert(self, m: re.Match[str]) -> float | None:
        ...


_MAGNITUDES = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}


class DollarAmountMatcher(AmountMatcher):
    """``$5,000``, ``$3000``, ``$2.5k``.

    Digits are never truncated (``$300`` is not found inside ``$3000``) and
    when several dollar figures appear the largest one is the target.
    """

    pattern = re.compile(
        r"\$\s*((?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{1,2})?)(?!\d|[,.]\d)"
        r"(?:([kmb])(?![a-z]))?",
        re.IGNORECASE,
    )

    def extract(self, text: str) -> float | None:
        amounts = [self.convert(m) for m in self.pattern.finditer(text)]
        return max(amounts) if amounts else None

    def convert(self, m: re.Match[str]) -> float | None:
        value = float(m.group(1).replace(",", ""))
        suffix = m.group(2)
        if suffix:
            value *= _MAGNITUDES[suffix.lower()]
        return value


class CurrencyWordAmountMatcher(AmountMatcher):
    """``1200 dollars``, ``500 usd``, ``80 bucks``."""

    pattern = re.compile(
        r"(?<![\d.,])((?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{1,2})?)\s*(?:usd|dollars|bucks)\b",
        re.IGNORECASE,
    )

    def convert(self, m: re.Match[str]) -> float | None:
        return float(m.group(1).replace(",", ""))


class MagnitudeAmountMatcher(AmountMatcher):
    """``3k``, ``1.5m``, ``2 b``."""

    pattern = re.compile(r"(?<![\d.])(\d+(?:\.\d+)?)\s*([kmb])(?![a-z])", re.IGNORECASE)

    def convert(self, m: re.Match[str]) -> float | None:
        return float(m.group(1)) * _MAGNITUDES[m.group(2).lower()]


AMOUNT_MATCHERS: tuple[AmountMatcher, ...] = (
    DollarAmountMatcher(),
    CurrencyWordAmountMatcher(),
    MagnitudeAmountMatcher(),
)


# --- Deadline matchers ---


class DeadlineMatcher(ABC):
    """Extracts an absolute deadline date from goal text, or ``None``."""

    pattern: re.Pattern[str]

    def extract(self, text: str, today: date) -> date | None:
        m = self.pattern.search(text)
        if not m:
            return None
        try:
            return self.to_date(m, today)
        except ValueError:
            # Impossible calendar date, e.g. "by February 30"
            return None

    @abstractmethod
    def to_date(self, m: re.Match[str], today: date) -> date:
        ...


class IsoDateMatcher(DeadlineMatcher):
    pattern = re.compile(r"\bby\s+(\d{4}-\d{2}-\d{2})\b", re.IGNORECASE)

    def to_date(self, m: re.Match[str], today: date) -> date:
        return date.fromisoformat(m.group(1))


class SlashDateMatcher(DeadlineMatcher):
    pattern = re.compile(r"\bby\s+(\d{1,2}/\d{1,2}/(\d{4}|\d{2}))(?!\d)", re.IGNORECASE)

    def to_date(self, m: re.Match[str], today: date) -> date:
        fmt = "%m/%d/%Y" if len(m.group(2)) == 4 else "%m/%d/%y"
        return datetime.strptime(m.group(1), fmt).date()


class MonthNameMatcher(DeadlineMatcher):
    """``by March 2026``, ``by March 5, 2026``, ``by June``."""

    pattern = re.compile(
        rf"\bby\s+({_MONTH_PATTERN})\b"
        r"(?:\s+(\d{1,2})(?!\d)(?:st|nd|rd|th)?)?"
        r"(?:\s*,?\s*(\d{4})(?!\d))?",
        re.IGNORECASE,
    )

    def to_date(self, m: re.Match[str], today: date) -> date:
        month = _month_number(m.group(1))
        year = int(m.group(3)) if m.group(3) else today.year
        if m.group(2):
            return date(year, month, int(m.group(2)))
        return last_day_of_month(year, month)


class EndOfMonthMatcher(DeadlineMatcher):
    """``by end of March``, ``by the end of March 2027``."""

    pattern = re.compile(
        rf"\bby\s+(?:the\s+)?end\s+of\s+({_MONTH_PATTERN})\b(?:\s*,?\s*(\d{{4}})(?!\d))?",
        re.IGNORECASE,
    )

    def to_date(self, m: re.Match[str], today: date) -> date:
        year = int(m.group(2)) if m.group(2) else today.year
        return last_day_of_month(year, _month_number(m.group(1)))


class NextMonthMatcher(DeadlineMatcher):
    """``by next March``: the coming March, rolling into next year if needed."""

    pattern = re.compile(rf"\bby\s+next\s+({_MONTH_PATTERN})\b", re.IGNORECASE)

    def to_date(self, m: re.Match[str], today: date) -> date:
        month = _month_number(m.group(1))
        year = today.year + 1 if month <= today.month else today.year
        return last_day_of_month(year, month)


DEADLINE_MATCHERS: tuple[DeadlineMatcher, ...] = (
    IsoDateMatcher(),
    SlashDateMatcher(),
    MonthNameMatcher(),
    EndOfMonthMatcher(),
    NextMonthMatcher(),
)


class RelativeDeadlineMatcher:
    """``in 6 months``, ``within 180 days``, ``in 2 years`` as a month count."""

    pattern = re.compile(
        r"\b(?:in|within)\s+(\d{1,4})\s*(days?|months?|years?)\b",
        re.IGNORECASE,
    )

    def extract(self, text: str) -> int | None:
        m = self.pattern.search(text)
        if not m:
            return None
        n = int(m.group(1))
        unit = m.group(2).lower()
        if unit.startswith("day"):
            return max(1, math.ceil(n / 30))
        if unit.startswith("month"):
            return max(1, n)
        return max(1, n * 12)


RELATIVE_DEADLINE_MATCHER = RelativeDeadlineMatcher()


# --- Parsing ---


def parse_amount(text: str) -> float | None:
    for matcher in AMOUNT_MATCHERS:
        amount = matcher.extract(text)
        if amount is not None:
            return amount
    return None


def parse_absolute_deadline(text: str, today: date) -> date | None:
    for matcher in DEADLINE_MATCHERS:
        deadline = matcher.extract(text, today)
        if deadline is not None:
            return deadline
    return None


def parse_goal_text(
    text: str | None,
    reference_date: date | None = None,
) -> ParsedGoal | None:
    """Extract a target amount and deadline from free-form goal text.

    Returns ``None`` when either is missing, the amount is not a finite
    number, or the deadline is not in the future or past the end of the
    calendar.
    """
    if text is None or not text.strip():
        return None
    s = text.strip()
    today = reference_date or date.today()

    amount = parse_amount(s)
    deadline = parse_absolute_deadline(s, today)
    if deadline is not None:
        months = months_between(today, deadline)
    else:
        months = RELATIVE_DEADLINE_MATCHER.extract(s)
        if months is not None:
            try:
                deadline = add_months_end_of_month(today, months)
            except (ValueError, OverflowError):
                # Beyond year 9999
                return None

    if amount is None or not math.isfinite(amount) or amount <= 0:
        return None
    if not months or months <= 0:
        return None
    return ParsedGoal(
        target_amount=round_money(amount),
        months_to_deadline=months,
        deadline=deadline,
    )


def resolve_goal(
    request: GoalRequest,
    reference_date: date | None = None,
) -> ResolvedGoal:
    """Turn a goal request into a usable goal.

    Complete structured fields win; otherwise the goal text is parsed.

    Raises :class:`GoalResolutionError` if neither yields a target of at
    least 1 and a deadline at least one month out.
    """
    common = dict(
        current_savings=request.current_savings,
        buffer=request.buffer,
        protected_categories=frozenset(c.strip() for c in request.protected_categories),
    )

    target = request.target_amount
    months = request.months_to_deadline
    if target is not None and months is not None and target >= 1 and months >= 1:
        return ResolvedGoal(target_amount=target, months_to_deadline=months, **common)

    if not request.goal_text:
        raise GoalResolutionError(
            "Goal needs a target amount of at least $1 and at least one month "
            "to the deadline, or a goal description."
        )

    parsed = parse_goal_text(request.goal_text, reference_date=reference_date)
    if parsed is None or parsed.target_amount < 1 or parsed.months_to_deadline < 1:
        raise GoalResolutionError(
            "Could not find both an amount and a future deadline in the goal. "
            "Try something like 'Save $5,000 by June 2026' or '$2.5k in 6 months'.",
            goal_text=request.goal_text,
        )
    return ResolvedGoal(
        target_amount=parsed.target_amount,
        months_to_deadline=parsed.months_to_deadline,
        from_text=True,
        deadline=parsed.deadline,
        **common,
    )
