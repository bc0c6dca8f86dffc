"""Pure analysis functions for transaction history and savings goals.

All functions take already-parsed domain objects and return result
dataclasses. No I/O, so business logic stays testable without mocking.
"""

import math

from src.core.config import ForecastSettings
from src.models.results import (
    BaselineHistory,
    CapacityForecast,
    MonthlyAggregate,
    ResolvedGoal,
)
from src.models.schemas import ForecastStatus, Transaction, round_money


# --- Order Statistics ---


def percentile(values: list[float], pct: float) -> float:
    """Linearly interpolated percentile between the closest ranks.

    *pct* is on a 0-100 scale. An empty sample yields ``0.0``.
    """
    if not values:
        return 0.0
    ordered = sorted(values)
    position = (pct / 100.0) * (len(ordered) - 1)
    lower = math.floor(position)
    upper = math.ceil(position)
    frac = position - lower
    return ordered[lower] * (1 - frac) + ordered[upper] * frac


def median(values: list[float]) -> float:
    """Middle value, or the mean of the two middle values for even counts."""
    if not values:
        return 0.0
    ordered = sorted(values)
    n = len(ordered)
    if n % 2 == 1:
        return ordered[n // 2]
    return (ordered[n // 2 - 1] + ordered[n // 2]) / 2.0


def sample_variance(values: list[float]) -> float:
    """Unbiased sample variance; ``0.0`` for fewer than two values."""
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / (len(values) - 1)


# --- Monthly Aggregation ---


def normalize_category(category: str | None) -> str:
    """Trim whitespace; a missing category becomes the empty string."""
    if category is None:
        return ""
    return category.strip()


def group_by_month(transactions: list[Transaction]) -> dict[str, list[Transaction]]:
    """Bucket transactions by ``YYYY-MM``, ignoring the day."""
    by_month: dict[str, list[Transaction]] = {}
    for t in transactions:
        by_month.setdefault(t.date.strftime("%Y-%m"), []).append(t)
    return by_month


def aggregate_month(
    month: str,
    transactions: list[Transaction],
    fixed_categories: frozenset[str],
) -> MonthlyAggregate:
    """Compute income, fixed and variable totals for a single month."""
    aggregate = MonthlyAggregate(month=month)
    for t in transactions:
        if t.is_inflow:
            aggregate.income += t.amount
            continue
        if not t.is_outflow:
            continue
        cat = normalize_category(t.category)
        spent = -t.amount
        if cat in fixed_categories:
            aggregate.fixed_expense += spent
        else:
            aggregate.variable_expense += spent
        aggregate.category_spend[cat] = aggregate.category_spend.get(cat, 0.0) + spent
    return aggregate


def build_baseline(
    transactions: list[Transaction],
    settings: ForecastSettings | None = None,
) -> BaselineHistory:
    """Aggregate the most recent months of history, oldest first.

    Only months that actually contain transactions count toward the
    window, so a sparse history yields fewer than ``baseline_months``.
    """
    settings = settings or ForecastSettings()
    by_month = group_by_month(transactions)
    recent = sorted(by_month, reverse=True)[:settings.baseline_months]
    recent.sort()
    return BaselineHistory(aggregates=[
        aggregate_month(m, by_month[m], settings.fixed_categories) for m in recent
    ])


# --- Capacity Forecast ---


def classify_status(p50: float, p90: float, required_monthly: float) -> ForecastStatus:
    """On track at the median, borderline at the optimistic end, else off track."""
    if p50 >= required_monthly:
        return ForecastStatus.ON_TRACK
    if p90 >= required_monthly:
        return ForecastStatus.BORDERLINE
    return ForecastStatus.OFF_TRACK


def forecast_capacity(
    capacities: list[float],
    goal: ResolvedGoal,
) -> CapacityForecast:
    """Compare percentile saving capacity with what the goal requires.

    *goal* must already be resolved, so ``months_to_deadline`` is at
    least one.
    """
    p10 = percentile(capacities, 10)
    p50 = percentile(capacities, 50)
    p90 = percentile(capacities, 90)

    required = round_money(goal.remaining_amount / goal.months_to_deadline)
    projected = round_money(max(0.0, max(0.0, p50) - goal.buffer))
    balance = round_money(projected * goal.months_to_deadline + goal.current_savings)
    gap = round_money(max(0.0, required - projected))

    return CapacityForecast(
        p10=p10,
        p50=p50,
        p90=p90,
        required_monthly=required,
        projected_monthly_to_goal=projected,
        forecasted_balance=balance,
        monthly_gap=gap,
        status=classify_status(p50, p90, required),
    )
