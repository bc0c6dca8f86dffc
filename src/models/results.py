"""Result dataclasses for the forecasting pipeline.

These are internal types passed between the aggregator, forecaster and
suggestion engine. Lightweight dataclasses rather than Pydantic models
since they don't need validation.
"""

from dataclasses import dataclass, field
from datetime import date

from src.models.schemas import ForecastStatus


@dataclass
class MonthlyAggregate:
    """Cash-flow totals for one calendar month."""
    month: str                   # "YYYY-MM"
    income: float = 0.0          # dollars, sum of inflows
    fixed_expense: float = 0.0   # dollars, outflows in fixed categories
    variable_expense: float = 0.0  # dollars, every other outflow
    category_spend: dict[str, float] = field(default_factory=dict)  # category -> dollars

    @property
    def capacity(self) -> float:
        """Money left over after fixed and variable spending."""
        return self.income - self.fixed_expense - self.variable_expense


@dataclass
class BaselineHistory:
    """The most recent months of history, oldest first."""
    aggregates: list[MonthlyAggregate] = field(default_factory=list)

    @property
    def months(self) -> list[str]:
        return [a.month for a in self.aggregates]

    @property
    def capacities(self) -> list[float]:
        return [a.capacity for a in self.aggregates]

    @property
    def category_spend_history(self) -> dict[str, list[float]]:
        """Category -> spend in each baseline month where it appeared."""
        history: dict[str, list[float]] = {}
        for aggregate in self.aggregates:
            for cat, amount in aggregate.category_spend.items():
                history.setdefault(cat, []).append(amount)
        return history


@dataclass
class ParsedGoal:
    """Amount and deadline extracted from free-form goal text."""
    target_amount: float     # dollars
    months_to_deadline: int
    deadline: date | None = None


@dataclass
class ResolvedGoal:
    """A goal with a usable target and month count."""
    target_amount: float          # dollars
    months_to_deadline: int
    current_savings: float = 0.0  # dollars
    buffer: float = 0.0           # dollars per month
    protected_categories: frozenset[str] = frozenset()
    from_text: bool = False
    deadline: date | None = None

    @property
    def remaining_amount(self) -> float:
        return self.target_amount - self.current_savings


@dataclass
class CapacityForecast:
    """Percentile capacity and what it means for the goal."""
    p10: float
    p50: float
    p90: float
    required_monthly: float           # dollars, rounded
    projected_monthly_to_goal: float  # dollars, rounded, after buffer
    forecasted_balance: float         # dollars at the deadline, rounded
    monthly_gap: float                # dollars, rounded, never negative
    status: ForecastStatus


@dataclass
class SuggestionContext:
    """Everything a suggestion generator may look at."""
    goal: ResolvedGoal
    category_spend_history: dict[str, list[float]]
    baseline_months: list[str]
    p50: float
    gap: float
