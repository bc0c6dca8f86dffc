"""Pydantic models for transactions, goals, suggestions and forecasts."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# --- Currency values are dollars, rounded half-up at the point they are shown ---

_CENT = Decimal("0.01")


def round_money(value: float) -> float:
    """Round a dollar amount to cents using round-half-up semantics."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


# --- Enums ---

class LeverType(str, Enum):
    VARIABLE_TRIM = "variable_trim"
    SUBSCRIPTION_CLEANUP = "subscription_cleanup"
    INCOME = "income"
    TIMELINE = "timeline"


class ForecastStatus(str, Enum):
    ON_TRACK = "on_track"
    BORDERLINE = "borderline"
    OFF_TRACK = "off_track"


# --- Domain Models ---

class Transaction(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    date: date
    amount: float  # dollars, positive = inflow, negative = outflow
    merchant: str = ""
    category: Optional[str] = None
    account: str = ""

    @property
    def is_inflow(self) -> bool:
        return self.amount > 0

    @property
    def is_outflow(self) -> bool:
        return self.amount < 0


class GoalRequest(BaseModel):
    """A savings goal, structured or as free text.

    Both halves are optional here; resolving them into a usable goal is the
    job of :func:`src.core.goal_parser.resolve_goal`.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    target_amount: Optional[float] = None
    months_to_deadline: Optional[int] = None
    current_savings: float = Field(default=0.0, ge=0)
    buffer: float = Field(default=0.0, ge=0)
    protected_categories: list[str] = []
    goal_text: Optional[str] = None


class Suggestion(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    title: str
    action: str = ""
    rationale: str = ""
    lever_type: Optional[LeverType] = None
    impact_per_month: float = 0.0  # dollars per month
    new_months_to_deadline: Optional[int] = None
    new_required_monthly: Optional[float] = None


class ForecastResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: ForecastStatus
    on_track: bool
    required_monthly: float
    parsed_target_amount: Optional[float] = None
    parsed_months_to_deadline: Optional[int] = None
    p10: float
    p50: float
    p90: float
    projected_monthly_to_goal: float  # after buffer
    forecasted_balance_at_deadline_p50: float
    monthly_gap: float = Field(ge=0)
    baseline_months: list[str] = []
    suggestions: list[Suggestion] = []


# --- MCP Tool Input Models ---


class AnalyzeGoalInput(BaseModel):
    """Input for forecasting a savings goal against a transaction file."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    csv_path: str = Field(
        ..., description="Path to a CSV file with date, amount, merchant, category, account columns"
    )
    goal_text: Optional[str] = Field(
        None, description="Goal in plain English, e.g. 'Save $5,000 by June 2026'"
    )
    target_amount: Optional[float] = Field(None, description="Target amount in dollars")
    months_to_deadline: Optional[int] = Field(None, description="Months until the deadline")
    current_savings: float = Field(default=0.0, ge=0, description="Dollars already saved")
    buffer: float = Field(
        default=0.0, ge=0, description="Dollars per month to keep aside before saving"
    )
    protected_categories: list[str] = Field(
        default_factory=list, description="Categories that must not be trimmed"
    )

    def to_goal_request(self) -> GoalRequest:
        return GoalRequest(
            target_amount=self.target_amount,
            months_to_deadline=self.months_to_deadline,
            current_savings=self.current_savings,
            buffer=self.buffer,
            protected_categories=self.protected_categories,
            goal_text=self.goal_text,
        )


class ParseGoalInput(BaseModel):
    """Input for previewing how a plain-English goal is understood."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    goal_text: str = Field(..., description="Goal in plain English", min_length=1)
