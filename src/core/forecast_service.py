"""End-to-end goal forecast: history + goal -> ForecastResult."""

import logging
from datetime import date

from src.core.analyzers import build_baseline, forecast_capacity
from src.core.config import ForecastSettings
from src.core.goal_parser import resolve_goal
from src.core.suggestion_client import SuggestionGenerator
from src.core.suggestions import generate_suggestions
from src.models.results import SuggestionContext
from src.models.schemas import (
    ForecastResult,
    ForecastStatus,
    GoalRequest,
    Transaction,
    round_money,
)

logger = logging.getLogger("goal_forecast")


def analyze_goal(
    transactions: list[Transaction],
    goal: GoalRequest,
    settings: ForecastSettings | None = None,
    generator: SuggestionGenerator | None = None,
    reference_date: date | None = None,
) -> ForecastResult:
    """Forecast whether *goal* is reachable from recent cash flow.

    Raises :class:`~src.core.goal_parser.GoalResolutionError` if the goal
    has no usable amount and deadline. An empty history is not an error:
    it forecasts zero capacity.
    """
    settings = settings or ForecastSettings()
    resolved = resolve_goal(goal, reference_date=reference_date)

    baseline = build_baseline(transactions, settings)
    forecast = forecast_capacity(baseline.capacities, resolved)

    suggestions = []
    if forecast.monthly_gap > 0:
        context = SuggestionContext(
            goal=resolved,
            category_spend_history=baseline.category_spend_history,
            baseline_months=baseline.months,
            p50=round_money(forecast.p50),
            gap=forecast.monthly_gap,
        )
        suggestions = generate_suggestions(context, settings, generator)

    logger.info(
        "Forecast over %d month(s): %s (required $%.2f, p50 $%.2f, gap $%.2f, %d suggestion(s))",
        len(baseline.aggregates),
        forecast.status.value,
        forecast.required_monthly,
        forecast.p50,
        forecast.monthly_gap,
        len(suggestions),
    )

    return ForecastResult(
        status=forecast.status,
        on_track=forecast.status == ForecastStatus.ON_TRACK,
        required_monthly=forecast.required_monthly,
        parsed_target_amount=resolved.target_amount if resolved.from_text else None,
        parsed_months_to_deadline=resolved.months_to_deadline if resolved.from_text else None,
        p10=round_money(forecast.p10),
        p50=round_money(forecast.p50),
        p90=round_money(forecast.p90),
        projected_monthly_to_goal=forecast.projected_monthly_to_goal,
        forecasted_balance_at_deadline_p50=forecast.forecasted_balance,
        monthly_gap=forecast.monthly_gap,
        baseline_months=baseline.months,
        suggestions=suggestions,
    )
