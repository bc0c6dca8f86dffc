"""Markdown formatters for MCP tool responses.

Pure functions that take domain objects and return human-readable Markdown strings.
"""

from __future__ import annotations

from src.models.results import ParsedGoal
from src.models.schemas import ForecastResult, ForecastStatus, LeverType, Suggestion

_STATUS_HEADLINES = {
    ForecastStatus.ON_TRACK: "You're on track for this goal.",
    ForecastStatus.BORDERLINE: "This goal is within reach in a good month, but not a typical one.",
    ForecastStatus.OFF_TRACK: "You're off track for this goal at your current pace.",
}


def format_suggestion(s: Suggestion) -> str:
    line = f"- **{s.title}**"
    if s.impact_per_month:
        line += f" (~${s.impact_per_month:,.2f}/month)"
    if s.action:
        line += f": {s.action}"
    if s.lever_type == LeverType.TIMELINE and s.new_months_to_deadline:
        line += (
            f"\n  New timeline: {s.new_months_to_deadline} months at "
            f"${(s.new_required_monthly or 0.0):,.2f}/month"
        )
    if s.rationale:
        line += f"\n  _{s.rationale}_"
    return line


def format_forecast_result(result: ForecastResult) -> str:
    lines = ["## Goal Forecast\n", f"**{_STATUS_HEADLINES[result.status]}**\n"]

    if result.parsed_target_amount is not None:
        lines.append(
            f"Understood goal: ${result.parsed_target_amount:,.2f} "
            f"in {result.parsed_months_to_deadline} months\n"
        )

    months = ", ".join(result.baseline_months) if result.baseline_months else "no history"
    lines.append(f"Based on: {months}")
    lines.append(f"- Required per month: ${result.required_monthly:,.2f}")
    lines.append(
        f"- Monthly capacity: ${result.p10:,.2f} (low) / ${result.p50:,.2f} (typical) "
        f"/ ${result.p90:,.2f} (high)"
    )
    lines.append(f"- Projected toward goal: ${result.projected_monthly_to_goal:,.2f}/month")
    lines.append(f"- Forecast balance at deadline: ${result.forecasted_balance_at_deadline_p50:,.2f}")
    if result.monthly_gap > 0:
        lines.append(f"- Monthly gap: ${result.monthly_gap:,.2f}")

    if result.suggestions:
        lines.append("\n### Options to close the gap\n")
        for s in result.suggestions:
            lines.append(format_suggestion(s))

    return "\n".join(lines)


def format_parsed_goal(text: str, parsed: ParsedGoal | None) -> str:
    if parsed is None:
        return (
            f"Could not find both an amount and a future deadline in '{text}'. "
            "Try something like 'Save $5,000 by June 2026' or '$2.5k in 6 months'."
        )
    lines = [
        "## Parsed Goal\n",
        f"- Target: ${parsed.target_amount:,.2f}",
        f"- Months to deadline: {parsed.months_to_deadline}",
    ]
    if parsed.deadline:
        lines.append(f"- Deadline: {parsed.deadline.isoformat()}")
    return "\n".join(lines)
