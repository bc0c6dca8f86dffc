"""Suggestion engine for closing a monthly savings gap.

Ranks discretionary categories by median spend and greedily proposes
trims until the gap is covered, then adds the fixed levers (subscription
cleanup, timeline extension, income boost) and anything an external
generator contributes.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType

from src.core.analyzers import median, normalize_category
from src.core.config import ForecastSettings
from src.core.suggestion_client import NullSuggestionGenerator, SuggestionGenerator
from src.models.results import ResolvedGoal, SuggestionContext
from src.models.schemas import LeverType, Suggestion, round_money

logger = logging.getLogger("goal_forecast")


@dataclass(frozen=True)
class CategoryTip:
    title: str
    tip: str


# Keyed by normalized category name.
CATEGORY_TIPS = MappingProxyType({
    "Dining": CategoryTip(
        "Cook at home a bit more",
        "Swap one or two takeout meals a week for something home-cooked",
    ),
    "Restaurants": CategoryTip(
        "Make restaurant nights count",
        "Pick one fewer restaurant outing a month and keep the favourites",
    ),
    "Shopping": CategoryTip(
        "Add a pause before non-essential buys",
        "Try a 48-hour wait on non-essential purchases and unsubscribe from store emails",
    ),
    "Rideshare": CategoryTip(
        "Mix in cheaper rides",
        "Batch errands, walk short trips, or take transit when it's convenient",
    ),
    "Entertainment": CategoryTip(
        "Lean on free or low-cost fun",
        "Rotate in free events or shared plans for a couple of outings a month",
    ),
    "Travel": CategoryTip(
        "Plan trips further ahead",
        "Book earlier, travel off-peak, or shorten one upcoming trip",
    ),
    "Hobbies": CategoryTip(
        "Pace hobby spending",
        "Use what you already have for a few weeks before buying new gear",
    ),
})


def category_tip(category: str, pct: int = 20) -> CategoryTip:
    """Friendly title and behaviour tip for *category*, with a generic fallback.

    *pct* is the trim percentage named in the fallback title.
    """
    tip = CATEGORY_TIPS.get(normalize_category(category))
    if tip is not None:
        return tip
    return CategoryTip(
        f"Trim {category} by ~{pct}%",
        f"Set a monthly cap for {category} and check in on it weekly",
    )


# --- Individual levers ---


def variable_trim_suggestions(
    category_spend_history: dict[str, list[float]],
    goal: ResolvedGoal,
    gap: float,
    settings: ForecastSettings,
) -> list[Suggestion]:
    """Greedily trim the biggest discretionary categories until *gap* is covered.

    Categories are visited in descending order of median monthly spend;
    protected categories are skipped. Closing the gap fully is not
    guaranteed.
    """
    medians = [
        (cat, median(values))
        for cat, values in category_spend_history.items()
        if normalize_category(cat) in settings.discretionary_categories
    ]
    medians.sort(key=lambda item: item[1], reverse=True)

    suggestions: list[Suggestion] = []
    remaining = gap
    pct = round(settings.variable_trim_fraction * 100)
    for cat, base in medians:
        if remaining <= 0:
            break
        if normalize_category(cat) in goal.protected_categories:
            continue
        impact = round_money(base * settings.variable_trim_fraction)
        tip = category_tip(cat, pct)
        months_seen = len(category_spend_history[cat])
        suggestions.append(Suggestion(
            title=tip.title,
            action=f"{tip.tip}, aiming for about ${impact:,.2f}/month less on {cat}",
            rationale=(
                f"A {pct}% trim of your typical {cat} spend "
                f"(median ${round_money(base):,.2f} over the last {months_seen} months)"
            ),
            lever_type=LeverType.VARIABLE_TRIM,
            impact_per_month=impact,
        ))
        remaining -= impact
    return suggestions


def subscription_cleanup_suggestion(
    category_spend_history: dict[str, list[float]],
    settings: ForecastSettings,
) -> Suggestion | None:
    values = category_spend_history.get(settings.subscription_category)
    if not values:
        return None
    typical = median(values)
    impact = round_money(min(
        settings.subscription_cleanup_cap,
        max(settings.subscription_cleanup_floor, typical * settings.subscription_cleanup_fraction),
    ))
    return Suggestion(
        title="Review your subscriptions",
        action="Cancel or pause one subscription you haven't used in the last month",
        rationale=(
            f"You spend about ${round_money(typical):,.2f}/month on subscriptions; "
            "dropping one or two rarely-used services usually frees up this much"
        ),
        lever_type=LeverType.SUBSCRIPTION_CLEANUP,
        impact_per_month=impact,
    )


def timeline_suggestion(goal: ResolvedGoal, settings: ForecastSettings) -> Suggestion:
    new_months = goal.months_to_deadline + settings.timeline_extension_months
    new_required = round_money(goal.remaining_amount / new_months)
    extension = settings.timeline_extension_months
    return Suggestion(
        title=f"Move the deadline by +{extension} month{'s' if extension != 1 else ''}",
        action=f"Consider a {new_months}-month timeline to lower the monthly amount",
        rationale=f"Spreading the remaining amount over {new_months} months needs ${new_required:,.2f}/month",
        lever_type=LeverType.TIMELINE,
        impact_per_month=0.0,
        new_months_to_deadline=new_months,
        new_required_monthly=new_required,
    )


def income_suggestion(settings: ForecastSettings) -> Suggestion:
    boost = round_money(settings.income_boost)
    return Suggestion(
        title=f"Add a small income boost (+${boost:,.0f})",
        action="If it feels doable, pick up an extra shift or a small freelance job each month",
        rationale="Optional, and only worth it if your income is flexible",
        lever_type=LeverType.INCOME,
        impact_per_month=boost,
    )


# --- Engine ---


def generate_suggestions(
    context: SuggestionContext,
    settings: ForecastSettings | None = None,
    generator: SuggestionGenerator | None = None,
) -> list[Suggestion]:
    """Build the ordered suggestion list for a positive monthly gap.

    Returns an empty list when there is no gap to close. External
    suggestions are appended as-is; a failing generator contributes
    nothing.
    """
    if context.gap <= 0:
        return []
    settings = settings or ForecastSettings()
    generator = generator or NullSuggestionGenerator()
    history = context.category_spend_history

    suggestions = variable_trim_suggestions(history, context.goal, context.gap, settings)
    cleanup = subscription_cleanup_suggestion(history, settings)
    if cleanup is not None:
        suggestions.append(cleanup)
    suggestions.append(timeline_suggestion(context.goal, settings))
    suggestions.append(income_suggestion(settings))

    try:
        extra = list(generator.generate(context) or [])
    except Exception:
        logger.warning("Suggestion generator %s failed", type(generator).__name__, exc_info=True)
        extra = []
    suggestions.extend(extra)
    return suggestions
