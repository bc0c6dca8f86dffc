"""Tests for src/core/goal_parser.py."""

from datetime import date

import pytest

from tests.conftest import make_goal
from src.core.goal_parser import (
    AMOUNT_MATCHERS,
    DEADLINE_MATCHERS,
    AmountMatcher,
    DeadlineMatcher,
    DollarAmountMatcher,
    GoalResolutionError,
    MagnitudeAmountMatcher,
    add_months_end_of_month,
    months_between,
    parse_amount,
    parse_goal_text,
    resolve_goal,
)
from src.models.schemas import GoalRequest

TODAY = date(2025, 6, 15)


# --- Calendar helpers ---


class TestMonthsBetween:
    def test_same_day_next_year_is_twelve(self):
        assert months_between(TODAY, date(2026, 6, 15)) == 12

    def test_later_day_rounds_up(self):
        assert months_between(TODAY, date(2025, 7, 16)) == 2

    def test_earlier_day_does_not_round_up(self):
        assert months_between(TODAY, date(2025, 8, 10)) == 2

    def test_partial_first_month_counts_as_one(self):
        assert months_between(TODAY, date(2025, 6, 20)) == 1

    def test_today_and_past_are_zero(self):
        assert months_between(TODAY, TODAY) == 0
        assert months_between(TODAY, date(2025, 1, 1)) == 0

    def test_short_month_boundary(self):
        assert months_between(date(2025, 1, 31), date(2025, 2, 28)) == 1


class TestAddMonthsEndOfMonth:
    def test_clamps_to_last_day(self):
        assert add_months_end_of_month(TODAY, 6) == date(2025, 12, 31)

    def test_rolls_year(self):
        assert add_months_end_of_month(TODAY, 8) == date(2026, 2, 28)


# --- Amounts ---


class TestParseAmount:
    def test_comma_grouped_dollars(self):
        assert parse_amount("Save $5,000 for a car") == 5000.0

    def test_dollars_with_cents(self):
        assert parse_amount("Put aside $1,234.56") == 1234.56

    def test_does_not_truncate_longer_digit_run(self):
        assert parse_amount("I need $3000 soon") == 3000.0

    def test_picks_largest_dollar_amount(self):
        assert parse_amount("Put $300 a month toward $3000 for a trip") == 3000.0
        assert parse_amount("$3000 trip, saving $300 a month") == 3000.0

    def test_dollar_with_magnitude_suffix(self):
        assert parse_amount("$2.5k in 6 months") == 2500.0

    def test_trailing_punctuation(self):
        assert parse_amount("Goal is $5,000.") == 5000.0

    def test_currency_word(self):
        assert parse_amount("save 1200 dollars") == 1200.0
        assert parse_amount("5,000 USD for tuition") == 5000.0
        assert parse_amount("80 bucks") == 80.0

    def test_magnitude_suffix(self):
        assert parse_amount("Put aside 3k") == 3000.0
        assert parse_amount("1.5M for a house") == 1_500_000.0
        assert parse_amount("2b") == 2_000_000_000.0

    def test_units_are_not_magnitudes(self):
        assert parse_amount("in 6 months") is None
        assert parse_amount("save 1000 by March") is None

    def test_dollar_sign_wins_over_other_forms(self):
        assert parse_amount("$700 or 5k") == 700.0

    def test_no_amount(self):
        assert parse_amount("save money") is None

    def test_matchers_in_priority_order(self):
        assert isinstance(AMOUNT_MATCHERS[0], DollarAmountMatcher)
        assert isinstance(AMOUNT_MATCHERS[-1], MagnitudeAmountMatcher)

    def test_matcher_bases_are_abstract(self):
        with pytest.raises(TypeError):
            AmountMatcher()
        with pytest.raises(TypeError):
            DeadlineMatcher()


# --- Full parse ---


class TestParseGoalText:
    def test_iso_date(self):
        parsed = parse_goal_text("Save $5,000 by 2026-06-15", reference_date=TODAY)
        assert parsed.target_amount == 5000.0
        assert parsed.months_to_deadline == 12
        assert parsed.deadline == date(2026, 6, 15)

    def test_relative_months_with_suffix_amount(self):
        parsed = parse_goal_text("$2.5k in 6 months", reference_date=TODAY)
        assert parsed.target_amount == 2500.0
        assert parsed.months_to_deadline == 6
        assert parsed.deadline == date(2025, 12, 31)

    def test_relative_days_round_up_to_months(self):
        parsed = parse_goal_text("$1200 for a trip within 180 days", reference_date=TODAY)
        assert parsed.months_to_deadline == 6
        parsed = parse_goal_text("1200 dollars within 45 days", reference_date=TODAY)
        assert parsed.months_to_deadline == 2

    def test_relative_days_floor_of_one_month(self):
        parsed = parse_goal_text("$500 within 10 days", reference_date=TODAY)
        assert parsed.months_to_deadline == 1

    def test_relative_years(self):
        parsed = parse_goal_text("Put aside 3k in 2 years", reference_date=TODAY)
        assert parsed.target_amount == 3000.0
        assert parsed.months_to_deadline == 24

    def test_zero_months_floors_to_one(self):
        parsed = parse_goal_text("$500 in 0 months", reference_date=TODAY)
        assert parsed.months_to_deadline == 1

    def test_slash_dates(self):
        long_form = parse_goal_text("$600 by 12/31/2025", reference_date=TODAY)
        short_form = parse_goal_text("$600 by 12/31/25", reference_date=TODAY)
        assert long_form.deadline == short_form.deadline == date(2025, 12, 31)
        assert long_form.months_to_deadline == 7

    def test_month_name_with_year(self):
        parsed = parse_goal_text("$2.5k by December 2026", reference_date=TODAY)
        assert parsed.deadline == date(2026, 12, 31)
        assert parsed.months_to_deadline == 19

    def test_month_name_with_day_and_year(self):
        parsed = parse_goal_text("Save $800 by March 5, 2026", reference_date=TODAY)
        assert parsed.deadline == date(2026, 3, 5)
        assert parsed.months_to_deadline == 9
        assert parse_goal_text("Save $800 by March 5 2026", reference_date=TODAY).deadline == date(2026, 3, 5)

    def test_month_name_defaults_to_this_year(self):
        parsed = parse_goal_text("Save $900 by september", reference_date=TODAY)
        assert parsed.deadline == date(2025, 9, 30)
        assert parsed.months_to_deadline == 4

    def test_end_of_month(self):
        parsed = parse_goal_text("$1000 by end of August", reference_date=TODAY)
        assert parsed.deadline == date(2025, 8, 31)
        assert parsed.months_to_deadline == 3
        parsed = parse_goal_text("$1000 by the end of August 2026", reference_date=TODAY)
        assert parsed.deadline == date(2026, 8, 31)

    def test_next_month_rolls_into_next_year(self):
        parsed = parse_goal_text("$1000 by next March", reference_date=TODAY)
        assert parsed.deadline == date(2026, 3, 31)
        assert parsed.months_to_deadline == 10

    def test_next_month_later_this_year(self):
        parsed = parse_goal_text("$1000 by next September", reference_date=TODAY)
        assert parsed.deadline == date(2025, 9, 30)

    def test_absolute_deadline_beats_relative(self):
        parsed = parse_goal_text("$1000 in 3 months, by 2026-06-15", reference_date=TODAY)
        assert parsed.months_to_deadline == 12

    def test_past_or_today_deadline_rejected(self):
        assert parse_goal_text("$500 by 2025-01-01", reference_date=TODAY) is None
        assert parse_goal_text("$500 by 2025-06-15", reference_date=TODAY) is None

    def test_impossible_date_is_not_a_deadline(self):
        assert parse_goal_text("Save $500 by February 30 2026", reference_date=TODAY) is None

    def test_missing_amount(self):
        assert parse_goal_text("Save money in 6 months", reference_date=TODAY) is None

    def test_missing_deadline(self):
        assert parse_goal_text("Save $500", reference_date=TODAY) is None

    def test_empty_text(self):
        assert parse_goal_text("", reference_date=TODAY) is None
        assert parse_goal_text("   ", reference_date=TODAY) is None
        assert parse_goal_text(None, reference_date=TODAY) is None

    def test_deadline_past_year_9999_rejected(self):
        assert parse_goal_text("Save $500 in 9999 years", reference_date=TODAY) is None

    def test_overflowing_amount_rejected(self):
        text = "$1" + "0" * 400 + " in 6 months"
        assert parse_goal_text(text, reference_date=TODAY) is None

    def test_deadline_matchers_cover_all_absolute_forms(self):
        assert len(DEADLINE_MATCHERS) == 5


# --- Goal resolution ---


class TestResolveGoal:
    def test_structured_goal(self):
        goal = resolve_goal(make_goal(target_amount=6000.0, months_to_deadline=10, current_savings=500.0))
        assert goal.target_amount == 6000.0
        assert goal.months_to_deadline == 10
        assert goal.current_savings == 500.0
        assert goal.from_text is False

    def test_structured_wins_over_text(self):
        request = make_goal(target_amount=6000.0, months_to_deadline=10, goal_text="$100 in 2 months")
        assert resolve_goal(request, reference_date=TODAY).target_amount == 6000.0

    def test_falls_back_to_text(self):
        request = make_goal(target_amount=None, months_to_deadline=None, goal_text="Save $5,000 by 2026-06-15")
        goal = resolve_goal(request, reference_date=TODAY)
        assert goal.target_amount == 5000.0
        assert goal.months_to_deadline == 12
        assert goal.deadline == date(2026, 6, 15)
        assert goal.from_text is True

    def test_incomplete_structured_uses_text(self):
        request = make_goal(target_amount=5000.0, months_to_deadline=None, goal_text="$2.5k in 6 months")
        goal = resolve_goal(request, reference_date=TODAY)
        assert goal.target_amount == 2500.0

    def test_protected_categories_trimmed(self):
        request = make_goal(protected_categories=[" Dining ", "Travel"])
        assert resolve_goal(request).protected_categories == frozenset({"Dining", "Travel"})

    def test_camel_case_payload(self):
        request = GoalRequest.model_validate({
            "goalText": "$2.5k in 6 months",
            "currentSavings": 100,
            "protectedCategories": ["Dining"],
        })
        goal = resolve_goal(request, reference_date=TODAY)
        assert goal.target_amount == 2500.0
        assert goal.current_savings == 100.0
        assert "Dining" in goal.protected_categories

    def test_nothing_usable_raises(self):
        with pytest.raises(GoalResolutionError):
            resolve_goal(make_goal(target_amount=None, months_to_deadline=None))

    def test_sub_dollar_target_raises(self):
        with pytest.raises(GoalResolutionError):
            resolve_goal(make_goal(target_amount=0.5, months_to_deadline=12))

    def test_zero_months_raises(self):
        with pytest.raises(GoalResolutionError):
            resolve_goal(make_goal(target_amount=1000.0, months_to_deadline=0))

    def test_unparseable_text_raises_with_text(self):
        request = make_goal(target_amount=None, months_to_deadline=None, goal_text="someday maybe")
        with pytest.raises(GoalResolutionError) as exc_info:
            resolve_goal(request, reference_date=TODAY)
        assert exc_info.value.goal_text == "someday maybe"
        assert "someday maybe" in str(exc_info.value)

    def test_out_of_range_text_raises(self):
        for text in ("Save $500 in 9999 years", "$1" + "0" * 400 + " in 6 months"):
            request = make_goal(target_amount=None, months_to_deadline=None, goal_text=text)
            with pytest.raises(GoalResolutionError):
                resolve_goal(request, reference_date=TODAY)
