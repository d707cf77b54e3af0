"""
Unit tests for normalizer.py

Covers day list adaptation, date validation, per-day/per-meal skipping,
and the three shopping list sources.
"""

import pytest
from datetime import date
from decimal import Decimal

from plateplan.data.models import Difficulty, FailureReason, NormalizationFailure
from plateplan.normalizer import derive_shopping_list, extract_day_list, normalize


def _day(date_str, **meals):
    return {"date": date_str, "meals": meals}


class TestNullResponse:
    """normalize(None) delegates to the fallback generator."""

    def test_none_returns_three_day_fallback(self, seed_date):
        plan = normalize(None, seed_date)

        assert len(plan.days) == 3
        assert plan.source == "fallback"
        assert plan.days[0].date == seed_date

    def test_none_is_deterministic(self, seed_date):
        assert normalize(None, seed_date) == normalize(None, seed_date)


class TestDayListAdaptation:
    """Locating the day list under alternate keys."""

    def test_meal_plan_key(self):
        days = [_day("2025-01-06", dinner={"name": "Tacos"})]
        assert extract_day_list({"mealPlan": days}) is days

    def test_days_beats_plan(self):
        days = [_day("2025-01-06", dinner={"name": "Tacos"})]
        plan = [_day("2025-02-01", dinner={"name": "Soup"})]

        assert extract_day_list({"plan": plan, "days": days}) is days

    def test_full_precedence_order(self):
        raw = {
            "meals": [_day("2025-01-04", lunch={"name": "D"})],
            "plan": [_day("2025-01-03", lunch={"name": "C"})],
            "days": [_day("2025-01-02", lunch={"name": "B"})],
            "mealPlan": [_day("2025-01-01", lunch={"name": "A"})],
        }
        assert extract_day_list(raw) is raw["mealPlan"]

        del raw["mealPlan"]
        assert extract_day_list(raw) is raw["days"]

        del raw["days"]
        assert extract_day_list(raw) is raw["plan"]

        del raw["plan"]
        assert extract_day_list(raw) is raw["meals"]

    def test_empty_meal_plan_falls_through_to_days(self):
        days = [_day("2025-01-06", dinner={"name": "Tacos"})]
        assert extract_day_list({"mealPlan": [], "days": days}) is days

    def test_top_level_list(self):
        days = [_day("2025-01-06", dinner={"name": "Tacos"})]
        assert extract_day_list(days) is days

    def test_heuristic_scan_finds_day_shaped_list(self):
        raw = {
            "notes": ["buy early", "cook in batches"],
            "weekPlan": [_day("2025-01-06", dinner={"name": "Tacos"})],
        }
        assert extract_day_list(raw) is raw["weekPlan"]

    def test_heuristic_first_match_wins(self):
        first = [{"day": "Monday"}]
        second = [{"date": "2025-01-06"}]
        assert extract_day_list({"schedule": first, "other": second}) is first

    def test_heuristic_matches_on_key_presence(self):
        """A day-shaped key counts even when its value is empty."""
        raw = {"schedule": [{"date": "", "meals": {}}, {"date": "2025-01-07"}]}
        assert extract_day_list(raw) is raw["schedule"]

    def test_heuristic_ignores_non_day_lists(self):
        assert extract_day_list({"tips": [{"text": "hello"}], "count": 3}) == []

    def test_scalar_has_no_day_list(self):
        assert extract_day_list("not a plan") == []


class TestPlanLevelFailures:
    """EmptyPlan, MissingDates and InvalidDateFormat."""

    def test_empty_day_list(self):
        with pytest.raises(NormalizationFailure) as exc:
            normalize({"mealPlan": []})
        assert exc.value.reason == FailureReason.EMPTY_PLAN

    def test_no_day_list_at_all(self):
        with pytest.raises(NormalizationFailure) as exc:
            normalize({"message": "Sorry, I can't help with that."})
        assert exc.value.reason == FailureReason.EMPTY_PLAN

    def test_first_day_missing_date(self):
        raw = {"mealPlan": [
            {"meals": {"dinner": {"name": "Tacos"}}},
            _day("2025-01-07", dinner={"name": "Soup"}),
        ]}
        with pytest.raises(NormalizationFailure) as exc:
            normalize(raw)
        assert exc.value.reason == FailureReason.MISSING_DATES

    def test_last_day_missing_date(self):
        raw = {"mealPlan": [
            _day("2025-01-06", dinner={"name": "Tacos"}),
            {"day": "Day 2", "meals": {"dinner": {"name": "Soup"}}},
        ]}
        with pytest.raises(NormalizationFailure) as exc:
            normalize(raw)
        assert exc.value.reason == FailureReason.MISSING_DATES

    def test_blank_date_counts_as_missing(self):
        with pytest.raises(NormalizationFailure) as exc:
            normalize({"mealPlan": [_day("  ", dinner={"name": "Tacos"})]})
        assert exc.value.reason == FailureReason.MISSING_DATES

    def test_unparseable_first_date(self):
        raw = {"mealPlan": [
            _day("next monday", dinner={"name": "Tacos"}),
            _day("2025-01-07", dinner={"name": "Soup"}),
        ]}
        with pytest.raises(NormalizationFailure) as exc:
            normalize(raw)
        assert exc.value.reason == FailureReason.INVALID_DATE_FORMAT

    def test_no_valid_day_survives(self):
        raw = {"mealPlan": [_day("2025-01-06", dinner={"description": "no name"})]}
        with pytest.raises(NormalizationFailure) as exc:
            normalize(raw)
        assert exc.value.reason == FailureReason.EMPTY_PLAN

    def test_failure_message_names_reason(self):
        with pytest.raises(NormalizationFailure, match="EmptyPlan"):
            normalize({"mealPlan": []})


class TestDayCoercion:
    """Per-day and per-meal skipping is non-fatal."""

    def test_well_formed_days_all_kept(self, raw_response):
        plan = normalize(raw_response)

        assert [d.date for d in plan.days] == [date(2025, 10, 20), date(2025, 10, 21)]
        assert [d.label for d in plan.days] == ["Monday", "Tuesday"]
        assert list(plan.days[0].meals) == ["breakfast", "dinner"]

    def test_day_count_matches_valid_days(self):
        raw = {"mealPlan": [
            _day("2025-01-06", breakfast={"name": "Eggs"}),
            {"date": "2025-01-07"},                        # no meals mapping
            _day("2025-01-08", lunch="just a string"),     # no valid meal
            "garbage",                                     # not an object
            _day("2025-02-30", dinner={"name": "Stew"}),   # impossible date
            _day("2025-01-10", dinner={"name": "Curry"}),
        ]}
        plan = normalize(raw)

        assert [d.date.isoformat() for d in plan.days] == ["2025-01-06", "2025-01-10"]

    def test_invalid_meal_slots_skipped(self):
        raw = {"mealPlan": [_day(
            "2025-01-06",
            breakfast={"name": "Eggs"},
            lunch={"description": "nameless"},
            dinner=None,
            snack={"name": "   "},
        )]}
        plan = normalize(raw)

        assert list(plan.days[0].meals) == ["breakfast"]

    def test_default_label_uses_position(self):
        raw = {"days": [
            _day("2025-01-06", dinner={"name": "Tacos"}),
            _day("2025-01-07", dinner={"name": "Soup"}),
        ]}
        plan = normalize(raw)

        assert [d.label for d in plan.days] == ["Day 1", "Day 2"]

    def test_datetime_strings_accepted(self):
        raw = {"mealPlan": [_day("2025-01-06T08:00:00Z", dinner={"name": "Tacos"})]}
        plan = normalize(raw)

        assert plan.days[0].date == date(2025, 1, 6)

    def test_meal_fields_coerced(self, raw_response):
        dinner = normalize(raw_response).days[0].meals["dinner"]

        assert dinner.name == "Lemon Chicken"
        assert dinner.prep_time_minutes == 10
        assert dinner.cook_time_minutes == 25
        assert dinner.calories_per_serving == 520
        assert dinner.cost_estimate == Decimal("7.25")
        assert dinner.difficulty == Difficulty.MEDIUM
        assert dinner.cuisine_type == "mediterranean"
        assert dinner.nutrition == {"protein": 45.0, "carbs": 10.0, "fat": 20.0}

    def test_minimal_meal_gets_defaults(self):
        meal = normalize({"mealPlan": [_day("2025-01-06", lunch={"name": "Toast"})]}).days[0].meals["lunch"]

        assert meal.description == ""
        assert meal.ingredients == {}
        assert meal.instructions == []
        assert meal.prep_time_minutes == 0
        assert meal.cook_time_minutes == 0
        assert meal.calories_per_serving == 0
        assert meal.cost_estimate == Decimal("0")
        assert meal.difficulty == Difficulty.EASY
        assert meal.diet_tags == []
        assert meal.cuisine_type == "general"

    def test_input_order_preserved(self):
        raw = {"mealPlan": [
            _day("2025-01-08", dinner={"name": "C"}),
            _day("2025-01-06", dinner={"name": "A"}),
            _day("2025-01-07", dinner={"name": "B"}),
        ]}
        names = [d.meals["dinner"].name for d in normalize(raw).days]

        assert names == ["C", "A", "B"]


class TestShoppingList:
    """AI list, category map, and ingredient-derived lists."""

    def test_ai_list_adopted(self, raw_response):
        raw_response["shoppingList"] = [
            {"name": "Oats", "amount": "2 cups", "category": "pantry", "estimatedCost": 3.5},
            {"name": "Lemons", "amount": "2", "purchased": True},
        ]
        entries = normalize(raw_response).shopping_list

        assert [e.name for e in entries] == ["Oats", "Lemons"]
        assert entries[0].estimated_cost == Decimal("3.5")
        assert entries[0].purchased is False
        assert entries[1].category == "general"
        assert entries[1].estimated_cost == Decimal("0")
        assert entries[1].purchased is True

    def test_ai_list_of_strings(self, raw_response):
        raw_response["shoppingList"] = ["Greek yogurt (32 oz)", "Granola (1 box)"]
        entries = normalize(raw_response).shopping_list

        assert [e.name for e in entries] == ["Greek yogurt (32 oz)", "Granola (1 box)"]
        assert all(e.amount == "" for e in entries)

    def test_category_map_flattened(self, raw_response):
        raw_response["shoppingList"] = {
            "produce": {"lemons": "2", "berries": "1 cup"},
            "proteins": {"chicken breast": "8 oz"},
            "notes": "ignored",
        }
        entries = normalize(raw_response).shopping_list

        assert [(e.name, e.amount, e.category) for e in entries] == [
            ("lemons", "2", "produce"),
            ("berries", "1 cup", "produce"),
            ("chicken breast", "8 oz", "proteins"),
        ]
        assert all(e.estimated_cost == Decimal("0") and not e.purchased for e in entries)

    def test_derived_when_missing(self, raw_response):
        entries = normalize(raw_response).shopping_list

        by_name = {e.name: e for e in entries}
        assert by_name["Oats"].amount == "1 cup + 2 tbsp + 1 cup"
        assert by_name["Berries"].amount == "1/2 cup + 1/2 cup"
        assert by_name["chicken breast"].category == "general"

    def test_derived_when_ai_list_empty(self, raw_response):
        raw_response["shoppingList"] = []
        assert len(normalize(raw_response).shopping_list) > 0

    def test_merge_is_text_concatenation(self):
        raw = {"mealPlan": [
            _day("2025-01-06", breakfast={"name": "Omelette", "ingredients": {"Egg": "2"}}),
            _day("2025-01-07", breakfast={"name": "Fried egg", "ingredients": {"egg": "1"}}),
        ]}
        entries = normalize(raw).shopping_list

        assert len(entries) == 1
        assert entries[0].name == "Egg"
        assert entries[0].amount == "2 + 1"

    def test_derive_only_uses_retained_days(self):
        raw = {"mealPlan": [
            _day("2025-01-06", dinner={"name": "Tacos", "ingredients": {"tortillas": "8"}}),
            _day("not-a-date", dinner={"name": "Soup", "ingredients": {"stock": "1 l"}}),
        ]}
        entries = normalize(raw).shopping_list

        assert [e.name for e in entries] == ["tortillas"]

    def test_derive_shopping_list_empty_for_no_days(self):
        assert derive_shopping_list([]) == []


class TestTotals:
    """Totals and extras carried from the raw response."""

    def test_totals_from_raw(self, raw_response):
        plan = normalize(raw_response)

        assert plan.total_cost == Decimal("19.25")
        assert plan.total_calories == 1120

    def test_totals_default_to_zero(self):
        plan = normalize({"mealPlan": [_day("2025-01-06", dinner={"name": "Tacos"})]})

        assert plan.total_cost == Decimal("0")
        assert plan.total_calories == 0

    def test_extras_carried(self, raw_response):
        raw_response["tips"] = ["Batch cook grains"]
        raw_response["prepAdvice"] = "Chop vegetables on Sunday."
        raw_response["nutritionalSummary"] = {"avgProtein": 30}
        plan = normalize(raw_response)

        assert plan.tips == ["Batch cook grains"]
        assert plan.prep_advice == "Chop vegetables on Sunday."
        assert plan.nutritional_summary == {"avgProtein": 30.0}
        assert plan.source == "ai"


class TestEndToEnd:
    """A partially broken response still yields a usable plan."""

    def test_bad_trailing_day_dropped(self):
        raw = {
            "mealPlan": [
                {"date": "2024-01-01", "meals": {"breakfast": {"name": "Oats"}}},
                {"date": "bad-date", "meals": {}},
            ],
            "shoppingList": None,
        }
        plan = normalize(raw)

        assert len(plan.days) == 1
        day = plan.days[0]
        assert day.date == date(2024, 1, 1)
        assert list(day.meals) == ["breakfast"]

        oats = day.meals["breakfast"]
        assert oats.name == "Oats"
        assert oats.prep_time_minutes == 0
        assert oats.cook_time_minutes == 0
        assert oats.calories_per_serving == 0
        assert oats.cost_estimate == Decimal("0")
        assert oats.ingredients == {}
        assert oats.instructions == []
        assert oats.difficulty == Difficulty.EASY
        assert oats.cuisine_type == "general"

        assert plan.shopping_list == []
        assert plan.date_range() == (date(2024, 1, 1), date(2024, 1, 1))
