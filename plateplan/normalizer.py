"""
Meal plan normalization.

Turns whatever JSON the AI model returned into a CanonicalMealPlan.

Steps:
- locate the day list (ordered extractors, first non-empty wins)
- check the plan has days and a usable start date
- coerce each day and meal, skipping malformed units
- build the shopping list (AI list, AI category map, or derived from ingredients)

A None response goes straight to the fallback generator.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from plateplan.coercion import (
    coerce_meal,
    coerce_shopping_entry,
    has_value,
    parse_date,
    to_non_negative_decimal,
    to_non_negative_int,
    to_nutrition,
    to_text,
    to_text_list,
)
from plateplan.data.models import (
    CanonicalDay,
    CanonicalMealPlan,
    FailureReason,
    NormalizationFailure,
    ShoppingListEntry,
)
from plateplan.fallback import generate_fallback

logger = logging.getLogger(__name__)

DAY_SHAPE_KEYS = ("meals", "day", "date")


# ============================================================================
# Day list extraction
# ============================================================================

def _non_empty_list(value: Any) -> Optional[List[Any]]:
    if isinstance(value, list) and value:
        return value
    return None


def _from_top_level_list(raw: Any) -> Optional[List[Any]]:
    return _non_empty_list(raw)


def _from_key(key: str) -> Callable[[Any], Optional[List[Any]]]:
    def extract(raw: Any) -> Optional[List[Any]]:
        if isinstance(raw, dict):
            return _non_empty_list(raw.get(key))
        return None
    extract.__name__ = f"from_{key}"
    return extract


def _looks_like_day(item: Any) -> bool:
    return isinstance(item, dict) and any(k in item for k in DAY_SHAPE_KEYS)


def _from_any_day_shaped_list(raw: Any) -> Optional[List[Any]]:
    """First property (in key order) holding a non-empty list of day-shaped objects."""
    if not isinstance(raw, dict):
        return None
    for key, value in raw.items():
        candidate = _non_empty_list(value)
        if candidate and _looks_like_day(candidate[0]):
            logger.info(f"Using '{key}' property as meal plan with {len(candidate)} items")
            return candidate
    return None


# Priority order: mealPlan > days > plan > meals > heuristic scan
DAY_LIST_EXTRACTORS: List[Callable[[Any], Optional[List[Any]]]] = [
    _from_top_level_list,
    _from_key("mealPlan"),
    _from_key("days"),
    _from_key("plan"),
    _from_key("meals"),
    _from_any_day_shaped_list,
]


def extract_day_list(raw: Any) -> List[Any]:
    """
    Locate the list of day objects in a raw response.

    Args:
        raw: Parsed AI response (dict, list, or anything else)

    Returns:
        The first non-empty day list found, or [] if there is none
    """
    for extractor in DAY_LIST_EXTRACTORS:
        days = extractor(raw)
        if days:
            logger.debug(f"Day list found by {extractor.__name__} ({len(days)} items)")
            return days
    return []


# ============================================================================
# Validation and day coercion
# ============================================================================

def _day_date(day: Any) -> Any:
    return day.get("date") if isinstance(day, dict) else None


def _check_bounding_dates(days: List[Any]) -> date:
    """
    Validate the first and last day carry dates and the first one parses.

    Returns:
        Parsed start date

    Raises:
        NormalizationFailure: MissingDates or InvalidDateFormat
    """
    first, last = _day_date(days[0]), _day_date(days[-1])
    if not has_value(first) or not has_value(last):
        logger.error(f"Missing date properties in meal plan: first={first!r}, last={last!r}")
        raise NormalizationFailure(FailureReason.MISSING_DATES, "first or last day has no date")

    start = parse_date(first)
    if start is None:
        logger.error(f"Invalid date format in meal plan: first={first!r}")
        raise NormalizationFailure(FailureReason.INVALID_DATE_FORMAT, f"unparseable date {first!r}")
    if parse_date(last) is None:
        logger.warning(f"Last day has unparseable date {last!r}; it will be skipped")
    return start


def coerce_day(raw_day: Any, position: int) -> Optional[CanonicalDay]:
    """
    Coerce one raw day, or return None if it should be skipped.

    Args:
        raw_day: Raw day object
        position: 1-based position in the day list (used for default label)
    """
    if not isinstance(raw_day, dict):
        logger.warning(f"Skipping day {position}: not an object")
        return None

    raw_meals = raw_day.get("meals")
    if not has_value(raw_day.get("date")) or not isinstance(raw_meals, dict):
        logger.warning(f"Skipping invalid day structure at position {position}")
        return None

    day_date = parse_date(raw_day["date"])
    if day_date is None:
        logger.warning(f"Skipping day with invalid date: {raw_day['date']!r}")
        return None

    meals = {}
    for slot, body in raw_meals.items():
        meal = coerce_meal(body)
        if meal is None:
            logger.warning(f"Skipping {slot} on {day_date.isoformat()}: missing name or not an object")
            continue
        meals[str(slot)] = meal

    if not meals:
        logger.warning(f"Skipping {day_date.isoformat()}: no valid meals")
        return None

    return CanonicalDay(
        label=to_text(raw_day.get("day"), default=f"Day {position}"),
        date=day_date,
        meals=meals,
    )


# ============================================================================
# Shopping list
# ============================================================================

def _shopping_from_list(items: List[Any]) -> List[ShoppingListEntry]:
    entries = [coerce_shopping_entry(item) for item in items]
    return [e for e in entries if e is not None]


def _shopping_from_categories(categories: Dict[str, Any]) -> List[ShoppingListEntry]:
    entries = []
    for category, items in categories.items():
        if not isinstance(items, dict):
            continue
        for name, amount in items.items():
            name = to_text(name)
            if name:
                entries.append(
                    ShoppingListEntry(name=name, amount=to_text(amount), category=str(category))
                )
    return entries


def derive_shopping_list(days: List[CanonicalDay]) -> List[ShoppingListEntry]:
    """
    Build a shopping list from meal ingredients.

    Ingredients are matched case-insensitively; the first spelling wins and
    repeated amounts are joined as text ("2 cups + 1 cup"), not summed.
    """
    merged: Dict[str, ShoppingListEntry] = {}
    for day in days:
        for meal in day.meals.values():
            for name, amount in meal.ingredients.items():
                key = name.lower()
                if key in merged:
                    merged[key].amount = f"{merged[key].amount} + {amount}"
                else:
                    merged[key] = ShoppingListEntry(name=name, amount=amount)
    return list(merged.values())


def build_shopping_list(raw: Any, days: List[CanonicalDay]) -> List[ShoppingListEntry]:
    raw_list = raw.get("shoppingList") if isinstance(raw, dict) else None

    entries: List[ShoppingListEntry] = []
    if isinstance(raw_list, list):
        entries = _shopping_from_list(raw_list)
    elif isinstance(raw_list, dict):
        entries = _shopping_from_categories(raw_list)

    if entries:
        return entries
    return derive_shopping_list(days)


# ============================================================================
# Entry point
# ============================================================================

def normalize(raw: Any, seed_date: Optional[date] = None) -> CanonicalMealPlan:
    """
    Normalize a raw AI meal plan response.

    Args:
        raw: Parsed AI response, or None when no response is available
        seed_date: Start date for the fallback plan when raw is None

    Returns:
        CanonicalMealPlan

    Raises:
        NormalizationFailure: EmptyPlan, MissingDates or InvalidDateFormat
    """
    if raw is None:
        logger.warning("No AI response available, using fallback meal plan")
        return generate_fallback(seed_date)

    raw_days = extract_day_list(raw)
    if not raw_days:
        keys = list(raw.keys()) if isinstance(raw, dict) else type(raw).__name__
        logger.error(f"No meal plan days found in response (available: {keys})")
        raise NormalizationFailure(FailureReason.EMPTY_PLAN, "no day list in response")

    _check_bounding_dates(raw_days)

    days = []
    for position, raw_day in enumerate(raw_days, start=1):
        day = coerce_day(raw_day, position)
        if day is not None:
            days.append(day)

    if not days:
        raise NormalizationFailure(FailureReason.EMPTY_PLAN, "no valid days after coercion")

    totals = raw if isinstance(raw, dict) else {}
    plan = CanonicalMealPlan(
        days=days,
        shopping_list=build_shopping_list(raw, days),
        total_cost=to_non_negative_decimal(totals.get("totalCost")),
        total_calories=to_non_negative_int(totals.get("totalCalories")),
        nutritional_summary=to_nutrition(totals.get("nutritionalSummary")),
        tips=to_text_list(totals.get("tips")),
        prep_advice=to_text(totals.get("prepAdvice")),
        source="ai",
    )

    logger.info(
        f"Normalized meal plan: {len(days)}/{len(raw_days)} days kept, "
        f"{plan.meal_count} meals, {len(plan.shopping_list)} shopping items"
    )
    return plan
