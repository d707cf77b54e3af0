"""
Field coercion for loosely-typed AI output.

Each helper takes whatever the model produced for one field and returns
the canonical value, falling back to the field default when the input
cannot be used. None of these raise on bad input except coerce_meal,
which returns None for bodies that cannot become a meal.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from plateplan.data.models import CanonicalMeal, Difficulty, ShoppingListEntry

_LEADING_NUMBER = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def parse_date(value: Any) -> Optional[date]:
    """
    Parse an ISO date or date-time into a calendar date.

    Args:
        value: "2024-01-01", "2024-01-01T08:00:00Z", a date, or anything else

    Returns:
        date, or None if the value is not a parseable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def has_value(value: Any) -> bool:
    """True unless value is None or a blank string."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _number(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return None
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value.replace("$", "").replace(",", ""))
        if match:
            return Decimal(match.group(1))
    return None


def to_non_negative_int(value: Any) -> int:
    """Coerce 15, 15.6, "15 minutes" to an int >= 0; anything else is 0."""
    number = _number(value)
    if number is None or not number.is_finite() or number < 0:
        return 0
    return int(number)


def to_non_negative_decimal(value: Any) -> Decimal:
    """Coerce 4.5, "$4.50" to a Decimal >= 0; anything else is 0."""
    number = _number(value)
    if number is None or not number.is_finite() or number < 0:
        return Decimal("0")
    return number


def to_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip() or default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def to_text_list(value: Any) -> List[str]:
    """Coerce a list of steps/tags to non-blank strings; a lone string becomes one item."""
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        return []
    return [to_text(item) for item in value if to_text(item)]


def to_tag_set(value: Any) -> List[str]:
    """Deduplicate tags case-insensitively, keeping first-seen order and casing."""
    seen = set()
    tags = []
    for tag in to_text_list(value):
        key = tag.lower()
        if key not in seen:
            seen.add(key)
            tags.append(tag)
    return tags


def to_ingredients(value: Any) -> Dict[str, str]:
    """
    Coerce an ingredients field to an ordered name -> quantity-text mapping.

    Accepts the documented {"oats": "1 cup"} shape plus the list forms
    models sometimes return: [{"name": "oats", "amount": "1 cup"}] or
    ["oats", "berries"] (empty quantity).
    """
    ingredients: Dict[str, str] = {}
    if isinstance(value, dict):
        for name, amount in value.items():
            name = to_text(name)
            if name:
                ingredients[name] = to_text(amount)
    elif isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, dict):
                name = to_text(item.get("name") or item.get("item"))
                if name:
                    ingredients[name] = to_text(item.get("amount", item.get("quantity")))
            else:
                name = to_text(item)
                if name:
                    ingredients[name] = ""
    return ingredients


def to_nutrition(value: Any) -> Dict[str, float]:
    if not isinstance(value, dict):
        return {}
    nutrition = {}
    for key, amount in value.items():
        number = _number(amount)
        if number is not None and number.is_finite():
            nutrition[str(key)] = float(number)
    return nutrition


def to_difficulty(value: Any) -> Difficulty:
    try:
        return Difficulty(to_text(value).lower())
    except ValueError:
        return Difficulty.EASY


def coerce_meal(body: Any) -> Optional[CanonicalMeal]:
    """
    Coerce one meal body from a day's meals mapping.

    Args:
        body: Raw meal object from the AI response

    Returns:
        CanonicalMeal, or None if body is not an object or has no name
    """
    if not isinstance(body, dict):
        return None
    name = to_text(body.get("name"))
    if not name:
        return None

    return CanonicalMeal(
        name=name,
        description=to_text(body.get("description")),
        ingredients=to_ingredients(body.get("ingredients")),
        instructions=to_text_list(body.get("instructions")),
        prep_time_minutes=to_non_negative_int(body.get("prepTime")),
        cook_time_minutes=to_non_negative_int(body.get("cookTime")),
        calories_per_serving=to_non_negative_int(
            body.get("calories", body.get("caloriesPerServing"))
        ),
        cost_estimate=to_non_negative_decimal(body.get("cost", body.get("costEstimate"))),
        difficulty=to_difficulty(body.get("difficulty", body.get("difficultyLevel"))),
        diet_tags=to_tag_set(body.get("dietTags")),
        cuisine_type=to_text(body.get("cuisineType"), default="general"),
        nutrition=to_nutrition(body.get("nutrition")),
    )


def coerce_shopping_entry(item: Any, category: str = "general") -> Optional[ShoppingListEntry]:
    """
    Coerce one shopping list item.

    Dicts need a name; bare strings ("Greek yogurt (32 oz)") become the
    entry name with an empty amount. Anything else is dropped.
    """
    if isinstance(item, str):
        name = item.strip()
        return ShoppingListEntry(name=name, category=category) if name else None
    if not isinstance(item, dict):
        return None
    name = to_text(item.get("name") or item.get("item"))
    if not name:
        return None
    return ShoppingListEntry(
        name=name,
        amount=to_text(item.get("amount", item.get("quantity"))),
        category=to_text(item.get("category"), default=category),
        estimated_cost=to_non_negative_decimal(item.get("estimatedCost")),
        purchased=item.get("purchased") is True,
    )
