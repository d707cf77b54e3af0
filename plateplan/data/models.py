"""
Data models for plateplan.

These models define the canonical shapes produced by normalization:
- CanonicalMeal: one dish in a meal slot
- CanonicalDay: a dated day of meals
- ShoppingListEntry: one line of the shopping list
- CanonicalMealPlan: the full multi-day plan
- MealPlanRequest: user preferences sent to the AI model
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field


class MealSlot(str, Enum):
    """Named positions within a day."""
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class FailureReason(str, Enum):
    """Plan-level reasons a raw AI response cannot be normalized."""
    EMPTY_PLAN = "EmptyPlan"
    MISSING_DATES = "MissingDates"
    INVALID_DATE_FORMAT = "InvalidDateFormat"


class NormalizationFailure(Exception):
    """Raised when a raw response cannot yield a usable meal plan."""

    def __init__(self, reason: FailureReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = reason.value if not detail else f"{reason.value}: {detail}"
        super().__init__(message)


def _money(value: Decimal) -> float:
    return float(value)


@dataclass
class CanonicalMeal:
    """A single dish in canonical form."""

    name: str
    description: str = ""
    ingredients: Dict[str, str] = field(default_factory=dict)  # ingredient -> quantity text
    instructions: List[str] = field(default_factory=list)
    prep_time_minutes: int = 0
    cook_time_minutes: int = 0
    calories_per_serving: int = 0
    cost_estimate: Decimal = Decimal("0")
    difficulty: Difficulty = Difficulty.EASY
    diet_tags: List[str] = field(default_factory=list)  # deduplicated
    cuisine_type: str = "general"
    nutrition: Dict[str, float] = field(default_factory=dict)  # protein/carbs/fat/fiber

    @property
    def total_time_minutes(self) -> int:
        return self.prep_time_minutes + self.cook_time_minutes

    def __str__(self) -> str:
        return f"{self.name} ({self.calories_per_serving} cal, {self.total_time_minutes} min)"

    def to_dict(self) -> Dict:
        """Serialize using the camelCase keys of the AI contract."""
        return {
            "name": self.name,
            "description": self.description,
            "ingredients": dict(self.ingredients),
            "instructions": list(self.instructions),
            "prepTime": self.prep_time_minutes,
            "cookTime": self.cook_time_minutes,
            "calories": self.calories_per_serving,
            "cost": _money(self.cost_estimate),
            "difficulty": self.difficulty.value,
            "dietTags": list(self.diet_tags),
            "cuisineType": self.cuisine_type,
            "nutrition": dict(self.nutrition),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CanonicalMeal":
        """Create CanonicalMeal from to_dict() output."""
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            ingredients=dict(data.get("ingredients", {})),
            instructions=list(data.get("instructions", [])),
            prep_time_minutes=data.get("prepTime", 0),
            cook_time_minutes=data.get("cookTime", 0),
            calories_per_serving=data.get("calories", 0),
            cost_estimate=Decimal(str(data.get("cost", 0))),
            difficulty=Difficulty(data.get("difficulty", "easy")),
            diet_tags=list(data.get("dietTags", [])),
            cuisine_type=data.get("cuisineType", "general"),
            nutrition=dict(data.get("nutrition", {})),
        )


@dataclass
class CanonicalDay:
    """A dated day with its meals keyed by slot name."""

    label: str  # "Day 1", "Monday", ...
    date: date
    meals: Dict[str, CanonicalMeal] = field(default_factory=dict)

    @property
    def calories(self) -> int:
        return sum(meal.calories_per_serving for meal in self.meals.values())

    def get_meal(self, slot) -> Optional[CanonicalMeal]:
        """
        Get the meal for a slot.

        Args:
            slot: MealSlot or plain slot name

        Returns:
            CanonicalMeal or None if the slot is empty
        """
        key = slot.value if isinstance(slot, MealSlot) else slot
        return self.meals.get(key)

    def __str__(self) -> str:
        return f"{self.label} ({self.date.isoformat()}): {len(self.meals)} meals"

    def to_dict(self) -> Dict:
        return {
            "day": self.label,
            "date": self.date.isoformat(),
            "meals": {slot: meal.to_dict() for slot, meal in self.meals.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CanonicalDay":
        return cls(
            label=data["day"],
            date=date.fromisoformat(data["date"]),
            meals={slot: CanonicalMeal.from_dict(m) for slot, m in data.get("meals", {}).items()},
        )


@dataclass
class ShoppingListEntry:
    """Single line on a shopping list."""

    name: str
    amount: str = ""
    category: str = "general"
    estimated_cost: Decimal = Decimal("0")
    purchased: bool = False

    def __str__(self) -> str:
        return f"{self.name} ({self.amount})" if self.amount else self.name

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "amount": self.amount,
            "category": self.category,
            "estimatedCost": _money(self.estimated_cost),
            "purchased": self.purchased,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ShoppingListEntry":
        return cls(
            name=data["name"],
            amount=data.get("amount", ""),
            category=data.get("category", "general"),
            estimated_cost=Decimal(str(data.get("estimatedCost", 0))),
            purchased=bool(data.get("purchased", False)),
        )


@dataclass
class CanonicalMealPlan:
    """Validated multi-day meal plan with its shopping list."""

    days: List[CanonicalDay]
    shopping_list: List[ShoppingListEntry] = field(default_factory=list)
    total_cost: Decimal = Decimal("0")
    total_calories: int = 0
    nutritional_summary: Dict[str, float] = field(default_factory=dict)
    tips: List[str] = field(default_factory=list)
    prep_advice: str = ""
    source: str = "ai"  # "ai" or "fallback"

    def __post_init__(self):
        if not self.days:
            raise ValueError("CanonicalMealPlan requires at least one day")

    def date_range(self) -> Tuple[date, date]:
        """
        Get the start and end dates of this meal plan.

        Returns:
            Tuple of (start_date, end_date) from the first and last day
        """
        return (self.days[0].date, self.days[-1].date)

    def iter_meals(self) -> Iterator[Tuple[CanonicalDay, str, CanonicalMeal]]:
        """Yield (day, slot, meal) for every meal in plan order."""
        for day in self.days:
            for slot, meal in day.meals.items():
                yield day, slot, meal

    def get_meals_by_slot(self, slot) -> List[CanonicalMeal]:
        key = slot.value if isinstance(slot, MealSlot) else slot
        return [meal for _, s, meal in self.iter_meals() if s == key]

    def get_shopping_list_by_category(self) -> Dict[str, List[ShoppingListEntry]]:
        """
        Get shopping list entries grouped by category.

        Returns:
            Dictionary mapping category to entries, in first-seen order
        """
        by_category: Dict[str, List[ShoppingListEntry]] = {}
        for entry in self.shopping_list:
            by_category.setdefault(entry.category, []).append(entry)
        return by_category

    @property
    def meal_count(self) -> int:
        return sum(len(day.meals) for day in self.days)

    def get_summary(self) -> str:
        start, end = self.date_range()
        return (
            f"Meal Plan: {start.isoformat()} to {end.isoformat()} "
            f"({len(self.days)} days, {self.meal_count} meals)"
        )

    def __str__(self) -> str:
        return self.get_summary()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "mealPlan": [day.to_dict() for day in self.days],
            "shoppingList": [entry.to_dict() for entry in self.shopping_list],
            "totalCost": _money(self.total_cost),
            "totalCalories": self.total_calories,
            "nutritionalSummary": dict(self.nutritional_summary),
            "tips": list(self.tips),
            "prepAdvice": self.prep_advice,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CanonicalMealPlan":
        """Create CanonicalMealPlan from to_dict() output."""
        return cls(
            days=[CanonicalDay.from_dict(d) for d in data["mealPlan"]],
            shopping_list=[ShoppingListEntry.from_dict(e) for e in data.get("shoppingList", [])],
            total_cost=Decimal(str(data.get("totalCost", 0))),
            total_calories=data.get("totalCalories", 0),
            nutritional_summary=dict(data.get("nutritionalSummary", {})),
            tips=list(data.get("tips", [])),
            prep_advice=data.get("prepAdvice", ""),
            source=data.get("source", "ai"),
        )


class MealPlanRequest(BaseModel):
    """User preferences used to prompt the AI model."""
    diet_type: Optional[str] = None
    allergies: list[str] = Field(default_factory=list)
    budget_weekly: Optional[float] = Field(default=None, ge=0)
    people_count: int = Field(default=1, ge=1)
    max_cooking_time: int = Field(default=30, ge=1)
    cuisine_types: list[str] = Field(default_factory=list)
    health_goals: list[str] = Field(default_factory=list)
    start_date: Optional[date] = None
