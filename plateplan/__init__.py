"""
plateplan - normalize AI-generated meal plans into a canonical shape.
"""

from plateplan.data.models import (
    CanonicalDay,
    CanonicalMeal,
    CanonicalMealPlan,
    Difficulty,
    FailureReason,
    MealPlanRequest,
    MealSlot,
    NormalizationFailure,
    ShoppingListEntry,
)
from plateplan.fallback import generate_fallback
from plateplan.normalizer import normalize

__version__ = "0.1.0"

__all__ = [
    "CanonicalDay",
    "CanonicalMeal",
    "CanonicalMealPlan",
    "Difficulty",
    "FailureReason",
    "MealPlanRequest",
    "MealSlot",
    "NormalizationFailure",
    "ShoppingListEntry",
    "generate_fallback",
    "normalize",
]
