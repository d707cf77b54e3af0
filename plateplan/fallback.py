"""
Fallback meal plan generator.

Used when the AI model is unavailable, fails, or returns nothing usable.
The plan is a static sample: each slot cycles through a small fixed menu
by day index, and the shopping list and totals are fixed literals that
do not depend on which dishes were picked.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from plateplan.coercion import coerce_meal, coerce_shopping_entry
from plateplan.data.models import CanonicalDay, CanonicalMealPlan, MealSlot

logger = logging.getLogger(__name__)

FALLBACK_DAYS = 3

# Menus are indexed by day_index % len(menu)
BREAKFAST_MENU = [
    {
        "name": "Oatmeal with Berries",
        "description": "Healthy breakfast with oats, berries, and honey",
        "ingredients": {"oats": "1 cup", "berries": "1/2 cup", "honey": "1 tbsp"},
        "instructions": ["Cook oats", "Add berries", "Drizzle with honey"],
        "prepTime": 5,
        "cookTime": 10,
        "calories": 300,
        "cost": "2.50",
        "difficulty": "easy",
        "dietTags": ["vegetarian", "healthy"],
        "nutrition": {"protein": 10, "carbs": 55, "fat": 5, "fiber": 8},
    },
    {
        "name": "Greek Yogurt Parfait",
        "description": "Creamy yogurt with granola and fresh fruit",
        "ingredients": {"greek yogurt": "1 cup", "granola": "1/2 cup", "berries": "1/2 cup"},
        "instructions": ["Layer yogurt", "Add granola", "Top with berries"],
        "prepTime": 5,
        "cookTime": 0,
        "calories": 280,
        "cost": "3.00",
        "difficulty": "easy",
        "dietTags": ["vegetarian", "healthy"],
        "nutrition": {"protein": 18, "carbs": 45, "fat": 8, "fiber": 6},
    },
]

LUNCH_MENU = [
    {
        "name": "Grilled Chicken Salad",
        "description": "Fresh salad with grilled chicken breast",
        "ingredients": {"chicken breast": "4 oz", "lettuce": "2 cups", "tomatoes": "1/2 cup"},
        "instructions": ["Grill chicken", "Chop vegetables", "Combine and serve"],
        "prepTime": 10,
        "cookTime": 15,
        "calories": 400,
        "cost": "6.00",
        "difficulty": "easy",
        "dietTags": ["high-protein", "low-carb"],
        "nutrition": {"protein": 35, "carbs": 15, "fat": 20, "fiber": 5},
    },
    {
        "name": "Quinoa Bowl",
        "description": "Nutritious quinoa with vegetables",
        "ingredients": {"quinoa": "1/2 cup", "vegetables": "1 cup", "olive oil": "1 tbsp"},
        "instructions": ["Cook quinoa", "Steam vegetables", "Combine with olive oil"],
        "prepTime": 10,
        "cookTime": 20,
        "calories": 350,
        "cost": "4.50",
        "difficulty": "easy",
        "dietTags": ["vegetarian", "gluten-free"],
        "nutrition": {"protein": 12, "carbs": 60, "fat": 15, "fiber": 8},
    },
    {
        "name": "Turkey Wrap",
        "description": "Lean turkey in whole grain wrap",
        "ingredients": {"turkey": "3 oz", "whole grain wrap": "1", "vegetables": "1/2 cup"},
        "instructions": ["Warm wrap", "Add turkey and vegetables", "Roll and serve"],
        "prepTime": 10,
        "cookTime": 5,
        "calories": 380,
        "cost": "5.50",
        "difficulty": "easy",
        "dietTags": ["balanced", "portable"],
        "nutrition": {"protein": 25, "carbs": 45, "fat": 12, "fiber": 6},
    },
]

DINNER_MENU = [
    {
        "name": "Salmon with Vegetables",
        "description": "Baked salmon with roasted vegetables",
        "ingredients": {"salmon": "6 oz", "broccoli": "1 cup", "carrots": "1 cup"},
        "instructions": ["Season salmon", "Roast vegetables", "Bake salmon"],
        "prepTime": 15,
        "cookTime": 20,
        "calories": 450,
        "cost": "8.50",
        "difficulty": "medium",
        "dietTags": ["omega-3", "healthy"],
        "nutrition": {"protein": 40, "carbs": 20, "fat": 25, "fiber": 8},
    },
    {
        "name": "Pasta Primavera",
        "description": "Fresh pasta with seasonal vegetables",
        "ingredients": {"pasta": "2 oz", "vegetables": "1.5 cups", "olive oil": "1 tbsp"},
        "instructions": ["Cook pasta", "Sauté vegetables", "Combine with olive oil"],
        "prepTime": 15,
        "cookTime": 15,
        "calories": 380,
        "cost": "5.00",
        "difficulty": "easy",
        "dietTags": ["vegetarian"],
        "nutrition": {"protein": 12, "carbs": 65, "fat": 15, "fiber": 8},
    },
    {
        "name": "Beef Stir Fry",
        "description": "Lean beef with colorful vegetables",
        "ingredients": {"beef": "4 oz", "vegetables": "1.5 cups", "soy sauce": "1 tbsp"},
        "instructions": ["Stir fry beef", "Add vegetables", "Season with soy sauce"],
        "prepTime": 15,
        "cookTime": 12,
        "calories": 420,
        "cost": "7.00",
        "difficulty": "easy",
        "dietTags": ["high-protein"],
        "nutrition": {"protein": 35, "carbs": 25, "fat": 18, "fiber": 6},
    },
    {
        "name": "Vegetarian Curry",
        "description": "Spiced vegetables with rice",
        "ingredients": {"vegetables": "2 cups", "rice": "1/2 cup", "coconut milk": "1/4 cup"},
        "instructions": ["Cook rice", "Sauté vegetables", "Add coconut milk and spices"],
        "prepTime": 15,
        "cookTime": 25,
        "calories": 320,
        "cost": "4.50",
        "difficulty": "easy",
        "dietTags": ["vegetarian", "vegan"],
        "nutrition": {"protein": 8, "carbs": 55, "fat": 12, "fiber": 10},
    },
]

SLOT_MENUS = [
    (MealSlot.BREAKFAST, BREAKFAST_MENU),
    (MealSlot.LUNCH, LUNCH_MENU),
    (MealSlot.DINNER, DINNER_MENU),
]

# Static sample list; intentionally not derived from the selected dishes
FALLBACK_SHOPPING_LIST = [
    {"name": "berries", "amount": "2 cups", "category": "produce", "estimatedCost": "4.00"},
    {"name": "lettuce", "amount": "4 cups", "category": "produce", "estimatedCost": "3.00"},
    {"name": "tomatoes", "amount": "2 cups", "category": "produce", "estimatedCost": "3.00"},
    {"name": "broccoli", "amount": "3 cups", "category": "produce", "estimatedCost": "4.50"},
    {"name": "carrots", "amount": "3 cups", "category": "produce", "estimatedCost": "2.00"},
    {"name": "vegetables", "amount": "4 cups", "category": "produce", "estimatedCost": "5.00"},
    {"name": "chicken breast", "amount": "12 oz", "category": "proteins", "estimatedCost": "6.00"},
    {"name": "salmon", "amount": "6 oz", "category": "proteins", "estimatedCost": "8.00"},
    {"name": "beef", "amount": "8 oz", "category": "proteins", "estimatedCost": "7.00"},
    {"name": "turkey", "amount": "6 oz", "category": "proteins", "estimatedCost": "5.00"},
    {"name": "oats", "amount": "3 cups", "category": "pantry", "estimatedCost": "2.00"},
    {"name": "honey", "amount": "2 tbsp", "category": "pantry", "estimatedCost": "1.00"},
    {"name": "quinoa", "amount": "2 cups", "category": "pantry", "estimatedCost": "3.00"},
    {"name": "pasta", "amount": "4 oz", "category": "pantry", "estimatedCost": "1.50"},
    {"name": "rice", "amount": "1 cup", "category": "pantry", "estimatedCost": "1.00"},
    {"name": "olive oil", "amount": "3 tbsp", "category": "pantry", "estimatedCost": "2.00"},
    {"name": "soy sauce", "amount": "2 tbsp", "category": "pantry", "estimatedCost": "1.00"},
    {"name": "coconut milk", "amount": "1/2 cup", "category": "pantry", "estimatedCost": "2.00"},
    {"name": "greek yogurt", "amount": "3 cups", "category": "dairy", "estimatedCost": "6.00"},
    {"name": "granola", "amount": "2 cups", "category": "dairy", "estimatedCost": "4.00"},
]

FALLBACK_TOTAL_COST = Decimal("65.00")
FALLBACK_TOTAL_CALORIES = 8050

FALLBACK_NUTRITIONAL_SUMMARY = {
    "avgProtein": 32,
    "avgCarbs": 45,
    "avgFat": 20,
    "avgFiber": 8,
}

FALLBACK_TIPS = [
    "Buy ingredients in bulk to save money",
    "Prepare meals in advance for busy days",
    "Use seasonal vegetables for better prices",
    "Cook grains in batches for the week",
]

FALLBACK_PREP_ADVICE = (
    "Cook grains and proteins in advance, store in containers for easy meal assembly. "
    "Chop vegetables ahead of time and store in airtight containers."
)


def generate_fallback(seed_date: Optional[date] = None) -> CanonicalMealPlan:
    """
    Build the static three-day sample plan.

    Args:
        seed_date: Date of "Day 1" (defaults to today)

    Returns:
        CanonicalMealPlan with source="fallback"
    """
    start = seed_date or date.today()

    days = []
    for index in range(FALLBACK_DAYS):
        meals = {
            slot.value: coerce_meal(menu[index % len(menu)])
            for slot, menu in SLOT_MENUS
        }
        days.append(
            CanonicalDay(
                label=f"Day {index + 1}",
                date=start + timedelta(days=index),
                meals=meals,
            )
        )

    logger.info(f"Generated fallback meal plan starting {start.isoformat()}")

    return CanonicalMealPlan(
        days=days,
        shopping_list=[coerce_shopping_entry(item) for item in FALLBACK_SHOPPING_LIST],
        total_cost=FALLBACK_TOTAL_COST,
        total_calories=FALLBACK_TOTAL_CALORIES,
        nutritional_summary={k: float(v) for k, v in FALLBACK_NUTRITIONAL_SUMMARY.items()},
        tips=list(FALLBACK_TIPS),
        prep_advice=FALLBACK_PREP_ADVICE,
        source="fallback",
    )
