"""
Prompt templates for meal plan generation.
"""

from plateplan.data.models import MealPlanRequest

SYSTEM_PROMPT = (
    "You are a professional nutritionist and meal planning expert with 20+ years of experience. "
    "You specialize in creating personalized, practical, and delicious meal plans that meet "
    "specific dietary and budgetary requirements. Always respond with valid, well-structured "
    "JSON only. Ensure all recipes are realistic, achievable, and nutritionally balanced."
)

RETRY_SYSTEM_PROMPT = "You are a meal planning expert. Return ONLY valid JSON, no other text."

DEFAULT_BUDGET = 100
PLACEHOLDER_DATE = "2024-01-01"


def _join(values, default: str) -> str:
    return ", ".join(values) or default


def _start(request: MealPlanRequest) -> str:
    return request.start_date.isoformat() if request.start_date else PLACEHOLDER_DATE


def build_meal_plan_prompt(request: MealPlanRequest) -> str:
    """Full prompt describing the preferences and the expected JSON shape."""
    budget = request.budget_weekly if request.budget_weekly is not None else DEFAULT_BUDGET
    return f"""Generate a 3-day meal plan for {request.people_count} people.

Diet: {request.diet_type or "balanced"}
Allergies: {_join(request.allergies, "none")}
Budget: ${budget:g}/week
Max cooking time: {request.max_cooking_time} min
Cuisines: {_join(request.cuisine_types, "any")}
Health goals: {_join(request.health_goals, "maintenance")}

Include breakfast, lunch, and dinner only (no snacks to reduce complexity).
Return ONLY a JSON object with this structure:
{{
  "mealPlan": [
    {{
      "day": "Day 1",
      "date": "{_start(request)}",
      "meals": {{
        "breakfast": {{
          "name": "Recipe Name",
          "description": "Brief description",
          "ingredients": {{"ingredient": "amount"}},
          "instructions": ["step 1", "step 2"],
          "prepTime": 10,
          "cookTime": 15,
          "calories": 350,
          "cost": 4.50,
          "difficulty": "easy",
          "dietTags": ["vegetarian"]
        }}
      }}
    }}
  ]
}}"""


def build_simplified_prompt(request: MealPlanRequest) -> str:
    """Shorter prompt used after a truncated reply."""
    return (
        f"Create a simple 3-day meal plan for {request.people_count} people.\n"
        f"Diet: {request.diet_type or 'balanced'}\n"
        f"Allergies: {_join(request.allergies, 'none')}\n\n"
        "Return ONLY this JSON structure:\n"
        '{"mealPlan":[{"day":"Day 1","date":"' + _start(request) + '","meals":{"breakfast":'
        '{"name":"Recipe","description":"Description","ingredients":{"item":"amount"},'
        '"instructions":["step1"],"prepTime":10,"cookTime":15,"calories":300,"cost":3.00,'
        '"difficulty":"easy","dietTags":["balanced"]}}}]}'
    )
