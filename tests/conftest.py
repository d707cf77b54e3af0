"""
Pytest configuration and shared fixtures.

Fixtures are reusable test setup that can be injected into tests.
"""

import pytest
from datetime import date
from typing import Any, Dict, List, Optional

from plateplan.llm_provider import LLMProvider, MockResponse, MockTextBlock


class ScriptedLLMProvider(LLMProvider):
    """
    Provider that replays a fixed list of replies.

    Each entry is either reply text or an Exception instance to raise.
    Records every call so tests can assert prompts and parameters.
    """

    def __init__(self, replies: List[Any]):
        self.replies = list(replies)
        self.calls: List[Dict[str, Any]] = []

    def create_message(
        self,
        model: str,
        max_tokens: int,
        messages: List[Dict[str, Any]],
        system: Optional[str] = None,
        **kwargs
    ) -> MockResponse:
        self.calls.append({
            "model": model,
            "max_tokens": max_tokens,
            "messages": messages,
            "system": system,
            **kwargs,
        })
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return MockResponse(content=[MockTextBlock(text=reply)])

    @property
    def is_null(self) -> bool:
        return False


@pytest.fixture
def seed_date():
    """Fixed start date for deterministic plans."""
    return date(2025, 10, 20)


@pytest.fixture
def oatmeal():
    """Raw breakfast body as the AI returns it."""
    return {
        "name": "Oatmeal with Berries",
        "description": "Warm oats topped with berries",
        "ingredients": {"Oats": "1 cup", "Berries": "1/2 cup"},
        "instructions": ["Cook oats", "Add berries"],
        "prepTime": 5,
        "cookTime": 10,
        "calories": 300,
        "cost": 2.5,
        "difficulty": "easy",
        "dietTags": ["vegetarian"],
    }


@pytest.fixture
def chicken_dinner():
    """Raw dinner body as the AI returns it."""
    return {
        "name": "Lemon Chicken",
        "description": "Roast chicken with lemon",
        "ingredients": {"chicken breast": "8 oz", "lemon": "1", "oats": "2 tbsp"},
        "instructions": ["Season chicken", "Roast 25 minutes"],
        "prepTime": 10,
        "cookTime": 25,
        "calories": 520,
        "cost": 7.25,
        "difficulty": "medium",
        "dietTags": ["high-protein", "gluten-free"],
        "cuisineType": "mediterranean",
        "nutrition": {"protein": 45, "carbs": 10, "fat": 20},
    }


@pytest.fixture
def raw_response(oatmeal, chicken_dinner):
    """Well-formed two-day AI response."""
    return {
        "mealPlan": [
            {
                "day": "Monday",
                "date": "2025-10-20",
                "meals": {"breakfast": oatmeal, "dinner": chicken_dinner},
            },
            {
                "day": "Tuesday",
                "date": "2025-10-21",
                "meals": {"breakfast": oatmeal},
            },
        ],
        "totalCost": 19.25,
        "totalCalories": 1120,
    }


@pytest.fixture
def scripted_provider():
    """Factory for ScriptedLLMProvider instances."""
    def make(*replies):
        return ScriptedLLMProvider(list(replies))
    return make
