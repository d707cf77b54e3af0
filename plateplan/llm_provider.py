"""
LLM Provider Abstraction.

Provides a unified interface for the meal plan text-completion call:
- AnthropicProvider: Real Claude API calls
- NullLLMProvider: Stand-in for CI/CD and offline use; forces the fallback plan
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, List, Any, Dict
import os
import logging

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


def configured_model() -> str:
    """Model name from PLATEPLAN_MODEL, read at call time so .env values apply."""
    return os.environ.get("PLATEPLAN_MODEL") or DEFAULT_MODEL


@dataclass
class MockTextBlock:
    """Minimal text content block, shaped like the Anthropic SDK block."""
    text: str
    type: str = "text"


@dataclass
class MockResponse:
    """Minimal response structure matching Anthropic API."""
    content: List[Any]
    stop_reason: str = "end_turn"
    model: str = "null-llm"


def response_text(response: Any) -> str:
    """
    Concatenate the text blocks of a message response.

    Args:
        response: Anthropic Message or MockResponse

    Returns:
        Reply text ("" if the response has no text blocks)
    """
    parts = []
    for block in getattr(response, "content", None) or []:
        text = getattr(block, "text", None)
        if isinstance(text, str):
            parts.append(text)
    return "".join(parts)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def create_message(
        self,
        model: str,
        max_tokens: int,
        messages: List[Dict[str, Any]],
        system: Optional[str] = None,
        **kwargs
    ) -> Any:
        """Create a message/completion request."""
        pass

    @property
    @abstractmethod
    def is_null(self) -> bool:
        """Return True if this is a null/mock provider."""
        pass

    def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 4000,
        temperature: float = 0.7,
    ) -> str:
        """Send a single user prompt and return the reply text."""
        response = self.create_message(
            model=model or configured_model(),
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
            system=system,
            temperature=temperature,
        )
        return response_text(response)


class AnthropicProvider(LLMProvider):
    """Real Anthropic Claude API provider."""

    def __init__(self, api_key: Optional[str] = None):
        from anthropic import Anthropic
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY required for AnthropicProvider")
        self.client = Anthropic(api_key=self.api_key)

    def create_message(
        self,
        model: str,
        max_tokens: int,
        messages: List[Dict[str, Any]],
        system: Optional[str] = None,
        **kwargs
    ) -> Any:
        params = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": messages,
        }
        if system:
            params["system"] = system
        params.update(kwargs)
        return self.client.messages.create(**params)

    @property
    def is_null(self) -> bool:
        return False


class NullLLMProvider(LLMProvider):
    """
    Offline provider used when no API key is configured.

    MealPlanGenerationAgent checks is_null and goes straight to the
    fallback plan, so a null provider is never asked for a plan during
    generation. Calls made directly return an empty reply and are counted.
    """

    def __init__(self):
        self.call_count = 0
        logger.info("NullLLMProvider initialized - meal plans will use the fallback generator")

    def create_message(
        self,
        model: str,
        max_tokens: int,
        messages: List[Dict[str, Any]],
        system: Optional[str] = None,
        **kwargs
    ) -> MockResponse:
        self.call_count += 1
        logger.debug(f"NullLLM call #{self.call_count} for {model}: returning empty reply")
        return MockResponse(content=[])

    @property
    def is_null(self) -> bool:
        return True


def get_llm_provider(
    api_key: Optional[str] = None,
    use_null: bool = False
) -> LLMProvider:
    """
    Get an LLM provider instance.

    Args:
        api_key: Optional API key (uses env var if not provided)
        use_null: Force use of NullLLMProvider (for testing)

    Returns:
        LLMProvider instance

    Environment Variables:
        USE_NULL_LLM: Set to "true" to use NullLLMProvider
        ANTHROPIC_API_KEY: API key for AnthropicProvider
    """
    if use_null or os.environ.get("USE_NULL_LLM", "").lower() == "true":
        return NullLLMProvider()

    # Without a key the generator still works, on the fallback plan
    api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
    if not api_key:
        logger.warning("No ANTHROPIC_API_KEY found, using NullLLMProvider")
        return NullLLMProvider()

    return AnthropicProvider(api_key=api_key)
