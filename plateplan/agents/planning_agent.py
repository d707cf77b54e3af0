"""
Meal plan generation agent using LangGraph.

Asks the LLM for a plan, retries once with a simplified prompt when the
reply is cut off, and normalizes the result. Any provider or parsing
problem routes to the deterministic fallback plan; a reply that parses
but cannot be normalized is reported as a failed generation.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, TypedDict

from langgraph.graph import StateGraph, END

from plateplan.data.models import (
    CanonicalMealPlan,
    FailureReason,
    MealPlanRequest,
    NormalizationFailure,
)
from plateplan.llm_provider import LLMProvider, configured_model, get_llm_provider
from plateplan.normalizer import normalize
from plateplan.prompts import (
    RETRY_SYSTEM_PROMPT,
    SYSTEM_PROMPT,
    build_meal_plan_prompt,
    build_simplified_prompt,
)
from plateplan.response_parser import ResponseParseError, looks_truncated, parse_model_json

logger = logging.getLogger(__name__)

MAX_TOKENS = 4000
TEMPERATURE = 0.7
RETRY_TEMPERATURE = 0.3

TRY_AGAIN_MESSAGE = "Failed to generate valid meal plan structure. Please try again."
USER_MESSAGES = {
    FailureReason.EMPTY_PLAN: TRY_AGAIN_MESSAGE,
    FailureReason.MISSING_DATES: "Generated meal plan is missing date information. Please try again.",
    FailureReason.INVALID_DATE_FORMAT: "Generated meal plan contains invalid date format. Please try again.",
}


class GenerationState(TypedDict):
    """State for the generation workflow."""
    request: MealPlanRequest

    # LLM exchange
    reply: Optional[str]
    raw_plan: Any

    # Outcome
    plan: Optional[CanonicalMealPlan]
    used_fallback: bool
    error: Optional[str]
    failure_reason: Optional[FailureReason]

    # Routing
    next_step: str


@dataclass
class GenerationResult:
    """Outcome of a generation request."""
    success: bool
    plan: Optional[CanonicalMealPlan] = None
    used_fallback: bool = False
    error: Optional[str] = None
    reason: Optional[FailureReason] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "reason": self.reason.value if self.reason else None,
            }
        start, end = self.plan.date_range()
        return {
            "success": True,
            "usedFallback": self.used_fallback,
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "totalMeals": self.plan.meal_count,
            "plan": self.plan.to_dict(),
        }


class MealPlanGenerationAgent:
    """LLM-backed meal plan generator with a deterministic fallback."""

    def __init__(self, provider: Optional[LLMProvider] = None, model: Optional[str] = None):
        """
        Initialize the generation agent.

        Args:
            provider: LLM provider (defaults to get_llm_provider())
            model: Model name passed to the provider (defaults to PLATEPLAN_MODEL)
        """
        self.provider = provider or get_llm_provider()
        self.model = model or configured_model()
        self.graph = self._build_graph()

        logger.info(f"Meal plan generation agent initialized (null_provider={self.provider.is_null})")

    def _build_graph(self):
        """Build the LangGraph state graph for the generation workflow."""
        workflow = StateGraph(GenerationState)

        workflow.add_node("request_plan", self._request_plan_node)
        workflow.add_node("retry_simplified", self._retry_simplified_node)
        workflow.add_node("parse_response", self._parse_response_node)
        workflow.add_node("normalize_plan", self._normalize_node)
        workflow.add_node("use_fallback", self._fallback_node)

        workflow.set_entry_point("request_plan")
        workflow.add_conditional_edges(
            "request_plan",
            self._route,
            {
                "retry_simplified": "retry_simplified",
                "parse_response": "parse_response",
                "use_fallback": "use_fallback",
            },
        )
        workflow.add_conditional_edges(
            "retry_simplified",
            self._route,
            {"parse_response": "parse_response", "use_fallback": "use_fallback"},
        )
        workflow.add_conditional_edges(
            "parse_response",
            self._route,
            {"normalize_plan": "normalize_plan", "use_fallback": "use_fallback"},
        )
        workflow.add_edge("normalize_plan", END)
        workflow.add_edge("use_fallback", END)

        return workflow.compile()

    @staticmethod
    def _route(state: GenerationState) -> str:
        return state["next_step"]

    def generate(self, request: Optional[MealPlanRequest] = None) -> GenerationResult:
        """
        Generate a meal plan.

        Args:
            request: User preferences (defaults to MealPlanRequest())

        Returns:
            GenerationResult; success=False only when the AI reply could
            not be normalized
        """
        request = request or MealPlanRequest()
        if request.start_date is None:
            request = request.model_copy(update={"start_date": date.today()})

        final_state = self.graph.invoke(
            GenerationState(
                request=request,
                reply=None,
                raw_plan=None,
                plan=None,
                used_fallback=False,
                error=None,
                failure_reason=None,
                next_step="",
            )
        )

        if final_state.get("plan") is None:
            return GenerationResult(
                success=False,
                error=final_state.get("error") or TRY_AGAIN_MESSAGE,
                reason=final_state.get("failure_reason"),
            )

        return GenerationResult(
            success=True,
            plan=final_state["plan"],
            used_fallback=final_state["used_fallback"],
        )

    def _call(self, prompt: str, system: str, temperature: float) -> str:
        return self.provider.complete(
            prompt,
            system=system,
            model=self.model,
            max_tokens=MAX_TOKENS,
            temperature=temperature,
        )

    def _request_plan_node(self, state: GenerationState) -> Dict[str, Any]:
        """LangGraph node: ask the LLM for the full plan."""
        if self.provider.is_null:
            logger.info("LLM provider not available, using fallback meal plan")
            return {"next_step": "use_fallback"}

        try:
            reply = self._call(build_meal_plan_prompt(state["request"]), SYSTEM_PROMPT, TEMPERATURE)
        except Exception as e:
            logger.error(f"LLM call failed, using fallback meal plan: {e}", exc_info=True)
            return {"error": str(e), "next_step": "use_fallback"}

        if not reply.strip():
            logger.error("No content received from LLM, using fallback meal plan")
            return {"next_step": "use_fallback"}

        if looks_truncated(reply):
            logger.warning(f"Response appears to be truncated ({len(reply)} chars), retrying with simplified prompt")
            return {"reply": reply, "next_step": "retry_simplified"}

        return {"reply": reply, "next_step": "parse_response"}

    def _retry_simplified_node(self, state: GenerationState) -> Dict[str, Any]:
        """LangGraph node: one retry with the short prompt."""
        try:
            reply = self._call(
                build_simplified_prompt(state["request"]), RETRY_SYSTEM_PROMPT, RETRY_TEMPERATURE
            )
        except Exception as e:
            logger.error(f"Retry request failed, using fallback meal plan: {e}", exc_info=True)
            return {"error": str(e), "next_step": "use_fallback"}

        if not reply.strip():
            logger.error("Retry response had no content, using fallback meal plan")
            return {"next_step": "use_fallback"}
        return {"reply": reply, "next_step": "parse_response"}

    def _parse_response_node(self, state: GenerationState) -> Dict[str, Any]:
        """LangGraph node: extract JSON from the reply text."""
        try:
            raw_plan = parse_model_json(state["reply"])
        except ResponseParseError as e:
            logger.error(f"Failed to parse LLM response, using fallback meal plan: {e}")
            return {"error": str(e), "next_step": "use_fallback"}

        if not isinstance(raw_plan, (dict, list)):
            logger.error(f"LLM response is not an object: {type(raw_plan).__name__}, using fallback")
            return {"next_step": "use_fallback"}
        return {"raw_plan": raw_plan, "next_step": "normalize_plan"}

    def _normalize_node(self, state: GenerationState) -> Dict[str, Any]:
        """LangGraph node: coerce the parsed reply into a canonical plan."""
        try:
            plan = normalize(state["raw_plan"], state["request"].start_date)
        except NormalizationFailure as e:
            logger.error(f"Invalid meal plan data structure: {e}")
            return {
                "plan": None,
                "error": USER_MESSAGES[e.reason],
                "failure_reason": e.reason,
            }

        logger.info(f"Generated meal plan: {plan.get_summary()}")
        return {"plan": plan, "error": None}

    def _fallback_node(self, state: GenerationState) -> Dict[str, Any]:
        """LangGraph node: deterministic sample plan."""
        plan = normalize(None, state["request"].start_date)
        return {"plan": plan, "used_fallback": True}
