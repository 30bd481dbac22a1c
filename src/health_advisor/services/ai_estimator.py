"""AI-assisted calorie estimation with cached, rule-based fallback."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from health_advisor.domain.estimates import (
    EMPTY_ESTIMATE,
    AIEstimateItem,
    AIEstimateResponse,
    Clarification,
    ClarificationOption,
    EstimateItem,
    EstimateResult,
    FoodEstimate,
)
from health_advisor.services.estimate_cache import EstimateCache
from health_advisor.services.estimator import RuleBasedEstimator

_logger = logging.getLogger(__name__)

AI_SOURCE = "AI estimate"
MAX_RECENT_GROCERIES = 50
DEFAULT_TIMEOUT_SECONDS = 20.0

_NULLABLE_NUMBER = {"anyOf": [{"type": "number", "minimum": 0}, {"type": "null"}]}
_NULLABLE_STRING = {"anyOf": [{"type": "string"}, {"type": "null"}]}

ESTIMATE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "quantity": _NULLABLE_NUMBER,
                    "unit": _NULLABLE_STRING,
                    "caloriesPerUnit": _NULLABLE_NUMBER,
                    "totalCalories": _NULLABLE_NUMBER,
                    "confidence": {"type": "string", "enum": ["low", "medium", "high"]},
                    "note": _NULLABLE_STRING,
                },
                "required": [
                    "name",
                    "quantity",
                    "unit",
                    "caloriesPerUnit",
                    "totalCalories",
                    "confidence",
                    "note",
                ],
                "additionalProperties": False,
            },
        },
        "totalCalories": _NULLABLE_NUMBER,
        "notes": _NULLABLE_STRING,
        "needsClarification": {"type": "boolean"},
        "clarificationQuestion": _NULLABLE_STRING,
        "clarificationOptions": {
            "anyOf": [
                {"type": "array", "items": {"type": "string"}},
                {"type": "null"},
            ]
        },
    },
    "required": [
        "items",
        "totalCalories",
        "notes",
        "needsClarification",
        "clarificationQuestion",
        "clarificationOptions",
    ],
    "additionalProperties": False,
}

_BASE_PROMPT = (
    "You are a nutrition calculator. Parse the meal description and return "
    "the food items it contains with calories. Be accurate about portions: "
    'if the user says "2 sandwiches", multiply all ingredients by 2. '
    "Account for cooking methods and preparation.\n\n"
    "Confidence levels:\n"
    "- high: common food, clear portion (or matched to a purchased grocery item)\n"
    "- medium: had to estimate portion size\n"
    "- low: very ambiguous, could vary significantly\n\n"
    "Rules:\n"
    "- Break compound foods into their component ingredients.\n"
    "- If a portion is ambiguous, use a reasonable default and mark it medium.\n"
    "- Use typical home portions for homemade food and restaurant portions "
    "for restaurant food.\n"
    "- Include cooking oils, condiments and spreads when implied.\n"
    "- Use standard USDA-referenced calorie values where possible.\n"
    "- Round totalCalories for each item to the nearest 5."
)

_CONFIDENCE_NOTES = {
    "medium": "Portion size estimated; adjust if needed",
    "low": "Rough estimate; could vary significantly",
}


class EstimateClient(Protocol):
    """Interface for the AI estimation backing service."""

    async def estimate(
        self, *, text: str, recent_groceries: Sequence[str]
    ) -> dict[str, object]:
        """Return the raw structured estimate for meal text."""


def build_estimate_prompt(recent_groceries: Sequence[str] = ()) -> str:
    """Return the instruction prompt, with grocery context when available."""
    if not recent_groceries:
        return _BASE_PROMPT
    listed = "\n".join(f"- {item}" for item in recent_groceries)
    return (
        f"{_BASE_PROMPT}\n\n"
        f"The user recently purchased these groceries:\n{listed}\n\n"
        "When the user mentions a generic food, assume it is one of these "
        "purchased items unless they say otherwise. If several purchased items "
        "could match, use the most likely one and set needsClarification to "
        "true with a question and options."
    )


def recent_grocery_context(items: Sequence[str] | None) -> list[str]:
    """Deduplicate grocery names, keeping order, capped for prompt size."""
    seen: list[str] = []
    for item in items or ():
        name = item.strip()
        if name and name not in seen:
            seen.append(name)
        if len(seen) >= MAX_RECENT_GROCERIES:
            break
    return seen


@dataclass
class AIEstimatorService:
    """Estimates meal calories through an AI client, degrading to rules."""

    rule_based: RuleBasedEstimator
    cache: EstimateCache
    client: EstimateClient | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    async def estimate(
        self, text: str | None, recent_groceries: Sequence[str] | None = None
    ) -> EstimateResult:
        """Return a cached, AI-refined, or rule-based estimate; never raises."""
        if not text or not text.strip():
            return EstimateResult(estimate=EMPTY_ESTIMATE, is_ai=False)

        cached = self.cache.get(text)
        if cached is not None:
            return EstimateResult(estimate=cached.estimate, is_ai=cached.is_ai)

        if self.client is None:
            entry = self.cache.put(text, self.rule_based.estimate(text), is_ai=False)
            return EstimateResult(estimate=entry.estimate, is_ai=entry.is_ai)

        try:
            raw = await asyncio.wait_for(
                self.client.estimate(
                    text=text.strip(),
                    recent_groceries=recent_grocery_context(recent_groceries),
                ),
                timeout=self.timeout_seconds,
            )
            response = AIEstimateResponse.model_validate(raw)
        except Exception:
            _logger.warning(
                "AI estimate failed, using rule-based estimate", exc_info=True
            )
            return EstimateResult(estimate=self.rule_based.estimate(text), is_ai=False)

        entry = self.cache.put(text, transform_ai_response(response), is_ai=True)
        return EstimateResult(estimate=entry.estimate, is_ai=entry.is_ai)

    def provisional(self, text: str | None) -> EstimateResult:
        """Return the cached estimate or an immediate rule-based one."""
        if not text or not text.strip():
            return EstimateResult(estimate=EMPTY_ESTIMATE, is_ai=False)
        cached = self.cache.get(text)
        if cached is not None:
            return EstimateResult(estimate=cached.estimate, is_ai=cached.is_ai)
        return EstimateResult(estimate=self.rule_based.estimate(text), is_ai=False)


def transform_ai_response(response: AIEstimateResponse) -> FoodEstimate:
    """Convert the AI payload into the application's estimate shape."""
    items = [_transform_item(item) for item in response.items]
    tips = [response.notes] if response.notes else []
    clarification = None
    if response.needs_clarification and response.clarification_question:
        clarification = Clarification(
            matched_food=items[0].food if items else "",
            question=response.clarification_question,
            options=[
                ClarificationOption(label=label)
                for label in response.clarification_options or []
            ],
        )
    return FoodEstimate.from_items(items, tips=tips, clarification=clarification)


def _transform_item(item: AIEstimateItem) -> EstimateItem:
    quantity = item.quantity or 1.0
    if item.calories_per_unit is not None:
        calories_per_unit = item.calories_per_unit
    else:
        calories_per_unit = (item.total_calories or 0) / quantity
    return EstimateItem(
        food=item.name,
        quantity=quantity,
        unit=item.unit or "serving",
        calories_per_unit=round(calories_per_unit, 2),
        calories=round(calories_per_unit * quantity),
        confidence=item.confidence,
        confidence_note=item.note or _CONFIDENCE_NOTES.get(item.confidence),
        source=AI_SOURCE,
    )
