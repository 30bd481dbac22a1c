"""Domain models for calorie estimates."""

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Confidence = Literal["low", "medium", "high"]

CONFIDENCE_RANK: dict[str, int] = {"low": 0, "medium": 1, "high": 2}


def weakest_confidence(levels: list[str]) -> Confidence:
    """Return the lowest confidence present, or low when empty."""
    if not levels:
        return "low"
    return min(levels, key=lambda level: CONFIDENCE_RANK[level])  # type: ignore[return-value]


@dataclass(frozen=True)
class EstimateItem:
    """A recognized food with its calorie calculation."""

    food: str
    quantity: float
    unit: str
    calories_per_unit: float
    calories: int
    confidence: Confidence
    source: str
    confidence_note: str | None = None
    source_url: str | None = None
    serving: str | None = None


@dataclass(frozen=True)
class ClarificationOption:
    """One multiple-choice answer with its calorie multiplier."""

    label: str
    multiplier: float = 1.0


@dataclass(frozen=True)
class Clarification:
    """Advisory question about an ambiguous food."""

    matched_food: str
    question: str
    options: list[ClarificationOption]


@dataclass(frozen=True)
class FoodEstimate:
    """Calorie breakdown for a meal description."""

    items: list[EstimateItem] = field(default_factory=list)
    total_calories: int = 0
    confidence: Confidence = "low"
    tips: list[str] = field(default_factory=list)
    clarification: Clarification | None = None

    @classmethod
    def from_items(
        cls,
        items: list[EstimateItem],
        tips: list[str] | None = None,
        clarification: Clarification | None = None,
    ) -> "FoodEstimate":
        """Build an estimate with derived total and overall confidence."""
        return cls(
            items=list(items),
            total_calories=sum(item.calories for item in items),
            confidence=weakest_confidence([item.confidence for item in items]),
            tips=list(tips or []),
            clarification=clarification,
        )


EMPTY_ESTIMATE = FoodEstimate()


@dataclass(frozen=True)
class EstimateResult:
    """An estimate tagged with whether it came from the AI path."""

    estimate: FoodEstimate
    is_ai: bool


class AIEstimateItem(BaseModel):
    """Single item returned by the AI estimation service."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    quantity: float | None = Field(default=None, gt=0)
    unit: str | None = None
    calories_per_unit: float | None = Field(
        default=None, ge=0, alias="caloriesPerUnit"
    )
    total_calories: float | None = Field(default=None, ge=0, alias="totalCalories")
    confidence: Confidence = "medium"
    note: str | None = None

    @model_validator(mode="after")
    def _has_calories(self) -> "AIEstimateItem":
        if self.calories_per_unit is None and self.total_calories is None:
            raise ValueError("item needs caloriesPerUnit or totalCalories")
        return self


class AIEstimateResponse(BaseModel):
    """Structured output of the AI estimation service."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[AIEstimateItem]
    total_calories: float | None = Field(default=None, alias="totalCalories")
    notes: str | None = None
    needs_clarification: bool = Field(default=False, alias="needsClarification")
    clarification_question: str | None = Field(
        default=None, alias="clarificationQuestion"
    )
    clarification_options: list[str] | None = Field(
        default=None, alias="clarificationOptions"
    )
