"""Nutrition profile seeded from a completed calibration period."""

from datetime import datetime

from pydantic import BaseModel, Field

PROFILE_MEAL_GROUPS: tuple[str, ...] = ("breakfast", "lunch", "dinner", "snacks")


class NutritionProfile(BaseModel):
    """Daily nutrition profile awaiting downstream AI analysis."""

    generated_at: datetime
    meal_patterns: dict[str, list[str]] = Field(
        default_factory=lambda: {group: [] for group in PROFILE_MEAL_GROUPS}
    )
    daily_calories: dict[str, int] = Field(default_factory=dict)
    estimated_daily_calories: int | None = None
    needs_analysis: bool = True
