"""Nutrition profile generated from a completed calibration period."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from health_advisor.domain.calibration import CalibrationPeriod, MealEntry
from health_advisor.domain.profile import PROFILE_MEAL_GROUPS, NutritionProfile
from health_advisor.services.ai_estimator import AIEstimatorService


class NutritionProfileRepository(Protocol):
    """Persistence interface for nutrition profiles."""

    def get_profile(self, user_id: UUID) -> NutritionProfile | None:
        """Return the user's nutrition profile, if any."""

    def save_profile(self, user_id: UUID, profile: NutritionProfile) -> None:
        """Replace the user's nutrition profile."""


def meal_group(meal_type: str) -> str | None:
    """Map a meal type onto a profile group; custom meals are ungrouped."""
    if "snack" in meal_type.lower():
        return "snacks"
    return meal_type if meal_type in PROFILE_MEAL_GROUPS else None


@dataclass
class NutritionProfileService:
    """Builds the profile seed that downstream analysis refines."""

    repository: NutritionProfileRepository
    estimator: AIEstimatorService

    def get_profile(self, user_id: UUID) -> NutritionProfile | None:
        """Return the stored profile."""
        return self.repository.get_profile(user_id)

    def meal_calories(self, meal: MealEntry) -> int:
        """Return a meal's override or its cached-or-rule-based estimate."""
        if meal.calorie_override is not None:
            return meal.calorie_override
        return self.estimator.provisional(meal.content).estimate.total_calories

    def generate(
        self, user_id: UUID, period: CalibrationPeriod, *, generated_at: datetime
    ) -> NutritionProfile:
        """Summarize completed days into a profile and persist it."""
        patterns: dict[str, list[str]] = {group: [] for group in PROFILE_MEAL_GROUPS}
        daily: dict[str, int] = {}
        for day, record in period.days.items():
            if not record.completed:
                continue
            filled = [meal for meal in record.meals if meal.has_content()]
            for meal in filled:
                group = meal_group(meal.type)
                if group is not None:
                    patterns[group].append(meal.content.strip())
            daily[day] = sum(self.meal_calories(meal) for meal in filled)

        profile = NutritionProfile(
            generated_at=generated_at,
            meal_patterns=patterns,
            daily_calories=daily,
            estimated_daily_calories=(
                round(sum(daily.values()) / len(daily)) if daily else None
            ),
        )
        self.repository.save_profile(user_id, profile)
        return profile
