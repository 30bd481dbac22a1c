"""Meal editing workflow: coalesced writes, stale-safe estimates, advisor edits."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

from health_advisor.domain.advisor import NUTRITION_ADDITION, AdvisorAddition
from health_advisor.domain.calibration import MealEntry, MealUpdate
from health_advisor.domain.estimates import EstimateResult
from health_advisor.services.advisor_additions import AdvisorAdditionService
from health_advisor.services.ai_estimator import AIEstimatorService
from health_advisor.services.calibration import CalibrationService

_logger = logging.getLogger(__name__)

_MealKey = tuple[str, str]


@dataclass
class MealEntryEditor:
    """Edits one user's calibration meals on top of the calibration service."""

    user_id: UUID
    calibration: CalibrationService
    estimator: AIEstimatorService
    additions: AdvisorAdditionService | None = None
    _generations: dict[_MealKey, int] = field(default_factory=dict, init=False)
    _staged: dict[_MealKey, str] = field(default_factory=dict, init=False)

    def stage_content(self, day: str, meal_id: str, content: str) -> None:
        """Buffer typed content; only the last value per meal is committed.

        Estimates still in flight for the meal go stale immediately.
        """
        self._staged[(day, meal_id)] = content
        self._bump(day, meal_id)

    def has_staged(self) -> bool:
        return bool(self._staged)

    def flush(self) -> list[MealEntry]:
        """Commit every staged value and empty the buffer."""
        staged, self._staged = self._staged, {}
        return [
            self._commit(day, meal_id, content)
            for (day, meal_id), content in staged.items()
        ]

    def update_content(self, day: str, meal_id: str, content: str) -> MealEntry:
        """Commit new content; any in-flight estimate for the meal goes stale."""
        self._staged.pop((day, meal_id), None)
        self._bump(day, meal_id)
        return self._commit(day, meal_id, content)

    def set_calorie_override(
        self, day: str, meal_id: str, calories: int | None
    ) -> MealEntry:
        """Set or clear the user's calorie total for a meal."""
        return self.calibration.update_meal(
            self.user_id, day, meal_id, MealUpdate(calorie_override=calories)
        )

    def generation(self, day: str, meal_id: str) -> int:
        return self._generations.get((day, meal_id), 0)

    async def refresh_estimate(
        self,
        day: str,
        meal_id: str,
        content: str,
        recent_groceries: Sequence[str] | None = None,
    ) -> EstimateResult | None:
        """Estimate content, or return None if the meal changed meanwhile."""
        token = self.generation(day, meal_id)
        result = await self.estimator.estimate(content, recent_groceries)
        if self.generation(day, meal_id) != token:
            _logger.debug("Discarding stale estimate for %s/%s", day, meal_id)
            return None
        return result

    def effective_calories(self, meal: MealEntry) -> int:
        """Return the override if set, otherwise the provisional estimate."""
        if meal.calorie_override is not None:
            return meal.calorie_override
        return self.estimator.provisional(meal.content).estimate.total_calories

    def pending_addition(self, day: str, meal_id: str) -> AdvisorAddition | None:
        if self.additions is None:
            return None
        return self.additions.pending_for(
            self.user_id, NUTRITION_ADDITION, day, meal_id
        )

    def approve_addition(self, addition: AdvisorAddition) -> AdvisorAddition | None:
        """Accept the advisor's edit as-is."""
        if self.additions is None:
            return None
        return self.additions.approve(addition.id)

    def undo_addition(self, addition: AdvisorAddition) -> MealEntry:
        """Restore the meal content from before the advisor's edit."""
        if addition.day is None or addition.meal_id is None:
            raise ValueError("addition is not attached to a meal")
        meal = self.update_content(
            addition.day, addition.meal_id, addition.original_content
        )
        if self.additions is not None:
            self.additions.remove(addition.id)
        return meal

    def _commit(self, day: str, meal_id: str, content: str) -> MealEntry:
        return self.calibration.update_meal(
            self.user_id, day, meal_id, MealUpdate(content=content)
        )

    def _bump(self, day: str, meal_id: str) -> None:
        key = (day, meal_id)
        self._generations[key] = self._generations.get(key, 0) + 1
