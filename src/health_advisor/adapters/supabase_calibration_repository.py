"""Supabase-backed calibration period and meal pattern storage."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from health_advisor.domain.calibration import CalibrationPeriod, MealTemplate
from health_advisor.services.calibration import CalibrationRepository


@dataclass
class SupabaseCalibrationRepository(CalibrationRepository):
    """Stores one calibration record and one meal pattern per user."""

    client: Client

    def get_period(self, user_id: UUID) -> CalibrationPeriod | None:
        """Return the user's calibration period, if stored."""
        response = (
            self.client.table("calibration_periods")
            .select("period_json")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return CalibrationPeriod.model_validate(response.data[0]["period_json"])

    def save_period(self, user_id: UUID, period: CalibrationPeriod) -> None:
        """Rewrite the user's calibration record."""
        response = (
            self.client.table("calibration_periods")
            .upsert(
                {
                    "user_id": str(user_id),
                    "period_json": period.model_dump(mode="json"),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save calibration period")

    def get_meal_pattern(self, user_id: UUID) -> list[MealTemplate] | None:
        """Return the saved default meal pattern, if any."""
        response = (
            self.client.table("meal_patterns")
            .select("pattern_json")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return [
            MealTemplate.model_validate(row) for row in response.data[0]["pattern_json"]
        ]

    def save_meal_pattern(self, user_id: UUID, pattern: list[MealTemplate]) -> None:
        """Rewrite the user's default meal pattern."""
        response = (
            self.client.table("meal_patterns")
            .upsert(
                {
                    "user_id": str(user_id),
                    "pattern_json": [
                        template.model_dump(mode="json") for template in pattern
                    ],
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save meal pattern")
