"""Supabase-backed nutrition profile storage."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from health_advisor.domain.profile import NutritionProfile
from health_advisor.services.nutrition_profile import NutritionProfileRepository


@dataclass
class SupabaseProfileRepository(NutritionProfileRepository):
    """Supabase implementation for nutrition profiles."""

    client: Client

    def get_profile(self, user_id: UUID) -> NutritionProfile | None:
        """Return the stored nutrition profile."""
        response = (
            self.client.table("nutrition_profiles")
            .select("profile_json")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return NutritionProfile.model_validate(response.data[0]["profile_json"])

    def save_profile(self, user_id: UUID, profile: NutritionProfile) -> None:
        """Rewrite the user's nutrition profile."""
        self.client.table("nutrition_profiles").upsert(
            {
                "user_id": str(user_id),
                "profile_json": profile.model_dump(mode="json"),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
