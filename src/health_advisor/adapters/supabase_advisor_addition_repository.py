"""Supabase-backed advisor addition storage."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from health_advisor.domain.advisor import AdditionStatus, AdvisorAddition
from health_advisor.services.advisor_additions import AdvisorAdditionRepository

_COLUMNS = (
    "id, user_id, type, day, meal_id, added_content, original_content, "
    "reason, status, created_at"
)


@dataclass
class SupabaseAdvisorAdditionRepository(AdvisorAdditionRepository):
    """Supabase implementation for advisor additions."""

    client: Client

    def create_addition(  # noqa: PLR0913
        self,
        *,
        user_id: UUID,
        type: str,
        day: str | None,
        meal_id: str | None,
        added_content: str,
        original_content: str,
        reason: str | None,
    ) -> AdvisorAddition:
        """Insert a pending addition and return it."""
        response = (
            self.client.table("advisor_additions")
            .insert(
                {
                    "user_id": str(user_id),
                    "type": type,
                    "day": day,
                    "meal_id": meal_id,
                    "added_content": added_content,
                    "original_content": original_content,
                    "reason": reason,
                    "status": "pending",
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create advisor addition")
        return _to_addition(response.data[0])

    def get_addition(self, addition_id: UUID) -> AdvisorAddition | None:
        """Return an addition by id."""
        response = (
            self.client.table("advisor_additions")
            .select(_COLUMNS)
            .eq("id", str(addition_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_addition(response.data[0])

    def list_pending(
        self, user_id: UUID, type: str, day: str | None = None
    ) -> list[AdvisorAddition]:
        """Return pending additions, oldest first."""
        query = (
            self.client.table("advisor_additions")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("type", type)
            .eq("status", "pending")
        )
        if day is not None:
            query = query.eq("day", day)
        response = query.order("created_at").execute()
        return [_to_addition(row) for row in response.data or []]

    def set_status(
        self, addition_id: UUID, status: AdditionStatus
    ) -> AdvisorAddition | None:
        """Update an addition's status."""
        response = (
            self.client.table("advisor_additions")
            .update(
                {
                    "status": status,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(addition_id))
            .execute()
        )
        if not response.data:
            return None
        return _to_addition(response.data[0])


def _to_addition(row: dict[str, object]) -> AdvisorAddition:
    created_at = row.get("created_at")
    return AdvisorAddition(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        type=str(row["type"]),
        day=row.get("day"),  # type: ignore[arg-type]
        meal_id=row.get("meal_id"),  # type: ignore[arg-type]
        added_content=str(row.get("added_content") or ""),
        original_content=str(row.get("original_content") or ""),
        reason=row.get("reason"),  # type: ignore[arg-type]
        status=row["status"],  # type: ignore[arg-type]
        created_at=(
            datetime.fromisoformat(str(created_at))
            if created_at
            else datetime.now(tz=UTC)
        ),
    )
