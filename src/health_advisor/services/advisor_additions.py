"""Advisor additions awaiting user approval."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from health_advisor.domain.advisor import AdditionStatus, AdvisorAddition


class AdvisorAdditionRepository(Protocol):
    """Persistence interface for advisor additions."""

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
        """Persist a pending addition and return it."""

    def get_addition(self, addition_id: UUID) -> AdvisorAddition | None:
        """Return an addition by id."""

    def list_pending(
        self, user_id: UUID, type: str, day: str | None = None
    ) -> list[AdvisorAddition]:
        """Return pending additions of a type, optionally for one day."""

    def set_status(
        self, addition_id: UUID, status: AdditionStatus
    ) -> AdvisorAddition | None:
        """Update an addition's status and return it."""


@dataclass
class AdvisorAdditionService:
    """Tracks advisor edits keyed by type, day and meal."""

    repository: AdvisorAdditionRepository

    def record(  # noqa: PLR0913
        self,
        user_id: UUID,
        type: str,
        *,
        day: str | None,
        meal_id: str | None,
        added_content: str,
        original_content: str = "",
        reason: str | None = None,
    ) -> AdvisorAddition:
        """Store a new pending addition."""
        return self.repository.create_addition(
            user_id=user_id,
            type=type,
            day=day,
            meal_id=meal_id,
            added_content=added_content,
            original_content=original_content,
            reason=reason,
        )

    def pending_for(
        self,
        user_id: UUID,
        type: str,
        day: str | None = None,
        meal_id: str | None = None,
    ) -> AdvisorAddition | None:
        """Return the pending addition at a location, if any."""
        for addition in self.repository.list_pending(user_id, type, day):
            if meal_id is None or addition.meal_id == meal_id:
                return addition
        return None

    def pending_for_day(
        self, user_id: UUID, type: str, day: str
    ) -> list[AdvisorAddition]:
        """Return all pending additions for a day."""
        return self.repository.list_pending(user_id, type, day)

    def approve(self, addition_id: UUID) -> AdvisorAddition | None:
        """Keep the advisor's edit."""
        return self._transition(addition_id, "approved")

    def remove(self, addition_id: UUID) -> AdvisorAddition | None:
        """Mark the advisor's edit as undone."""
        return self._transition(addition_id, "removed")

    def _transition(
        self, addition_id: UUID, status: AdditionStatus
    ) -> AdvisorAddition | None:
        addition = self.repository.get_addition(addition_id)
        if addition is None or addition.status != "pending":
            return addition
        return self.repository.set_status(addition_id, status)
