"""Domain models for advisor-suggested edits."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal
from uuid import UUID

AdditionStatus = Literal["pending", "approved", "removed"]

NUTRITION_ADDITION = "nutrition"


@dataclass(frozen=True)
class AdvisorAddition:
    """Content the advisor added to a meal that awaits user review."""

    id: UUID
    user_id: UUID
    type: str
    day: str | None
    meal_id: str | None
    added_content: str
    original_content: str
    reason: str | None
    status: AdditionStatus
    created_at: datetime
