"""Calibration period endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from health_advisor.api.dependencies import (
    current_user_id,
    get_container,
    require_api_token,
)
from health_advisor.domain.calibration import MealTemplate, MealUpdate

if TYPE_CHECKING:
    from health_advisor.domain.advisor import AdvisorAddition
    from health_advisor.services.calibration import CalibrationStatus

router = APIRouter(
    prefix="/calibration",
    tags=["calibration"],
    dependencies=[Depends(require_api_token)],
)


class AddMealRequest(BaseModel):
    type: str
    label: str | None = None


class ReorderRequest(BaseModel):
    meal_ids: list[str]


class TrackingModeRequest(BaseModel):
    mode: str


class ChatMealRequest(BaseModel):
    meal_type: str
    description: str


@router.post("/start")
async def start_period(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Start the calibration period if it does not exist yet."""
    period = get_container(request).calibration_service.start_period(user_id)
    return period.model_dump(mode="json")


@router.get("")
async def get_period(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the stored calibration period."""
    period = get_container(request).calibration_service.get_period(user_id)
    if period is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return period.model_dump(mode="json")


@router.get("/status")
async def get_status(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return day statuses and progress for the current calendar date."""
    calibration_status = get_container(request).calibration_service.get_status(
        user_id
    )
    return _status_payload(calibration_status)


@router.post("/align")
async def align_period(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Move a prior-week period onto the current week."""
    period = get_container(request).calibration_service.align_to_current_week(
        user_id
    )
    return period.model_dump(mode="json")


@router.post("/days/{day}/meals")
async def add_meal(
    day: str,
    payload: AddMealRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Append a meal to a day."""
    meal = get_container(request).calibration_service.add_meal(
        user_id, day, payload.type, payload.label
    )
    return meal.model_dump(mode="json")


@router.patch("/days/{day}/meals/{meal_id}")
async def update_meal(
    day: str,
    meal_id: str,
    payload: MealUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Update meal content and/or its calorie override."""
    meal = get_container(request).calibration_service.update_meal(
        user_id, day, meal_id, payload
    )
    return meal.model_dump(mode="json")


@router.delete("/days/{day}/meals/{meal_id}")
async def remove_meal(
    day: str,
    meal_id: str,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Remove a meal from a day."""
    record = get_container(request).calibration_service.remove_meal(
        user_id, day, meal_id
    )
    return record.model_dump(mode="json")


@router.post("/days/{day}/reorder")
async def reorder_meals(
    day: str,
    payload: ReorderRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Reorder a day's meals."""
    record = get_container(request).calibration_service.reorder_meals(
        user_id, day, payload.meal_ids
    )
    return record.model_dump(mode="json")


@router.post("/days/{day}/reset")
async def reset_day(
    day: str, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Reset a day's meals to the default pattern."""
    record = get_container(request).calibration_service.reset_day(user_id, day)
    return record.model_dump(mode="json")


@router.get("/days/{day}/can-complete")
async def can_complete(
    day: str, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, bool]:
    service = get_container(request).calibration_service
    return {"can_complete": service.can_complete(user_id, day)}


@router.post("/days/{day}/complete")
async def complete_day(
    day: str, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Complete a day once it has enough meals."""
    period = get_container(request).calibration_service.complete_day(user_id, day)
    return period.model_dump(mode="json")


@router.get("/days/{day}/meals/{meal_id}/calories")
async def meal_calories(
    day: str,
    meal_id: str,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return a meal's effective calories and whether an override applies."""
    container = get_container(request)
    period = container.calibration_service.get_period(user_id)
    meal = period.day(day).find_meal(meal_id) if period else None
    if meal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    editor = container.meal_editor(user_id)
    return {
        "calories": editor.effective_calories(meal),
        "overridden": meal.calorie_override is not None,
    }


@router.get("/days/{day}/meals/{meal_id}/addition")
async def pending_addition(
    day: str,
    meal_id: str,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the pending advisor addition for a meal, if any."""
    addition = get_container(request).meal_editor(user_id).pending_addition(
        day, meal_id
    )
    return {"addition": _addition_payload(addition) if addition else None}


@router.post("/days/{day}/meals/{meal_id}/addition/approve")
async def approve_addition(
    day: str,
    meal_id: str,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Keep the advisor's edit to a meal."""
    editor = get_container(request).meal_editor(user_id)
    addition = editor.pending_addition(day, meal_id)
    if addition is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    approved = editor.approve_addition(addition)
    return {"addition": _addition_payload(approved or addition)}


@router.post("/days/{day}/meals/{meal_id}/addition/undo")
async def undo_addition(
    day: str,
    meal_id: str,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Restore the meal content from before the advisor's edit."""
    editor = get_container(request).meal_editor(user_id)
    addition = editor.pending_addition(day, meal_id)
    if addition is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    meal = editor.undo_addition(addition)
    return meal.model_dump(mode="json")


@router.put("/tracking-mode")
async def set_tracking_mode(
    payload: TrackingModeRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Record the post-calibration tracking choice."""
    period = get_container(request).calibration_service.set_tracking_mode(
        user_id, payload.mode
    )
    return period.model_dump(mode="json")


@router.post("/dismiss")
async def dismiss(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    period = get_container(request).calibration_service.dismiss(user_id)
    return period.model_dump(mode="json")


@router.post("/opt-in")
async def opt_in(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    period = get_container(request).calibration_service.opt_in(user_id)
    return period.model_dump(mode="json")


@router.get("/meal-pattern")
async def get_meal_pattern(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    pattern = get_container(request).calibration_service.get_meal_pattern(user_id)
    return {"meals": [template.model_dump(mode="json") for template in pattern]}


@router.put("/meal-pattern")
async def save_meal_pattern(
    payload: list[MealTemplate],
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Save the default meal pattern for new or reset days."""
    pattern = get_container(request).calibration_service.save_meal_pattern(
        user_id, payload
    )
    return {"meals": [template.model_dump(mode="json") for template in pattern]}


@router.post("/chat-meals")
async def log_chat_meal(
    payload: ChatMealRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Record a meal reported in chat on the current calibration day."""
    logged = get_container(request).calibration_service.log_meal_from_chat(
        user_id, payload.meal_type, payload.description
    )
    if logged is None:
        return {"logged": False}
    return {
        "logged": True,
        "day": logged.day,
        "meal": logged.meal.model_dump(mode="json"),
    }


@router.get("/profile")
async def get_profile(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the nutrition profile generated on completion."""
    profile = get_container(request).profile_service.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return profile.model_dump(mode="json")


def _status_payload(calibration_status: CalibrationStatus) -> dict[str, object]:
    return {
        "period": calibration_status.period.model_dump(mode="json"),
        "day_statuses": calibration_status.day_statuses,
        "completed": calibration_status.completed_count,
        "remaining": calibration_status.remaining_count,
        "percentage": calibration_status.percentage,
        "today": calibration_status.today_key,
        "next_day": calibration_status.next_day,
        "in_effect": calibration_status.in_effect,
        "tracking_mode_required": calibration_status.tracking_mode_required,
    }


def _addition_payload(addition: AdvisorAddition) -> dict[str, object]:
    return {
        "id": str(addition.id),
        "type": addition.type,
        "day": addition.day,
        "meal_id": addition.meal_id,
        "added_content": addition.added_content,
        "original_content": addition.original_content,
        "reason": addition.reason,
        "status": addition.status,
        "created_at": addition.created_at.isoformat(),
    }
