"""Calorie estimate endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from health_advisor.api.dependencies import get_container, require_api_token

router = APIRouter(
    prefix="/estimates",
    tags=["estimates"],
    dependencies=[Depends(require_api_token)],
)


class EstimateRequest(BaseModel):
    text: str
    recent_groceries: list[str] = Field(default_factory=list)


@router.post("")
async def estimate(payload: EstimateRequest, request: Request) -> dict[str, object]:
    """Return an AI-refined estimate, falling back to the rule-based one."""
    result = await get_container(request).estimator_service.estimate(
        payload.text, payload.recent_groceries
    )
    return asdict(result)


@router.post("/provisional")
async def provisional(
    payload: EstimateRequest, request: Request
) -> dict[str, object]:
    """Return the immediately available estimate for display."""
    return asdict(get_container(request).estimator_service.provisional(payload.text))


@router.post("/clarification")
async def clarification(
    payload: EstimateRequest, request: Request
) -> dict[str, object]:
    """Return an advisory question for ambiguous meal text."""
    question = get_container(
        request
    ).estimator_service.rule_based.needs_clarification(payload.text)
    return {"clarification": asdict(question) if question else None}


@router.delete("/cache")
async def clear_cache(request: Request) -> dict[str, str]:
    """Drop cached estimates, e.g. after switching profiles."""
    get_container(request).estimator_service.cache.clear()
    return {"status": "ok"}
