"""Tests for the meal entry editor."""

import asyncio
from uuid import UUID

from health_advisor.domain.advisor import NUTRITION_ADDITION
from health_advisor.services.advisor_additions import AdvisorAdditionService
from health_advisor.services.ai_estimator import AIEstimatorService
from health_advisor.services.calibration import CalibrationService
from health_advisor.services.estimate_cache import EstimateCache
from health_advisor.services.estimator import RuleBasedEstimator
from health_advisor.services.meal_editor import MealEntryEditor
from tests.conftest import FakeEstimateClient


class GatedEstimateClient(FakeEstimateClient):
    """Estimate client that waits until released."""

    release: asyncio.Event | None = None

    async def estimate(self, *, text, recent_groceries):  # type: ignore[no-untyped-def]
        assert self.release is not None
        await self.release.wait()
        return await super().estimate(text=text, recent_groceries=recent_groceries)


def _editor(
    user_id: UUID,
    calibration_service: CalibrationService,
    estimator_service: AIEstimatorService,
    addition_service: AdvisorAdditionService | None = None,
) -> tuple[MealEntryEditor, str]:
    period = calibration_service.start_period(user_id)
    meal_id = period.days["monday"].meals[0].id
    editor = MealEntryEditor(
        user_id=user_id,
        calibration=calibration_service,
        estimator=estimator_service,
        additions=addition_service,
    )
    return editor, meal_id


def test_flush_commits_last_staged_value(
    calibration_service: CalibrationService,
    estimator_service: AIEstimatorService,
    user_id: UUID,
) -> None:
    editor, meal_id = _editor(user_id, calibration_service, estimator_service)

    editor.stage_content("monday", meal_id, "2 e")
    editor.stage_content("monday", meal_id, "2 eggs")
    committed = editor.flush()

    assert [meal.content for meal in committed] == ["2 eggs"]
    assert not editor.has_staged()
    assert editor.generation("monday", meal_id) == 2
    stored = calibration_service.get_period(user_id).days["monday"].meals[0]
    assert stored.content == "2 eggs"


def test_stale_estimate_is_discarded(
    calibration_service: CalibrationService, user_id: UUID
) -> None:
    client = GatedEstimateClient()
    estimator = AIEstimatorService(
        rule_based=RuleBasedEstimator(), cache=EstimateCache(), client=client
    )
    editor, meal_id = _editor(user_id, calibration_service, estimator)

    async def scenario() -> tuple[object, object]:
        client.release = asyncio.Event()
        stale = asyncio.create_task(editor.refresh_estimate("monday", meal_id, "2 eggs"))
        await asyncio.sleep(0)
        editor.update_content("monday", meal_id, "oatmeal")
        client.release.set()
        fresh = await editor.refresh_estimate("monday", meal_id, "oatmeal")
        return await stale, fresh

    stale, fresh = asyncio.run(scenario())

    assert stale is None
    assert fresh is not None
    assert fresh.is_ai is True


def test_staged_content_makes_pending_estimate_stale(
    calibration_service: CalibrationService, user_id: UUID
) -> None:
    client = GatedEstimateClient()
    estimator = AIEstimatorService(
        rule_based=RuleBasedEstimator(), cache=EstimateCache(), client=client
    )
    editor, meal_id = _editor(user_id, calibration_service, estimator)

    async def scenario() -> object:
        client.release = asyncio.Event()
        pending = asyncio.create_task(
            editor.refresh_estimate("monday", meal_id, "2 eggs")
        )
        await asyncio.sleep(0)
        editor.stage_content("monday", meal_id, "a bowl of oatmeal")
        client.release.set()
        return await pending

    assert asyncio.run(scenario()) is None
    assert editor.has_staged()


def test_effective_calories_prefers_override(
    calibration_service: CalibrationService,
    estimator_service: AIEstimatorService,
    user_id: UUID,
) -> None:
    editor, meal_id = _editor(user_id, calibration_service, estimator_service)

    meal = editor.update_content("monday", meal_id, "2 eggs and a slice of toast")
    assert editor.effective_calories(meal) == 220

    overridden = editor.set_calorie_override("monday", meal_id, 350)
    assert editor.effective_calories(overridden) == 350

    edited = editor.update_content("monday", meal_id, "oatmeal")
    assert edited.calorie_override is None
    assert editor.effective_calories(edited) == 150


def test_approve_and_undo_advisor_additions(
    calibration_service: CalibrationService,
    estimator_service: AIEstimatorService,
    addition_service: AdvisorAdditionService,
    user_id: UUID,
) -> None:
    editor, meal_id = _editor(
        user_id, calibration_service, estimator_service, addition_service
    )
    editor.update_content("monday", meal_id, "oatmeal")
    editor.update_content("monday", meal_id, "oatmeal, 1 banana")
    addition = addition_service.record(
        user_id,
        NUTRITION_ADDITION,
        day="monday",
        meal_id=meal_id,
        added_content="1 banana",
        original_content="oatmeal",
        reason="Added from chat",
    )

    assert editor.pending_addition("monday", meal_id) == addition
    assert editor.pending_addition("tuesday", meal_id) is None

    restored = editor.undo_addition(addition)

    assert restored.content == "oatmeal"
    assert editor.pending_addition("monday", meal_id) is None
    assert addition_service.repository.get_addition(addition.id).status == "removed"

    second = addition_service.record(
        user_id,
        NUTRITION_ADDITION,
        day="monday",
        meal_id=meal_id,
        added_content="honey",
    )
    approved = editor.approve_addition(second)

    assert approved is not None
    assert approved.status == "approved"
    assert editor.pending_addition("monday", meal_id) is None
