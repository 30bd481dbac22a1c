"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import UUID

from supabase import create_client

from health_advisor.adapters.http_estimate_client import HttpxEstimateClient
from health_advisor.adapters.openai_estimate_client import OpenAIEstimateClient
from health_advisor.adapters.supabase_advisor_addition_repository import (
    SupabaseAdvisorAdditionRepository,
)
from health_advisor.adapters.supabase_calibration_repository import (
    SupabaseCalibrationRepository,
)
from health_advisor.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from health_advisor.config import Settings
from health_advisor.services.advisor_additions import AdvisorAdditionService
from health_advisor.services.ai_estimator import AIEstimatorService
from health_advisor.services.calibration import CalibrationService
from health_advisor.services.clock import SystemClock
from health_advisor.services.estimate_cache import EstimateCache
from health_advisor.services.estimator import RuleBasedEstimator
from health_advisor.services.meal_editor import MealEntryEditor
from health_advisor.services.nutrition_profile import NutritionProfileService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    estimator_service: AIEstimatorService
    calibration_service: CalibrationService
    profile_service: NutritionProfileService
    advisor_addition_service: AdvisorAdditionService
    close_resources: Callable[[], Awaitable[None]]
    _editors: dict[UUID, MealEntryEditor] = field(default_factory=dict, init=False)

    def meal_editor(self, user_id: UUID) -> MealEntryEditor:
        """Return the meal editor for a user, reused across requests."""
        editor = self._editors.get(user_id)
        if editor is None:
            editor = MealEntryEditor(
                user_id=user_id,
                calibration=self.calibration_service,
                estimator=self.estimator_service,
                additions=self.advisor_addition_service,
            )
            self._editors[user_id] = editor
        return editor


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    calibration_repository = SupabaseCalibrationRepository(supabase_client)
    profile_repository = SupabaseProfileRepository(supabase_client)
    addition_repository = SupabaseAdvisorAdditionRepository(supabase_client)

    estimate_client: HttpxEstimateClient | OpenAIEstimateClient | None = None
    if resolved_settings.estimate_service_url:
        estimate_client = HttpxEstimateClient.create(
            resolved_settings.estimate_service_url,
            timeout=resolved_settings.estimate_timeout_seconds,
        )
    elif resolved_settings.openai_api_key:
        estimate_client = OpenAIEstimateClient.create(
            resolved_settings.openai_api_key,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
        )
    estimator_service = AIEstimatorService(
        rule_based=RuleBasedEstimator(),
        cache=EstimateCache(max_entries=resolved_settings.estimate_cache_max_entries),
        client=estimate_client,
        timeout_seconds=resolved_settings.estimate_timeout_seconds,
    )
    profile_service = NutritionProfileService(
        repository=profile_repository,
        estimator=estimator_service,
    )
    calibration_service = CalibrationService(
        repository=calibration_repository,
        clock=SystemClock.create(resolved_settings.timezone),
        profile_service=profile_service,
    )
    advisor_addition_service = AdvisorAdditionService(addition_repository)

    async def close_resources() -> None:
        if estimate_client is not None:
            await estimate_client.close()

    return AppContainer(
        settings=resolved_settings,
        estimator_service=estimator_service,
        calibration_service=calibration_service,
        profile_service=profile_service,
        advisor_addition_service=advisor_addition_service,
        close_resources=close_resources,
    )
