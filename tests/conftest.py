"""Shared test fixtures."""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from health_advisor.config import Settings
from health_advisor.containers import AppContainer
from health_advisor.domain.advisor import AdditionStatus, AdvisorAddition
from health_advisor.domain.calibration import CalibrationPeriod, MealTemplate
from health_advisor.domain.profile import NutritionProfile
from health_advisor.services.advisor_additions import (
    AdvisorAdditionRepository,
    AdvisorAdditionService,
)
from health_advisor.services.ai_estimator import AIEstimatorService, EstimateClient
from health_advisor.services.calibration import (
    CalibrationRepository,
    CalibrationService,
)
from health_advisor.services.clock import Clock
from health_advisor.services.estimate_cache import EstimateCache
from health_advisor.services.estimator import RuleBasedEstimator
from health_advisor.services.nutrition_profile import (
    NutritionProfileRepository,
    NutritionProfileService,
)

# 2026-10-12 is a Monday.
MONDAY = datetime(2026, 10, 12, 9, 0, tzinfo=UTC)


@dataclass
class FixedClock(Clock):
    """Clock frozen at a settable instant."""

    current: datetime = MONDAY

    def now(self) -> datetime:
        return self.current

    def set_date(self, value: date, hour: int = 9) -> None:
        self.current = datetime(value.year, value.month, value.day, hour, tzinfo=UTC)

    def advance(self, days: int) -> None:
        self.current += timedelta(days=days)


@dataclass
class InMemoryCalibrationRepository(CalibrationRepository):
    """In-memory calibration repository that stores detached copies."""

    periods: dict[UUID, CalibrationPeriod] = field(default_factory=dict)
    patterns: dict[UUID, list[MealTemplate]] = field(default_factory=dict)
    saves: int = 0

    def get_period(self, user_id: UUID) -> CalibrationPeriod | None:
        period = self.periods.get(user_id)
        return period.model_copy(deep=True) if period else None

    def save_period(self, user_id: UUID, period: CalibrationPeriod) -> None:
        self.saves += 1
        self.periods[user_id] = period.model_copy(deep=True)

    def get_meal_pattern(self, user_id: UUID) -> list[MealTemplate] | None:
        pattern = self.patterns.get(user_id)
        return [template.model_copy() for template in pattern] if pattern else None

    def save_meal_pattern(self, user_id: UUID, pattern: list[MealTemplate]) -> None:
        self.patterns[user_id] = [template.model_copy() for template in pattern]


@dataclass
class InMemoryProfileRepository(NutritionProfileRepository):
    """In-memory nutrition profile repository for tests."""

    profiles: dict[UUID, NutritionProfile] = field(default_factory=dict)

    def get_profile(self, user_id: UUID) -> NutritionProfile | None:
        return self.profiles.get(user_id)

    def save_profile(self, user_id: UUID, profile: NutritionProfile) -> None:
        self.profiles[user_id] = profile


@dataclass
class InMemoryAdvisorAdditionRepository(AdvisorAdditionRepository):
    """In-memory advisor addition repository for tests."""

    additions: dict[UUID, AdvisorAddition] = field(default_factory=dict)

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
        addition = AdvisorAddition(
            id=uuid4(),
            user_id=user_id,
            type=type,
            day=day,
            meal_id=meal_id,
            added_content=added_content,
            original_content=original_content,
            reason=reason,
            status="pending",
            created_at=datetime.now(tz=UTC),
        )
        self.additions[addition.id] = addition
        return addition

    def get_addition(self, addition_id: UUID) -> AdvisorAddition | None:
        return self.additions.get(addition_id)

    def list_pending(
        self, user_id: UUID, type: str, day: str | None = None
    ) -> list[AdvisorAddition]:
        return [
            addition
            for addition in self.additions.values()
            if addition.user_id == user_id
            and addition.type == type
            and addition.status == "pending"
            and (day is None or addition.day == day)
        ]

    def set_status(
        self, addition_id: UUID, status: AdditionStatus
    ) -> AdvisorAddition | None:
        addition = self.additions.get(addition_id)
        if addition is None:
            return None
        updated = replace(addition, status=status)
        self.additions[addition_id] = updated
        return updated


@dataclass
class FakeEstimateClient(EstimateClient):
    """Fake AI estimate client returning a fixed payload or raising."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "items": [
                {
                    "name": "Scrambled eggs",
                    "quantity": 2,
                    "unit": "egg",
                    "caloriesPerUnit": 90,
                    "totalCalories": 180,
                    "confidence": "high",
                    "note": None,
                }
            ],
            "totalCalories": 180,
            "notes": "Cooked with butter",
            "needsClarification": False,
            "clarificationQuestion": None,
            "clarificationOptions": None,
        }
    )
    error: Exception | None = None
    calls: list[tuple[str, list[str]]] = field(default_factory=list)

    async def estimate(
        self, *, text: str, recent_groceries: Sequence[str]
    ) -> dict[str, object]:
        self.calls.append((text, list(recent_groceries)))
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def calibration_repository() -> InMemoryCalibrationRepository:
    return InMemoryCalibrationRepository()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def addition_repository() -> InMemoryAdvisorAdditionRepository:
    return InMemoryAdvisorAdditionRepository()


@pytest.fixture
def estimate_client() -> FakeEstimateClient:
    return FakeEstimateClient()


@pytest.fixture
def estimator_service(estimate_client: FakeEstimateClient) -> AIEstimatorService:
    return AIEstimatorService(
        rule_based=RuleBasedEstimator(),
        cache=EstimateCache(),
        client=estimate_client,
        timeout_seconds=1,
    )


@pytest.fixture
def profile_service(
    profile_repository: InMemoryProfileRepository,
    estimator_service: AIEstimatorService,
) -> NutritionProfileService:
    return NutritionProfileService(
        repository=profile_repository, estimator=estimator_service
    )


@pytest.fixture
def calibration_service(
    calibration_repository: InMemoryCalibrationRepository,
    clock: FixedClock,
    profile_service: NutritionProfileService,
) -> CalibrationService:
    return CalibrationService(
        repository=calibration_repository,
        clock=clock,
        profile_service=profile_service,
    )


@pytest.fixture
def addition_service(
    addition_repository: InMemoryAdvisorAdditionRepository,
) -> AdvisorAdditionService:
    return AdvisorAdditionService(addition_repository)


@pytest.fixture
def container(
    settings: Settings,
    estimator_service: AIEstimatorService,
    calibration_service: CalibrationService,
    profile_service: NutritionProfileService,
    addition_service: AdvisorAdditionService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        estimator_service=estimator_service,
        calibration_service=calibration_service,
        profile_service=profile_service,
        advisor_addition_service=addition_service,
        close_resources=close_resources,
    )
