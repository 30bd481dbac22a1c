"""Tests for the AI-assisted estimator."""

import asyncio

from health_advisor.domain.estimates import AIEstimateResponse
from health_advisor.services.ai_estimator import (
    AIEstimatorService,
    build_estimate_prompt,
    recent_grocery_context,
    transform_ai_response,
)
from health_advisor.services.estimate_cache import EstimateCache
from health_advisor.services.estimator import RuleBasedEstimator
from tests.conftest import FakeEstimateClient


def test_ai_result_is_cached(
    estimator_service: AIEstimatorService, estimate_client: FakeEstimateClient
) -> None:
    first = asyncio.run(estimator_service.estimate("2 eggs", ["Pasture eggs"]))
    second = asyncio.run(estimator_service.estimate("  2 EGGS "))

    assert first.is_ai is True
    assert first.estimate.total_calories == 180
    assert first.estimate.items[0].source == "AI estimate"
    assert first.estimate.tips == ["Cooked with butter"]
    assert second == first
    assert estimate_client.calls == [("2 eggs", ["Pasture eggs"])]


def test_failure_falls_back_without_caching(
    estimator_service: AIEstimatorService, estimate_client: FakeEstimateClient
) -> None:
    estimate_client.error = RuntimeError("service down")

    result = asyncio.run(estimator_service.estimate("2 eggs and a slice of toast"))

    assert result.is_ai is False
    assert result.estimate.total_calories == 220
    assert estimator_service.cache.get("2 eggs and a slice of toast") is None

    estimate_client.error = None
    retried = asyncio.run(estimator_service.estimate("2 eggs and a slice of toast"))
    assert retried.is_ai is True
    assert len(estimate_client.calls) == 2


def test_malformed_response_falls_back(
    estimator_service: AIEstimatorService, estimate_client: FakeEstimateClient
) -> None:
    estimate_client.payload = {"items": [{"name": "eggs"}]}

    result = asyncio.run(estimator_service.estimate("2 eggs"))

    assert result.is_ai is False
    assert result.estimate.total_calories == 140


def test_timeout_falls_back() -> None:
    class SlowClient:
        async def estimate(self, *, text, recent_groceries):  # type: ignore[no-untyped-def]
            await asyncio.sleep(1)
            return {}

    service = AIEstimatorService(
        rule_based=RuleBasedEstimator(),
        cache=EstimateCache(),
        client=SlowClient(),
        timeout_seconds=0.01,
    )

    result = asyncio.run(service.estimate("oatmeal"))

    assert result.is_ai is False
    assert result.estimate.total_calories == 150


def test_empty_text_skips_request(
    estimator_service: AIEstimatorService, estimate_client: FakeEstimateClient
) -> None:
    result = asyncio.run(estimator_service.estimate("   "))

    assert result.is_ai is False
    assert result.estimate.items == []
    assert estimate_client.calls == []


def test_without_client_caches_rule_based() -> None:
    service = AIEstimatorService(rule_based=RuleBasedEstimator(), cache=EstimateCache())

    result = asyncio.run(service.estimate("oatmeal"))

    assert result.is_ai is False
    assert service.cache.get("oatmeal").is_ai is False


def test_provisional_prefers_cache(
    estimator_service: AIEstimatorService,
) -> None:
    before = estimator_service.provisional("2 eggs")
    asyncio.run(estimator_service.estimate("2 eggs"))
    after = estimator_service.provisional("2 eggs")

    assert before.is_ai is False
    assert before.estimate.total_calories == 140
    assert after.is_ai is True
    assert after.estimate.total_calories == 180


def test_transform_derives_per_unit_calories() -> None:
    response = AIEstimateResponse.model_validate(
        {
            "items": [
                {
                    "name": "Greek yogurt",
                    "quantity": 2,
                    "unit": "cup",
                    "totalCalories": 260,
                },
                {"name": "Honey", "caloriesPerUnit": 60, "confidence": "low"},
            ],
            "needsClarification": True,
            "clarificationQuestion": "Which yogurt?",
            "clarificationOptions": ["0% Fage", "2% Chobani"],
        }
    )

    estimate = transform_ai_response(response)

    yogurt, honey = estimate.items
    assert yogurt.calories_per_unit == 130
    assert yogurt.calories == 260
    assert honey.quantity == 1
    assert honey.unit == "serving"
    assert honey.confidence_note == "Rough estimate; could vary significantly"
    assert estimate.total_calories == 320
    assert estimate.confidence == "low"
    assert estimate.clarification is not None
    assert [option.label for option in estimate.clarification.options] == [
        "0% Fage",
        "2% Chobani",
    ]


def test_prompt_and_grocery_context() -> None:
    groceries = recent_grocery_context([" Fage yogurt ", "Fage yogurt", "", "Oat milk"])

    assert groceries == ["Fage yogurt", "Oat milk"]
    assert "- Oat milk" in build_estimate_prompt(groceries)
    assert "recently purchased" not in build_estimate_prompt()


def test_malformed_fraction_falls_back_on_failure(
    estimator_service: AIEstimatorService, estimate_client: FakeEstimateClient
) -> None:
    estimate_client.error = RuntimeError("service down")
    offline = AIEstimatorService(rule_based=RuleBasedEstimator(), cache=EstimateCache())

    fallback = asyncio.run(estimator_service.estimate("1 1/0 cup rice"))
    rule_based = asyncio.run(offline.estimate("1 1/0 cup rice"))

    assert fallback.is_ai is False
    assert fallback.estimate.total_calories == 200
    assert rule_based.estimate.total_calories == 200
