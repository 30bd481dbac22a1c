"""Tests for the estimate cache."""

import pytest

from health_advisor.domain.estimates import FoodEstimate
from health_advisor.services.estimate_cache import EstimateCache, normalize_key


def test_normalize_key() -> None:
    assert normalize_key("  Two  Eggs\tand TOAST ") == "two eggs and toast"


def test_put_is_write_once() -> None:
    cache = EstimateCache()
    first = FoodEstimate(total_calories=100)

    cache.put("eggs", first, is_ai=True)
    kept = cache.put(" EGGS ", FoodEstimate(total_calories=999), is_ai=False)

    assert kept.estimate is first
    assert kept.is_ai is True
    assert cache.get("Eggs").estimate.total_calories == 100
    assert len(cache) == 1


def test_oldest_entries_are_evicted() -> None:
    cache = EstimateCache(max_entries=2)

    cache.put("a", FoodEstimate(), is_ai=True)
    cache.put("b", FoodEstimate(), is_ai=True)
    cache.put("c", FoodEstimate(), is_ai=True)

    assert "a" not in cache
    assert "b" in cache
    assert "c" in cache


def test_clear_and_validation() -> None:
    cache = EstimateCache()
    cache.put("toast", FoodEstimate(), is_ai=False)

    cache.clear()

    assert cache.get("toast") is None
    with pytest.raises(ValueError):
        EstimateCache(max_entries=0)
