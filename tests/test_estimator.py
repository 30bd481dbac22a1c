"""Tests for the rule-based estimator."""

from health_advisor.domain.estimates import CONFIDENCE_RANK
from health_advisor.services.estimator import RuleBasedEstimator


def test_eggs_and_toast() -> None:
    estimate = RuleBasedEstimator().estimate("2 eggs and a slice of toast")

    assert [item.food for item in estimate.items] == ["Egg", "Toast"]
    assert estimate.items[0].quantity == 2
    assert estimate.total_calories == 220
    weakest = min(CONFIDENCE_RANK[item.confidence] for item in estimate.items)
    assert CONFIDENCE_RANK[estimate.confidence] <= weakest


def test_estimate_is_deterministic() -> None:
    estimator = RuleBasedEstimator()
    text = "1 cup of oatmeal with a handful of almonds, coffee"

    assert estimator.estimate(text) == estimator.estimate(text)


def test_empty_and_unknown_text() -> None:
    estimator = RuleBasedEstimator()

    for text in ("", "   ", None, "xyzzy plugh"):
        estimate = estimator.estimate(text)
        assert estimate.items == []
        assert estimate.total_calories == 0
        assert estimate.confidence == "low"


def test_unit_is_converted_to_food_unit() -> None:
    estimate = RuleBasedEstimator().estimate("8 oz orange juice")

    item = estimate.items[0]
    assert item.unit == "cup"
    assert item.quantity == 1
    assert item.calories == 110
    assert item.confidence == "high"


def test_default_serving_is_medium_confidence() -> None:
    estimate = RuleBasedEstimator().estimate("oatmeal")

    assert estimate.total_calories == 150
    assert estimate.confidence == "medium"
    assert estimate.items[0].confidence_note == "Assumed 1 cup cooked"


def test_informal_portion_is_low_confidence() -> None:
    estimate = RuleBasedEstimator().estimate("a handful of almonds")

    item = estimate.items[0]
    assert item.quantity == 1
    assert item.unit == "oz"
    assert item.calories == 165
    assert item.confidence == "low"


def test_number_words_and_fractions() -> None:
    estimator = RuleBasedEstimator()

    assert estimator.estimate("two bananas").total_calories == 210
    assert estimator.estimate("half an avocado").total_calories == 120
    assert estimator.estimate("1/2 cup of oatmeal").total_calories == 75
    assert estimator.estimate("1 and a half cups of rice").total_calories == 300
    assert estimator.estimate("two and a half cups of rice").total_calories == 500


def test_composite_dropped_when_ingredients_match() -> None:
    estimator = RuleBasedEstimator()

    with_chicken = estimator.estimate("salad with chicken")
    alone = estimator.estimate("sandwich")

    assert [item.food for item in with_chicken.items] == ["Chicken"]
    assert with_chicken.total_calories == 180
    assert [item.food for item in alone.items] == ["Sandwich"]
    assert alone.confidence == "low"


def test_dense_food_adds_tip() -> None:
    estimate = RuleBasedEstimator().estimate("1 tbsp olive oil")

    assert estimate.total_calories == 120
    assert estimate.tips == ["Olive oil is calorie-dense at 120 cal per tbsp."]


def test_items_carry_source_citation() -> None:
    item = RuleBasedEstimator().estimate("1 banana").items[0]

    assert item.source == "USDA"
    assert item.source_url == "https://fdc.nal.usda.gov/"
    assert item.serving == "1 medium (118g)"


def test_vague_portion_clarification() -> None:
    clarification = RuleBasedEstimator().needs_clarification("a handful of almonds")

    assert clarification is not None
    assert clarification.matched_food == "almonds"
    assert "handful of almonds" in clarification.question
    assert [option.multiplier for option in clarification.options] == [0.5, 1.0, 1.5]


def test_preparation_clarification() -> None:
    estimator = RuleBasedEstimator()

    eggs = estimator.needs_clarification("2 eggs")

    assert eggs is not None
    assert eggs.question == "How were the eggs cooked?"
    assert estimator.needs_clarification("2 scrambled eggs") is None
    assert estimator.needs_clarification("black coffee") is None
    assert estimator.needs_clarification("") is None


def test_zero_denominator_is_not_an_error() -> None:
    estimator = RuleBasedEstimator()

    estimate = estimator.estimate("1 1/0 cup rice")

    assert estimate.total_calories == 200
    assert estimator.estimate("1/0 cup rice").total_calories >= 0


def test_item_calories_match_displayed_quantity() -> None:
    estimator = RuleBasedEstimator()
    texts = ("1 tsp olive oil", "3 oz orange juice", "100 g almonds", "7 tbsp rice")

    for text in texts:
        for item in estimator.estimate(text).items:
            assert item.calories == round(item.calories_per_unit * item.quantity)
