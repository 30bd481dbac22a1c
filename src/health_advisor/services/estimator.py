"""Deterministic rule-based calorie estimator for free-form meal text."""

import re
from dataclasses import dataclass

from health_advisor.domain.estimates import (
    Clarification,
    ClarificationOption,
    EstimateItem,
    FoodEstimate,
)
from health_advisor.services.food_reference import (
    BRAND_NAMES,
    FOOD_REFERENCE,
    SOURCE_URLS,
    FoodReference,
)
from health_advisor.services.units import (
    UNIT_ALIASES,
    can_convert,
    convert,
    normalize_unit,
    unit_family,
)

_CARDINALS: dict[str, float] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
}
_FRACTION_WORDS: dict[str, float] = {"half": 0.5, "quarter": 0.25, "third": 0.33}
_COMPOUND_FRACTION = re.compile(
    rf"\b(\d+(?:\.\d+)?|{'|'.join(_CARDINALS)})\s+and\s+(?:an?\s+)?"
    rf"({'|'.join(_FRACTION_WORDS)})\b"
)

_SEGMENT_SPLIT = re.compile(
    r"\b(?:and|with|plus|added)\b|[,;:\n]|\.(?=\s+[a-z]|\s*$)"
)

# Longest phrases first so "a couple of" wins over "a".
_NUMBER_WORDS: tuple[tuple[str, float], ...] = (
    (r"a half dozen", 6),
    (r"half (?:a )?dozen", 6),
    (r"a dozen", 12),
    (r"dozen", 12),
    (r"a couple of", 2),
    (r"a couple", 2),
    (r"couple of", 2),
    (r"couple", 2),
    (r"a few", 3),
    (r"few", 3),
    (r"several", 3),
    (r"half (?:of )?(?:an?|the)", 0.5),
    (r"half", 0.5),
    (r"(?:a )?quarter of (?:an?|the)", 0.25),
    (r"(?:a )?quarter", 0.25),
    (r"(?:a )?third of (?:an?|the)", 0.33),
    (r"(?:a )?third", 0.33),
    (r"one", 1),
    (r"two", 2),
    (r"three", 3),
    (r"four", 4),
    (r"five", 5),
    (r"six", 6),
    (r"seven", 7),
    (r"eight", 8),
    (r"nine", 9),
    (r"ten", 10),
    (r"an?", 1),
)
_NUMBER_PATTERNS = tuple(
    (re.compile(rf"\b{phrase}\b"), value) for phrase, value in _NUMBER_WORDS
)
_MIXED_NUMBER = re.compile(r"\b(\d+)\s+(\d+)/(\d+)\b")
_FRACTION = re.compile(r"\b(\d+)/(\d+)\b")
_PARENTHETICAL = re.compile(r"\s*\([^)]*\)\s*")

_UNIT_WORDS = "|".join(
    re.escape(alias) for alias in sorted(UNIT_ALIASES, key=lambda a: (-len(a), a))
)
_QUANTITY_PATTERN = re.compile(
    rf"^(?P<qty>\d*\.?\d+)(?![\d.%])\s*(?:(?P<unit>{_UNIT_WORDS})\b\.?)?"
    r"\s*(?:of\s+)?(?P<food>.*)$"
)

# word -> (quantity, implied unit, confidence note)
_INFORMAL_PORTIONS: dict[str, tuple[float | None, str | None, str]] = {
    "handful": (0.25, "cup", "Estimated as ~1/4 cup"),
    "drizzle": (1.0, "tsp", "Estimated as ~1 tsp"),
    "splash": (2.0, "tbsp", "Estimated as ~2 tbsp"),
    "sprinkle": (0.5, "tbsp", "Estimated as ~1/2 tbsp"),
    "dash": (0.25, "tsp", "Estimated as ~1/4 tsp"),
    "dollop": (2.0, "tbsp", "Estimated as ~2 tbsp"),
    "pinch": (0.0, None, "Negligible calories"),
    "some": (None, None, "Assumed 1 serving"),
    "bit": (None, None, "Assumed 1 serving"),
    "little": (None, None, "Assumed 1 serving"),
}
_INFORMAL_PATTERN = re.compile(
    r"^(?:(?:an?|1)\s+)?"
    rf"(?P<word>{'|'.join(_INFORMAL_PORTIONS)})s?\b\s*(?:of\s+)?"
)

_FOOD_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (name, re.compile(rf"\b{re.escape(name)}(?:s|es)?\b"))
    for name in sorted(FOOD_REFERENCE, key=lambda n: (-len(n), n))
)

_PRODUCT_WORDS = ("protein", "yogurt", "milk", "bar", "powder", "shake")
_DENSE_UNITS = {"tbsp", "oz"}
_DENSE_CALORIES = 100


@dataclass(frozen=True)
class _Segment:
    quantity: float | None
    unit: str | None
    food_text: str
    informal_word: str | None


@dataclass(frozen=True)
class _Match:
    name: str
    food: FoodReference
    item: EstimateItem


class RuleBasedEstimator:
    """Parses meal descriptions against the reference food table."""

    def estimate(self, text: str | None) -> FoodEstimate:
        """Return a calorie breakdown for meal text; never raises."""
        if not text or not text.strip():
            return FoodEstimate()

        matches: list[_Match] = []
        for raw_segment in _split_segments(text):
            segment = _parse_segment(raw_segment)
            found = _find_food(segment.food_text)
            if found is None:
                continue
            name, food = found
            matches.append(_Match(name, food, _build_item(name, food, segment)))

        if any(not match.food.composite for match in matches):
            matches = [match for match in matches if not match.food.composite]
        unique = _deduplicate(matches)

        tips: list[str] = []
        for match in unique:
            tip = _density_tip(match)
            if tip and tip not in tips:
                tips.append(tip)
        return FoodEstimate.from_items([match.item for match in unique], tips=tips)

    def needs_clarification(self, text: str | None) -> Clarification | None:
        """Return an advisory question when the text is materially ambiguous."""
        if not text or not text.strip():
            return None
        lowered = text.lower()
        for pattern, question in _VAGUE_PORTIONS:
            match = pattern.search(lowered)
            if match:
                food = match.group(1)
                return Clarification(
                    matched_food=food,
                    question=question.format(food=food),
                    options=list(_PORTION_OPTIONS),
                )
        for food_pattern, prep_pattern, question, options in _PREPARATION_QUESTIONS:
            match = food_pattern.search(lowered)
            if match and not prep_pattern.search(lowered):
                return Clarification(
                    matched_food=match.group(0),
                    question=question,
                    options=list(options),
                )
        return None


def _split_segments(text: str) -> list[str]:
    lowered = _COMPOUND_FRACTION.sub(_compound_fraction, text.lower())
    return [part.strip() for part in _SEGMENT_SPLIT.split(lowered) if part.strip()]


def _compound_fraction(match: re.Match[str]) -> str:
    whole = match.group(1)
    value = _CARDINALS[whole] if whole in _CARDINALS else float(whole)
    return _format_number(value + _FRACTION_WORDS[match.group(2)])


def _convert_number_words(segment: str) -> str:
    result = _MIXED_NUMBER.sub(
        lambda m: _format_number(int(m.group(1)) + int(m.group(2)) / int(m.group(3)))
        if int(m.group(3))
        else m.group(1),
        segment,
    )
    result = _FRACTION.sub(
        lambda m: _format_number(int(m.group(1)) / int(m.group(2)))
        if int(m.group(2))
        else m.group(0),
        result,
    )
    for pattern, value in _NUMBER_PATTERNS:
        result = pattern.sub(_format_number(value), result)
    return result


def _parse_segment(segment: str) -> _Segment:
    text = _PARENTHETICAL.sub(" ", segment).strip()
    informal = _INFORMAL_PATTERN.match(text)
    if informal:
        rest = text[informal.end() :]
        return _Segment(None, None, rest, informal.group("word"))

    converted = _convert_number_words(text)
    match = _QUANTITY_PATTERN.match(converted)
    if match:
        return _Segment(
            quantity=float(match.group("qty")),
            unit=normalize_unit(match.group("unit")),
            food_text=match.group("food").strip(),
            informal_word=None,
        )
    return _Segment(None, None, converted, None)


def _find_food(text: str) -> tuple[str, FoodReference] | None:
    for name, pattern in _FOOD_PATTERNS:
        if pattern.search(text):
            return name, FOOD_REFERENCE[name]
    return None


def _build_item(name: str, food: FoodReference, segment: _Segment) -> EstimateItem:
    quantity, unit, confidence, note = _resolve_portion(food, segment)
    quantity = round(quantity, 3)
    calories = round(food.calories_per_unit * quantity)
    return EstimateItem(
        food=name.title(),
        quantity=quantity,
        unit=unit,
        calories_per_unit=food.calories_per_unit,
        calories=calories,
        confidence=confidence,
        confidence_note=note,
        source=food.source,
        source_url=SOURCE_URLS.get(food.source),
        serving=food.serving,
    )


def _resolve_portion(
    food: FoodReference, segment: _Segment
) -> tuple[float, str, str, str | None]:
    """Return quantity in the food's unit, the unit, confidence and a note."""
    if segment.informal_word:
        quantity, unit, note = _informal_portion(food, segment.informal_word)
        return quantity, unit, "low", note

    if segment.quantity is None:
        note = f"Assumed {food.serving}"
        return food.default_quantity, food.unit, _assumed_confidence(food), note

    if segment.unit and segment.unit != food.unit:
        if can_convert(segment.unit, food.unit):
            quantity = convert(segment.quantity, segment.unit, food.unit)
            return quantity, food.unit, _explicit_confidence(food), None
        note = f"Assumed 1 {segment.unit} is about 1 {food.unit}"
        return segment.quantity, segment.unit, _assumed_confidence(food), note

    if segment.unit or unit_family(food.unit) is None:
        return segment.quantity, food.unit, _explicit_confidence(food), None
    note = f"Assumed {food.unit} as the unit"
    return segment.quantity, food.unit, _assumed_confidence(food), note


def _explicit_confidence(food: FoodReference) -> str:
    return "low" if food.generic else "high"


def _assumed_confidence(food: FoodReference) -> str:
    return "low" if food.generic else "medium"


def _informal_portion(food: FoodReference, word: str) -> tuple[float, str, str]:
    quantity, unit, note = _INFORMAL_PORTIONS[word]
    if quantity is None:
        return food.default_quantity, food.unit, note
    if unit is None:
        return quantity, food.unit, note
    if word == "handful" and food.unit == "oz":
        return 1.0, "oz", "Estimated as ~1 oz"
    if unit == food.unit:
        return quantity, unit, note
    if can_convert(unit, food.unit):
        return convert(quantity, unit, food.unit), food.unit, note
    return food.default_quantity, food.unit, f"Assumed {food.serving}"


def _deduplicate(matches: list[_Match]) -> list[_Match]:
    """Drop items already covered by a longer or overlapping food name."""
    if len(matches) <= 1:
        return matches
    kept: list[_Match] = []
    for candidate in sorted(matches, key=lambda m: -len(m.name)):
        if not any(_is_duplicate(candidate.name, other.name) for other in kept):
            kept.append(candidate)
    kept_ids = {id(match) for match in kept}
    return [match for match in matches if id(match) in kept_ids]


def _is_duplicate(shorter: str, longer: str) -> bool:
    if shorter in longer:
        return True
    shorter_words = [word for word in shorter.split() if len(word) > 2]
    longer_words = [word for word in longer.split() if len(word) > 2]
    if shorter_words and longer_words:
        overlap = sum(1 for word in shorter_words if word in longer_words)
        if overlap / min(len(shorter_words), len(longer_words)) >= 0.5:  # noqa: PLR2004
            return True
    if shorter in BRAND_NAMES:
        return any(word in longer for word in _PRODUCT_WORDS)
    if longer in BRAND_NAMES:
        return any(word in shorter for word in _PRODUCT_WORDS)
    return False


def _density_tip(match: _Match) -> str | None:
    food = match.food
    if food.calories_per_unit >= _DENSE_CALORIES and food.unit in _DENSE_UNITS:
        return (
            f"{match.name.capitalize()} is calorie-dense at "
            f"{food.calories_per_unit:g} cal per {food.unit}."
        )
    return None


def _format_number(value: float) -> str:
    return f"{value:g}" if value == int(value) else f"{value:.2f}".rstrip("0")


_VAGUE_PORTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(r"handfuls?\s+(?:of\s+)?(\w+)"),
        'You mentioned "a handful of {food}" - roughly how much?',
    ),
    (
        re.compile(r"(?:\bsome|\ba\s+bit\s+of|\ba\s+little)\s+(\w+)"),
        'You mentioned "some {food}" - roughly how much?',
    ),
)

_PORTION_OPTIONS = (
    ClarificationOption("Small portion", 0.5),
    ClarificationOption("Medium portion", 1.0),
    ClarificationOption("Large portion", 1.5),
)

_PREPARATION_QUESTIONS: tuple[
    tuple[re.Pattern[str], re.Pattern[str], str, tuple[ClarificationOption, ...]],
    ...,
] = (
    (
        re.compile(r"\beggs?\b"),
        re.compile(r"\b(?:boiled|poached|scrambled|fried|omelet(?:te)?|whites?)\b"),
        "How were the eggs cooked?",
        (
            ClarificationOption("Boiled or poached", 1.0),
            ClarificationOption("Scrambled with butter or milk", 1.3),
            ClarificationOption("Fried in oil or butter", 1.3),
        ),
    ),
    (
        re.compile(r"\bchicken\b"),
        re.compile(
            r"\b(?:grilled|baked|roasted|boiled|fried|breaded|rotisserie|skinless)\b"
        ),
        "How was the chicken prepared?",
        (
            ClarificationOption("Grilled or baked, skinless", 1.0),
            ClarificationOption("Roasted with skin", 1.25),
            ClarificationOption("Fried or breaded", 1.6),
        ),
    ),
    (
        re.compile(r"\bpotato(?:es)?\b"),
        re.compile(r"\b(?:baked|boiled|mashed|roasted|fried|fries|sweet)\b"),
        "How was the potato prepared?",
        (
            ClarificationOption("Baked or boiled, plain", 1.0),
            ClarificationOption("Mashed with butter", 1.4),
            ClarificationOption("Fried", 2.0),
        ),
    ),
    (
        re.compile(r"\bcoffee\b"),
        re.compile(r"\b(?:black|cream|milk|sugar|latte|creamer|oat|almond)\b"),
        "Did the coffee have anything added?",
        (
            ClarificationOption("Black", 1.0),
            ClarificationOption("Splash of milk", 4.0),
            ClarificationOption("Cream and sugar", 14.0),
        ),
    ),
)
