"""Unit conversion between compatible kitchen measurement units."""

UNIT_ALIASES: dict[str, str] = {
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "tbsp": "tbsp",
    "tbsps": "tbsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "tsp": "tsp",
    "tsps": "tsp",
    "cup": "cup",
    "cups": "cup",
    "glass": "cup",
    "glasses": "cup",
    "ml": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "ounce": "oz",
    "ounces": "oz",
    "oz": "oz",
    "fl oz": "oz",
    "pound": "lb",
    "pounds": "lb",
    "lb": "lb",
    "lbs": "lb",
    "gram": "g",
    "grams": "g",
    "g": "g",
    "scoop": "scoop",
    "scoops": "scoop",
    "handful": "handful",
    "handfuls": "handful",
    "spoonful": "spoonful",
    "spoonfuls": "spoonful",
    "piece": "piece",
    "pieces": "piece",
    "slice": "slice",
    "slices": "slice",
    "strip": "slice",
    "strips": "slice",
    "serving": "serving",
    "servings": "serving",
    "breast": "breast",
    "breasts": "breast",
    "thigh": "thigh",
    "thighs": "thigh",
    "fillet": "fillet",
    "fillets": "fillet",
}

# Factors relative to each family's base unit (tsp for volume, oz for weight).
# "oz" is a fluid ounce when paired with a volume unit.
_FAMILIES: dict[str, dict[str, float]] = {
    "volume": {
        "tsp": 1.0,
        "tbsp": 3.0,
        "oz": 6.0,
        "cup": 48.0,
        "ml": 1 / 4.92892,
    },
    "weight": {
        "oz": 1.0,
        "lb": 16.0,
        "g": 1 / 28.3495,
    },
}


def normalize_unit(unit: str | None) -> str | None:
    """Return the canonical unit name for an alias."""
    if not unit:
        return None
    cleaned = unit.strip().lower().rstrip(".")
    return UNIT_ALIASES.get(cleaned, cleaned)


def unit_family(unit: str | None) -> str | None:
    """Return the family of a unit, or None for count-like units.

    Fluid ounces and weight ounces share the "oz" name; a bare "oz" reports
    the volume family.
    """
    canonical = normalize_unit(unit)
    for family, factors in _FAMILIES.items():
        if canonical in factors:
            return family
    return None


def convert(quantity: float, from_unit: str | None, to_unit: str | None) -> float:
    """Convert a quantity between units, or return it unchanged.

    Unknown pairs and count-like units are returned as-is.
    """
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    if source is None or target is None or source == target:
        return quantity
    for factors in _FAMILIES.values():
        if source in factors and target in factors:
            return quantity * factors[source] / factors[target]
    return quantity


def can_convert(from_unit: str | None, to_unit: str | None) -> bool:
    """Return True when a conversion factor exists for the pair."""
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    if source is None or target is None:
        return False
    if source == target:
        return True
    return any(
        source in factors and target in factors for factors in _FAMILIES.values()
    )
