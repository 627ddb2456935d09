"""Fixed option lists offered by the recipe forms and the filter sheet."""

from dataclasses import dataclass
from typing import Dict, List, Optional


class UnitCategory:
    """Allowed categories for kitchen units."""

    VOLUME = "volume"
    WEIGHT = "weight"
    COUNT = "count"
    OTHER = "other"


@dataclass(frozen=True)
class Unit:
    code: str
    plural: str
    category: str


_UNITS: List[Unit] = [
    Unit("cup", "cups", UnitCategory.VOLUME),
    Unit("tablespoon", "tablespoons", UnitCategory.VOLUME),
    Unit("teaspoon", "teaspoons", UnitCategory.VOLUME),
    Unit("ounce", "ounces", UnitCategory.WEIGHT),
    Unit("pound", "pounds", UnitCategory.WEIGHT),
    Unit("gram", "grams", UnitCategory.WEIGHT),
    Unit("kilogram", "kilograms", UnitCategory.WEIGHT),
    Unit("milliliter", "milliliters", UnitCategory.VOLUME),
    Unit("liter", "liters", UnitCategory.VOLUME),
    Unit("pinch", "pinches", UnitCategory.OTHER),
    Unit("piece", "pieces", UnitCategory.COUNT),
    Unit("slice", "slices", UnitCategory.COUNT),
    Unit("clove", "cloves", UnitCategory.COUNT),
]

_UNITS_BY_CODE: Dict[str, Unit] = {unit.code: unit for unit in _UNITS}
# plural spellings are accepted when parsing free text
_UNITS_BY_PLURAL: Dict[str, Unit] = {unit.plural: unit for unit in _UNITS}

DEFAULT_UNIT = "cup"
DEFAULT_AMOUNT = 1.0

CUISINE_TYPES = [
    "Italian", "Mexican", "Asian", "American", "Mediterranean", "Indian",
    "French", "Greek", "Spanish", "Middle Eastern", "Thai", "Japanese",
    "Chinese", "Korean", "Vietnamese", "Other",
]

DIET_TYPES = [
    "None", "Vegetarian", "Vegan", "Gluten Free", "Dairy Free", "Keto",
    "Paleo", "Low Carb", "Low Fat", "Other",
]

# Options for filtering remote recipes
MAIN_INGREDIENTS = ["chicken", "beef", "pork", "fish", "vegetable"]
FILTER_CUISINES = ["italian", "mexican", "asian", "american", "mediterranean", "indian"]
DIETARY_RESTRICTIONS = ["vegetarian", "vegan", "gluten free", "dairy free"]


def get_all_units() -> List[Unit]:
    """Return every unit in display order."""
    return list(_UNITS)


def get_unit(code: str) -> Optional[Unit]:
    """Look a unit up by code or plural, or None if unknown."""
    if not code:
        return None
    key = code.strip().lower()
    return _UNITS_BY_CODE.get(key) or _UNITS_BY_PLURAL.get(key)


def is_valid_unit(code: str) -> bool:
    return code in _UNITS_BY_CODE


def options() -> Dict[str, list]:
    return {
        "units": [u.code for u in get_all_units()],
        "cuisine_types": list(CUISINE_TYPES),
        "diet_types": list(DIET_TYPES),
        "main_ingredients": list(MAIN_INGREDIENTS),
        "cuisines": list(FILTER_CUISINES),
        "dietary_restrictions": list(DIETARY_RESTRICTIONS),
    }


__all__ = [
    "Unit",
    "UnitCategory",
    "DEFAULT_UNIT",
    "DEFAULT_AMOUNT",
    "CUISINE_TYPES",
    "DIET_TYPES",
    "MAIN_INGREDIENTS",
    "FILTER_CUISINES",
    "DIETARY_RESTRICTIONS",
    "get_all_units",
    "get_unit",
    "is_valid_unit",
    "options",
]
