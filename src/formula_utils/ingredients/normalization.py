"""Ingredient resolution and normalization utilities.

Formula data arrives from the content API in several shapes: bare strings,
text-field wrappers such as ``{"value": "ginger"}``, ``(id, quantity, unit)``
sequences and full ingredient objects. ``resolve_ingredient`` turns each of
those into an ``Ingredient`` in one place, and ``normalize_ingredients`` turns
a formula's ingredients into percentages. All defaulting of missing or
malformed fields happens here.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from formula_utils.ingredients.models import Ingredient, NormalizedIngredient
from formula_utils.ingredients.number_utils import coerce_number

logger = logging.getLogger(__name__)

# Unit normalization mapping
UNIT_MAP = {
    # Weight
    "g": ["g", "g.", "gm", "gms", "gram", "grams", "gramme", "grammes"],
    "kg": ["kg", "kg.", "kilogram", "kilograms"],
    "mg": ["mg", "mg.", "milligram", "milligrams"],
    "oz": ["oz", "oz.", "ounce", "ounces"],
    "lb": ["lb", "lb.", "lbs", "pound", "pounds"],
    "qian": ["qian", "chien", "mace"],
    "liang": ["liang", "tael", "taels"],
    # Volume
    "ml": ["ml", "ml.", "milliliter", "milliliters", "millilitre", "millilitres"],
    "tsp": ["tsp", "tsp.", "teaspoon", "teaspoons"],
    "tbsp": ["tbsp", "tbsp.", "tablespoon", "tablespoons"],
    # Count
    "piece": ["piece", "pieces", "pc", "pcs"],
    "slice": ["slice", "slices"],
}

# Create reverse mapping for lookup
UNIT_LOOKUP = {v: k for k, vs in UNIT_MAP.items() for v in vs}

# Keys checked, in order, when reading a full ingredient object
ID_KEYS = ("id", "herb_id")
TITLE_KEYS = ("title", "herb_title", "field_herb_name", "name")
QUANTITY_KEYS = ("field_quantity", "quantity")
UNIT_KEYS = ("field_unit", "unit")
PERCENTAGE_KEYS = ("field_percentage", "percentage")
ROLE_KEYS = ("field_role", "role")


def normalize_unit(unit: str) -> str:
    """Normalize unit names to their standard form.

    Args:
        unit: Raw unit string

    Returns:
        Normalized unit name

    Examples:
        >>> normalize_unit("Grams")
        "g"
        >>> normalize_unit("tael")
        "liang"
    """
    unit = unit.lower().strip()
    return UNIT_LOOKUP.get(unit, unit)  # Return original if not found


def unwrap_value(value: Any) -> Any:
    """Strip text-field wrappers like ``{"value": ..., "format": ...}``."""
    while isinstance(value, Mapping) and "value" in value:
        value = value["value"]
    return value


def _text(value: Any) -> Optional[str]:
    value = unwrap_value(value)
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        text = str(value).strip()
        return text or None
    return None


def _first(raw: Mapping, keys: Sequence[str]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _is_text_wrapper(raw: Mapping) -> bool:
    return "value" in raw and not any(key in raw for key in ID_KEYS + TITLE_KEYS)


def resolve_ingredient(raw: Any, fallback_id: Optional[str] = None) -> Optional[Ingredient]:
    """Resolve one raw ingredient payload into an ``Ingredient``.

    Supported shapes:
        - ``Ingredient``: returned unchanged
        - ``str``: used as both identifier and title
        - ``{"value": raw}``: the wrapped value is resolved
        - ``(id, quantity)`` or ``(id, quantity, unit)`` sequences
        - mappings with ``id``/``title``/``field_quantity``/... keys

    Args:
        raw: Raw ingredient payload
        fallback_id: Identifier to use for a mapping that carries none

    Returns:
        The resolved ingredient, or None if the payload has no usable
        identifier.

    Examples:
        >>> resolve_ingredient("ginger")
        Ingredient(id='ginger', title='ginger', ...)
        >>> resolve_ingredient({"value": "ginger"}).id
        'ginger'
        >>> resolve_ingredient(("ginger", 30, "grams")).unit
        'g'
    """
    if isinstance(raw, Ingredient):
        return raw

    if isinstance(raw, str):
        text = raw.strip()
        return Ingredient(id=text, title=text) if text else None

    if isinstance(raw, Mapping):
        if _is_text_wrapper(raw):
            return resolve_ingredient(raw["value"], fallback_id)

        ingredient_id = _text(_first(raw, ID_KEYS)) or fallback_id
        if not ingredient_id:
            return None
        unit = _text(_first(raw, UNIT_KEYS))
        role = _text(_first(raw, ROLE_KEYS))
        return Ingredient(
            id=ingredient_id,
            title=_text(_first(raw, TITLE_KEYS)) or ingredient_id,
            quantity=coerce_number(unwrap_value(_first(raw, QUANTITY_KEYS))),
            unit=normalize_unit(unit) if unit else None,
            percentage=coerce_number(unwrap_value(_first(raw, PERCENTAGE_KEYS))),
            role=role.lower() if role else None,
        )

    if isinstance(raw, (list, tuple)) and raw:
        ingredient_id = _text(raw[0])
        if not ingredient_id:
            return None
        quantity = coerce_number(unwrap_value(raw[1])) if len(raw) > 1 else None
        unit = _text(raw[2]) if len(raw) > 2 else None
        return Ingredient(
            id=ingredient_id,
            title=ingredient_id,
            quantity=quantity,
            unit=normalize_unit(unit) if unit else None,
        )

    return None


def resolve_ingredients(raws: Optional[Iterable[Any]]) -> List[Ingredient]:
    """Resolve a list of raw ingredient payloads, dropping unusable entries.

    Mappings without an identifier get the positional id ``herb-<n>``.
    """
    if raws is None or isinstance(raws, (str, Mapping)):
        return []

    ingredients = []
    for position, raw in enumerate(raws):
        ingredient = resolve_ingredient(raw, fallback_id=f"herb-{position}")
        if ingredient is None:
            logger.debug(f"Dropping unresolvable ingredient at position {position}: {raw!r}")
            continue
        ingredients.append(ingredient)
    return ingredients


def normalize_ingredients(
    ingredients: Sequence[Ingredient], total_weight: Any = None
) -> List[NormalizedIngredient]:
    """Convert a formula's ingredients into percentages of the whole.

    The denominator is ``total_weight`` when it is a positive number, and the
    sum of the ingredient quantities otherwise. When there is no weight
    information at all, every ingredient gets an equal share of
    ``100 / len(ingredients)``. Otherwise an explicit percentage wins over the
    quantity ratio.

    Args:
        ingredients: Resolved ingredients of one formula
        total_weight: Optional formula total weight

    Returns:
        One NormalizedIngredient per input ingredient, in input order. An
        empty input yields an empty list.

    Examples:
        >>> [n.percentage for n in normalize_ingredients(
        ...     [Ingredient("a", "A", quantity=30), Ingredient("b", "B", quantity=10)])]
        [75.0, 25.0]
    """
    if not ingredients:
        return []

    # Ingredients built by hand may still carry strings or junk
    quantities = [coerce_number(ingredient.quantity) or 0.0 for ingredient in ingredients]
    denominator = coerce_number(total_weight) or sum(quantities)

    if denominator == 0:
        equal_percentage = 100 / len(ingredients)
        return [
            NormalizedIngredient(id=i.id, title=i.title, percentage=equal_percentage)
            for i in ingredients
        ]

    normalized = []
    for ingredient, quantity in zip(ingredients, quantities):
        percentage = coerce_number(ingredient.percentage)
        if percentage is None:
            percentage = quantity / denominator * 100
        normalized.append(
            NormalizedIngredient(id=ingredient.id, title=ingredient.title, percentage=percentage)
        )
    return normalized
