"""Ingredient resolution and normalization utilities."""

from .models import Formula, Ingredient, NormalizedIngredient
from .normalization import (
    normalize_ingredients,
    normalize_unit,
    resolve_ingredient,
    resolve_ingredients,
    unwrap_value,
)
from .number_utils import coerce_number

__all__ = [
    "Formula",
    "Ingredient",
    "NormalizedIngredient",
    "coerce_number",
    "normalize_ingredients",
    "normalize_unit",
    "resolve_ingredient",
    "resolve_ingredients",
    "unwrap_value",
]
