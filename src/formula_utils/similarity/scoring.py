"""Pairwise formula similarity scoring.

The composite score blends two views of a pair of formulas:

- set overlap (Jaccard index of the ingredient identifiers), which answers
  "do they use the same ingredients", and
- proportion similarity (cosine of the percentage vectors restricted to the
  shared ingredients), which answers "are the shared ingredients emphasized
  the same way".
"""

import math
from typing import AbstractSet, Any, Dict, List, Sequence

import numpy as np

from formula_utils.ingredients.models import Ingredient, NormalizedIngredient
from formula_utils.ingredients.normalization import normalize_ingredients
from formula_utils.similarity.models import FormulaComparison, SharedIngredient

# Share of the composite score given to each component
JACCARD_WEIGHT = 0.5
PROPORTION_WEIGHT = 0.5

# Lower bounds of the similarity label bands, highest first
SIMILARITY_LABELS = [
    (80, "Very Similar"),
    (60, "Similar"),
    (40, "Moderately Similar"),
    (20, "Somewhat Similar"),
]
LOW_SIMILARITY_LABEL = "Low Similarity"


def round_score(value: float) -> float:
    """Round half up to one decimal place.

    Examples:
        >>> round_score(79.4872)
        79.5
        >>> round_score(12.25)
        12.3
    """
    return math.floor(value * 10 + 0.5) / 10


def jaccard_similarity(ids_a: AbstractSet[str], ids_b: AbstractSet[str]) -> float:
    """Intersection over union of two identifier sets, in [0, 1]."""
    union = ids_a | ids_b
    if not union:
        return 0.0
    return len(ids_a & ids_b) / len(union)


def weighted_similarity(
    normalized_a: Sequence[NormalizedIngredient],
    normalized_b: Sequence[NormalizedIngredient],
) -> float:
    """Cosine similarity of the percentages of the shared ingredients.

    Only identifiers present in both formulas contribute to the dot product
    and to both magnitudes.

    Returns:
        A value in [0, 1]; 0 when nothing is shared or a magnitude is zero.
    """
    map_a = {ingredient.id: ingredient.percentage for ingredient in normalized_a}
    map_b = {ingredient.id: ingredient.percentage for ingredient in normalized_b}

    shared_ids = [ingredient_id for ingredient_id in map_a if ingredient_id in map_b]
    if not shared_ids:
        return 0.0

    vector_a = np.array([map_a[ingredient_id] for ingredient_id in shared_ids], dtype=float)
    vector_b = np.array([map_b[ingredient_id] for ingredient_id in shared_ids], dtype=float)

    magnitude = np.linalg.norm(vector_a) * np.linalg.norm(vector_b)
    if magnitude == 0:
        return 0.0

    return min(1.0, float(np.dot(vector_a, vector_b) / magnitude))


def _shared_ingredients(
    normalized_source: Sequence[NormalizedIngredient],
    normalized_target: Sequence[NormalizedIngredient],
) -> List[SharedIngredient]:
    source_map: Dict[str, NormalizedIngredient] = {i.id: i for i in normalized_source}
    target_map: Dict[str, NormalizedIngredient] = {i.id: i for i in normalized_target}

    shared = [
        SharedIngredient(
            id=ingredient_id,
            title=source_ingredient.title,
            percentage_in_source=round_score(source_ingredient.percentage),
            percentage_in_target=round_score(target_map[ingredient_id].percentage),
        )
        for ingredient_id, source_ingredient in source_map.items()
        if ingredient_id in target_map
    ]
    # Most emphasized shared ingredient first
    shared.sort(key=lambda herb: herb.percentage_in_source, reverse=True)
    return shared


def score_formulas(
    source_ingredients: Sequence[Ingredient],
    source_total_weight: Any,
    target_ingredients: Sequence[Ingredient],
    target_total_weight: Any,
) -> FormulaComparison:
    """Score how similar two formulas are.

    Args:
        source_ingredients: Ingredients of the formula being compared from
        source_total_weight: Optional total weight of the source formula
        target_ingredients: Ingredients of the formula being compared to
        target_total_weight: Optional total weight of the target formula

    Returns:
        A FormulaComparison with the composite score (0-100, one decimal
        place) and the shared ingredients sorted by descending source
        percentage. Either formula being empty yields a score of 0 and no
        shared ingredients.

    Example:
        >>> source = [Ingredient("ginger", "Ginger", quantity=30),
        ...           Ingredient("licorice", "Licorice", quantity=20),
        ...           Ingredient("cinnamon", "Cinnamon", quantity=50)]
        >>> target = [Ingredient("ginger", "Ginger", quantity=40),
        ...           Ingredient("licorice", "Licorice", quantity=60)]
        >>> score_formulas(source, None, target, None).score
        79.5
    """
    if not source_ingredients or not target_ingredients:
        return FormulaComparison(score=0.0, shared_ingredients=[])

    normalized_source = normalize_ingredients(source_ingredients, source_total_weight)
    normalized_target = normalize_ingredients(target_ingredients, target_total_weight)

    jaccard = jaccard_similarity(
        {i.id for i in normalized_source}, {i.id for i in normalized_target}
    )
    weighted = weighted_similarity(normalized_source, normalized_target)
    combined = (jaccard * JACCARD_WEIGHT + weighted * PROPORTION_WEIGHT) * 100

    return FormulaComparison(
        score=round_score(combined),
        shared_ingredients=_shared_ingredients(normalized_source, normalized_target),
    )


def similarity_label(score: float) -> str:
    """Get a human-readable description of a composite score."""
    for threshold, label in SIMILARITY_LABELS:
        if score >= threshold:
            return label
    return LOW_SIMILARITY_LABEL
