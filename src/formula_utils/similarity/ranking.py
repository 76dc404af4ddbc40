"""Rank a pool of candidate formulas by similarity to a source formula."""

import logging
from typing import Iterable, List

from formula_utils.config import DEFAULT_MAX_RESULTS, DEFAULT_MIN_SIMILARITY
from formula_utils.ingredients.models import Formula
from formula_utils.similarity.models import SimilarityResult
from formula_utils.similarity.scoring import score_formulas

logger = logging.getLogger(__name__)


def find_similar_formulas(
    source: Formula,
    candidates: Iterable[Formula],
    min_similarity: float = DEFAULT_MIN_SIMILARITY,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> List[SimilarityResult]:
    """Find the formulas most similar to ``source``.

    The source formula itself is never compared. A candidate is kept when its
    composite score reaches ``min_similarity`` and it shares at least one
    ingredient with the source; candidates without ingredients therefore
    never qualify.

    Args:
        source: Formula to compare against
        candidates: Pool of formulas, which may include the source
        min_similarity: Minimum composite score (0-100) to keep a candidate
        max_results: Maximum number of results to return

    Returns:
        Results sorted by descending score. Ties keep pool order.
    """
    source_ids = source.ingredient_ids
    results = []

    for formula in candidates:
        if formula.id == source.id:
            continue

        comparison = score_formulas(
            source.ingredients,
            source.total_weight,
            formula.ingredients,
            formula.total_weight,
        )
        if comparison.score < min_similarity or not comparison.shared_ingredients:
            continue

        results.append(
            SimilarityResult(
                formula_id=formula.id,
                formula_title=formula.title,
                similarity_score=comparison.score,
                shared_herb_count=len(comparison.shared_ingredients),
                total_herbs_in_comparison=len(source_ids | formula.ingredient_ids),
                shared_herbs=comparison.shared_ingredients,
            )
        )

    # sorted() is stable, so equal scores keep pool order
    results = sorted(results, key=lambda result: result.similarity_score, reverse=True)
    logger.debug(
        f"Formula {source.id}: {len(results)} candidates at or above {min_similarity}"
    )
    return results[: max(0, max_results)]
