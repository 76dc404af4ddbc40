"""Formula similarity scoring, ranking and matrices."""

from .matrix import similarity_matrix
from .models import FormulaComparison, SharedIngredient, SimilarityResult
from .ranking import find_similar_formulas
from .scoring import (
    JACCARD_WEIGHT,
    PROPORTION_WEIGHT,
    jaccard_similarity,
    round_score,
    score_formulas,
    similarity_label,
    weighted_similarity,
)

__all__ = [
    "FormulaComparison",
    "JACCARD_WEIGHT",
    "PROPORTION_WEIGHT",
    "SharedIngredient",
    "SimilarityResult",
    "find_similar_formulas",
    "jaccard_similarity",
    "round_score",
    "score_formulas",
    "similarity_label",
    "similarity_matrix",
    "weighted_similarity",
]
