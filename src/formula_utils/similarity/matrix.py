"""All-pairs similarity matrices for offline analysis."""

from typing import Sequence

import numpy as np
import pandas as pd

from formula_utils.ingredients.models import Formula
from formula_utils.similarity.scoring import score_formulas


def similarity_matrix(formulas: Sequence[Formula]) -> pd.DataFrame:
    """Compute the composite similarity score between every pair of formulas.

    Args:
        formulas: Formulas to compare; identifiers should be unique

    Returns:
        Square DataFrame indexed and columned by formula id. The diagonal is
        100 for formulas with ingredients and 0 for empty ones.

    Example:
        >>> matrix = similarity_matrix(formulas)
        >>> matrix.loc["gui-zhi-tang", "ma-huang-tang"]
        55.3
    """
    ids = [formula.id for formula in formulas]
    n = len(formulas)
    scores = np.zeros((n, n), dtype=float)

    for i in range(n):
        scores[i, i] = 100.0 if formulas[i].ingredients else 0.0
        for j in range(i + 1, n):
            score = score_formulas(
                formulas[i].ingredients,
                formulas[i].total_weight,
                formulas[j].ingredients,
                formulas[j].total_weight,
            ).score
            # Both components are symmetric in their arguments
            scores[i, j] = score
            scores[j, i] = score

    return pd.DataFrame(scores, index=ids, columns=ids)
