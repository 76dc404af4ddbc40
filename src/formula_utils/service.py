"""Similar-formula lookups for request handlers.

``SimilarFormulaService`` is what a "similar formulas" endpoint calls: it
fetches the formula pool (cached), finds the source formula, ranks the pool
against it (cached per query shape) and annotates the result.
"""

import dataclasses
import logging
import re
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple

from formula_utils.cache.memory import MemoryCache
from formula_utils.config import (
    CACHE_TTL,
    DEFAULT_MIN_SIMILARITY,
    DEFAULT_RESPONSE_MAX_RESULTS,
)
from formula_utils.ingredients.models import Formula
from formula_utils.similarity.models import SimilarityResult
from formula_utils.similarity.ranking import find_similar_formulas

logger = logging.getLogger(__name__)

FORMULAS_CACHE_KEY = "all-formulas-with-ingredients"

NO_FORMULAS_MESSAGE = "No formulas found."
NO_INGREDIENTS_MESSAGE = "Source formula has no ingredients."

_LEADING_INT = re.compile(r"\s*([-+]?\d+)")


class FormulaNotFoundError(LookupError):
    """Raised when the requested source formula is not in the pool."""

    def __init__(self, formula_id: str):
        super().__init__(f"Formula not found: {formula_id}")
        self.formula_id = formula_id


@dataclasses.dataclass
class SimilarFormulasResponse:
    similar_formulas: List[SimilarityResult]
    source_formula_id: str
    source_herb_count: int = 0
    total_formulas_compared: int = 0
    message: Optional[str] = None
    duration_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def _parse_int(value: Any, default: int) -> int:
    """Parse the leading integer of a query value, e.g. "12abc" -> 12."""
    if value is None:
        return default
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else default


def parse_similarity_params(
    params: Mapping[str, Any],
    default_min_similarity: int = DEFAULT_MIN_SIMILARITY,
    default_max_results: int = DEFAULT_RESPONSE_MAX_RESULTS,
) -> Tuple[int, int]:
    """Read ``minSimilarity`` and ``maxResults`` from request query parameters.

    Missing or unparseable values fall back to the defaults.

    Returns:
        Tuple of (min_similarity, max_results)
    """
    return (
        _parse_int(params.get("minSimilarity"), default_min_similarity),
        _parse_int(params.get("maxResults"), default_max_results),
    )


class SimilarFormulaService:
    """Finds formulas similar to a given one.

    Attributes:
        client: Object with a ``fetch_formulas()`` method returning the pool
        cache: Cache shared by the pool fetch and the rankings
        min_similarity: Default minimum composite score
        max_results: Default number of results
    """

    def __init__(
        self,
        client: Any,
        cache: MemoryCache,
        min_similarity: int = DEFAULT_MIN_SIMILARITY,
        max_results: int = DEFAULT_RESPONSE_MAX_RESULTS,
    ):
        self.client = client
        self.cache = cache
        self.min_similarity = min_similarity
        self.max_results = max_results

    def fetch_all_formulas(self) -> List[Formula]:
        """Get the formula pool, from the cache when fresh."""
        return self.cache.cached_fetch(
            FORMULAS_CACHE_KEY, self.client.fetch_formulas, CACHE_TTL["formulas_list"]
        )

    def find_similar(
        self,
        formula_id: str,
        min_similarity: Optional[int] = None,
        max_results: Optional[int] = None,
    ) -> SimilarFormulasResponse:
        """Rank the formula pool against one formula.

        Args:
            formula_id: Identifier of the source formula
            min_similarity: Minimum composite score; service default if None
            max_results: Maximum number of results; service default if None

        Returns:
            The ranked results, annotated with the source's ingredient count
            and the number of formulas it was compared against. An empty
            pool or a source without ingredients yields no results and an
            explanatory message.

        Raises:
            FormulaNotFoundError: If no formula in the pool has ``formula_id``
        """
        start = time.perf_counter()
        if min_similarity is None:
            min_similarity = self.min_similarity
        if max_results is None:
            max_results = self.max_results

        formulas = self.fetch_all_formulas()
        if not formulas:
            return SimilarFormulasResponse([], formula_id, message=NO_FORMULAS_MESSAGE)

        source = next((formula for formula in formulas if formula.id == formula_id), None)
        if source is None:
            raise FormulaNotFoundError(formula_id)

        if not source.ingredients:
            return SimilarFormulasResponse(
                [],
                formula_id,
                total_formulas_compared=len(formulas) - 1,
                message=NO_INGREDIENTS_MESSAGE,
            )

        cache_key = f"similarities:{formula_id}:{min_similarity}:{max_results}"
        similar = self.cache.cached_fetch(
            cache_key,
            lambda: find_similar_formulas(source, formulas, min_similarity, max_results),
            CACHE_TTL["similarities"],
        )

        duration_ms = round((time.perf_counter() - start) * 1000, 1)
        logger.info(
            f"Found {len(similar)} formulas similar to {formula_id} in {duration_ms}ms"
        )
        return SimilarFormulasResponse(
            similar_formulas=similar,
            source_formula_id=formula_id,
            source_herb_count=len(source.ingredients),
            total_formulas_compared=len(formulas) - 1,
            duration_ms=duration_ms,
        )
