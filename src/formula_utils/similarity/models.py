import dataclasses
from typing import Any, Dict, List


@dataclasses.dataclass(frozen=True)
class SharedIngredient:
    """An ingredient present in both formulas of a comparison."""

    id: str
    title: str
    percentage_in_source: float
    percentage_in_target: float


@dataclasses.dataclass
class FormulaComparison:
    score: float  # 0-100, one decimal place
    shared_ingredients: List[SharedIngredient]


@dataclasses.dataclass
class SimilarityResult:
    """One ranked candidate formula and why it matched."""

    formula_id: str
    formula_title: str
    similarity_score: float
    shared_herb_count: int
    total_herbs_in_comparison: int
    shared_herbs: List[SharedIngredient]

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)
