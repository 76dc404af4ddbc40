import dataclasses
from typing import List, Optional


@dataclasses.dataclass
class Ingredient:
    id: str
    title: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    percentage: Optional[float] = None  # explicit share of the formula, 0-100
    role: Optional[str] = None  # 'chief', 'deputy', 'assistant', 'envoy'


@dataclasses.dataclass(frozen=True)
class NormalizedIngredient:
    id: str
    title: str
    percentage: float


@dataclasses.dataclass
class Formula:
    """A named collection of ingredients with relative proportions."""

    id: str
    title: str
    ingredients: List[Ingredient] = dataclasses.field(default_factory=list)
    total_weight: Optional[float] = None

    @property
    def ingredient_ids(self) -> set:
        return {ingredient.id for ingredient in self.ingredients}
