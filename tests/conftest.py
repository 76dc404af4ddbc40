import pytest

from formula_utils.ingredients import Formula, Ingredient


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def make_formula(formula_id, quantities, title=None, total_weight=None):
    """Build a formula from a {herb_id: quantity} mapping."""
    return Formula(
        id=formula_id,
        title=title or formula_id.title(),
        ingredients=[
            Ingredient(id=herb_id, title=herb_id.title(), quantity=quantity)
            for herb_id, quantity in quantities.items()
        ],
        total_weight=total_weight,
    )


@pytest.fixture
def source_formula():
    return make_formula("source", {"ginger": 30, "licorice": 20, "cinnamon": 50})


@pytest.fixture
def formula_pool(source_formula):
    return [
        source_formula,
        make_formula("ginger-licorice", {"ginger": 40, "licorice": 60}),
        make_formula("near-copy", {"ginger": 30, "licorice": 20, "cinnamon": 45, "jujube": 5}),
        make_formula("one-herb", {"cinnamon": 10, "peony": 40, "jujube": 30, "astragalus": 20}),
        make_formula("unrelated", {"peony": 50, "astragalus": 50}),
        Formula(id="empty", title="Empty", ingredients=[]),
    ]
