import pytest

from formula_utils.ingredients import (
    Ingredient,
    coerce_number,
    normalize_ingredients,
    normalize_unit,
    resolve_ingredient,
    resolve_ingredients,
)


def percentages(normalized):
    return {n.id: n.percentage for n in normalized}


def test_quantities_become_percentages_of_their_sum():
    ingredients = [
        Ingredient("ginger", "Ginger", quantity=30),
        Ingredient("licorice", "Licorice", quantity=20),
        Ingredient("cinnamon", "Cinnamon", quantity=50),
    ]
    assert percentages(normalize_ingredients(ingredients)) == pytest.approx(
        {"ginger": 30.0, "licorice": 20.0, "cinnamon": 50.0}
    )


def test_total_weight_is_the_denominator_when_given():
    ingredients = [
        Ingredient("ginger", "Ginger", quantity=9),
        Ingredient("licorice", "Licorice", quantity=6),
    ]
    assert percentages(normalize_ingredients(ingredients, total_weight=60)) == pytest.approx(
        {"ginger": 15.0, "licorice": 10.0}
    )


@pytest.mark.parametrize("total_weight", [0, None, "heavy", -5])
def test_unusable_total_weight_falls_back_to_quantity_sum(total_weight):
    ingredients = [
        Ingredient("ginger", "Ginger", quantity=1),
        Ingredient("licorice", "Licorice", quantity=3),
    ]
    assert percentages(normalize_ingredients(ingredients, total_weight)) == pytest.approx(
        {"ginger": 25.0, "licorice": 75.0}
    )


def test_equal_distribution_without_any_weights():
    ingredients = [Ingredient(herb, herb) for herb in ["a", "b", "c", "d"]]
    normalized = normalize_ingredients(ingredients)
    assert [n.percentage for n in normalized] == [25.0, 25.0, 25.0, 25.0]


def test_explicit_percentage_wins_over_quantity_ratio():
    ingredients = [
        Ingredient("ginger", "Ginger", quantity=10, percentage=40),
        Ingredient("licorice", "Licorice", quantity=90),
    ]
    normalized = percentages(normalize_ingredients(ingredients, total_weight=100))
    assert normalized["ginger"] == 40
    assert normalized["licorice"] == pytest.approx(90.0)


def test_equal_distribution_ignores_explicit_percentages_without_weights():
    ingredients = [
        Ingredient("ginger", "Ginger", percentage=70),
        Ingredient("licorice", "Licorice"),
    ]
    assert percentages(normalize_ingredients(ingredients)) == {"ginger": 50.0, "licorice": 50.0}


def test_missing_and_malformed_quantities_count_as_zero():
    ingredients = [
        Ingredient("ginger", "Ginger", quantity=10),
        Ingredient("licorice", "Licorice", quantity="a pinch"),
        Ingredient("cinnamon", "Cinnamon"),
    ]
    assert percentages(normalize_ingredients(ingredients)) == {
        "ginger": 100.0,
        "licorice": 0.0,
        "cinnamon": 0.0,
    }


def test_empty_ingredient_list_normalizes_to_empty():
    assert normalize_ingredients([]) == []
    assert normalize_ingredients([], total_weight=100) == []


def test_normalization_preserves_order_and_titles():
    ingredients = [Ingredient("b", "Bai Shao", quantity=1), Ingredient("a", "Gan Cao", quantity=1)]
    normalized = normalize_ingredients(ingredients)
    assert [(n.id, n.title) for n in normalized] == [("b", "Bai Shao"), ("a", "Gan Cao")]


@pytest.mark.parametrize(
    "value, expected",
    [
        (12, 12.0),
        (2.5, 2.5),
        ("12.5", 12.5),
        (" 3 ", 3.0),
        ("1/2", 0.5),
        ("1/0", None),
        ("a pinch", None),
        (True, None),
        (None, None),
        (-4, None),
        (float("nan"), None),
        (float("inf"), None),
        ([3], None),
    ],
)
def test_coerce_number(value, expected):
    assert coerce_number(value) == expected


@pytest.mark.parametrize(
    "unit, expected",
    [("Grams", "g"), ("g.", "g"), ("tael", "liang"), ("Ounces", "oz"), ("handful", "handful")],
)
def test_normalize_unit(unit, expected):
    assert normalize_unit(unit) == expected


def test_resolve_string_ingredient():
    assert resolve_ingredient("  ginger ") == Ingredient(id="ginger", title="ginger")


def test_resolve_wrapped_ingredient():
    ingredient = resolve_ingredient({"value": "ginger", "format": "plain_text"})
    assert ingredient.id == "ginger"


def test_resolve_sequence_ingredient():
    ingredient = resolve_ingredient(("ginger", "9", "grams"))
    assert ingredient == Ingredient(id="ginger", title="ginger", quantity=9.0, unit="g")


def test_resolve_full_object_with_wrapped_fields():
    ingredient = resolve_ingredient(
        {
            "herb_id": "gui-zhi",
            "herb_title": {"value": "Gui Zhi"},
            "quantity": "9",
            "unit": "Grams",
            "percentage": {"value": 30},
            "role": "Chief",
        }
    )
    assert ingredient == Ingredient(
        id="gui-zhi",
        title="Gui Zhi",
        quantity=9.0,
        unit="g",
        percentage=30.0,
        role="chief",
    )


def test_resolve_object_without_title_uses_id():
    assert resolve_ingredient({"id": "gan-cao"}).title == "gan-cao"


@pytest.mark.parametrize("raw", [None, 42, "", "   ", [], {"title": "No id"}, {"value": 3}])
def test_unresolvable_payloads(raw):
    assert resolve_ingredient(raw) is None


def test_resolve_ingredient_returns_ingredients_unchanged():
    ingredient = Ingredient("ginger", "Ginger", quantity=3)
    assert resolve_ingredient(ingredient) is ingredient


def test_resolve_ingredients_drops_unusable_and_assigns_positional_ids():
    ingredients = resolve_ingredients(["ginger", None, {"title": "Da Zao", "quantity": 4}, 7])
    assert [(i.id, i.title) for i in ingredients] == [("ginger", "ginger"), ("herb-2", "Da Zao")]


@pytest.mark.parametrize("raws", [None, "ginger", {"id": "ginger"}])
def test_resolve_ingredients_rejects_non_lists(raws):
    assert resolve_ingredients(raws) == []
