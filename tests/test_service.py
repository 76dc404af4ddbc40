import pytest

from formula_utils.cache import MemoryCache
from formula_utils.ingredients import Formula
from formula_utils.service import (
    FormulaNotFoundError,
    SimilarFormulaService,
    parse_similarity_params,
)


class StubClient:
    def __init__(self, formulas):
        self.formulas = formulas
        self.calls = 0

    def fetch_formulas(self):
        self.calls += 1
        return list(self.formulas)


@pytest.fixture
def cache(clock):
    return MemoryCache(clock=clock)


@pytest.fixture
def client(formula_pool):
    return StubClient(formula_pool)


@pytest.fixture
def service(client, cache):
    return SimilarFormulaService(client, cache)


def test_find_similar(service):
    response = service.find_similar("source")

    assert [r.formula_id for r in response.similar_formulas] == [
        "near-copy",
        "ginger-licorice",
        "one-herb",
    ]
    assert response.source_formula_id == "source"
    assert response.source_herb_count == 3
    assert response.total_formulas_compared == 5
    assert response.message is None
    assert response.duration_ms >= 0


def test_find_similar_respects_query_shape(service):
    response = service.find_similar("source", min_similarity=60, max_results=1)
    assert [r.formula_id for r in response.similar_formulas] == ["near-copy"]


def test_service_defaults(client, cache):
    service = SimilarFormulaService(client, cache, min_similarity=80, max_results=10)
    response = service.find_similar("source")
    assert [r.formula_id for r in response.similar_formulas] == ["near-copy"]


def test_unknown_formula(service):
    with pytest.raises(FormulaNotFoundError) as excinfo:
        service.find_similar("missing")
    assert excinfo.value.formula_id == "missing"
    assert isinstance(excinfo.value, LookupError)


def test_source_without_ingredients(service, cache):
    response = service.find_similar("empty")

    assert response.similar_formulas == []
    assert response.message == "Source formula has no ingredients."
    assert not any(key.startswith("similarities:") for key in cache.stats()["keys"])


def test_empty_pool(cache):
    service = SimilarFormulaService(StubClient([]), cache)
    response = service.find_similar("anything")
    assert response.similar_formulas == []
    assert response.message == "No formulas found."


def test_pool_and_rankings_are_cached(service, client, cache, clock):
    service.find_similar("source")
    service.find_similar("source")
    service.find_similar("near-copy")
    assert client.calls == 1
    assert set(cache.stats()["keys"]) == {
        "all-formulas-with-ingredients",
        "similarities:source:10:5",
        "similarities:near-copy:10:5",
    }

    clock.advance(300)
    service.find_similar("source")
    assert client.calls == 2


def test_rankings_cached_per_query_shape(service, cache):
    first = service.find_similar("source", min_similarity=10, max_results=1)
    second = service.find_similar("source", min_similarity=10, max_results=3)
    assert len(first.similar_formulas) == 1
    assert len(second.similar_formulas) == 3


def test_ranking_cache_outlives_stale_pool(service, client, clock):
    service.find_similar("source")
    client.formulas = client.formulas + [
        Formula(id="late", title="Late", ingredients=list(client.formulas[0].ingredients))
    ]
    clock.advance(300)
    response = service.find_similar("source")
    assert "late" not in [r.formula_id for r in response.similar_formulas]

    clock.advance(300)
    response = service.find_similar("source")
    assert response.similar_formulas[0].formula_id == "late"


def test_fetch_failure_is_not_cached(cache):
    class BrokenClient:
        def fetch_formulas(self):
            raise ConnectionError("cms offline")

    service = SimilarFormulaService(BrokenClient(), cache)
    with pytest.raises(ConnectionError):
        service.find_similar("source")
    assert cache.stats()["size"] == 0


def test_response_serializes(service):
    data = service.find_similar("source", max_results=1).to_dict()
    assert data["similar_formulas"][0]["formula_id"] == "near-copy"
    assert data["source_herb_count"] == 3


@pytest.mark.parametrize(
    "params, expected",
    [
        ({}, (10, 5)),
        ({"minSimilarity": "25", "maxResults": "8"}, (25, 8)),
        ({"minSimilarity": "12abc"}, (12, 5)),
        ({"minSimilarity": "abc", "maxResults": ""}, (10, 5)),
        ({"maxResults": " 3"}, (10, 3)),
        ({"maxResults": 7}, (10, 7)),
    ],
)
def test_parse_similarity_params(params, expected):
    assert parse_similarity_params(params) == expected
