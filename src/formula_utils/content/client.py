"""Content API client for fetching formulas with their ingredients.

The CMS exposes formulas as JSON:API documents. A formula's ingredients are
relationships that point either directly at herb nodes or at herb-ingredient
paragraphs, which in turn reference a herb node and carry the quantity,
unit, percentage and role for that formula. Older formulas keep a
denormalized ingredient list in the ``field_herb_ingredients`` attribute.
"""

import dataclasses
import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from formula_utils.config import CONTENT_BASE_URL, REQUEST_TIMEOUT, USER_AGENT
from formula_utils.content.retry import retry_on_connection_error
from formula_utils.ingredients.models import Formula, Ingredient
from formula_utils.ingredients.normalization import (
    resolve_ingredient,
    resolve_ingredients,
)
from formula_utils.ingredients.number_utils import coerce_number

logger = logging.getLogger(__name__)

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"
FORMULA_PATH = "/jsonapi/node/formula"

# Published formulas, with only the fields needed for similarity
FORMULA_QUERY = {
    "filter[status][value]": "1",
    "include": "field_herb_ingredients",
    "fields[node--formula]": "title,field_total_weight,field_herb_ingredients",
    "fields[node--herb]": "title,field_quantity,field_unit,field_percentage,field_role",
    "fields[paragraph--herb_ingredient]": (
        "field_herb,field_quantity,field_unit,field_percentage,field_role,field_herb_name"
    ),
}

# The CMS leaves these blank when an editor skips them
DEFAULT_QUANTITY = 1.0
DEFAULT_UNIT = "g"
DEFAULT_HERB_TITLE = "Herb"
DEFAULT_FORMULA_TITLE = "Formula"

MAX_PAGES = 100


def _with_cms_defaults(ingredient: Ingredient) -> Ingredient:
    return dataclasses.replace(
        ingredient,
        quantity=DEFAULT_QUANTITY if ingredient.quantity is None else ingredient.quantity,
        unit=ingredient.unit or DEFAULT_UNIT,
    )


def _ingredient_fields(attributes: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "field_quantity": attributes.get("field_quantity"),
        "field_unit": attributes.get("field_unit"),
        "field_percentage": attributes.get("field_percentage"),
        "field_role": attributes.get("field_role"),
    }


def _ingredient_from_reference(
    ref: Mapping[str, Any], included: Mapping[str, Mapping[str, Any]]
) -> Optional[Ingredient]:
    """Resolve one ``field_herb_ingredients`` relationship reference."""
    ref_id = ref.get("id")
    item = included.get(ref_id)

    if item is None:
        # Not included; the reference meta is all we have
        meta = ref.get("meta") or {}
        raw = {"id": ref_id, "title": meta.get("title") or DEFAULT_HERB_TITLE}
        raw.update(_ingredient_fields(meta))
        return resolve_ingredient(raw)

    attributes = item.get("attributes") or {}
    item_type = item.get("type") or ""

    if item_type == "node--herb":
        raw = {"id": item.get("id"), "title": attributes.get("title") or DEFAULT_HERB_TITLE}
        raw.update(_ingredient_fields(attributes))
        return resolve_ingredient(raw)

    if "paragraph" in item_type:
        herb_ref = ((item.get("relationships") or {}).get("field_herb") or {}).get("data")
        if isinstance(herb_ref, list):
            # Multi-value reference; the first herb is the ingredient
            herb_ref = herb_ref[0] if herb_ref else None
        herb = included.get(herb_ref.get("id")) if isinstance(herb_ref, Mapping) else None
        herb_attributes = (herb or {}).get("attributes") or {}
        raw = {
            "id": (herb or {}).get("id") or ref_id,
            "title": herb_attributes.get("title")
            or attributes.get("field_herb_name")
            or DEFAULT_HERB_TITLE,
        }
        raw.update(_ingredient_fields(attributes))
        return resolve_ingredient(raw)

    logger.debug(f"Skipping ingredient {ref_id} of unexpected type {item_type!r}")
    return None


def parse_formula(item: Mapping[str, Any], included: Mapping[str, Mapping[str, Any]]) -> Formula:
    """Build a Formula from one JSON:API ``node--formula`` resource.

    Args:
        item: The formula resource object
        included: Included resources of the document, keyed by id

    Returns:
        The parsed formula; ingredients lacking a quantity or unit get the
        CMS defaults of 1 and "g".
    """
    attributes = item.get("attributes") or {}
    relationship = (item.get("relationships") or {}).get("field_herb_ingredients") or {}
    refs = relationship.get("data") or []

    ingredients = []
    for ref in refs:
        if not isinstance(ref, Mapping):
            continue
        ingredient = _ingredient_from_reference(ref, included)
        if ingredient is not None:
            ingredients.append(ingredient)

    if not ingredients and isinstance(attributes.get("field_herb_ingredients"), list):
        ingredients = resolve_ingredients(attributes["field_herb_ingredients"])

    return Formula(
        id=item.get("id"),
        title=attributes.get("title") or DEFAULT_FORMULA_TITLE,
        ingredients=[_with_cms_defaults(ingredient) for ingredient in ingredients],
        total_weight=coerce_number(attributes.get("field_total_weight")),
    )


def parse_formula_collection(document: Mapping[str, Any]) -> List[Formula]:
    """Parse a JSON:API formula collection document.

    Args:
        document: Decoded JSON:API response body

    Returns:
        Formulas in document order; resources without an id are skipped
    """
    included = {
        item["id"]: item
        for item in document.get("included") or []
        if isinstance(item, Mapping) and item.get("id")
    }
    return [
        parse_formula(item, included)
        for item in document.get("data") or []
        if isinstance(item, Mapping) and item.get("id")
    ]


class ContentClient:
    """Read-only client for formulas served by the CMS JSON:API.

    Attributes:
        base_url: CMS base URL, without a trailing slash
        session: The underlying requests session
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str = CONTENT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
        user_agent: str = USER_AGENT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.session.headers["Accept"] = JSONAPI_MEDIA_TYPE
        self.timeout = timeout

    @retry_on_connection_error()
    def _get_document(self, url: str, params: Optional[Mapping[str, str]] = None) -> Dict:
        """GET a JSON:API document.

        Raises:
            requests.HTTPError: If the CMS answers with an error status
        """
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def fetch_formulas(self) -> List[Formula]:
        """Fetch every published formula with its ingredients.

        Follows the document's ``links.next`` pagination.

        Returns:
            All formulas, in CMS order
        """
        url: Optional[str] = f"{self.base_url}{FORMULA_PATH}"
        params: Optional[Mapping[str, str]] = FORMULA_QUERY
        formulas: List[Formula] = []

        for _ in range(MAX_PAGES):
            document = self._get_document(url, params)
            formulas.extend(parse_formula_collection(document))

            next_link = (document.get("links") or {}).get("next")
            if isinstance(next_link, Mapping):
                next_link = next_link.get("href")
            if not next_link:
                break
            # The next link already carries the query string
            url, params = next_link, None
        else:
            logger.warning(f"Stopped paging formulas after {MAX_PAGES} pages")

        logger.info(f"Fetched {len(formulas)} formulas from {self.base_url}")
        return formulas
