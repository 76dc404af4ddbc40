"""Content API access for formula data."""

from .client import ContentClient, parse_formula, parse_formula_collection
from .retry import retry_on_connection_error

__all__ = [
    "ContentClient",
    "parse_formula",
    "parse_formula_collection",
    "retry_on_connection_error",
]
