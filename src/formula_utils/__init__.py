"""Formula Utils - Utilities for herbal formula normalization and similarity analysis."""

__version__ = "0.1.0"

from . import cache, content, ingredients, similarity

__all__ = ["cache", "content", "ingredients", "similarity"]
