"""Command line interface for formula similarity lookups.

Usage:
    formula-similarity similar <formula-id> --min-similarity 20 --max-results 5
    formula-similarity --input formulas.json matrix --output similarity.csv
"""

import argparse
import json
import logging
import pathlib
import sys
from typing import List, Optional

from formula_utils.cache.memory import MemoryCache
from formula_utils.config import (
    CONTENT_BASE_URL,
    DEFAULT_MIN_SIMILARITY,
    DEFAULT_RESPONSE_MAX_RESULTS,
)
from formula_utils.content.client import ContentClient, parse_formula_collection
from formula_utils.ingredients.models import Formula
from formula_utils.service import FormulaNotFoundError, SimilarFormulaService
from formula_utils.similarity.matrix import similarity_matrix


class JsonDocumentSource:
    """Formula source backed by a saved JSON:API document."""

    def __init__(self, path: str):
        self.path = pathlib.Path(path)

    def fetch_formulas(self) -> List[Formula]:
        with self.path.open("r", encoding="utf-8") as f:
            return parse_formula_collection(json.load(f))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formula-similarity",
        description="Find similar herbal formulas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Formulas similar to one formula, from the live content API
  formula-similarity similar 3f2c9a7e-formula-id --max-results 10

  # Use a saved JSON:API document instead of the content API
  formula-similarity --input formulas.json similar 3f2c9a7e-formula-id

  # Export the all-pairs similarity matrix
  formula-similarity --input formulas.json matrix --output similarity.csv
        """,
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=CONTENT_BASE_URL,
        help=f"Content API base URL (default: {CONTENT_BASE_URL})",
    )
    parser.add_argument(
        "--input",
        type=str,
        help="Path to a saved JSON:API formula document; skips the content API",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    similar = subparsers.add_parser("similar", help="Rank formulas similar to one formula")
    similar.add_argument("formula_id", help="Identifier of the source formula")
    similar.add_argument(
        "--min-similarity",
        type=int,
        default=DEFAULT_MIN_SIMILARITY,
        help=f"Minimum similarity score, 0-100 (default: {DEFAULT_MIN_SIMILARITY})",
    )
    similar.add_argument(
        "--max-results",
        type=int,
        default=DEFAULT_RESPONSE_MAX_RESULTS,
        help=f"Maximum number of results (default: {DEFAULT_RESPONSE_MAX_RESULTS})",
    )

    matrix = subparsers.add_parser("matrix", help="Write the all-pairs similarity matrix")
    matrix.add_argument("--output", required=True, help="CSV file to write")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    source = JsonDocumentSource(args.input) if args.input else ContentClient(args.base_url)

    if args.command == "matrix":
        formulas = source.fetch_formulas()
        matrix = similarity_matrix(formulas)
        matrix.to_csv(args.output)
        print(f"Wrote {len(formulas)}x{len(formulas)} similarity matrix to {args.output}")
        return 0

    service = SimilarFormulaService(source, MemoryCache())
    try:
        response = service.find_similar(
            args.formula_id,
            min_similarity=args.min_similarity,
            max_results=args.max_results,
        )
    except FormulaNotFoundError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(json.dumps(response.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
