"""CLI script for getting product recommendations.

Useful for testing and evaluation. Loads a catalog and interaction log from
CSV into the in-memory stores and prints personalized, similar or popular
products to the console.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.config import Settings
from src.recommender.engine import RecommendationEngine
from src.recommender.exceptions import RecommenderError
from src.recommender.models import ProductRecord
from src.recommender.stores import (
    InMemoryCatalog,
    InMemoryInteractionStore,
    load_catalog_csv,
    load_interactions_csv,
)

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def load_engine(catalog_csv: str, interactions_csv: str) -> RecommendationEngine:
    """Build an engine over CSV-seeded in-memory stores."""
    catalog = InMemoryCatalog(load_catalog_csv(catalog_csv))
    interactions = InMemoryInteractionStore(load_interactions_csv(interactions_csv))
    return RecommendationEngine.from_settings(Settings.from_env(), interactions, catalog)


def print_products(title: str, products: List[ProductRecord]) -> None:
    print(f"\n{title}")
    if not products:
        print("  (no products)")
    for rank, product in enumerate(products, start=1):
        print(f"  {rank:>2}. {product.id:<8} {product.name} [{product.category}] ${product.price:.2f}")


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Get product recommendations from an interaction log",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/predict_cli.py user u42
  python scripts/predict_cli.py user u42 --limit 5
  python scripts/predict_cli.py similar p7
  python scripts/predict_cli.py popular --limit 20
        """
    )

    parser.add_argument(
        "mode",
        choices=["user", "similar", "popular"],
        help="Personalized for a user, similar to a product, or globally popular"
    )
    parser.add_argument(
        "target",
        nargs="?",
        help="User ID (mode=user) or product ID (mode=similar)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Number of products to return (default: 10, or 6 for similar)"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Directory containing catalog.csv and interactions.csv (default: data)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    if args.mode != "popular" and not args.target:
        parser.error(f"mode '{args.mode}' needs a target ID")

    data_dir = Path(args.data_dir)
    try:
        engine = load_engine(
            str(data_dir / "catalog.csv"), str(data_dir / "interactions.csv")
        )
        if args.mode == "user":
            limit = args.limit if args.limit is not None else 10
            products = engine.get_recommendations(args.target, limit)
            title = f"Recommendations for user {args.target}:"
        elif args.mode == "similar":
            limit = args.limit if args.limit is not None else 6
            anchor = engine.get_product(args.target)
            products = engine.get_similar_products(args.target, limit)
            title = f"Products similar to {anchor.name} ({anchor.id}):"
        else:
            limit = args.limit if args.limit is not None else 10
            products = engine.get_popular_products(limit)
            title = "Popular products:"
    except FileNotFoundError as e:
        print(f"Error: data files not found in {data_dir}", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        print("  Run scripts/generate_fake_data.py first.", file=sys.stderr)
        sys.exit(1)
    except RecommenderError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    print_products(title, products)
    print()


if __name__ == "__main__":
    main()
