"""Generate a fake product catalog and interaction log.

Writes two CSV files usable as ``CATALOG_CSV`` and ``INTERACTIONS_CSV`` for
the API service or ``scripts/predict_cli.py``. Each user gets a favorite
category, so the generated log has real neighborhoods for collaborative
filtering to find.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_interactions
        df = generate_fake_interactions(catalog, num_users=100)
"""

import argparse
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pandas as pd

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.recommender.weights import InteractionType

# Default configuration constants
DEFAULT_NUM_USERS = 50
DEFAULT_NUM_PRODUCTS = 100
DEFAULT_NUM_INTERACTIONS = 2000
DEFAULT_DAYS_BACK = 90
DEFAULT_SEED = 42

CATEGORIES = ["laptops", "smartphones", "headphones", "smartwatches", "tablets", "accessories"]
BRANDS = ["Acme", "Globex", "Initech", "Umbrella", "Hooli"]
SOURCES = ["search", "recommendation", "category", "home"]

# Funnel shape: most events are views, few are purchases
TYPE_PROBABILITIES = {
    InteractionType.VIEW: 0.55,
    InteractionType.CLICK: 0.25,
    InteractionType.ADD_TO_CART: 0.12,
    InteractionType.PURCHASE: 0.08,
}

# Share of a user's events that land in their favorite category
FAVORITE_CATEGORY_SHARE = 0.8


def generate_fake_catalog(
    num_products: int = DEFAULT_NUM_PRODUCTS,
    seed: Optional[int] = DEFAULT_SEED,
) -> pd.DataFrame:
    """Generate a product catalog spread evenly across categories.

    Returns:
        DataFrame with columns product_id, name, category, brand, price.
    """
    if num_products <= 0:
        raise ValueError("num_products must be positive")

    rng = random.Random(seed)
    rows = []
    for i in range(1, num_products + 1):
        category = CATEGORIES[i % len(CATEGORIES)]
        brand = rng.choice(BRANDS)
        rows.append({
            "product_id": f"p{i}",
            "name": f"{brand} {category.title()} {i}",
            "category": category,
            "brand": brand,
            "price": round(rng.uniform(9.99, 1999.99), 2),
        })
    return pd.DataFrame(rows)


def generate_fake_interactions(
    catalog: pd.DataFrame,
    num_users: int = DEFAULT_NUM_USERS,
    num_interactions: int = DEFAULT_NUM_INTERACTIONS,
    days_back: int = DEFAULT_DAYS_BACK,
    seed: Optional[int] = DEFAULT_SEED,
) -> pd.DataFrame:
    """Generate typed user-product interactions.

    Args:
        catalog: Catalog produced by ``generate_fake_catalog``.
        num_users: Number of unique users to simulate.
        num_interactions: Total number of interaction records.
        days_back: Timestamps are spread over this many past days.
        seed: Random seed for reproducibility.

    Returns:
        DataFrame with columns user_id, product_id, type, timestamp,
        session_id, source and duration, sorted by timestamp.

    Raises:
        ValueError: If any numeric parameter is non-positive.
    """
    if num_users <= 0 or num_interactions <= 0 or days_back <= 0:
        raise ValueError("num_users, num_interactions and days_back must be positive")

    rng = random.Random(seed)
    end_date = datetime.now(timezone.utc)
    by_category = catalog.groupby("category")["product_id"].apply(list).to_dict()
    all_products = catalog["product_id"].tolist()
    favorites = {f"u{u}": rng.choice(CATEGORIES) for u in range(1, num_users + 1)}
    types = list(TYPE_PROBABILITIES)
    type_weights = list(TYPE_PROBABILITIES.values())

    rows = []
    for _ in range(num_interactions):
        user_id = rng.choice(list(favorites))
        pool = by_category.get(favorites[user_id]) or all_products
        if rng.random() > FAVORITE_CATEGORY_SHARE:
            pool = all_products
        interaction_type = rng.choices(types, weights=type_weights)[0]

        rows.append({
            "user_id": user_id,
            "product_id": rng.choice(pool),
            "type": interaction_type.value,
            "timestamp": end_date - timedelta(seconds=rng.randrange(days_back * 86400)),
            "session_id": f"s{rng.randrange(10_000)}",
            "source": rng.choice(SOURCES),
            "duration": round(rng.uniform(1, 300), 1)
            if interaction_type == InteractionType.VIEW
            else None,
        })

    df = pd.DataFrame(rows)
    return df.sort_values("timestamp").reset_index(drop=True)


def main() -> None:
    """Generate both CSV files and print a summary."""
    parser = argparse.ArgumentParser(description="Generate fake catalog and interaction data")
    parser.add_argument("--users", type=int, default=DEFAULT_NUM_USERS)
    parser.add_argument("--products", type=int, default=DEFAULT_NUM_PRODUCTS)
    parser.add_argument("--interactions", type=int, default=DEFAULT_NUM_INTERACTIONS)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument(
        "--output-dir",
        type=str,
        default=str(project_root / "data"),
        help="Directory for catalog.csv and interactions.csv (default: data/)",
    )
    args = parser.parse_args()

    try:
        catalog = generate_fake_catalog(args.products, seed=args.seed)
        interactions = generate_fake_interactions(
            catalog,
            num_users=args.users,
            num_interactions=args.interactions,
            seed=args.seed,
        )
    except ValueError as e:
        print(f"Error generating data: {e}")
        sys.exit(1)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    catalog_path = output_dir / "catalog.csv"
    interactions_path = output_dir / "interactions.csv"
    catalog.to_csv(catalog_path, index=False)
    interactions.to_csv(interactions_path, index=False)

    print("\nData generated successfully!")
    print(f"Catalog: {catalog_path} ({len(catalog)} products)")
    print(f"Interactions: {interactions_path} ({len(interactions)} events)")
    print("\nInteraction types:")
    print(interactions["type"].value_counts().to_string())
    print(f"\nUnique users: {interactions['user_id'].nunique()}")
    print(f"Unique products: {interactions['product_id'].nunique()}")


if __name__ == "__main__":
    main()
