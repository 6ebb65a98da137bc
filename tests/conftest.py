"""Shared fixtures: a small catalog and interaction log.

Users u1 to u3 overlap on laptops, u4 only viewed one phone, and u5 touched
three accessories nobody else did:

    u1: p1 purchase, p2 click, p3 view        -> {p1: 5, p2: 2, p3: 1}
    u2: p1 purchase, p2 view, p4 add_to_cart  -> {p1: 5, p2: 1, p4: 3}
    u3: p1 view, p5 purchase                  -> {p1: 1, p5: 5}
    u4: p6 view                               -> {p6: 1}
    u5: p8 view, p9 view, p10 view            -> {p8: 1, p9: 1, p10: 1}
"""

from datetime import datetime, timezone
from typing import Callable

import pytest

from src.recommender.engine import RecommendationEngine
from src.recommender.models import Interaction, ProductRecord
from src.recommender.stores import InMemoryCatalog, InMemoryInteractionStore
from src.recommender.tracking import InteractionTracker
from src.recommender.weights import InteractionType, interaction_weight

PRODUCTS = [
    ProductRecord("p1", "Acme Laptop 14", "laptops", 999.0, "Acme"),
    ProductRecord("p2", "Globex Laptop 15", "laptops", 1299.0, "Globex"),
    ProductRecord("p3", "Initech Laptop 13", "laptops", 899.0, "Initech"),
    ProductRecord("p4", "Acme Phone X", "smartphones", 699.0, "Acme"),
    ProductRecord("p5", "Hooli Phone", "smartphones", 599.0, "Hooli"),
    ProductRecord("p6", "Globex Phone Mini", "smartphones", 399.0, "Globex"),
    ProductRecord("p7", "Umbrella Laptop Pro", "laptops", 2199.0, "Umbrella"),
    ProductRecord("p8", "USB-C Cable", "accessories", 9.99),
    ProductRecord("p9", "Laptop Sleeve", "accessories", 24.99),
    ProductRecord("p10", "Phone Case", "accessories", 14.99),
]

EVENTS = [
    ("u1", "p1", "purchase"),
    ("u1", "p2", "click"),
    ("u1", "p3", "view"),
    ("u2", "p1", "purchase"),
    ("u2", "p2", "view"),
    ("u2", "p4", "add_to_cart"),
    ("u3", "p1", "view"),
    ("u3", "p5", "purchase"),
    ("u4", "p6", "view"),
    ("u5", "p8", "view"),
    ("u5", "p9", "view"),
    ("u5", "p10", "view"),
]


def build_interaction(
    user_id: str,
    product_id: str,
    interaction_type: str,
    created_at: datetime = None,
) -> Interaction:
    parsed = InteractionType(interaction_type)
    return Interaction(
        user_id=user_id,
        product_id=product_id,
        type=parsed,
        weight=interaction_weight(parsed),
        created_at=created_at or datetime.now(timezone.utc),
    )


@pytest.fixture
def make_interaction() -> Callable[..., Interaction]:
    """Factory building an Interaction with its derived weight."""
    return build_interaction


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog(PRODUCTS)


@pytest.fixture
def interaction_store() -> InMemoryInteractionStore:
    return InMemoryInteractionStore([build_interaction(*event) for event in EVENTS])


@pytest.fixture
def engine(interaction_store, catalog) -> RecommendationEngine:
    return RecommendationEngine(interaction_store, catalog)


@pytest.fixture
def tracker(interaction_store, engine) -> InteractionTracker:
    return InteractionTracker(interaction_store, engine)
