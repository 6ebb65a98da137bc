"""Non-personalized recommendation fallbacks.

PopularityFallback serves cold-start users from global interaction volume.
ItemCooccurrenceFallback answers "users who liked this also liked" straight
from the interaction log, without building the user-item matrix.
"""

import logging
from typing import List

from src.recommender.models import ProductId
from src.recommender.stores import CatalogStore, InteractionStore

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_POPULAR_LIMIT = 10
DEFAULT_SIMILAR_LIMIT = 6


class PopularityFallback:
    """Ranks products by purchase count, then total interaction weight."""

    def __init__(self, interactions: InteractionStore):
        self.interactions = interactions

    def top(self, limit: int = DEFAULT_POPULAR_LIMIT) -> List[ProductId]:
        aggregates = self.interactions.aggregate_by_product()
        ranked = sorted(
            aggregates,
            key=lambda a: (-a.purchase_count, -a.total_weight, a.product_id),
        )
        return [a.product_id for a in ranked[:limit]]


class ItemCooccurrenceFallback:
    """Finds products favored by the users who interacted with a product."""

    def __init__(self, interactions: InteractionStore, catalog: CatalogStore):
        self.interactions = interactions
        self.catalog = catalog

    def similar_to(
        self, product_id: ProductId, limit: int = DEFAULT_SIMILAR_LIMIT
    ) -> List[ProductId]:
        """Rank products co-visited with ``product_id``.

        Sums the weight of every interaction the product's users had with
        other products. When nobody interacted with the product, or its users
        touched nothing else, falls back to the product's catalog category.

        Args:
            product_id: Product to find related products for.
            limit: Maximum number of products to return.

        Returns:
            Related product IDs, strongest first.
        """
        user_ids = {i.user_id for i in self.interactions.find_by_product(product_id)}

        if user_ids:
            aggregates = self.interactions.aggregate_by_product(
                user_ids=user_ids, exclude_product_id=product_id
            )
            ranked = sorted(aggregates, key=lambda a: (-a.total_weight, a.product_id))
            if ranked:
                return [a.product_id for a in ranked[:limit]]
            logger.debug(f"No co-occurring products for {product_id}")

        return self._same_category(product_id, limit)

    def _same_category(self, product_id: ProductId, limit: int) -> List[ProductId]:
        product = self.catalog.find_by_id(product_id)
        if product is None:
            logger.info(f"Product {product_id} not in catalog, no category fallback")
            return []

        logger.debug(
            "Using category fallback",
            extra={"product_id": product_id, "category": product.category},
        )
        related = self.catalog.find_by_category(
            product.category, exclude_id=product_id, limit=limit
        )
        return [p.id for p in related]
