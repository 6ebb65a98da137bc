"""Personalized recommendation engine.

User-based collaborative filtering:

1. Build the user-item interaction matrix from the log.
2. Find the target user's nearest neighbors by cosine similarity.
3. Score every product a neighbor touched and the target user has not,
   adding ``similarity * weight`` across neighbors.
4. Return the highest scoring products, resolved through the catalog.

Users with too little history, or with no similar users, get the popularity
fallback instead. Collaborative results are cached per ``(user, limit)``
until the TTL passes or the user records a new interaction.
"""

import logging
import time
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from src.config import Settings
from src.recommender.cache import RecommendationCache
from src.recommender.exceptions import NotFoundError, ValidationError
from src.recommender.fallback import (
    DEFAULT_POPULAR_LIMIT,
    DEFAULT_SIMILAR_LIMIT,
    ItemCooccurrenceFallback,
    PopularityFallback,
)
from src.recommender.matrix import MatrixBuilder, UserVector
from src.recommender.metrics import (
    STRATEGY_COLD_START,
    STRATEGY_COLLABORATIVE,
    STRATEGY_POPULAR,
    RecommendationMetrics,
)
from src.recommender.models import ProductId, ProductRecord, SimilarityResult, UserId
from src.recommender.similarity import DEFAULT_NEIGHBOR_COUNT, k_nearest_neighbors
from src.recommender.stores import CatalogStore, InteractionStore, UserDirectory

# Configure module logger
logger = logging.getLogger(__name__)

# Default parameters
DEFAULT_TOP_N = 10
DEFAULT_MIN_INTERACTIONS = 3


class RecommendationRanker:
    """Turns neighbor vectors into a ranked candidate list."""

    def score(
        self,
        user_vector: Mapping[ProductId, float],
        neighbors: Sequence[SimilarityResult],
        matrix: Mapping[UserId, Mapping[ProductId, float]],
    ) -> Dict[ProductId, float]:
        """Accumulate ``similarity * weight`` per unseen product.

        Products already in ``user_vector`` are never scored.
        """
        scores: Dict[ProductId, float] = {}
        for neighbor in neighbors:
            for product_id, weight in matrix[neighbor.user_id].items():
                if product_id in user_vector:
                    continue
                scores[product_id] = scores.get(product_id, 0.0) + (
                    neighbor.similarity * weight
                )
        return scores

    def rank(
        self,
        user_vector: Mapping[ProductId, float],
        neighbors: Sequence[SimilarityResult],
        matrix: Mapping[UserId, Mapping[ProductId, float]],
        limit: int,
    ) -> List[ProductId]:
        scores = self.score(user_vector, neighbors, matrix)
        # Stable sort: equal scores keep the order they were first accumulated in
        ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
        return [product_id for product_id, _ in ranked[:limit]]


class RecommendationEngine:
    """Serves personalized, similar-product and popular-product lists."""

    def __init__(
        self,
        interactions: InteractionStore,
        catalog: CatalogStore,
        users: Optional[UserDirectory] = None,
        cache: Optional[RecommendationCache] = None,
        min_interactions: int = DEFAULT_MIN_INTERACTIONS,
        neighbor_count: int = DEFAULT_NEIGHBOR_COUNT,
        metrics: Optional[RecommendationMetrics] = None,
    ):
        """Initialize the engine.

        Args:
            interactions: Interaction log to read from.
            catalog: Product catalog used to resolve recommended IDs.
            users: Optional user directory; interactions of users it does
                not know are ignored.
            cache: Result cache. A fresh one with the default TTL is
                created when omitted.
            min_interactions: Distinct products a user needs before
                collaborative filtering is attempted.
            neighbor_count: Number of nearest neighbors used for scoring.
            metrics: Metrics collector, created when omitted.
        """
        self.interactions = interactions
        self.catalog = catalog
        self.builder = MatrixBuilder(interactions, catalog, users)
        self.ranker = RecommendationRanker()
        self.popularity = PopularityFallback(interactions)
        self.cooccurrence = ItemCooccurrenceFallback(interactions, catalog)
        self.cache = cache if cache is not None else RecommendationCache()
        self.min_interactions = min_interactions
        self.neighbor_count = neighbor_count
        self.metrics = metrics if metrics is not None else RecommendationMetrics()

        logger.info(
            f"Initialized RecommendationEngine: "
            f"cache_ttl={self.cache.ttl_seconds}s, "
            f"min_interactions={min_interactions}, "
            f"neighbors={neighbor_count}"
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        interactions: InteractionStore,
        catalog: CatalogStore,
        users: Optional[UserDirectory] = None,
    ) -> "RecommendationEngine":
        return cls(
            interactions=interactions,
            catalog=catalog,
            users=users,
            cache=RecommendationCache(ttl_seconds=settings.cache_ttl_seconds),
            min_interactions=settings.min_interactions,
            neighbor_count=settings.neighbor_count,
        )

    def recommend(self, user_id: UserId, limit: int = DEFAULT_TOP_N) -> List[ProductId]:
        """Compute recommended product IDs for a user, bypassing the cache."""
        _check_limit(limit)
        product_ids, _ = self._recommend(user_id, limit)
        return product_ids

    def _recommend(self, user_id: UserId, limit: int) -> Tuple[List[ProductId], str]:
        matrix = self.builder.build()
        user_vector: UserVector = matrix.get(user_id, {})

        if len(user_vector) < self.min_interactions:
            logger.info(
                "Not enough interactions, using popular products",
                extra={
                    "user_id": user_id,
                    "distinct_products": len(user_vector),
                    "strategy": STRATEGY_COLD_START,
                },
            )
            return self.popularity.top(limit), STRATEGY_COLD_START

        neighbors = k_nearest_neighbors(user_id, matrix, self.neighbor_count)
        if not neighbors:
            logger.info(
                "No similar users, using popular products",
                extra={"user_id": user_id, "strategy": STRATEGY_POPULAR},
            )
            return self.popularity.top(limit), STRATEGY_POPULAR

        product_ids = self.ranker.rank(user_vector, neighbors, matrix, limit)
        return product_ids, STRATEGY_COLLABORATIVE

    def get_recommendations(
        self, user_id: UserId, limit: int = DEFAULT_TOP_N
    ) -> List[ProductRecord]:
        """Get personalized product recommendations for a user.

        Args:
            user_id: User to recommend for.
            limit: Maximum number of products to return.

        Returns:
            Product records in recommendation order. Products the catalog no
            longer knows are left out.

        Raises:
            ValidationError: If limit is not a positive integer.
            DependencyError: If a store is unreachable.
        """
        _check_limit(limit)

        cached = self.cache.get(user_id, limit)
        if cached is not None:
            self.metrics.record_cache_hit()
            logger.debug(f"Cache hit for user {user_id}, limit={limit}")
            return cached
        self.metrics.record_cache_miss()

        start_time = time.perf_counter()
        product_ids, strategy = self._recommend(user_id, limit)
        products = self.resolve_products(product_ids)
        latency_ms = (time.perf_counter() - start_time) * 1000

        # Fallback lists follow the log as it changes, so only CF results are cached
        if strategy == STRATEGY_COLLABORATIVE:
            self.cache.put(user_id, limit, products)

        self.metrics.record_computation(strategy, latency_ms)
        logger.info(
            "Recommendations generated",
            extra={
                "user_id": user_id,
                "strategy": strategy,
                "num_recommendations": len(products),
                "total_time_ms": round(latency_ms, 2),
            },
        )

        return products

    def get_similar_products(
        self, product_id: ProductId, limit: int = DEFAULT_SIMILAR_LIMIT
    ) -> List[ProductRecord]:
        _check_limit(limit)
        return self.resolve_products(self.cooccurrence.similar_to(product_id, limit))

    def get_popular_products(self, limit: int = DEFAULT_POPULAR_LIMIT) -> List[ProductRecord]:
        _check_limit(limit)
        return self.resolve_products(self.popularity.top(limit))

    def get_product(self, product_id: ProductId) -> ProductRecord:
        """Look up a single catalog product.

        Raises:
            NotFoundError: If the catalog does not know the product.
        """
        product = self.catalog.find_by_id(product_id)
        if product is None:
            raise NotFoundError("product", product_id)
        return product

    def resolve_products(self, product_ids: Sequence[ProductId]) -> List[ProductRecord]:
        """Look up product records, keeping the order of ``product_ids``.

        IDs missing from the catalog are dropped without reordering the rest.
        """
        if not product_ids:
            return []
        by_id = {p.id: p for p in self.catalog.find_by_ids(product_ids)}
        missing = [pid for pid in product_ids if pid not in by_id]
        if missing:
            logger.debug(f"Dropping {len(missing)} products missing from catalog: {missing}")
        return [by_id[pid] for pid in product_ids if pid in by_id]

    def invalidate_user(self, user_id: UserId) -> int:
        return self.cache.invalidate(user_id)

    def clear_cache(self) -> None:
        self.cache.clear_all()


def _check_limit(limit: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError(
            f"limit must be a positive integer, got {limit!r}",
            details={"limit": repr(limit)},
        )
