"""User interaction tracking.

Every write to the interaction log goes through here so the owning user's
cached recommendations are invalidated in the same call. Interactions are kept
for a fixed retention window and can be erased per user on request.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from src.recommender.engine import RecommendationEngine
from src.recommender.exceptions import ValidationError
from src.recommender.models import (
    RETENTION_DAYS,
    Interaction,
    InteractionMetadata,
    ProductId,
    UserId,
)
from src.recommender.stores import InteractionStore
from src.recommender.weights import (
    InteractionType,
    interaction_weight,
    parse_interaction_type,
)

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InteractionTracker:
    """Records, lists and erases user interactions."""

    def __init__(
        self,
        interactions: InteractionStore,
        engine: RecommendationEngine,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.interactions = interactions
        self.engine = engine
        self._clock = clock

    def build_interaction(
        self,
        user_id: UserId,
        product_id: ProductId,
        interaction_type: Union[InteractionType, str],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Interaction:
        """Validate input and create an Interaction with its derived weight.

        Raises:
            ValidationError: If an ID is empty or the type is unknown.
        """
        if not user_id:
            raise ValidationError("user_id is required")
        if not product_id:
            raise ValidationError("product_id is required")

        parsed_type = parse_interaction_type(interaction_type)
        return Interaction(
            user_id=user_id,
            product_id=product_id,
            type=parsed_type,
            weight=interaction_weight(parsed_type),
            metadata=InteractionMetadata.from_dict(metadata),
            created_at=self._clock(),
        )

    def record_interaction(
        self,
        user_id: UserId,
        product_id: ProductId,
        interaction_type: Union[InteractionType, str],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Interaction:
        """Append an interaction and invalidate the user's recommendations.

        Args:
            user_id: Acting user.
            product_id: Product acted upon.
            interaction_type: One of view, click, add_to_cart, purchase.
            metadata: Optional session_id, source and duration.

        Returns:
            The stored interaction.

        Raises:
            ValidationError: If the input is rejected. Nothing is stored.
        """
        interaction = self.build_interaction(
            user_id, product_id, interaction_type, metadata
        )
        stored = self.interactions.insert(interaction)
        self.engine.invalidate_user(user_id)

        logger.info(
            "Interaction recorded",
            extra={
                "user_id": user_id,
                "product_id": product_id,
                "type": interaction.type.value,
                "weight": interaction.weight,
            },
        )
        return stored

    def batch_record(self, interactions: Iterable[Interaction]) -> List[Interaction]:
        """Insert many interactions, invalidating each affected user once.

        The whole batch is checked before anything is stored.

        Raises:
            ValidationError: If a record has an empty ID, an unknown type, or
                a weight that does not match its type. Nothing is stored.
        """
        batch = list(interactions)
        for interaction in batch:
            _check_record(interaction)

        created = self.interactions.insert_many(batch)
        for user_id in {i.user_id for i in created}:
            self.engine.invalidate_user(user_id)

        logger.info(f"Batch recorded {len(created)} interactions")
        return created

    def get_user_interactions(
        self,
        user_id: UserId,
        interaction_type: Optional[Union[InteractionType, str]] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        skip: int = 0,
    ) -> List[Interaction]:
        """Return a user's interactions, newest first."""
        records = self.interactions.find_by_user(user_id)
        if interaction_type is not None:
            wanted = parse_interaction_type(interaction_type)
            records = [r for r in records if r.type == wanted]

        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[skip : skip + limit]

    def get_product_stats(self, product_id: ProductId) -> Dict[str, int]:
        """Count a product's interactions by type."""
        counts = {t: 0 for t in InteractionType}
        for record in self.interactions.find_by_product(product_id):
            counts[record.type] += 1

        return {
            "views": counts[InteractionType.VIEW],
            "clicks": counts[InteractionType.CLICK],
            "add_to_carts": counts[InteractionType.ADD_TO_CART],
            "purchases": counts[InteractionType.PURCHASE],
            "total": sum(counts.values()),
        }

    def delete_user_interactions(self, user_id: UserId) -> int:
        """Erase every interaction of a user and invalidate their cache.

        Returns:
            Number of interactions deleted.
        """
        deleted = self.interactions.delete_by_user(user_id)
        self.engine.invalidate_user(user_id)

        logger.info(
            "User interactions erased",
            extra={"user_id": user_id, "deleted": deleted},
        )
        return deleted

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete interactions older than the retention window.

        Returns:
            Number of interactions deleted.
        """
        cutoff = (now or self._clock()) - timedelta(days=RETENTION_DAYS)
        expired = self.interactions.delete_older_than(cutoff)
        for user_id in {i.user_id for i in expired}:
            self.engine.invalidate_user(user_id)

        if expired:
            logger.info(f"Purged {len(expired)} interactions older than {cutoff.isoformat()}")
        return len(expired)


def _check_record(interaction: Interaction) -> None:
    if not interaction.user_id:
        raise ValidationError("user_id is required")
    if not interaction.product_id:
        raise ValidationError("product_id is required")

    parsed_type = parse_interaction_type(interaction.type)
    expected = interaction_weight(parsed_type)
    if interaction.weight != expected:
        raise ValidationError(
            f"Interaction weight {interaction.weight} does not match "
            f"type '{parsed_type.value}', expected {expected}",
            details={"id": interaction.id, "weight": interaction.weight},
        )
