"""Plain data records shared by the recommendation core and its stores."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from src.recommender.weights import InteractionType

UserId = str
ProductId = str

METADATA_FIELDS = ("session_id", "source", "duration")

# Interactions older than this are expired and invisible to reads
RETENTION_DAYS = 180


@dataclass(frozen=True)
class InteractionMetadata:
    """Context captured alongside an interaction.

    Attributes:
        session_id: Client session the action happened in.
        source: Where the user came from, e.g. "search" or "recommendation".
        duration: Seconds spent on the product, for views.
    """

    session_id: Optional[str] = None
    source: Optional[str] = None
    duration: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "InteractionMetadata":
        """Build metadata from a loose mapping, ignoring unknown keys."""
        if not data:
            return cls()
        return cls(**{key: data[key] for key in METADATA_FIELDS if key in data})

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, key) for key in METADATA_FIELDS}


@dataclass(frozen=True)
class Interaction:
    """A single recorded user-product event.

    The weight is fixed when the record is created and never recomputed.
    """

    user_id: UserId
    product_id: ProductId
    type: InteractionType
    weight: float
    metadata: InteractionMetadata = field(default_factory=InteractionMetadata)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "product_id": self.product_id,
            "type": self.type.value,
            "weight": self.weight,
            "metadata": self.metadata.to_dict(),
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class ProductRecord:
    """Catalog entry returned to callers for display."""

    id: ProductId
    name: str
    category: str
    price: float = 0.0
    brand: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProductAggregate:
    """Per-product totals over a set of interactions."""

    product_id: ProductId
    total_weight: float
    purchase_count: int
    interaction_count: int


@dataclass(frozen=True)
class SimilarityResult:
    """A neighbor of the queried user and how similar they are."""

    user_id: UserId
    similarity: float
