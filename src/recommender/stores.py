"""Interaction log and product catalog collaborators.

The recommendation core only talks to the protocols defined here. The
in-memory implementations back the API service and the tests; a database-
backed store only has to honor the same method contracts and raise
``DependencyError`` when its backend is unreachable.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Set

import pandas as pd

from src.recommender.exceptions import ValidationError
from src.recommender.models import (
    RETENTION_DAYS,
    Interaction,
    InteractionMetadata,
    ProductAggregate,
    ProductId,
    ProductRecord,
    UserId,
)
from src.recommender.weights import (
    InteractionType,
    interaction_weight,
    parse_interaction_type,
)

# Configure module logger
logger = logging.getLogger(__name__)

INTERACTION_REQUIRED_COLUMNS = {"user_id", "product_id", "type"}
CATALOG_REQUIRED_COLUMNS = {"product_id", "name", "category"}
CATALOG_KNOWN_COLUMNS = CATALOG_REQUIRED_COLUMNS | {"price", "brand"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InteractionStore(Protocol):
    """Append-only interaction log.

    Reads only return interactions inside the retention window.
    """

    def insert(self, interaction: Interaction) -> Interaction: ...

    def insert_many(self, interactions: Iterable[Interaction]) -> List[Interaction]: ...

    def find_all(self) -> List[Interaction]: ...

    def find_by_user(self, user_id: UserId) -> List[Interaction]: ...

    def find_by_product(self, product_id: ProductId) -> List[Interaction]: ...

    def aggregate_by_product(
        self,
        user_ids: Optional[Iterable[UserId]] = None,
        exclude_product_id: Optional[ProductId] = None,
    ) -> List[ProductAggregate]: ...

    def delete_by_user(self, user_id: UserId) -> int: ...

    def delete_older_than(self, cutoff: datetime) -> List[Interaction]: ...


class CatalogStore(Protocol):
    """Read-only product lookup."""

    def find_by_id(self, product_id: ProductId) -> Optional[ProductRecord]: ...

    def find_by_ids(self, product_ids: Iterable[ProductId]) -> List[ProductRecord]: ...

    def find_by_category(
        self,
        category: str,
        exclude_id: Optional[ProductId] = None,
        limit: Optional[int] = None,
    ) -> List[ProductRecord]: ...


class UserDirectory(Protocol):
    """Answers which user IDs still exist."""

    def find_existing(self, user_ids: Iterable[UserId]) -> Set[UserId]: ...


class InMemoryInteractionStore:
    """Thread-safe list-backed interaction log.

    Records older than ``retention_days`` are expired: every read skips them,
    and ``delete_older_than`` removes them for good. Pass
    ``retention_days=None`` to keep records forever.
    """

    def __init__(
        self,
        interactions: Optional[Iterable[Interaction]] = None,
        retention_days: Optional[int] = RETENTION_DAYS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._lock = threading.Lock()
        self._records: List[Interaction] = list(interactions or [])
        self.retention_days = retention_days
        self._clock = clock

    def __len__(self) -> int:
        return len(self._records)

    def _live(self) -> List[Interaction]:
        # Caller holds the lock
        if self.retention_days is None:
            return list(self._records)
        cutoff = self._clock() - timedelta(days=self.retention_days)
        return [r for r in self._records if r.created_at >= cutoff]

    def insert(self, interaction: Interaction) -> Interaction:
        with self._lock:
            self._records.append(interaction)
        return interaction

    def insert_many(self, interactions: Iterable[Interaction]) -> List[Interaction]:
        batch = list(interactions)
        with self._lock:
            self._records.extend(batch)
        return batch

    def find_all(self) -> List[Interaction]:
        with self._lock:
            return self._live()

    def find_by_user(self, user_id: UserId) -> List[Interaction]:
        with self._lock:
            return [r for r in self._live() if r.user_id == user_id]

    def find_by_product(self, product_id: ProductId) -> List[Interaction]:
        with self._lock:
            return [r for r in self._live() if r.product_id == product_id]

    def aggregate_by_product(
        self,
        user_ids: Optional[Iterable[UserId]] = None,
        exclude_product_id: Optional[ProductId] = None,
    ) -> List[ProductAggregate]:
        """Sum weight and count purchases per product.

        Args:
            user_ids: Only aggregate interactions by these users when given.
            exclude_product_id: Product to leave out of the result.

        Returns:
            One aggregate per product, in order of first appearance.
        """
        user_filter = set(user_ids) if user_ids is not None else None
        with self._lock:
            rows = [
                (r.product_id, r.type.value, r.weight)
                for r in self._live()
                if (user_filter is None or r.user_id in user_filter)
                and r.product_id != exclude_product_id
            ]

        if not rows:
            return []

        frame = pd.DataFrame(rows, columns=["product_id", "type", "weight"])
        frame["is_purchase"] = frame["type"] == InteractionType.PURCHASE.value
        grouped = frame.groupby("product_id", sort=False).agg(
            total_weight=("weight", "sum"),
            purchase_count=("is_purchase", "sum"),
            interaction_count=("weight", "size"),
        )

        return [
            ProductAggregate(
                product_id=str(row.Index),
                total_weight=float(row.total_weight),
                purchase_count=int(row.purchase_count),
                interaction_count=int(row.interaction_count),
            )
            for row in grouped.itertuples()
        ]

    def delete_by_user(self, user_id: UserId) -> int:
        with self._lock:
            before = len(self._records)
            self._records = [r for r in self._records if r.user_id != user_id]
            return before - len(self._records)

    def delete_older_than(self, cutoff: datetime) -> List[Interaction]:
        with self._lock:
            expired = [r for r in self._records if r.created_at < cutoff]
            self._records = [r for r in self._records if r.created_at >= cutoff]
        return expired


class InMemoryCatalog:
    """Dictionary-backed product catalog."""

    def __init__(self, products: Optional[Iterable[ProductRecord]] = None):
        self._products: Dict[ProductId, ProductRecord] = {}
        for product in products or []:
            self.add(product)

    def __len__(self) -> int:
        return len(self._products)

    def add(self, product: ProductRecord) -> None:
        self._products[product.id] = product

    def remove(self, product_id: ProductId) -> bool:
        return self._products.pop(product_id, None) is not None

    def find_by_id(self, product_id: ProductId) -> Optional[ProductRecord]:
        return self._products.get(product_id)

    def find_by_ids(self, product_ids: Iterable[ProductId]) -> List[ProductRecord]:
        wanted = set(product_ids)
        return [p for pid, p in self._products.items() if pid in wanted]

    def find_by_category(
        self,
        category: str,
        exclude_id: Optional[ProductId] = None,
        limit: Optional[int] = None,
    ) -> List[ProductRecord]:
        matches = [
            p
            for p in self._products.values()
            if p.category == category and p.id != exclude_id
        ]
        return matches if limit is None else matches[:limit]


class InMemoryUserDirectory:
    """Set-backed user registry."""

    def __init__(self, user_ids: Optional[Iterable[UserId]] = None):
        self._user_ids: Set[UserId] = set(user_ids or [])

    def add(self, user_id: UserId) -> None:
        self._user_ids.add(user_id)

    def remove(self, user_id: UserId) -> None:
        self._user_ids.discard(user_id)

    def find_existing(self, user_ids: Iterable[UserId]) -> Set[UserId]:
        return {u for u in user_ids if u in self._user_ids}


def _optional(value: Any) -> Any:
    if value is None or pd.isna(value):
        return None
    # numpy scalars -> builtins so records serialize cleanly
    return value.item() if hasattr(value, "item") else value


def _read_csv(csv_path: str, required_columns: Set[str]) -> pd.DataFrame:
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    logger.info(f"Loading CSV from {csv_path}")
    df = pd.read_csv(csv_path, dtype={"user_id": str, "product_id": str})

    if not required_columns.issubset(df.columns):
        missing = required_columns - set(df.columns)
        raise ValueError(f"CSV missing required columns: {missing}")

    return df


def load_interactions_csv(csv_path: str) -> List[Interaction]:
    """Load interaction events from a CSV file.

    Required columns are ``user_id``, ``product_id`` and ``type``. Optional
    ``timestamp``, ``session_id``, ``source`` and ``duration`` columns are
    picked up when present. Weights are always derived from the type, and
    rows with an unknown type are skipped.

    Args:
        csv_path: Path to CSV file containing interaction events.

    Returns:
        List of Interaction records in file order.

    Raises:
        FileNotFoundError: If CSV file does not exist.
        ValueError: If CSV is missing required columns.
    """
    df = _read_csv(csv_path, INTERACTION_REQUIRED_COLUMNS)

    if "timestamp" in df.columns:
        timestamps = pd.to_datetime(df["timestamp"], utc=True)
    else:
        timestamps = pd.Series([pd.Timestamp.now(tz=timezone.utc)] * len(df))

    interactions = []
    skipped = 0
    for position, row in enumerate(df.itertuples(index=False)):
        try:
            interaction_type = parse_interaction_type(row.type)
        except ValidationError:
            skipped += 1
            continue

        raw_metadata = {
            key: _optional(getattr(row, key))
            for key in ("session_id", "source", "duration")
            if key in df.columns
        }
        for key in ("session_id", "source"):
            if raw_metadata.get(key) is not None:
                raw_metadata[key] = str(raw_metadata[key])
        metadata = InteractionMetadata.from_dict(raw_metadata)
        interactions.append(
            Interaction(
                user_id=str(row.user_id),
                product_id=str(row.product_id),
                type=interaction_type,
                weight=interaction_weight(interaction_type),
                metadata=metadata,
                created_at=timestamps.iloc[position].to_pydatetime(),
            )
        )

    if skipped:
        logger.warning(f"Skipped {skipped} rows with unknown interaction type")
    logger.info(f"Loaded {len(interactions)} interaction records")

    return interactions


def load_catalog_csv(csv_path: str) -> List[ProductRecord]:
    """Load product records from a CSV file.

    Required columns are ``product_id``, ``name`` and ``category``; ``price``
    and ``brand`` are optional and every other column lands in
    ``ProductRecord.attributes``.

    Raises:
        FileNotFoundError: If CSV file does not exist.
        ValueError: If CSV is missing required columns.
    """
    df = _read_csv(csv_path, CATALOG_REQUIRED_COLUMNS)
    extra_columns = [c for c in df.columns if c not in CATALOG_KNOWN_COLUMNS]

    products = []
    for record in df.to_dict(orient="records"):
        price = _optional(record.get("price"))
        products.append(
            ProductRecord(
                id=str(record["product_id"]),
                name=str(record["name"]),
                category=str(record["category"]),
                price=float(price) if price is not None else 0.0,
                brand=_optional(record.get("brand")),
                attributes={c: _optional(record[c]) for c in extra_columns},
            )
        )

    logger.info(f"Loaded {len(products)} catalog products")
    return products
