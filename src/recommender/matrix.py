"""User-item interaction matrix construction.

Folds the interaction log into a sparse ``user -> {product: weight}`` mapping.
The matrix is rebuilt from scratch for every cold cache entry; there is no
incremental maintenance, so results always reflect the log at build time.
"""

import logging
from typing import Dict, Iterator, Mapping, Optional, Set, Tuple

import numpy as np
from scipy.sparse import csr_matrix

from src.recommender.models import ProductId, UserId
from src.recommender.stores import CatalogStore, InteractionStore, UserDirectory

# Configure module logger
logger = logging.getLogger(__name__)

UserVector = Dict[ProductId, float]


class InteractionMatrix(Mapping[UserId, UserVector]):
    """Accumulated interaction weights per user.

    Behaves as a read-only mapping of user ID to user vector and also
    carries the set of distinct products observed while building it.
    """

    def __init__(
        self,
        vectors: Dict[UserId, UserVector],
        products: Optional[Set[ProductId]] = None,
    ):
        self.vectors = vectors
        if products is None:
            products = {pid for vector in vectors.values() for pid in vector}
        self.products = products

    def __getitem__(self, user_id: UserId) -> UserVector:
        return self.vectors[user_id]

    def __iter__(self) -> Iterator[UserId]:
        return iter(self.vectors)

    def __len__(self) -> int:
        return len(self.vectors)

    def to_sparse(self) -> Tuple[csr_matrix, Dict[UserId, int], Dict[ProductId, int]]:
        return build_sparse_matrix(self.vectors)


class MatrixBuilder:
    """Builds an InteractionMatrix from the interaction log."""

    def __init__(
        self,
        interactions: InteractionStore,
        catalog: CatalogStore,
        users: Optional[UserDirectory] = None,
    ):
        self.interactions = interactions
        self.catalog = catalog
        self.users = users

    def build(self) -> InteractionMatrix:
        """Scan every interaction and sum weights per (user, product).

        Records whose product is gone from the catalog, or whose user is gone
        from the user directory, are skipped.

        Returns:
            The full interaction matrix.
        """
        records = self.interactions.find_all()

        product_ids = {r.product_id for r in records}
        known_products = {p.id for p in self.catalog.find_by_ids(product_ids)}
        if self.users is not None:
            known_users = self.users.find_existing({r.user_id for r in records})
        else:
            known_users = None

        vectors: Dict[UserId, UserVector] = {}
        products: Set[ProductId] = set()
        skipped = 0

        for record in records:
            if not record.user_id or record.product_id not in known_products:
                skipped += 1
                continue
            if known_users is not None and record.user_id not in known_users:
                skipped += 1
                continue

            vector = vectors.setdefault(record.user_id, {})
            vector[record.product_id] = vector.get(record.product_id, 0.0) + record.weight
            products.add(record.product_id)

        logger.debug(
            "Built interaction matrix",
            extra={
                "num_interactions": len(records),
                "num_users": len(vectors),
                "num_products": len(products),
                "skipped": skipped,
            },
        )

        return InteractionMatrix(vectors, products)


def build_sparse_matrix(
    matrix: Mapping[UserId, Mapping[ProductId, float]],
) -> Tuple[csr_matrix, Dict[UserId, int], Dict[ProductId, int]]:
    """Convert a user-vector mapping to a sparse CSR matrix.

    Rows follow the mapping's iteration order and columns follow the order
    in which products are first seen, so row ``i`` always belongs to the
    ``i``-th user of ``matrix``.

    Args:
        matrix: Mapping of user ID to ``{product ID: weight}``.

    Returns:
        A tuple containing:
            - Sparse CSR matrix of shape (n_users, n_products)
            - Dictionary mapping user ID to matrix row index
            - Dictionary mapping product ID to matrix column index
    """
    user_id_to_idx: Dict[UserId, int] = {}
    product_id_to_idx: Dict[ProductId, int] = {}
    rows, cols, data = [], [], []

    for user_id, vector in matrix.items():
        row = user_id_to_idx.setdefault(user_id, len(user_id_to_idx))
        for product_id, weight in vector.items():
            col = product_id_to_idx.setdefault(product_id, len(product_id_to_idx))
            rows.append(row)
            cols.append(col)
            data.append(weight)

    sparse = csr_matrix(
        (np.asarray(data, dtype=np.float64), (rows, cols)),
        shape=(len(user_id_to_idx), len(product_id_to_idx)),
        dtype=np.float64,
    )

    return sparse, user_id_to_idx, product_id_to_idx
