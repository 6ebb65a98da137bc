"""User similarity and nearest-neighbor search.

Cosine similarity between sparse weight vectors: the dot product runs over
the products both users touched, the magnitudes over each user's full vector.
"""

import logging
import math
from typing import List, Mapping

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as pairwise_cosine

from src.recommender.matrix import build_sparse_matrix
from src.recommender.models import ProductId, SimilarityResult, UserId

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_NEIGHBOR_COUNT = 10

# Float noise below this precision must not reorder equally similar users
SIMILARITY_DECIMALS = 12


def _magnitude(vector: Mapping[ProductId, float]) -> float:
    values = np.fromiter(vector.values(), dtype=np.float64, count=len(vector))
    return float(np.linalg.norm(values))


def cosine_similarity(
    vec_a: Mapping[ProductId, float],
    vec_b: Mapping[ProductId, float],
) -> float:
    """Cosine similarity between two sparse weight vectors.

    Args:
        vec_a: First user's ``{product ID: weight}`` vector.
        vec_b: Second user's ``{product ID: weight}`` vector.

    Returns:
        Similarity in [0, 1]. Zero when the vectors share no product or
        either of them has zero magnitude.

    Example:
        >>> cosine_similarity({"p1": 3, "p2": 4}, {"p1": 3, "p2": 4})
        1.0
    """
    common = vec_a.keys() & vec_b.keys()
    if not common:
        return 0.0

    # Fixed summation order keeps sim(a, b) == sim(b, a) bit for bit
    dot = math.fsum(vec_a[p] * vec_b[p] for p in sorted(common, key=str))

    mag_a = _magnitude(vec_a)
    mag_b = _magnitude(vec_b)
    if mag_a == 0 or mag_b == 0:
        return 0.0

    return min(max(dot / (mag_a * mag_b), 0.0), 1.0)


def k_nearest_neighbors(
    user_id: UserId,
    matrix: Mapping[UserId, Mapping[ProductId, float]],
    k: int = DEFAULT_NEIGHBOR_COUNT,
) -> List[SimilarityResult]:
    """Find the k users most similar to ``user_id``.

    One sparse row-against-matrix product screens out every user who shares
    no product with the target. Each remaining candidate is scored with
    ``cosine_similarity`` and rounded to ``SIMILARITY_DECIMALS``, so equal
    similarities compare equal and ties keep the matrix iteration order.

    Args:
        user_id: The user to find neighbors for.
        matrix: Mapping of user ID to ``{product ID: weight}``.
        k: Maximum number of neighbors to return.

    Returns:
        Neighbors sorted by descending similarity, at most k of them. Empty
        when the user is not in the matrix.
    """
    target = matrix.get(user_id)
    if not target or k <= 0:
        return []

    sparse, user_id_to_idx, _ = build_sparse_matrix(matrix)
    target_idx = user_id_to_idx[user_id]
    overlaps = pairwise_cosine(sparse[target_idx], sparse)[0] > 0

    neighbors = []
    for other_id, idx in user_id_to_idx.items():
        if idx == target_idx or not overlaps[idx]:
            continue
        similarity = round(cosine_similarity(target, matrix[other_id]), SIMILARITY_DECIMALS)
        if similarity > 0:
            neighbors.append(SimilarityResult(user_id=other_id, similarity=similarity))
    neighbors.sort(key=lambda n: n.similarity, reverse=True)

    logger.debug(
        "Computed nearest neighbors",
        extra={
            "user_id": user_id,
            "candidates": int(overlaps.sum()) - 1,
            "neighbors_found": len(neighbors),
            "k": k,
        },
    )

    return neighbors[:k]
