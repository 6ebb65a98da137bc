"""Recommendation metrics.

Thread-safe counters for cache behavior, the strategy that served each
request, and the latency of recommendation computation.
"""

import threading
from typing import Dict

STRATEGY_COLLABORATIVE = "collaborative"
STRATEGY_COLD_START = "cold_start"
STRATEGY_POPULAR = "popular"


class RecommendationMetrics:
    """Counters owned by one RecommendationEngine."""

    def __init__(self):
        """Initialize metrics counters."""
        self._lock = threading.Lock()
        self.reset()

    def record_cache_hit(self) -> None:
        with self._lock:
            self._cache_hits += 1

    def record_cache_miss(self) -> None:
        with self._lock:
            self._cache_misses += 1

    def record_computation(self, strategy: str, latency_ms: float) -> None:
        """Record a computed recommendation list.

        Args:
            strategy: Which path produced the result
            latency_ms: Latency in milliseconds
        """
        with self._lock:
            self._strategies[strategy] = self._strategies.get(strategy, 0) + 1
            self._computation_count += 1
            self._total_latency_ms += latency_ms
            self._min_latency_ms = min(self._min_latency_ms, latency_ms)
            self._max_latency_ms = max(self._max_latency_ms, latency_ms)

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with metrics including:
            - cache_hits / cache_misses: Cache lookups by outcome
            - strategies: Computations per strategy
            - computation_count: Total number of computations
            - average_latency_ms: Average computation latency
            - min_latency_ms: Minimum latency observed
            - max_latency_ms: Maximum latency observed
        """
        with self._lock:
            avg_latency = (
                self._total_latency_ms / self._computation_count
                if self._computation_count > 0
                else 0.0
            )

            return {
                "cache_hits": self._cache_hits,
                "cache_misses": self._cache_misses,
                "strategies": dict(self._strategies),
                "computation_count": self._computation_count,
                "average_latency_ms": round(avg_latency, 2),
                "min_latency_ms": (
                    round(self._min_latency_ms, 2)
                    if self._min_latency_ms != float("inf")
                    else 0.0
                ),
                "max_latency_ms": round(self._max_latency_ms, 2),
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._cache_hits = 0
            self._cache_misses = 0
            self._strategies: Dict[str, int] = {}
            self._computation_count = 0
            self._total_latency_ms = 0.0
            self._min_latency_ms = float("inf")
            self._max_latency_ms = 0.0
