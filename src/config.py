"""Runtime configuration for PeerRec.

Settings are read once at startup from environment variables. Anything that
cannot be parsed falls back to its default so a typo never stops the service.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Configure module logger
logger = logging.getLogger(__name__)

# Defaults
DEFAULT_CACHE_TTL_SECONDS = 3600
DEFAULT_MIN_INTERACTIONS = 3
DEFAULT_NEIGHBOR_COUNT = 10
DEFAULT_LOG_LEVEL = "INFO"


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default
    if value < 0:
        logger.warning(f"Ignoring negative {name}={value}, using {default}")
        return default
    return value


@dataclass(frozen=True)
class Settings:
    """Service settings.

    Attributes:
        cache_ttl_seconds: Lifetime of a cached recommendation list.
        min_interactions: Distinct products a user must have touched before
            collaborative filtering is attempted.
        neighbor_count: Number of nearest neighbors used for scoring.
        log_level: Root logging level.
        interactions_csv: Optional CSV used to seed the interaction store.
        catalog_csv: Optional CSV used to seed the product catalog.
    """

    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    min_interactions: int = DEFAULT_MIN_INTERACTIONS
    neighbor_count: int = DEFAULT_NEIGHBOR_COUNT
    log_level: str = DEFAULT_LOG_LEVEL
    interactions_csv: Optional[str] = None
    catalog_csv: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Populated Settings instance.
        """
        env = os.environ if environ is None else environ
        return cls(
            cache_ttl_seconds=_read_int(
                env, "RECOMMENDATION_CACHE_TTL", DEFAULT_CACHE_TTL_SECONDS
            ),
            min_interactions=_read_int(
                env, "MIN_INTERACTIONS_FOR_RECOMMENDATIONS", DEFAULT_MIN_INTERACTIONS
            ),
            neighbor_count=_read_int(
                env, "RECOMMENDATION_NEIGHBORS", DEFAULT_NEIGHBOR_COUNT
            ),
            log_level=env.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            interactions_csv=env.get("INTERACTIONS_CSV") or None,
            catalog_csv=env.get("CATALOG_CSV") or None,
        )
