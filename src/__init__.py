"""PeerRec: user-based collaborative filtering recommendation service.

This package turns a log of user-product interactions into ranked product
suggestions, with popularity and co-occurrence fallbacks and a time-bounded
result cache.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: interaction weighting, similarity search and ranking logic
    config: environment-driven settings
"""

__version__ = "0.2.0"
