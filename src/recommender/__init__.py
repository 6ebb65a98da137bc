"""Recommendation core for PeerRec.

This module contains the interaction weighting model, the user-item matrix
builder, cosine similarity and k-nearest-neighbor search, score aggregation,
the popularity and co-occurrence fallbacks, and the recommendation cache.
"""
