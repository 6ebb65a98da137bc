"""Request-scoped access to the components held on ``app.state``."""

from fastapi import Request

from src.recommender.engine import RecommendationEngine
from src.recommender.tracking import InteractionTracker


def get_engine(request: Request) -> RecommendationEngine:
    return request.app.state.engine


def get_tracker(request: Request) -> InteractionTracker:
    return request.app.state.tracker
