"""Recommendation endpoints for the PeerRec API.

Personalized recommendations, similar products and popular products, all
returned as catalog records in ranked order.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from src.api.dependencies import get_engine
from src.recommender.engine import RecommendationEngine
from src.recommender.models import ProductRecord

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommendations",
    tags=["recommendations"],
)

MAX_LIMIT = 100


class ProductResponse(BaseModel):
    """A catalog product as returned to clients."""

    id: str
    name: str
    category: str
    price: float
    brand: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductResponse":
        return cls(
            id=record.id,
            name=record.name,
            category=record.category,
            price=record.price,
            brand=record.brand,
            attributes=record.attributes,
        )


class RecommendationResponse(BaseModel):
    """Response model for personalized recommendation requests.

    Attributes:
        user_id: The user the recommendations were generated for.
        recommendations: Recommended products, best first.
        count: Number of products returned.
    """

    user_id: str = Field(..., description="User ID for recommendations")
    recommendations: List[ProductResponse] = Field(
        ..., description="Recommended products, best first"
    )
    count: int


class ProductListResponse(BaseModel):
    """Response model for non-personalized product lists."""

    products: List[ProductResponse]
    count: int


def _to_response(records: List[ProductRecord]) -> List[ProductResponse]:
    return [ProductResponse.from_record(r) for r in records]


@router.get("/popular", response_model=ProductListResponse)
def get_popular_products(
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    engine: RecommendationEngine = Depends(get_engine),
) -> ProductListResponse:
    """Get the most purchased, most interacted-with products."""
    products = _to_response(engine.get_popular_products(limit))
    return ProductListResponse(products=products, count=len(products))


@router.get("/similar/{product_id}", response_model=ProductListResponse)
def get_similar_products(
    product_id: str,
    limit: int = Query(6, ge=1, le=MAX_LIMIT),
    engine: RecommendationEngine = Depends(get_engine),
) -> ProductListResponse:
    """Get products favored by the users who interacted with a product.

    Falls back to products from the same category when nobody has
    interacted with the product yet.
    """
    products = _to_response(engine.get_similar_products(product_id, limit))
    return ProductListResponse(products=products, count=len(products))


@router.post("/cache/clear")
def clear_cache(engine: RecommendationEngine = Depends(get_engine)) -> Dict[str, str]:
    """Drop every cached recommendation list.

    Returns:
        Dictionary with status message.
    """
    logger.info("Clearing recommendation cache on request")
    engine.clear_cache()
    return {"status": "Recommendation cache cleared"}


@router.get("/{user_id}", response_model=RecommendationResponse)
def get_recommendations(
    user_id: str,
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    engine: RecommendationEngine = Depends(get_engine),
) -> RecommendationResponse:
    """Get personalized product recommendations for a user.

    Users with too little history, or with no similar users, receive
    popular products instead.

    Args:
        user_id: User ID for which to generate recommendations.
        limit: Number of recommendations to return (default: 10).

    Example:
        GET /recommendations/u42?limit=5
        Returns top 5 product recommendations for user u42.
    """
    products = _to_response(engine.get_recommendations(user_id, limit))
    return RecommendationResponse(
        user_id=user_id,
        recommendations=products,
        count=len(products),
    )
