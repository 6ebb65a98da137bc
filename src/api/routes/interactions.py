"""Interaction tracking endpoints for the PeerRec API."""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.dependencies import get_tracker
from src.recommender.models import Interaction
from src.recommender.tracking import DEFAULT_HISTORY_LIMIT, InteractionTracker

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/interactions",
    tags=["interactions"],
)


class InteractionMetadataModel(BaseModel):
    session_id: Optional[str] = None
    source: Optional[str] = Field(
        None, description="e.g. 'search', 'recommendation', 'category'"
    )
    duration: Optional[float] = Field(None, description="Seconds spent viewing")


class TrackInteractionRequest(BaseModel):
    """Request body for recording an interaction.

    ``type`` is checked by the tracker rather than by pydantic so an unknown
    type is reported as a 400 listing the accepted values.
    """

    user_id: str
    product_id: str
    type: str = Field(..., description="view, click, add_to_cart or purchase")
    metadata: Optional[InteractionMetadataModel] = None


class InteractionResponse(BaseModel):
    id: str
    user_id: str
    product_id: str
    type: str
    weight: float
    metadata: InteractionMetadataModel
    created_at: datetime

    @classmethod
    def from_interaction(cls, interaction: Interaction) -> "InteractionResponse":
        return cls(
            id=interaction.id,
            user_id=interaction.user_id,
            product_id=interaction.product_id,
            type=interaction.type.value,
            weight=interaction.weight,
            metadata=InteractionMetadataModel(**interaction.metadata.to_dict()),
            created_at=interaction.created_at,
        )


class InteractionHistoryResponse(BaseModel):
    user_id: str
    interactions: List[InteractionResponse]
    count: int


class DeletionResponse(BaseModel):
    user_id: str
    deleted: int


class ProductStatsResponse(BaseModel):
    product_id: str
    views: int
    clicks: int
    add_to_carts: int
    purchases: int
    total: int


@router.post(
    "",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
)
def track_interaction(
    body: TrackInteractionRequest,
    tracker: InteractionTracker = Depends(get_tracker),
) -> InteractionResponse:
    """Record a user interaction with a product."""
    metadata = body.metadata.model_dump() if body.metadata else None
    interaction = tracker.record_interaction(
        body.user_id, body.product_id, body.type, metadata
    )
    return InteractionResponse.from_interaction(interaction)


@router.get("/users/{user_id}", response_model=InteractionHistoryResponse)
def get_interaction_history(
    user_id: str,
    type: Optional[str] = None,
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=500),
    skip: int = Query(0, ge=0),
    tracker: InteractionTracker = Depends(get_tracker),
) -> InteractionHistoryResponse:
    """Get a user's interaction history, newest first."""
    interactions = tracker.get_user_interactions(
        user_id, interaction_type=type, limit=limit, skip=skip
    )
    return InteractionHistoryResponse(
        user_id=user_id,
        interactions=[InteractionResponse.from_interaction(i) for i in interactions],
        count=len(interactions),
    )


@router.delete("/users/{user_id}", response_model=DeletionResponse)
def delete_user_interactions(
    user_id: str,
    tracker: InteractionTracker = Depends(get_tracker),
) -> DeletionResponse:
    """Erase all of a user's interactions (right to erasure)."""
    deleted = tracker.delete_user_interactions(user_id)
    return DeletionResponse(user_id=user_id, deleted=deleted)


@router.get("/products/{product_id}/stats", response_model=ProductStatsResponse)
def get_product_stats(
    product_id: str,
    tracker: InteractionTracker = Depends(get_tracker),
) -> ProductStatsResponse:
    """Count a product's interactions by type."""
    stats: Dict[str, int] = tracker.get_product_stats(product_id)
    return ProductStatsResponse(product_id=product_id, **stats)
