"""Interaction weighting model.

Maps each tracked interaction type to the strength it contributes to a user's
interest in a product. Stronger intent signals weigh more.
"""

from enum import Enum
from typing import Dict, Union

from src.recommender.exceptions import InvalidInteractionTypeError


class InteractionType(str, Enum):
    """Fixed set of tracked user actions."""

    VIEW = "view"
    CLICK = "click"
    ADD_TO_CART = "add_to_cart"
    PURCHASE = "purchase"


INTERACTION_WEIGHTS: Dict[InteractionType, float] = {
    InteractionType.VIEW: 1.0,
    InteractionType.CLICK: 2.0,
    InteractionType.ADD_TO_CART: 3.0,
    InteractionType.PURCHASE: 5.0,
}

DEFAULT_WEIGHT = 1.0

VALID_TYPES = tuple(t.value for t in InteractionType)


def interaction_weight(interaction_type: Union[InteractionType, str]) -> float:
    """Return the weight for an interaction type, 1.0 when unknown."""
    try:
        return INTERACTION_WEIGHTS[InteractionType(interaction_type)]
    except ValueError:
        return DEFAULT_WEIGHT


def parse_interaction_type(value: Union[InteractionType, str]) -> InteractionType:
    """Coerce a raw value into an InteractionType.

    Raises:
        InvalidInteractionTypeError: If the value is not one of the fixed types.
    """
    try:
        return InteractionType(value)
    except ValueError:
        raise InvalidInteractionTypeError(value, VALID_TYPES) from None
