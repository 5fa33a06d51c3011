"""Recommendation endpoints for the ShopScore API.

Scores every catalog product for the posted user against the most recently
trained model.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from shopscore.api.metrics import metrics_service
from shopscore.recommender.session import RecommenderSession

# Configure module logger
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(
    prefix="/recommend",
    tags=["recommendations"],
)


class PurchaseIn(BaseModel):
    """A purchased product; only the name is required."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Product name")


class UserIn(BaseModel):
    """A user with an age and an ordered purchase history."""

    model_config = ConfigDict(extra="allow")

    age: float = Field(..., description="User age")
    purchases: List[PurchaseIn] = Field(
        default_factory=list, description="Purchased products, oldest first"
    )


class RecommendationResponse(BaseModel):
    """Response model for recommendation requests.

    Attributes:
        recommendations: Catalog products with a ``score`` key, best first.
        trained_at: When the model used for scoring was trained.
    """

    recommendations: List[Dict[str, Any]] = Field(
        ..., description="Scored products, highest score first"
    )
    trained_at: Optional[str] = Field(
        default=None, description="Training timestamp of the model used"
    )


def get_session(request: Request) -> RecommenderSession:
    return request.app.state.session


@router.post("", response_model=RecommendationResponse)
def recommend(
    user: UserIn,
    top_n: Optional[int] = Query(default=None, ge=1),
    session: RecommenderSession = Depends(get_session),
) -> RecommendationResponse:
    """Rank the catalog for a user.

    Raises:
        NoModelError: If no model has been trained yet (rendered as 503).

    Example:
        POST /recommend?top_n=5
        {"age": 30, "purchases": [{"name": "A"}]}
    """
    start_time = time.time()

    # Scores and trained_at must come from the same model
    state = session.state
    recommendations = session.recommend(user.model_dump(), top_n=top_n, state=state)

    metrics_service.record_recommendation((time.time() - start_time) * 1000)

    return RecommendationResponse(
        recommendations=recommendations,
        trained_at=state.trained_at.isoformat(),
    )
