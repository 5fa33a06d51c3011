"""Training endpoint for the ShopScore API."""

import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from shopscore.api.metrics import metrics_service
from shopscore.api.routes.recommend import UserIn, get_session
from shopscore.recommender.exceptions import ShopScoreError
from shopscore.recommender.session import RecommenderSession

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/train",
    tags=["training"],
)


class TrainRequest(BaseModel):
    users: List[UserIn] = Field(..., description="Users to train on")
    catalog_url: Optional[str] = Field(
        default=None, description="Catalog URL, overrides the configured source"
    )

    @field_validator("catalog_url")
    @classmethod
    def catalog_url_must_be_http(cls, value: Optional[str]) -> Optional[str]:
        # Local paths are reserved for the configured source and the CLI
        if value is not None and not value.startswith(("http://", "https://")):
            raise ValueError("catalog_url must be an http:// or https:// URL")
        return value


class TrainResponse(BaseModel):
    """Outcome of a training run.

    Attributes:
        status: "completed" on success.
        events: Progress, epoch and completion events in emission order.
        metrics: Row counts, final loss/accuracy and duration.
    """

    status: str
    events: List[Dict[str, Any]]
    metrics: Dict[str, Any]


@router.post("", response_model=TrainResponse)
def train(
    payload: TrainRequest,
    session: RecommenderSession = Depends(get_session),
) -> TrainResponse:
    """Train a new model and make it the current one.

    The catalog is fetched once for this run. Events are buffered and
    returned with the response.
    """
    events: List[Dict[str, Any]] = []
    start_time = time.time()

    try:
        state = session.train(
            [user.model_dump() for user in payload.users],
            listener=lambda event: events.append(event.to_dict()),
            catalog_source=payload.catalog_url,
        )
    except ShopScoreError:
        metrics_service.record_training_failure()
        raise

    metrics_service.record_training((time.time() - start_time) * 1000)

    return TrainResponse(status="completed", events=events, metrics=state.metrics)
