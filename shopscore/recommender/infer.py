"""Module for ranking the catalog for a user.

Uses a trained model to score every cached product vector against the
user's vector.
"""

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from shopscore.recommender.backend import ScoringBackend
from shopscore.recommender.context import EncodingContext
from shopscore.recommender.encode import ProductVector, encode_user
from shopscore.recommender.exceptions import BackendPredictError, ShopScoreError

# Configure module logger
logger = logging.getLogger(__name__)


def recommend_products(
    user: Mapping[str, Any],
    context: EncodingContext,
    product_vectors: Sequence[ProductVector],
    model: Any,
    backend: ScoringBackend,
    top_n: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Score and rank every catalog product for a user.

    Args:
        user: User record with ``age`` and ``purchases``.
        context: Context of the training run that produced ``model``.
        product_vectors: Encoded catalog of the same training run.
        model: Fitted backend model.
        backend: Backend that produced ``model``.
        top_n: Keep only the best ``top_n`` products if given.

    Returns:
        Product metadata dicts with a ``score`` key, highest score first.
        Ties keep catalog order.

    Raises:
        ValueError: If ``top_n`` is not positive.
        BackendPredictError: If the backend fails to score the batch.
    """
    if top_n is not None and top_n < 1:
        raise ValueError(f"top_n must be positive, got {top_n}")

    start_time = time.time()

    user_vector = encode_user(user, context)
    inputs = np.vstack(
        [np.concatenate([user_vector, product.vector]) for product in product_vectors]
    )

    try:
        scores = np.asarray(backend.predict(model, inputs), dtype=float).ravel()
    except ShopScoreError:
        raise
    except Exception as e:
        logger.error(
            "Recommendation scoring failed",
            extra={"error": str(e), "error_type": type(e).__name__},
        )
        raise BackendPredictError(e) from e

    recommendations = [
        {**product.meta, "name": product.name, "score": float(score)}
        for product, score in zip(product_vectors, scores)
    ]
    # sorted() is stable, so equal scores keep catalog order
    recommendations = sorted(recommendations, key=lambda item: -item["score"])

    if top_n is not None:
        recommendations = recommendations[:top_n]

    logger.info(
        "Recommendations generated",
        extra={
            "num_recommendations": len(recommendations),
            "num_purchases": len(user.get("purchases") or []),
            "total_time_ms": round((time.time() - start_time) * 1000, 2),
        },
    )

    return recommendations
