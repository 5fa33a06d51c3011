"""Training matrix assembly.

Every user with a purchase history is paired with every catalog product.
Rows are user-major, product-minor, following input order.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from shopscore.recommender.context import EncodingContext
from shopscore.recommender.encode import ProductVector, encode_products, encode_user
from shopscore.recommender.exceptions import NoTrainableDataError
from shopscore.recommender.utils import VECTOR_DTYPE

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass
class TrainingData:
    """Feature matrix and binary labels for one training run.

    Attributes:
        features: Matrix of shape (user_count * product_count, input_dim).
        labels: Vector of 0/1 labels, one per feature row.
        input_dim: Width of one row, twice the context dimensions.
        user_count: Number of users that contributed rows.
        product_count: Number of catalog products.
    """

    features: np.ndarray
    labels: np.ndarray
    input_dim: int
    user_count: int
    product_count: int


def build_training_data(
    context: EncodingContext,
    product_vectors: Optional[List[ProductVector]] = None,
) -> TrainingData:
    """Assemble the labeled cross-product training matrix.

    Cold-start users are skipped since they carry no label signal. A row is
    labeled 1 when the product's name appears in the user's purchases.

    Args:
        context: Encoding context holding the users and products.
        product_vectors: Pre-encoded catalog, reused if given.

    Returns:
        TrainingData with features and labels in matching row order.

    Raises:
        NoTrainableDataError: If no user has purchases.
    """
    if product_vectors is None:
        product_vectors = encode_products(context)

    input_dim = context.dimensions * 2
    training_users = [user for user in context.users if user.get("purchases")]

    if not training_users:
        raise NoTrainableDataError(len(context.users), len(context.products))

    rows = []
    labels = []
    for user in training_users:
        user_vector = encode_user(user, context)
        purchased = {purchase["name"] for purchase in user["purchases"]}
        for product in product_vectors:
            rows.append(np.concatenate([user_vector, product.vector]))
            labels.append(1.0 if product.name in purchased else 0.0)

    features = np.vstack(rows).astype(VECTOR_DTYPE)
    label_column = np.asarray(labels, dtype=VECTOR_DTYPE)

    logger.info(
        "Assembled training data",
        extra={
            "rows": features.shape[0],
            "input_dim": input_dim,
            "training_users": len(training_users),
            "positive_labels": int(label_column.sum()),
        },
    )

    return TrainingData(
        features=features,
        labels=label_column,
        input_dim=input_dim,
        user_count=len(training_users),
        product_count=len(product_vectors),
    )
