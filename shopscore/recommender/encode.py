"""Feature encoding for users and products.

Products and users are encoded into vectors of the same width and the same
segment order (age, price, category one-hot, color one-hot), so a user vector
and a product vector can be concatenated positionally into one model input.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

import numpy as np

from shopscore.recommender.context import UNKNOWN_AS_ERROR, EncodingContext
from shopscore.recommender.exceptions import UnknownCategoryError
from shopscore.recommender.utils import VECTOR_DTYPE, normalize, one_hot_weighted

# Configure module logger
logger = logging.getLogger(__name__)

# Age slot for a product missing from the implicit age table
UNSEEN_PRODUCT_AGE = 0.5


@dataclass(frozen=True)
class ProductVector:
    """Encoded catalog product, cached for one training session."""

    name: str
    meta: Dict[str, Any]
    vector: np.ndarray


def _min_aggregate(vectors: np.ndarray) -> np.ndarray:
    return vectors.min(axis=0)


def _mean_aggregate(vectors: np.ndarray) -> np.ndarray:
    return vectors.mean(axis=0)


# Strategies that fold a user's purchase vectors into one user vector
AGGREGATIONS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "min": _min_aggregate,
    "mean": _mean_aggregate,
}


def get_aggregation(name: str) -> Callable[[np.ndarray], np.ndarray]:
    """Look up a purchase aggregation strategy by name.

    Raises:
        ValueError: If no strategy is registered under ``name``.
    """
    try:
        return AGGREGATIONS[name]
    except KeyError:
        raise ValueError(
            f"Unknown aggregation {name!r}, expected one of {sorted(AGGREGATIONS)}"
        ) from None


def _vocabulary_index(
    field: str,
    value: Any,
    index: Mapping[str, int],
    context: EncodingContext,
    product_name: Optional[str],
) -> Optional[int]:
    position = index.get(value)
    if position is None:
        if context.unknown_category == UNKNOWN_AS_ERROR:
            raise UnknownCategoryError(field, value, product_name)
        logger.debug(
            f"Out-of-vocabulary {field} {value!r} encoded as zeros",
            extra={"product": product_name},
        )
    return position


def encode_product(product: Mapping[str, Any], context: EncodingContext) -> np.ndarray:
    """Encode one product into a weighted feature vector.

    Args:
        product: Product record. ``price``, ``color`` and ``category`` may be
            missing, in which case their segments are zero.
        context: Encoding context of the current training run.

    Returns:
        Vector of length ``context.dimensions``.

    Raises:
        UnknownCategoryError: If the context uses the "error" policy and the
            product's color or category is not in the vocabulary.
    """
    weights = context.weights
    name = product.get("name")

    price = product.get("price")
    price_slot = (
        normalize(price, context.min_price, context.max_price) * weights.price
        if price is not None
        else 0.0
    )
    age_slot = context.product_avg_age_norm.get(name, UNSEEN_PRODUCT_AGE) * weights.age

    category = one_hot_weighted(
        _vocabulary_index(
            "category", product.get("category"), context.category_index, context, name
        ),
        context.num_categories,
        weights.category,
    )
    color = one_hot_weighted(
        _vocabulary_index(
            "color", product.get("color"), context.color_index, context, name
        ),
        context.num_colors,
        weights.color,
    )

    return np.concatenate(
        [np.array([age_slot, price_slot], dtype=VECTOR_DTYPE), category, color]
    )


def encode_user(user: Mapping[str, Any], context: EncodingContext) -> np.ndarray:
    """Encode one user into a feature vector.

    A user with purchases is the aggregation (element-wise minimum by
    default) of their purchased products' vectors. Purchases are looked up
    by name in the catalog, falling back to the purchase record itself.
    A cold-start user only carries their normalized age.
    """
    purchases = user.get("purchases") or []

    if purchases:
        vectors = np.stack(
            [
                encode_product(
                    context.products_by_name.get(purchase["name"], purchase), context
                )
                for purchase in purchases
            ]
        )
        aggregate = get_aggregation(context.aggregation)
        return aggregate(vectors).astype(VECTOR_DTYPE)

    vector = np.zeros(context.dimensions, dtype=VECTOR_DTYPE)
    vector[0] = normalize(user["age"], context.min_age, context.max_age) * context.weights.age
    return vector


def encode_products(context: EncodingContext) -> List[ProductVector]:
    """Encode the whole catalog of a context, in catalog order."""
    return [
        ProductVector(
            name=product["name"],
            meta=dict(product),
            vector=encode_product(product, context),
        )
        for product in context.products
    ]
