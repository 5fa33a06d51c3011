"""Shared encoding context derived from the user and product collections.

The context is a snapshot of value ranges, categorical vocabularies and the
per-product implicit age signal. It is built once per training run and never
updated in place; a changed catalog or user list means a new context.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from shopscore.recommender.exceptions import EmptyInputError
from shopscore.recommender.utils import normalize

# Configure module logger
logger = logging.getLogger(__name__)

# Policies for colors/categories missing from the vocabulary
UNKNOWN_AS_ZERO = "zero"
UNKNOWN_AS_ERROR = "error"
UNKNOWN_CATEGORY_POLICIES = (UNKNOWN_AS_ZERO, UNKNOWN_AS_ERROR)

DEFAULT_AGGREGATION = "min"


@dataclass(frozen=True)
class FeatureWeights:
    """Relative weight of each feature segment."""

    age: float = 0.1
    price: float = 0.2
    color: float = 0.3
    category: float = 0.4


DEFAULT_WEIGHTS = FeatureWeights()


@dataclass(frozen=True)
class EncodingContext:
    """Immutable snapshot used to encode users and products.

    Attributes:
        products: Catalog records in input order.
        users: User records in input order.
        min_age: Smallest user age.
        max_age: Largest user age.
        min_price: Smallest product price.
        max_price: Largest product price.
        colors: Distinct colors in first-seen order.
        categories: Distinct categories in first-seen order.
        color_index: Color to one-hot position.
        category_index: Category to one-hot position.
        product_avg_age_norm: Product name to normalized average buyer age.
        weights: Feature segment weights.
        aggregation: Name of the strategy combining purchase vectors.
        unknown_category: Out-of-vocabulary policy, "zero" or "error".
    """

    products: Tuple[Mapping[str, Any], ...]
    users: Tuple[Mapping[str, Any], ...]
    min_age: float
    max_age: float
    min_price: float
    max_price: float
    colors: Tuple[str, ...]
    categories: Tuple[str, ...]
    color_index: Mapping[str, int]
    category_index: Mapping[str, int]
    product_avg_age_norm: Mapping[str, float]
    weights: FeatureWeights = DEFAULT_WEIGHTS
    aggregation: str = DEFAULT_AGGREGATION
    unknown_category: str = UNKNOWN_AS_ZERO
    products_by_name: Mapping[str, Mapping[str, Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def num_colors(self) -> int:
        return len(self.colors)

    @property
    def num_categories(self) -> int:
        return len(self.categories)

    @property
    def dimensions(self) -> int:
        """Width of one encoded user or product vector."""
        # age + price + one-hot colors + one-hot categories
        return 2 + self.num_colors + self.num_categories

    def summary(self) -> Dict[str, Any]:
        return {
            "num_users": len(self.users),
            "num_products": len(self.products),
            "num_colors": self.num_colors,
            "num_categories": self.num_categories,
            "dimensions": self.dimensions,
            "age_range": [self.min_age, self.max_age],
            "price_range": [self.min_price, self.max_price],
        }


def _distinct(values: Sequence[str]) -> Tuple[Tuple[str, ...], Mapping[str, int]]:
    """Distinct values in first-seen order plus their index map."""
    ordered: List[str] = list(dict.fromkeys(values))
    index = MappingProxyType({value: idx for idx, value in enumerate(ordered)})
    return tuple(ordered), index


def build_context(
    products: Sequence[Mapping[str, Any]],
    users: Sequence[Mapping[str, Any]],
    weights: FeatureWeights = DEFAULT_WEIGHTS,
    aggregation: str = DEFAULT_AGGREGATION,
    unknown_category: str = UNKNOWN_AS_ZERO,
) -> EncodingContext:
    """Derive the encoding context from the full user and product collections.

    Purchases are matched to catalog products by ``name``, so a purchase
    record only needs to carry the product name.

    Args:
        products: Product catalog records with ``name``, ``price``, ``color``
            and ``category``.
        users: User records with ``age`` and a ``purchases`` list.
        weights: Feature segment weights.
        aggregation: Name of the purchase aggregation strategy.
        unknown_category: Out-of-vocabulary policy, "zero" or "error".

    Returns:
        The built EncodingContext.

    Raises:
        EmptyInputError: If products or users are empty.
        ValueError: If ``unknown_category`` is not a known policy.
    """
    if not products:
        raise EmptyInputError("products")
    if not users:
        raise EmptyInputError("users")
    if unknown_category not in UNKNOWN_CATEGORY_POLICIES:
        raise ValueError(
            f"unknown_category must be one of {UNKNOWN_CATEGORY_POLICIES}, "
            f"got {unknown_category!r}"
        )

    ages = [user["age"] for user in users]
    min_age, max_age = min(ages), max(ages)

    prices = [product["price"] for product in products]
    min_price, max_price = min(prices), max(prices)

    colors, color_index = _distinct([product["color"] for product in products])
    categories, category_index = _distinct(
        [product["category"] for product in products]
    )

    # Baseline for products nobody has bought yet
    mid_age = (min_age + max_age) / 2

    age_sums: Dict[str, float] = {}
    age_counts: Dict[str, int] = {}
    for user in users:
        for purchase in user.get("purchases") or []:
            name = purchase["name"]
            age_sums[name] = age_sums.get(name, 0.0) + user["age"]
            age_counts[name] = age_counts.get(name, 0) + 1

    product_avg_age_norm = {}
    for product in products:
        name = product["name"]
        avg_age = age_sums[name] / age_counts[name] if age_counts.get(name) else mid_age
        product_avg_age_norm[name] = normalize(avg_age, min_age, max_age)

    context = EncodingContext(
        products=tuple(products),
        users=tuple(users),
        min_age=min_age,
        max_age=max_age,
        min_price=min_price,
        max_price=max_price,
        colors=colors,
        categories=categories,
        color_index=color_index,
        category_index=category_index,
        product_avg_age_norm=MappingProxyType(product_avg_age_norm),
        weights=weights,
        aggregation=aggregation,
        unknown_category=unknown_category,
        products_by_name=MappingProxyType(
            {product["name"]: product for product in products}
        ),
    )

    logger.info("Built encoding context", extra=context.summary())

    return context
