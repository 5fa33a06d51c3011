"""Product catalog loading and record validation.

The catalog is a JSON list of product records. It can live behind an
HTTP(S) URL or in a local file.
"""

import json
import logging
from numbers import Real
from pathlib import Path
from typing import Any, Dict, List, Sequence

import requests

from shopscore.recommender.exceptions import CatalogError, InvalidUserError

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

REQUIRED_PRODUCT_FIELDS = ("name", "price", "color", "category")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def validate_products(products: Any, source: str = "<memory>") -> List[Dict[str, Any]]:
    """Check that a decoded catalog is a list of complete product records.

    ``price`` must be a real number, ``color`` and ``category`` strings.

    Raises:
        CatalogError: If the payload is not a list or a record is missing
            a required field or has a field of the wrong type.
    """
    if not isinstance(products, list):
        raise CatalogError(
            source, f"expected a JSON list, got {type(products).__name__}"
        )

    for position, product in enumerate(products):
        if not isinstance(product, dict):
            raise CatalogError(source, f"record {position} is not an object")
        missing = [name for name in REQUIRED_PRODUCT_FIELDS if name not in product]
        if missing:
            raise CatalogError(
                source, f"record {position} is missing fields {missing}"
            )
        if not _is_number(product["price"]):
            raise CatalogError(
                source,
                f"record {position} has a non-numeric price {product['price']!r}",
            )
        for field in ("name", "color", "category"):
            if not isinstance(product[field], str):
                raise CatalogError(
                    source,
                    f"record {position} has a non-string {field} {product[field]!r}",
                )

    return products


def validate_users(users: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Normalize user records so every user has a ``purchases`` list.

    Raises:
        InvalidUserError: If a user has no numeric age or a purchase has
            no name.
    """
    cleaned = []
    for position, user in enumerate(users):
        if not isinstance(user, dict):
            raise InvalidUserError(position, "not an object")
        if "age" not in user:
            raise InvalidUserError(position, "missing 'age'")
        if not _is_number(user["age"]):
            raise InvalidUserError(position, f"non-numeric age {user['age']!r}")
        purchases = user.get("purchases") or []
        if not isinstance(purchases, list):
            raise InvalidUserError(position, "'purchases' is not a list")
        for purchase in purchases:
            if not isinstance(purchase, dict) or "name" not in purchase:
                raise InvalidUserError(position, "purchase without 'name'")
        cleaned.append({**user, "purchases": list(purchases)})
    return cleaned


def load_catalog(source: str, timeout: float = DEFAULT_TIMEOUT) -> List[Dict[str, Any]]:
    """Fetch the product catalog from a URL or a local JSON file.

    Args:
        source: ``http(s)://`` URL or filesystem path.
        timeout: Request timeout in seconds for URL sources.

    Returns:
        List of validated product records.

    Raises:
        CatalogError: If the catalog cannot be fetched, decoded or validated.

    Example:
        >>> products = load_catalog("data/products.json")
        >>> products[0]["name"]
    """
    logger.info(f"Loading catalog from {source}")

    if source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
            payload = response.json()
        except ValueError as e:
            raise CatalogError(source, "response is not valid JSON", e) from e
        except requests.exceptions.RequestException as e:
            raise CatalogError(source, "request failed", e) from e
    else:
        path = Path(source)
        if not path.exists():
            raise CatalogError(source, "file not found")
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CatalogError(source, "file is not valid JSON", e) from e

    products = validate_products(payload, source)

    logger.info(f"Loaded {len(products)} products")

    return products
