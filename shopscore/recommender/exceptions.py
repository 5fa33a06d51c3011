"""Custom exceptions for the ShopScore pipeline.

Every error carries the pipeline stage that raised it so callers can tell
data problems (context, encoding, dataset, catalog) apart from backend
problems (training, predict).
"""

from typing import Any, Dict, Optional


class ShopScoreError(Exception):
    """Base exception for ShopScore errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        stage: str = "unknown",
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            stage: Pipeline stage that failed
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.stage = stage
        self.details = details or {}


class EmptyInputError(ShopScoreError):
    """Raised when users or products are empty at context-build time."""

    def __init__(self, collection: str):
        message = (
            f"Cannot build encoding context: no {collection} supplied. "
            "Value ranges are undefined for an empty collection."
        )
        super().__init__(
            message=message,
            status_code=422,
            stage="context",
            details={"collection": collection},
        )


class InvalidUserError(ShopScoreError):
    """Raised when a user record is missing fields or has the wrong types."""

    def __init__(self, position: int, reason: str):
        super().__init__(
            message=f"Invalid user record {position}: {reason}",
            status_code=422,
            stage="context",
            details={"position": position, "reason": reason},
        )


class NoTrainableDataError(ShopScoreError):
    """Raised when no user has purchase history."""

    def __init__(self, num_users: int, num_products: int):
        message = (
            f"No trainable rows: none of the {num_users} users has a purchase "
            "history, so the training matrix would be empty."
        )
        super().__init__(
            message=message,
            status_code=422,
            stage="dataset",
            details={"num_users": num_users, "num_products": num_products},
        )


class UnknownCategoryError(ShopScoreError):
    """Raised when a color or category is outside the context vocabulary."""

    def __init__(self, field: str, value: Any, product_name: Optional[str] = None):
        message = (
            f"Unknown {field} {value!r}"
            + (f" on product {product_name!r}" if product_name else "")
            + ": not present in the encoding context vocabulary."
        )
        super().__init__(
            message=message,
            status_code=422,
            stage="encoding",
            details={"field": field, "value": value, "product": product_name},
        )


class NoModelError(ShopScoreError):
    """Raised when recommendations are requested before any training run."""

    def __init__(self):
        super().__init__(
            message="No trained model available. Please train a model first.",
            status_code=503,
            stage="recommend",
        )


class CatalogError(ShopScoreError):
    """Raised when the product catalog cannot be fetched or is malformed."""

    def __init__(
        self,
        source: str,
        reason: str,
        error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {"source": source}
        if error is not None:
            details["error"] = str(error)
            details["error_type"] = type(error).__name__
        super().__init__(
            message=f"Failed to load catalog from '{source}': {reason}",
            status_code=502,
            stage="catalog",
            details=details,
        )


class BackendTrainingError(ShopScoreError):
    """Raised when the scoring backend fails to fit."""

    def __init__(self, error: Exception):
        super().__init__(
            message=f"Backend training failed: {str(error)}",
            status_code=500,
            stage="training",
            details={"error": str(error), "error_type": type(error).__name__},
        )


class BackendPredictError(ShopScoreError):
    """Raised when the scoring backend fails to predict."""

    def __init__(self, error: Exception):
        super().__init__(
            message=f"Backend prediction failed: {str(error)}",
            status_code=500,
            stage="predict",
            details={"error": str(error), "error_type": type(error).__name__},
        )
