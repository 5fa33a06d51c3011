"""Numeric helpers shared by the encoding pipeline."""

import logging
from typing import Optional

import numpy as np

# Configure module logger
logger = logging.getLogger(__name__)

# All feature vectors use this dtype
VECTOR_DTYPE = np.float32


def normalize(value: float, min_value: float, max_value: float) -> float:
    """Scale a value linearly into [0, 1] given its observed range.

    Args:
        value: Value to scale.
        min_value: Smallest observed value.
        max_value: Largest observed value.

    Returns:
        ``(value - min_value) / (max_value - min_value)``, or ``1.0`` when the
        range is degenerate (``max_value == min_value``).

    Example:
        >>> normalize(30, 20, 40)
        0.5
        >>> normalize(7, 5, 5)
        1.0
    """
    span = max_value - min_value
    if span == 0:
        return 1.0
    return float((value - min_value) / span)


def one_hot_weighted(index: Optional[int], length: int, weight: float) -> np.ndarray:
    """Build a weighted one-hot vector.

    Args:
        index: Position to set, or None for an all-zero vector.
        length: Vector length.
        weight: Value placed at ``index``.

    Returns:
        Float vector of ``length`` zeros with ``weight`` at ``index``.
    """
    vector = np.zeros(length, dtype=VECTOR_DTYPE)
    if index is not None:
        vector[index] = weight
    return vector
