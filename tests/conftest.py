"""Shared fixtures for the ShopScore test suite."""

import json
from pathlib import Path
from typing import Any, Dict, List

import numpy as np
import pytest

from shopscore.recommender.backend import BackendConfig, EpochLog, ScoringBackend
from shopscore.recommender.context import EncodingContext, build_context


class StubBackend(ScoringBackend):
    """Deterministic backend: scores rows by their similarity to positives.

    The "model" is the difference between the mean positive row and the
    mean negative row; scores are a sigmoid of the dot product with it.
    """

    def __init__(self):
        self.fit_calls = 0
        self.predict_calls = 0

    def fit(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        config: BackendConfig,
        on_epoch=None,
    ) -> np.ndarray:
        self.fit_calls += 1
        positives = features[labels == 1]
        negatives = features[labels == 0]
        weights = np.zeros(features.shape[1])
        if len(positives):
            weights += positives.mean(axis=0)
        if len(negatives):
            weights -= negatives.mean(axis=0)

        for epoch in range(config.epochs):
            if on_epoch is not None:
                on_epoch(EpochLog(epoch=epoch, loss=1.0 / (epoch + 1), accuracy=0.5))
        return weights

    def predict(self, model: np.ndarray, features: np.ndarray) -> np.ndarray:
        self.predict_calls += 1
        return 1.0 / (1.0 + np.exp(-10.0 * features @ model))


@pytest.fixture
def stub_backend() -> StubBackend:
    return StubBackend()


@pytest.fixture
def two_products() -> List[Dict[str, Any]]:
    """Two-product catalog with distinct colors and categories."""
    return [
        {"name": "A", "price": 10, "color": "red", "category": "x"},
        {"name": "B", "price": 20, "color": "blue", "category": "y"},
    ]


@pytest.fixture
def two_users() -> List[Dict[str, Any]]:
    """One buyer of A and one cold-start user."""
    return [
        {"age": 30, "purchases": [{"name": "A"}]},
        {"age": 40, "purchases": []},
    ]


@pytest.fixture
def small_context(two_products, two_users) -> EncodingContext:
    return build_context(two_products, two_users)


@pytest.fixture
def catalog() -> List[Dict[str, Any]]:
    """Six-product catalog with repeated colors and categories."""
    return [
        {"name": "Trail Runner", "price": 130.0, "color": "black", "category": "shoes", "sku": "TR-1"},
        {"name": "Canvas Sneaker", "price": 60.0, "color": "white", "category": "shoes", "sku": "CS-2"},
        {"name": "Oxford Shirt", "price": 45.0, "color": "blue", "category": "shirts", "sku": "OS-3"},
        {"name": "Graphic Tee", "price": 20.0, "color": "white", "category": "shirts", "sku": "GT-4"},
        {"name": "Wool Coat", "price": 250.0, "color": "black", "category": "jackets", "sku": "WC-5"},
        {"name": "Bucket Hat", "price": 25.0, "color": "green", "category": "hats", "sku": "BH-6"},
    ]


@pytest.fixture
def users() -> List[Dict[str, Any]]:
    """Users with overlapping purchases plus one cold-start user."""
    return [
        {"age": 19, "purchases": [{"name": "Canvas Sneaker"}, {"name": "Graphic Tee"}]},
        {"age": 24, "purchases": [{"name": "Graphic Tee"}, {"name": "Bucket Hat"}]},
        {"age": 41, "purchases": [{"name": "Oxford Shirt"}]},
        {"age": 57, "purchases": [{"name": "Wool Coat"}, {"name": "Oxford Shirt"}]},
        {"age": 33, "purchases": []},
    ]


@pytest.fixture
def catalog_file(tmp_path: Path, catalog) -> Path:
    """Write the catalog fixture to a JSON file."""
    path = tmp_path / "products.json"
    path.write_text(json.dumps(catalog))
    return path
