"""Scoring backends that fit and apply the (user, product) classifier.

The encoding pipeline only talks to the ``ScoringBackend`` interface, so any
backend that can fit a binary classifier and return probabilities can be
plugged in. ``MLPBackend`` is the default, built on scikit-learn's
``MLPClassifier``.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

import numpy as np
from sklearn.neural_network import MLPClassifier

# Configure module logger
logger = logging.getLogger(__name__)

# Model configuration constants
DEFAULT_HIDDEN_LAYERS = (128, 64, 32)
DEFAULT_LEARNING_RATE = 0.01
DEFAULT_EPOCHS = 100
DEFAULT_BATCH_SIZE = 32
DEFAULT_RANDOM_STATE = 42


@dataclass(frozen=True)
class BackendConfig:
    """Hyperparameters of the dense classifier."""

    hidden_layers: Tuple[int, ...] = DEFAULT_HIDDEN_LAYERS
    learning_rate: float = DEFAULT_LEARNING_RATE
    epochs: int = DEFAULT_EPOCHS
    batch_size: int = DEFAULT_BATCH_SIZE
    shuffle: bool = True
    random_state: Optional[int] = DEFAULT_RANDOM_STATE


@dataclass(frozen=True)
class EpochLog:
    """Metrics reported at the end of one training epoch."""

    epoch: int
    loss: float
    accuracy: float


EpochCallback = Callable[[EpochLog], None]


class ScoringBackend(ABC):
    """Fits a binary classifier and scores feature rows with it."""

    @abstractmethod
    def fit(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        config: BackendConfig,
        on_epoch: Optional[EpochCallback] = None,
    ) -> Any:
        """Train on ``features``/``labels`` and return the fitted model."""

    @abstractmethod
    def predict(self, model: Any, features: np.ndarray) -> np.ndarray:
        """Return one probability in [0, 1] per feature row."""


class MLPBackend(ScoringBackend):
    """Dense ReLU network with a logistic output, trained with Adam.

    Training runs one ``partial_fit`` pass per epoch so that loss and
    accuracy can be reported after every epoch.
    """

    def fit(
        self,
        features: np.ndarray,
        labels: np.ndarray,
        config: BackendConfig,
        on_epoch: Optional[EpochCallback] = None,
    ) -> MLPClassifier:
        n_samples = features.shape[0]
        targets = labels.astype(int)
        classes = np.array([0, 1])

        model = MLPClassifier(
            hidden_layer_sizes=config.hidden_layers,
            activation="relu",
            solver="adam",
            learning_rate_init=config.learning_rate,
            batch_size=max(1, min(config.batch_size, n_samples)),
            shuffle=config.shuffle,
            random_state=config.random_state,
        )

        logger.info(
            "Training dense classifier",
            extra={
                "samples": n_samples,
                "input_dim": features.shape[1],
                "hidden_layers": list(config.hidden_layers),
                "epochs": config.epochs,
            },
        )

        for epoch in range(config.epochs):
            model.partial_fit(features, targets, classes=classes)
            log = EpochLog(
                epoch=epoch,
                loss=float(model.loss_),
                accuracy=float(model.score(features, targets)),
            )
            logger.debug(
                f"Epoch {epoch}: loss={log.loss:.4f} accuracy={log.accuracy:.4f}"
            )
            if on_epoch is not None:
                on_epoch(log)

        logger.info("Model training completed")

        return model

    def predict(self, model: MLPClassifier, features: np.ndarray) -> np.ndarray:
        positive = list(model.classes_).index(1)
        return model.predict_proba(features)[:, positive]
