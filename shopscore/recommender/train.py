"""Training pipeline for the (user, product) purchase classifier.

This module runs one complete training cycle: fetch the catalog, build the
encoding context, encode the catalog, assemble the labeled training matrix
and fit the scoring backend. Progress is reported to an optional listener.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from shopscore.recommender.backend import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_EPOCHS,
    DEFAULT_LEARNING_RATE,
    DEFAULT_RANDOM_STATE,
    BackendConfig,
    EpochLog,
    ScoringBackend,
)
from shopscore.recommender.catalog import DEFAULT_TIMEOUT, load_catalog, validate_users
from shopscore.recommender.context import (
    DEFAULT_AGGREGATION,
    DEFAULT_WEIGHTS,
    UNKNOWN_AS_ZERO,
    EncodingContext,
    FeatureWeights,
    build_context,
)
from shopscore.recommender.dataset import build_training_data
from shopscore.recommender.encode import ProductVector, encode_products, get_aggregation
from shopscore.recommender.exceptions import BackendTrainingError, ShopScoreError

# Configure module logger
logger = logging.getLogger(__name__)

# Coarse progress markers
PROGRESS_FETCHING = 50
PROGRESS_DONE = 100


@dataclass
class TrainingConfig:
    """Configuration for one training run.

    Attributes:
        weights: Feature segment weights.
        aggregation: Purchase aggregation strategy name ("min" or "mean").
        unknown_category: Out-of-vocabulary policy ("zero" or "error").
        epochs: Number of training epochs.
        batch_size: Mini-batch size.
        learning_rate: Adam learning rate.
        random_state: Seed for weight init and shuffling.
        fetch_timeout: Catalog request timeout in seconds.
    """

    weights: FeatureWeights = DEFAULT_WEIGHTS
    aggregation: str = DEFAULT_AGGREGATION
    unknown_category: str = UNKNOWN_AS_ZERO
    epochs: int = DEFAULT_EPOCHS
    batch_size: int = DEFAULT_BATCH_SIZE
    learning_rate: float = DEFAULT_LEARNING_RATE
    random_state: Optional[int] = DEFAULT_RANDOM_STATE
    fetch_timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        get_aggregation(self.aggregation)
        if self.epochs <= 0:
            raise ValueError(f"epochs must be positive, got {self.epochs}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    def backend_config(self) -> BackendConfig:
        return BackendConfig(
            learning_rate=self.learning_rate,
            epochs=self.epochs,
            batch_size=self.batch_size,
            random_state=self.random_state,
        )


@dataclass(frozen=True)
class ProgressEvent:
    progress: int
    type: str = "progress"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EpochEvent:
    epoch: int
    loss: float
    accuracy: float
    type: str = "epoch"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TrainingCompleteEvent:
    type: str = "training_complete"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


TrainingListener = Callable[[Any], None]


@dataclass(frozen=True)
class TrainedState:
    """Everything produced by one successful training run."""

    context: EncodingContext
    product_vectors: List[ProductVector]
    model: Any
    trained_at: datetime
    metrics: Dict[str, Any] = field(default_factory=dict)


def _notify(listener: Optional[TrainingListener], event: Any) -> None:
    """Deliver an event; a failing listener never stops training."""
    if listener is None:
        return
    try:
        listener(event)
    except Exception:
        logger.warning(
            "Training listener failed, event dropped",
            extra={"event_type": getattr(event, "type", None)},
            exc_info=True,
        )


def train_pipeline(
    users: Sequence[Mapping[str, Any]],
    catalog_source: str,
    backend: ScoringBackend,
    config: Optional[TrainingConfig] = None,
    listener: Optional[TrainingListener] = None,
) -> TrainedState:
    """Run one full training cycle.

    Args:
        users: User records with ``age`` and ``purchases``.
        catalog_source: URL or file path of the product catalog.
        backend: Scoring backend used to fit the classifier.
        config: Training configuration, defaults used when None.
        listener: Called with ProgressEvent, EpochEvent and
            TrainingCompleteEvent instances as training proceeds.

    Returns:
        The TrainedState for the session to install.

    Raises:
        CatalogError: If the catalog cannot be loaded.
        EmptyInputError: If users or products are empty.
        NoTrainableDataError: If no user has purchases.
        UnknownCategoryError: Under the "error" policy only.
        BackendTrainingError: If the backend fails to fit.

    Example:
        >>> state = train_pipeline(users, "data/products.json", MLPBackend())
        >>> state.context.dimensions
    """
    config = config or TrainingConfig()
    start_time = time.time()

    logger.info("=" * 60)
    logger.info("Starting training run", extra={"num_users": len(users)})
    logger.info("=" * 60)

    try:
        _notify(listener, ProgressEvent(progress=PROGRESS_FETCHING))

        # Step 1: Fetch the catalog
        products = load_catalog(catalog_source, timeout=config.fetch_timeout)

        # Step 2: Build context and encode the catalog
        context = build_context(
            products,
            validate_users(users),
            weights=config.weights,
            aggregation=config.aggregation,
            unknown_category=config.unknown_category,
        )
        product_vectors = encode_products(context)

        # Step 3: Assemble the training matrix
        data = build_training_data(context, product_vectors)

        # Step 4: Fit the backend
        epochs: List[EpochLog] = []

        def on_epoch(log: EpochLog) -> None:
            epochs.append(log)
            _notify(
                listener,
                EpochEvent(epoch=log.epoch, loss=log.loss, accuracy=log.accuracy),
            )

        try:
            model = backend.fit(
                data.features, data.labels, config.backend_config(), on_epoch
            )
        except ShopScoreError:
            raise
        except Exception as e:
            raise BackendTrainingError(e) from e

    except ShopScoreError as e:
        logger.error(
            f"Training failed: {e.message}",
            extra={"stage": e.stage, "error_type": type(e).__name__},
            exc_info=True,
        )
        raise

    duration = time.time() - start_time
    metrics = {
        "rows": int(data.features.shape[0]),
        "input_dim": data.input_dim,
        "training_users": data.user_count,
        "num_products": data.product_count,
        "epochs": len(epochs),
        "final_loss": epochs[-1].loss if epochs else None,
        "final_accuracy": epochs[-1].accuracy if epochs else None,
        "duration_ms": round(duration * 1000, 2),
    }

    _notify(listener, ProgressEvent(progress=PROGRESS_DONE))
    _notify(listener, TrainingCompleteEvent())

    logger.info("Training completed successfully!", extra=metrics)

    return TrainedState(
        context=context,
        product_vectors=product_vectors,
        model=model,
        trained_at=datetime.now(timezone.utc),
        metrics=metrics,
    )
