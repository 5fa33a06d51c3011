"""Runtime settings read from ``SHOPSCORE_*`` environment variables."""

import os

from shopscore.recommender.backend import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_EPOCHS,
    DEFAULT_LEARNING_RATE,
    DEFAULT_RANDOM_STATE,
)
from shopscore.recommender.catalog import DEFAULT_TIMEOUT
from shopscore.recommender.context import DEFAULT_AGGREGATION, UNKNOWN_AS_ZERO
from shopscore.recommender.session import DEFAULT_CATALOG_SOURCE
from shopscore.recommender.train import TrainingConfig


class Settings:
    # Catalog URL or local JSON path
    catalog_source: str = os.getenv("SHOPSCORE_CATALOG_SOURCE", DEFAULT_CATALOG_SOURCE)
    catalog_timeout: float = float(os.getenv("SHOPSCORE_CATALOG_TIMEOUT", DEFAULT_TIMEOUT))

    log_level: str = os.getenv("SHOPSCORE_LOG_LEVEL", "INFO")

    # Training
    epochs: int = int(os.getenv("SHOPSCORE_EPOCHS", DEFAULT_EPOCHS))
    batch_size: int = int(os.getenv("SHOPSCORE_BATCH_SIZE", DEFAULT_BATCH_SIZE))
    learning_rate: float = float(os.getenv("SHOPSCORE_LEARNING_RATE", DEFAULT_LEARNING_RATE))
    random_state: int = int(os.getenv("SHOPSCORE_RANDOM_STATE", DEFAULT_RANDOM_STATE))
    aggregation: str = os.getenv("SHOPSCORE_AGGREGATION", DEFAULT_AGGREGATION)
    unknown_category: str = os.getenv("SHOPSCORE_UNKNOWN_CATEGORY", UNKNOWN_AS_ZERO)

    def training_config(self) -> TrainingConfig:
        return TrainingConfig(
            aggregation=self.aggregation,
            unknown_category=self.unknown_category,
            epochs=self.epochs,
            batch_size=self.batch_size,
            learning_rate=self.learning_rate,
            random_state=self.random_state,
            fetch_timeout=self.catalog_timeout,
        )


settings = Settings()
