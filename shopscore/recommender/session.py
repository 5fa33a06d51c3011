"""Session object owning the current encoding context and model.

One ``RecommenderSession`` holds at most one trained state. Training runs are
serialized: a second ``train`` call blocks until the running one finishes.
A finished run replaces the state with a single assignment, so ``recommend``
never blocks and always sees either the previous state or the new one,
never a mix of both. A failed run leaves the previous state in place.
"""

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence

from shopscore.recommender.backend import MLPBackend, ScoringBackend
from shopscore.recommender.exceptions import NoModelError
from shopscore.recommender.infer import recommend_products
from shopscore.recommender.train import (
    TrainedState,
    TrainingConfig,
    TrainingListener,
    train_pipeline,
)

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_CATALOG_SOURCE = "data/products.json"


class RecommenderSession:
    """Trains and serves one model at a time."""

    def __init__(
        self,
        backend: Optional[ScoringBackend] = None,
        catalog_source: str = DEFAULT_CATALOG_SOURCE,
        config: Optional[TrainingConfig] = None,
    ):
        self.backend = backend or MLPBackend()
        self.catalog_source = catalog_source
        self.config = config or TrainingConfig()
        self._train_lock = threading.Lock()
        self._state: Optional[TrainedState] = None

    @property
    def state(self) -> Optional[TrainedState]:
        return self._state

    @property
    def is_trained(self) -> bool:
        return self._state is not None

    def train(
        self,
        users: Sequence[Mapping[str, Any]],
        listener: Optional[TrainingListener] = None,
        catalog_source: Optional[str] = None,
        config: Optional[TrainingConfig] = None,
    ) -> TrainedState:
        """Run a training cycle and install its result as the current state.

        Args:
            users: User records with ``age`` and ``purchases``.
            listener: Receives progress, epoch and completion events.
            catalog_source: Overrides the session's catalog URL or path.
            config: Overrides the session's training configuration.

        Returns:
            The newly installed TrainedState.
        """
        with self._train_lock:
            state = train_pipeline(
                users,
                catalog_source or self.catalog_source,
                self.backend,
                config or self.config,
                listener,
            )
            self._state = state

        logger.info(
            "Installed new model",
            extra={"trained_at": state.trained_at.isoformat()},
        )
        return state

    def recommend(
        self,
        user: Mapping[str, Any],
        top_n: Optional[int] = None,
        state: Optional[TrainedState] = None,
    ) -> List[Dict[str, Any]]:
        """Rank the trained catalog for ``user``.

        Args:
            user: User record with ``age`` and ``purchases``.
            top_n: Keep only the best ``top_n`` products if given.
            state: State to score with. Defaults to the current one; pass the
                snapshot read from ``state`` when reporting that model's
                details next to the scores.

        Raises:
            NoModelError: If no training run has completed yet.
        """
        if state is None:
            state = self._state
        if state is None:
            raise NoModelError()

        return recommend_products(
            user,
            state.context,
            state.product_vectors,
            state.model,
            self.backend,
            top_n=top_n,
        )

    def status(self) -> Dict[str, Any]:
        state = self._state
        if state is None:
            return {
                "model_loaded": False,
                "trained_at": None,
                "num_users": 0,
                "num_products": 0,
                "dimensions": 0,
            }
        return {
            "model_loaded": True,
            "trained_at": state.trained_at.isoformat(),
            "num_users": len(state.context.users),
            "num_products": len(state.context.products),
            "dimensions": state.context.dimensions,
        }
