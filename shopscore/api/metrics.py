"""Metrics service for tracking training runs and recommendation latency.

Singleton service shared by the route handlers.
"""

import threading
from typing import Dict


class _LatencyStats:
    """Count and min/avg/max latency of one kind of call."""

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.count = 0
        self.total_ms = 0.0
        self.min_ms = float("inf")
        self.max_ms = 0.0

    def record(self, latency_ms: float) -> None:
        self.count += 1
        self.total_ms += latency_ms
        self.min_ms = min(self.min_ms, latency_ms)
        self.max_ms = max(self.max_ms, latency_ms)

    def as_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "average_latency_ms": round(self.total_ms / self.count, 2) if self.count else 0.0,
            "min_latency_ms": round(self.min_ms, 2) if self.count else 0.0,
            "max_latency_ms": round(self.max_ms, 2),
        }


class MetricsService:
    """Singleton service for tracking API metrics.

    Thread-safe counters for recommendation calls, training runs and
    failed training runs.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(MetricsService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._lock = threading.Lock()
        self._recommend = _LatencyStats()
        self._training = _LatencyStats()
        self._training_failures = 0
        self._initialized = True

    def record_recommendation(self, latency_ms: float) -> None:
        with self._lock:
            self._recommend.record(latency_ms)

    def record_training(self, latency_ms: float) -> None:
        with self._lock:
            self._training.record(latency_ms)

    def record_training_failure(self) -> None:
        with self._lock:
            self._training_failures += 1

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with ``recommendations`` and ``training`` latency
            stats plus ``training_failures``.
        """
        with self._lock:
            return {
                "recommendations": self._recommend.as_dict(),
                "training": self._training.as_dict(),
                "training_failures": self._training_failures,
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._recommend.reset()
            self._training.reset()
            self._training_failures = 0


# Global singleton instance
metrics_service = MetricsService()
