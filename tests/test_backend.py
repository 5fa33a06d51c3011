"""Tests for the scikit-learn scoring backend."""

import numpy as np
import pytest
from sklearn.neural_network import MLPClassifier

from shopscore.recommender.backend import BackendConfig, MLPBackend
from shopscore.recommender.dataset import build_training_data


@pytest.fixture
def training_data(small_context):
    return build_training_data(small_context)


def test_fit_reports_every_epoch(training_data):
    logs = []
    config = BackendConfig(epochs=5)

    model = MLPBackend().fit(
        training_data.features, training_data.labels, config, logs.append
    )

    assert isinstance(model, MLPClassifier)
    assert model.hidden_layer_sizes == (128, 64, 32)
    assert [log.epoch for log in logs] == [0, 1, 2, 3, 4]
    assert all(log.loss >= 0 for log in logs)
    assert all(0.0 <= log.accuracy <= 1.0 for log in logs)


def test_predict_returns_probabilities(training_data):
    backend = MLPBackend()
    model = backend.fit(
        training_data.features, training_data.labels, BackendConfig(epochs=10)
    )

    scores = backend.predict(model, training_data.features)

    assert scores.shape == (2,)
    assert np.all((scores >= 0.0) & (scores <= 1.0))


def test_fit_is_reproducible_with_fixed_seed(training_data):
    backend = MLPBackend()
    config = BackendConfig(epochs=10, random_state=7)

    first = backend.fit(training_data.features, training_data.labels, config)
    second = backend.fit(training_data.features, training_data.labels, config)

    assert np.allclose(
        backend.predict(first, training_data.features),
        backend.predict(second, training_data.features),
    )


def test_fit_learns_the_positive_row(training_data):
    backend = MLPBackend()
    model = backend.fit(training_data.features, training_data.labels, BackendConfig())

    scores = backend.predict(model, training_data.features)

    assert scores[0] > scores[1]
