"""Tests for the FastAPI application endpoints.

This module contains integration tests for the ShopScore API endpoints,
including health checks, training, recommendation and error responses.
"""

import pytest
import requests_mock
from fastapi.testclient import TestClient

from shopscore.api.main import create_app
from shopscore.api.metrics import metrics_service
from shopscore.recommender.session import RecommenderSession
from shopscore.recommender.train import TrainingConfig

CATALOG_URL = "https://shop.example.com/data/products.json"


@pytest.fixture
def client(stub_backend, catalog_file) -> TestClient:
    """Test client around a session with a stub backend."""
    metrics_service.reset()
    session = RecommenderSession(
        backend=stub_backend,
        catalog_source=str(catalog_file),
        config=TrainingConfig(epochs=2),
    )
    return TestClient(create_app(session))


@pytest.fixture
def trained_client(client, users) -> TestClient:
    response = client.post("/train", json={"users": users})
    assert response.status_code == 200, response.text
    return client


def test_ping_endpoint(client):
    """Test that the /ping endpoint returns correct status and JSON."""
    response = client.get("/ping")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert "X-Request-ID" in response.headers


def test_status_before_training(client):
    response = client.get("/status")

    assert response.status_code == 200
    assert response.json() == {
        "model_loaded": False,
        "trained_at": None,
        "num_users": 0,
        "num_products": 0,
        "dimensions": 0,
    }


def test_recommend_before_training_returns_503(client):
    response = client.post("/recommend", json={"age": 30, "purchases": []})

    assert response.status_code == 503
    data = response.json()
    assert data["error"] == "NoModelError"
    assert data["stage"] == "recommend"
    assert "train a model first" in data["message"]


def test_train_returns_events(client, users):
    response = client.post("/train", json={"users": users})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert [event["type"] for event in data["events"]] == [
        "progress",
        "epoch",
        "epoch",
        "progress",
        "training_complete",
    ]
    assert data["events"][0]["progress"] == 50
    assert data["events"][3]["progress"] == 100
    assert data["metrics"]["rows"] == 24


def test_status_after_training(trained_client):
    data = trained_client.get("/status").json()

    assert data["model_loaded"] is True
    assert data["num_products"] == 6
    assert data["dimensions"] == 10
    assert isinstance(data["trained_at"], str)


def test_recommend_returns_sorted_catalog(trained_client):
    response = trained_client.post(
        "/recommend",
        json={"age": 22, "purchases": [{"name": "Graphic Tee"}]},
    )

    assert response.status_code == 200
    data = response.json()
    recommendations = data["recommendations"]
    assert len(recommendations) == 6
    scores = [item["score"] for item in recommendations]
    assert scores == sorted(scores, reverse=True)
    assert all(0.0 <= score <= 1.0 for score in scores)
    assert data["trained_at"] is not None


def test_recommend_top_n(trained_client):
    response = trained_client.post("/recommend?top_n=3", json={"age": 40})

    assert response.status_code == 200
    assert len(response.json()["recommendations"]) == 3


def test_recommend_invalid_top_n(trained_client):
    response = trained_client.post("/recommend?top_n=0", json={"age": 40})

    assert response.status_code == 422


def test_recommend_invalid_body(trained_client):
    response = trained_client.post("/recommend", json={"purchases": []})

    assert response.status_code == 422


def test_train_without_trainable_users(client):
    response = client.post("/train", json={"users": [{"age": 30, "purchases": []}]})

    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "NoTrainableDataError"
    assert data["stage"] == "dataset"


def test_train_with_empty_users(client):
    response = client.post("/train", json={"users": []})

    assert response.status_code == 422
    assert response.json()["error"] == "EmptyInputError"


def test_train_with_unreachable_catalog(client, users):
    with requests_mock.Mocker() as m:
        m.get(CATALOG_URL, status_code=404)

        response = client.post(
            "/train", json={"users": users, "catalog_url": CATALOG_URL}
        )

    assert response.status_code == 502
    data = response.json()
    assert data["error"] == "CatalogError"
    assert data["stage"] == "catalog"


def test_train_with_catalog_url_override(client, two_users, two_products):
    with requests_mock.Mocker() as m:
        m.get(CATALOG_URL, json=two_products)

        response = client.post(
            "/train", json={"users": two_users, "catalog_url": CATALOG_URL}
        )

    assert response.status_code == 200, response.text
    assert client.get("/status").json()["num_products"] == 2


@pytest.mark.parametrize(
    "catalog_url", ["/etc/passwd", "data/products.json", "file:///etc/passwd"]
)
def test_train_rejects_local_catalog_source(client, users, catalog_url):
    response = client.post("/train", json={"users": users, "catalog_url": catalog_url})

    assert response.status_code == 422
    assert "http" in response.text
    assert client.get("/status").json()["model_loaded"] is False


def test_recommend_reports_timestamp_of_scoring_model(trained_client, users):
    session = trained_client.app.state.session
    first = session.state
    original_recommend = session.recommend

    def recommend_then_retrain(*args, **kwargs):
        result = original_recommend(*args, **kwargs)
        session.train(users)
        return result

    session.recommend = recommend_then_retrain

    response = trained_client.post("/recommend", json={"age": 30})

    assert response.status_code == 200
    assert session.state is not first
    assert response.json()["trained_at"] == first.trained_at.isoformat()


def test_metrics_endpoint(trained_client, client):
    trained_client.post("/recommend", json={"age": 30})
    client.post("/train", json={"users": []})

    data = client.get("/metrics").json()

    assert data["training"]["count"] == 1
    assert data["training_failures"] == 1
    assert data["recommendations"]["count"] == 1
