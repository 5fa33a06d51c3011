"""Tests for catalog loading.

Uses requests-mock to avoid real network calls.
"""

import json

import pytest
import requests
import requests_mock

from shopscore.recommender.catalog import load_catalog, validate_products, validate_users
from shopscore.recommender.exceptions import CatalogError, InvalidUserError
from shopscore.recommender.session import RecommenderSession

CATALOG_URL = "https://shop.example.com/data/products.json"


def test_load_catalog_from_url(catalog):
    with requests_mock.Mocker() as m:
        m.get(CATALOG_URL, json=catalog)

        products = load_catalog(CATALOG_URL)

    assert products == catalog
    assert m.call_count == 1


def test_load_catalog_http_error():
    with requests_mock.Mocker() as m:
        m.get(CATALOG_URL, status_code=500)

        with pytest.raises(CatalogError) as excinfo:
            load_catalog(CATALOG_URL)

    assert excinfo.value.stage == "catalog"
    assert excinfo.value.status_code == 502
    assert excinfo.value.details["error_type"] == "HTTPError"


def test_load_catalog_connection_error():
    with requests_mock.Mocker() as m:
        m.get(CATALOG_URL, exc=requests.exceptions.ConnectTimeout)

        with pytest.raises(CatalogError, match="request failed"):
            load_catalog(CATALOG_URL)


def test_load_catalog_invalid_json_response():
    with requests_mock.Mocker() as m:
        m.get(CATALOG_URL, text="<html>not json</html>")

        with pytest.raises(CatalogError, match="not valid JSON"):
            load_catalog(CATALOG_URL)


def test_load_catalog_from_file(catalog_file, catalog):
    assert load_catalog(str(catalog_file)) == catalog


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(CatalogError, match="file not found"):
        load_catalog(str(tmp_path / "missing.json"))


def test_load_catalog_rejects_non_list(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps({"products": []}))

    with pytest.raises(CatalogError, match="expected a JSON list"):
        load_catalog(str(path))


def test_validate_products_missing_fields():
    with pytest.raises(CatalogError, match=r"record 1 is missing fields \['color'\]"):
        validate_products(
            [
                {"name": "A", "price": 1, "color": "red", "category": "x"},
                {"name": "B", "price": 2, "category": "y"},
            ]
        )


def test_validate_users_fills_purchases():
    users = validate_users([{"age": 20}, {"age": 30, "purchases": None, "id": 9}])

    assert users == [
        {"age": 20, "purchases": []},
        {"age": 30, "purchases": [], "id": 9},
    ]


@pytest.mark.parametrize(
    "field, value",
    [
        ("price", "cheap"),
        ("price", None),
        ("price", True),
        ("color", ["red"]),
        ("category", None),
        ("name", 7),
    ],
)
def test_validate_products_rejects_wrong_types(field, value):
    record = {"name": "A", "price": 10, "color": "red", "category": "x"}
    record[field] = value

    pattern = f"record 0 has a non-(numeric|string) {field}"
    with pytest.raises(CatalogError, match=pattern) as excinfo:
        validate_products([record])

    assert excinfo.value.stage == "catalog"


def test_non_numeric_price_fails_training_at_catalog_stage(
    tmp_path, stub_backend, two_users
):
    path = tmp_path / "products.json"
    path.write_text(
        json.dumps(
            [
                {"name": "A", "price": "cheap", "color": "red", "category": "x"},
                {"name": "B", "price": 20, "color": "blue", "category": "y"},
            ]
        )
    )
    session = RecommenderSession(backend=stub_backend, catalog_source=str(path))

    with pytest.raises(CatalogError, match="non-numeric price 'cheap'"):
        session.train(two_users)

    assert stub_backend.fit_calls == 0


def test_validate_users_rejects_incomplete_records():
    with pytest.raises(InvalidUserError, match="missing 'age'") as excinfo:
        validate_users([{"purchases": []}])
    assert excinfo.value.stage == "context"
    assert excinfo.value.status_code == 422

    with pytest.raises(InvalidUserError, match="purchase without 'name'"):
        validate_users([{"age": 20, "purchases": [{"price": 3}]}])


@pytest.mark.parametrize("age", ["thirty", None, False])
def test_validate_users_rejects_non_numeric_age(age):
    with pytest.raises(InvalidUserError, match="non-numeric age") as excinfo:
        validate_users([{"age": 20}, {"age": age}])

    assert excinfo.value.details["position"] == 1
