"""Tests for the FastAPI application endpoints.

Integration tests for health, metrics, recommendation and interaction
endpoints, run against an app wired to the shared in-memory fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app


@pytest.fixture
def client(engine, tracker):
    return TestClient(create_app(engine=engine, tracker=tracker))


def product_ids(items):
    return [item["id"] for item in items]


# ===== Health and metrics =====


def test_ping_endpoint(client):
    """Test that the /ping endpoint returns correct status and JSON."""
    response = client.get("/ping")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_metrics_endpoint(client):
    client.get("/recommendations/u1")
    client.get("/recommendations/u1")

    response = client.get("/metrics")

    assert response.status_code == 200
    data = response.json()
    assert data["cache_hits"] == 1
    assert data["cache_misses"] == 1
    assert data["strategies"] == {"collaborative": 1}
    assert data["cache_entries"] == 1


# ===== Recommendations =====


def test_recommend_endpoint_returns_products(client):
    response = client.get("/recommendations/u1")

    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == "u1"
    assert data["count"] == 2
    assert product_ids(data["recommendations"]) == ["p4", "p5"]

    first = data["recommendations"][0]
    assert first["name"] == "Acme Phone X"
    assert first["category"] == "smartphones"
    assert first["price"] == 699.0
    assert first["brand"] == "Acme"


def test_recommend_endpoint_respects_limit(client):
    response = client.get("/recommendations/u1?limit=1")

    assert response.status_code == 200
    assert product_ids(response.json()["recommendations"]) == ["p4"]


def test_recommend_unknown_user_gets_popular(client):
    response = client.get("/recommendations/nobody?limit=3")

    assert response.status_code == 200
    assert product_ids(response.json()["recommendations"]) == ["p1", "p5", "p2"]


def test_popular_endpoint(client):
    response = client.get("/recommendations/popular?limit=2")

    assert response.status_code == 200
    assert response.json()["count"] == 2
    assert product_ids(response.json()["products"]) == ["p1", "p5"]


def test_similar_endpoint(client):
    response = client.get("/recommendations/similar/p1")

    assert response.status_code == 200
    assert product_ids(response.json()["products"]) == ["p5", "p2", "p4", "p3"]


def test_similar_endpoint_unknown_product_is_empty(client):
    response = client.get("/recommendations/similar/nonexistent")

    assert response.status_code == 200
    assert response.json() == {"products": [], "count": 0}


def test_cache_clear_endpoint(client, engine):
    client.get("/recommendations/u1")
    assert len(engine.cache) == 1

    response = client.post("/recommendations/cache/clear")

    assert response.status_code == 200
    assert response.json() == {"status": "Recommendation cache cleared"}
    assert len(engine.cache) == 0


# ===== Interactions =====


def test_track_interaction(client, interaction_store):
    payload = {
        "user_id": "u9",
        "product_id": "p3",
        "type": "purchase",
        "metadata": {"session_id": "s1", "source": "recommendation"},
    }

    response = client.post("/interactions", json=payload)

    assert response.status_code == 201
    data = response.json()
    assert data["user_id"] == "u9"
    assert data["type"] == "purchase"
    assert data["weight"] == 5
    assert data["metadata"]["source"] == "recommendation"
    assert data["metadata"]["duration"] is None
    assert len(interaction_store.find_by_user("u9")) == 1


def test_track_interaction_without_metadata(client):
    response = client.post(
        "/interactions", json={"user_id": "u9", "product_id": "p3", "type": "view"}
    )

    assert response.status_code == 201
    assert response.json()["weight"] == 1


def test_tracking_invalidates_cached_recommendations(client, engine):
    client.get("/recommendations/u1")
    assert engine.cache.get("u1", 10) is not None

    client.post("/interactions", json={"user_id": "u1", "product_id": "p9", "type": "view"})

    assert engine.cache.get("u1", 10) is None


def test_interaction_history(client):
    client.post("/interactions", json={"user_id": "u9", "product_id": "p1", "type": "view"})
    client.post("/interactions", json={"user_id": "u9", "product_id": "p2", "type": "click"})

    response = client.get("/interactions/users/u9")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert {i["product_id"] for i in data["interactions"]} == {"p1", "p2"}


def test_interaction_history_filtered_by_type(client):
    response = client.get("/interactions/users/u1?type=purchase")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["interactions"][0]["product_id"] == "p1"


def test_delete_user_interactions(client, interaction_store):
    response = client.delete("/interactions/users/u2")

    assert response.status_code == 200
    assert response.json() == {"user_id": "u2", "deleted": 3}
    assert interaction_store.find_by_user("u2") == []


def test_product_stats(client):
    response = client.get("/interactions/products/p1/stats")

    assert response.status_code == 200
    assert response.json() == {
        "product_id": "p1",
        "views": 1,
        "clicks": 0,
        "add_to_carts": 0,
        "purchases": 2,
        "total": 3,
    }
