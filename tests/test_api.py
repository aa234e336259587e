"""
Tests for the cache API.
"""

import pytest
from fastapi.testclient import TestClient

from akora_cache.api.app import create_app
from akora_cache.exceptions import RemoteFetchError
from akora_cache.repositories import InMemoryPersistentStore


@pytest.fixture
def client(store, remote):
    """Create a test client backed by an in-memory store and a fake remote."""
    with TestClient(create_app(store=store, remote=remote)) as test_client:
        yield test_client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Akora Cache API"


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "store_healthy": True}


def test_store_and_read_entry(client, store):
    """Test writing and reading a cache entry."""
    response = client.put("/cache/profile-42", json={"data": {"name": "Ama"}, "expiry_minutes": 30})
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = client.get("/cache/profile-42")
    data = response.json()
    assert data["hit"] is True
    assert data["value"] == {"name": "Ama"}
    assert data["in_memory"] is True
    assert data["expires_at"] is not None
    assert "akora_expiry_profile-42" in store.snapshot()


def test_read_missing_entry(client):
    data = client.get("/cache/profile-404").json()
    assert data["hit"] is False
    assert data["value"] is None


def test_store_rejects_non_positive_expiry(client):
    response = client.put("/cache/profile-42", json={"data": {}, "expiry_minutes": 0})
    assert response.status_code == 422


def test_delete_entry(client, store):
    client.put("/cache/profile-42", json={"data": {"name": "Ama"}})

    response = client.delete("/cache/profile-42")

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 1
    assert store.snapshot() == {}


def test_clear_all_keeps_app_state(remote):
    store = InMemoryPersistentStore({"auth_session": "token"})
    with TestClient(create_app(store=store, remote=remote)) as client:
        client.put("/cache/profile-42", json={"data": {"name": "Ama"}, "expiry_minutes": 30})

        response = client.delete("/cache")

    assert response.json()["deleted_count"] == 2
    assert store.snapshot() == {"auth_session": "token"}


def test_preload(client):
    client.put("/cache/profile-42", json={"data": {"name": "Ama"}})

    response = client.post("/cache/preload", json={"keys": ["profile-42", "home-posts-42"]})

    assert response.json() == {"requested": 2, "loaded": 1}


def test_preload_requires_keys(client):
    assert client.post("/cache/preload", json={"keys": []}).status_code == 422


def test_read_domain_revalidates(client, remote):
    """Instant value comes from memory, data from the remote source."""
    client.put("/cache/profile-42", json={"data": {"name": "Old"}})
    remote.responses["profiles"] = {"name": "New"}

    data = client.get("/users/42/profile").json()

    assert data == {"key": "profile-42", "instant": {"name": "Old"}, "data": {"name": "New"}, "status": "settled"}
    assert client.get("/cache/profile-42").json()["value"] == {"name": "New"}


def test_read_discover_category(client, remote):
    remote.responses["posts"] = [{"id": 1}]

    data = client.get("/users/42/discover-feed", params={"category": "jobs"}).json()

    assert data["key"] == "discover-feed-42-jobs"
    assert data["instant"] is None


def test_read_unknown_domain(client):
    assert client.get("/users/42/notifications").status_code == 404


def test_read_domain_remote_failure(client, remote):
    remote.responses["posts"] = RemoteFetchError("posts", "offline")

    response = client.get("/users/42/home-posts")

    assert response.status_code == 502


def test_invalidate_user(client, store):
    client.put("/cache/profile-42", json={"data": {"id": "42"}})
    client.put("/cache/discover-feed-42-jobs", json={"data": []})
    client.put("/cache/profile-7", json={"data": {"id": "7"}})

    response = client.delete("/users/42/cache", params={"category": ["jobs"]})

    assert response.status_code == 200
    assert response.json()["deleted_count"] == 2
    assert list(store.snapshot()) == ["akora_cache_profile-7"]


def test_stats(client):
    client.put("/cache/profile-42", json={"data": {}})

    data = client.get("/stats").json()

    assert data["memory_entries"] == 1
    assert data["cache_prefix"] == "akora_cache_"
