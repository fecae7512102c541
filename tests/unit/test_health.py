"""Test health endpoint"""

import pytest

pytestmark = pytest.mark.unit


def test_health_check(client):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["dependencies"]["database"] == "connected"
    assert data["dependencies"]["cache"] == "connected"
    assert data["dependencies"]["ai_providers"] == ["openai", "gemini", "anthropic"]


def test_health_reports_cache_errors_without_failing(client, fake_redis):
    fake_redis.fail = True

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["dependencies"]["cache"].startswith("error")


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"].endswith("API")
