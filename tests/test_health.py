from fastapi.testclient import TestClient

from stockroom.core.db import Database
from stockroom.main import create_app


def test_health_endpoint(tmp_path):
    """Test health endpoint"""
    app = create_app(Database(f"sqlite://{tmp_path / 'health.db'}"))

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "open"
