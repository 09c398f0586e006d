import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

from stockroom.core.db import Database
from stockroom.core.exceptions import StorageFault
from stockroom.main import create_app


@pytest.fixture
def client(tmp_path):
    app = create_app(Database(f"sqlite://{tmp_path / 'api.db'}"), export_dir=str(tmp_path / "exports"))
    with TestClient(app) as client:
        yield client


def _create(client, **overrides):
    item = {"category": "Shirt", "color": "Red", "ageGroup": "2-3", "price": 200, "quantity": 3}
    item.update(overrides)
    response = client.post("/api/v1/items", json=item)
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestItemRoutes:
    def test_create_and_list(self, client):
        item_id = _create(client, subCategory="Polo")

        response = client.get("/api/v1/items")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_stock"] == 3
        [item] = data["items"]
        assert item["id"] == item_id
        assert item["sub_category"] == "Polo"
        assert item["price"] == 200

    def test_create_with_empty_color_is_rejected(self, client):
        response = client.post(
            "/api/v1/items", json={"category": "Shirt", "color": "", "age_group": "2-3", "quantity": 1}
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"

    def test_list_filters(self, client):
        _create(client)
        blue = _create(client, color="Blue", ageGroup="4-5")

        response = client.get("/api/v1/items", params={"age_group": "4-5"})
        assert [i["id"] for i in response.json()["data"]["items"]] == [blue]

    def test_missing_item_is_404(self, client):
        assert client.get("/api/v1/items/999").status_code == 404
        response = client.put(
            "/api/v1/items/999", json={"category": "Shirt", "color": "Red", "age_group": "2-3", "quantity": 1}
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    def test_update_and_delete(self, client):
        item_id = _create(client)

        response = client.put(
            f"/api/v1/items/{item_id}",
            json={"category": "Kurta", "color": "Green", "age_group": "1-2", "quantity": 9},
        )
        assert response.status_code == 200
        assert response.json()["data"]["quantity"] == 9

        assert client.delete(f"/api/v1/items/{item_id}").status_code == 200
        assert client.delete(f"/api/v1/items/{item_id}").status_code == 404

    def test_sell_and_restock(self, client):
        item_id = _create(client)

        response = client.post(f"/api/v1/items/{item_id}/sell", json={"current_quantity": 3, "price": 220})
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["sale"]["total"] == 220
        assert data["item"]["quantity"] == 2

        response = client.post(f"/api/v1/items/{item_id}/restock", json={"current_quantity": 2})
        assert response.json()["data"]["quantity"] == 3

        sales = client.get("/api/v1/sales", params={"item_id": item_id}).json()["data"]
        assert len(sales) == 1
        assert sales[0]["category"] == "Shirt"

    def test_sell_out_of_stock_is_409(self, client):
        item_id = _create(client, quantity=0)

        response = client.post(f"/api/v1/items/{item_id}/sell", json={"current_quantity": 0, "price": 220})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "insufficient_stock"
        assert client.get("/api/v1/sales").json()["data"] == []

    def test_subcategories(self, client):
        _create(client, subCategory="Polo")
        _create(client, category="Kurta", subCategory="Linen")

        response = client.get("/api/v1/items/subcategories", params={"category": "Kurta"})
        assert response.json()["data"] == ["Linen"]


class TestOptionRoutes:
    def test_list_seeded_categories(self, client):
        response = client.get("/api/v1/options/CATEGORY")
        assert response.status_code == 200
        assert "Shirt" in response.json()["data"]

    def test_add_subcategory_creates_missing_parent(self, client):
        response = client.post("/api/v1/options/SUBCATEGORY", json={"value": "Graphic", "parent": "Hoodie"})
        assert response.status_code == 201
        assert response.json()["data"]["created"] is True

        assert "Hoodie" in client.get("/api/v1/options/CATEGORY").json()["data"]
        listed = client.get("/api/v1/options/SUBCATEGORY", params={"parent": "Hoodie"})
        assert listed.json()["data"] == ["Graphic"]

    def test_duplicate_add_reports_not_created(self, client):
        response = client.post("/api/v1/options/CATEGORY", json={"value": "Shirt"})
        assert response.json()["data"]["created"] is False

    def test_blank_value_is_400(self, client):
        response = client.post("/api/v1/options/AGE", json={"value": "  "})
        assert response.status_code == 400
        assert "must not be empty" in response.json()["error"]["message"]

    def test_unknown_type_is_422(self, client):
        assert client.get("/api/v1/options/COLOUR").status_code == 422


class TestExportRoutes:
    def test_preview(self, client):
        item_id = _create(client, color='Kid\'s, "Blue"')
        client.post(f"/api/v1/items/{item_id}/sell", json={"current_quantity": 3, "price": 150})

        response = client.get("/api/v1/export/preview")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        header, line = response.text.splitlines()
        assert header.startswith("Category,Subcategory,Color")
        assert '"Kid\'s, ""Blue"""' in line

    def test_export_writes_known_path_file(self, client, tmp_path):
        _create(client)

        response = client.post("/api/v1/export")

        assert response.status_code == 200
        path = response.headers["x-export-path"]
        assert path.startswith(str((tmp_path / "exports").resolve()))
        with open(path, encoding="utf-8") as exported:
            assert exported.read() == response.text


def test_storage_fault_is_reported_generically(client):
    with patch(
        "stockroom.api.v1.sales.sales_service.history",
        AsyncMock(side_effect=StorageFault("disk I/O error in /data/inventory.db")),
    ):
        response = client.get("/api/v1/sales")

    assert response.status_code == 503
    error = response.json()["error"]
    assert error["code"] == "storage_error"
    assert "/data" not in error["message"]
