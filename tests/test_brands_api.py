"""Endpoint tests for /api/v1/brands and the health check."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from conftest import vehicle_payload

BASE = "/api/v1/brands"


class TestBrands:
    def test_create_normalises_names(self, client):
        response = client.post(BASE, json={"name": " Toyota ", "models": ["Corolla", "HILUX", "corolla"]})
        assert response.status_code == 201
        assert response.json()["name"] == "toyota"
        assert response.json()["models"] == ["corolla", "hilux"]

    def test_duplicate_name_is_400(self, client):
        client.post(BASE, json={"name": "Honda", "models": []})
        response = client.post(BASE, json={"name": "HONDA", "models": []})
        assert response.status_code == 400
        assert response.json()["details"] == {"name": "honda"}

    def test_models_by_name_is_case_insensitive(self, client):
        client.post(BASE, json={"name": "Nissan", "models": ["Patrol", "Navara"]})
        response = client.get(f"{BASE}/name/NISSAN/models")
        assert response.status_code == 200
        assert response.json() == ["patrol", "navara"]

    def test_unknown_brand_is_404(self, client):
        assert client.get(f"{BASE}/name/lada/models").status_code == 404
        assert client.get(f"{BASE}/42").status_code == 404

    def test_vehicle_embeds_brand_and_is_listed_under_it(self, client):
        brand = client.post(BASE, json={"name": "Toyota", "models": ["Corolla"]}).json()
        created = client.post("/api/v1/vehicles", json=vehicle_payload(brand=brand["id"]))
        assert created.status_code == 201
        assert created.json()["brand"]["name"] == "toyota"

        listed = client.get(f"/api/v1/vehicles/brand/{brand['id']}").json()
        assert [v["id"] for v in listed] == [created.json()["id"]]

    def test_vehicle_model_must_match_brand(self, client):
        brand = client.post(BASE, json={"name": "Toyota", "models": ["Corolla"]}).json()
        response = client.post("/api/v1/vehicles", json=vehicle_payload(brand=brand["id"], model="Civic"))
        assert response.status_code == 400
        assert "model" in response.json()["details"]


class TestHealth:
    def test_health_reports_database(self, client):
        body = client.get("/api/v1/health").json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"
