"""Test cross-cutting app behavior: CORS, basic auth and error handling."""

import base64
import sqlite3
from unittest.mock import patch

from aom_web.error_logging import ErrorLogger


def _auth(user, password):
    token = base64.b64encode(f"{user}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


class TestCors:

    def test_api_responses_carry_cors_headers(self, client):
        response = client.get("/api/products")
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "PUT" in response.headers["Access-Control-Allow-Methods"]
        assert "Content-Type" in response.headers["Access-Control-Allow-Headers"]

    def test_preflight(self, client):
        response = client.options("/api/products")
        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_storefront_has_no_cors_headers(self, client):
        assert "Access-Control-Allow-Origin" not in client.get("/products").headers


class TestBasicAuth:

    def test_reads_stay_public(self, client, monkeypatch):
        monkeypatch.setenv("ADMIN_USER", "admin")
        monkeypatch.setenv("ADMIN_PASS", "geheim")

        assert client.get("/api/products").status_code == 200
        assert client.get("/products").status_code == 200

    def test_mutations_require_credentials(self, client, monkeypatch):
        monkeypatch.setenv("ADMIN_USER", "admin")
        monkeypatch.setenv("ADMIN_PASS", "geheim")

        response = client.post("/api/products/bulk", json={"ids": ["x"], "action": "delete"})
        assert response.status_code == 401
        assert "Basic" in response.headers["WWW-Authenticate"]

        response = client.post(
            "/api/products/bulk",
            json={"ids": ["x"], "action": "delete"},
            headers=_auth("admin", "falsch"),
        )
        assert response.status_code == 401

        response = client.post(
            "/api/products/bulk",
            json={"ids": ["x"], "action": "delete"},
            headers=_auth("admin", "geheim"),
        )
        assert response.status_code == 200

    def test_scraper_status_requires_credentials(self, client, monkeypatch):
        monkeypatch.setenv("ADMIN_USER", "admin")
        monkeypatch.setenv("ADMIN_PASS", "geheim")

        assert client.get("/api/scraper").status_code == 401
        assert client.get("/api/scraper", headers=_auth("admin", "geheim")).status_code == 200

    def test_malformed_header(self, client, monkeypatch):
        monkeypatch.setenv("ADMIN_USER", "admin")
        monkeypatch.setenv("ADMIN_PASS", "geheim")

        response = client.delete("/api/products/x", headers={"Authorization": "Basic !!!"})
        assert response.status_code == 401


class TestErrorHandling:

    def test_unknown_api_route_is_json(self, client):
        response = client.get("/api/unbekannt")
        assert response.status_code == 404
        assert "error" in response.json

    def test_method_not_allowed_is_json(self, client):
        response = client.patch("/api/products")
        assert response.status_code == 405
        assert "error" in response.json

    def test_unexpected_error_hides_details_and_is_persisted(self, client, db_path):
        with patch("aom_web.api.list_products", side_effect=sqlite3.OperationalError("disk I/O error")):
            response = client.get("/api/products")

        assert response.status_code == 500
        assert response.json == {"error": "Internal Server Error"}

        errors = ErrorLogger(db_path).get_errors()
        assert len(errors) == 1
        assert errors[0]["error_type"] == "unexpected_error"
        assert "disk I/O error" in errors[0]["error_message"]
        assert errors[0]["request_path"] == "/api/products"
        assert "Traceback" in errors[0]["stack_trace"]
