"""Tests for the application factory."""

from tasktracker.app import create_app
from tasktracker.config import Config


class TestCreateApp:

    def test_defaults_to_environment_config(self, db, gateway):
        app = create_app(db=db, auth_gateway_factory=lambda: gateway)
        assert app.config["MONGO_DB_NAME"] == Config.MONGO_DB_NAME
        assert app.config["LOG_LEVEL"] == Config.LOG_LEVEL

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "ok"

    def test_unknown_route_is_json_404(self, client):
        resp = client.get("/api/nowhere")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not Found"}
