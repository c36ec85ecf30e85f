"""
Basic application tests.

Checks that the FastAPI app builds, serves the health endpoint and keeps
the interactive docs off outside debug mode.
"""

from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app, create_app

client = TestClient(app)


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_reports_version(self) -> None:
        """Health endpoint must return status ok and the configured version."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "version": settings.version,
            "storage": settings.storage_backend,
        }


class TestAppFactory:
    """Tests for create_app()."""

    def test_docs_hidden_without_debug(self) -> None:
        expected = 200 if settings.debug else 404
        assert TestClient(create_app()).get("/docs").status_code == expected

    def test_vending_routes_mounted(self) -> None:
        paths = {route.path for route in app.routes}
        assert {"/api/v1/buy", "/api/v1/reset", "/api/v1/products"} <= paths

    def test_lifespan_runs_without_touching_storage(self) -> None:
        """Startup and shutdown succeed before any storage was created."""
        with TestClient(create_app()) as lifespan_client:
            assert lifespan_client.get("/api/v1/health").status_code == 200
