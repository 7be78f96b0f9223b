"""Tests for the FastAPI app factory, lifespan and health route."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from deal_promoter.api.main import create_app
from deal_promoter.pipeline.pipeline import DealPipeline


class TestLifespan:
    def test_lifespan_builds_pipeline_from_settings(self, settings):
        app = create_app(settings)

        with TestClient(app):
            assert app.state.settings is settings
            assert isinstance(app.state.pipeline, DealPipeline)
            assert app.state.pipeline.settings is settings
            assert app.state.pipeline.fetcher.client is app.state.http_client

        assert app.state.http_client.is_closed

    def test_routes_registered(self, settings):
        paths = create_app(settings).openapi()["paths"]

        assert set(paths["/put/{cid}"]) == {"post"}
        assert set(paths["/health"]) == {"get"}


class TestHealth:
    @patch("deal_promoter.api.routes.health.shutil.which", return_value="/usr/local/bin/boost")
    def test_ok_when_tools_on_path(self, _which, settings):
        with TestClient(create_app(settings)) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @patch("deal_promoter.api.routes.health.shutil.which", return_value=None)
    def test_unhealthy_when_tools_missing(self, _which, settings):
        with TestClient(create_app(settings)) as client:
            response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["missing"] == ["boostx", "boost"]
