"""Tests for the HTTP server."""

import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from scmsettings.config import ProviderConfig
from scmsettings.server import app as app_module
from scmsettings.server.app import create_app, lifespan
from scmsettings.server.routes import router

CONFIGS_FILE = "/site/ScmHostingConfigurations.txt"


@pytest.fixture
def client(provider):
    """Create test client with the fake-backed provider."""
    # Directly set the module-level variable
    app_module._provider = provider

    # Create app without lifespan (we manage the provider manually)
    app = FastAPI()
    app.include_router(router)

    yield TestClient(app)

    app_module._provider = None


class TestHealthEndpoint:
    """Tests for /v1/health endpoint."""

    def test_health_cold(self, client):
        response = client.get("/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["site_name"] == "test-site"
        assert data["cache_warm"] is False
        assert data["cache_fresh"] is False

    def test_health_warm(self, client, provider):
        provider.config = {"a": "1"}

        data = client.get("/v1/health").json()

        assert data["cache_warm"] is True
        assert data["cache_fresh"] is True

    def test_uninitialized_provider_returns_503(self, client):
        app_module._provider = None

        response = client.get("/v1/health")

        assert response.status_code == 503


class TestSettingsEndpoints:
    """Tests for /v1/settings endpoints."""

    def test_list_settings(self, client, provider, environ):
        environ["SCM_TelemetryIntervalMinutes"] = "5"
        provider.config = {
            "ArmRetryAfterSeconds": "1",
            "GetLatestDeploymentOptimized": "0",
        }

        response = client.get("/v1/settings")

        assert response.status_code == 200
        settings = {s["key"]: s for s in response.json()["settings"]}
        assert settings["ArmRetryAfterSeconds"]["value"] == 10
        assert settings["ArmRetryAfterSeconds"]["raw_value"] == "1"
        assert settings["ArmRetryAfterSeconds"]["source"] == "file"
        assert settings["GetLatestDeploymentOptimized"]["value"] is False
        assert settings["DeploymentStatusCompleteFileEnabled"]["value"] is True
        assert settings["DeploymentStatusCompleteFileEnabled"]["source"] == "default"
        assert settings["TelemetryIntervalMinutes"]["value"] == 5
        assert settings["TelemetryIntervalMinutes"]["source"] == "environment"

    def test_get_known_setting_default(self, client):
        response = client.get("/v1/settings/ArmRetryAfterSeconds")

        assert response.status_code == 200
        assert response.json() == {
            "key": "ArmRetryAfterSeconds",
            "value": "30",
            "source": "default",
        }

    def test_get_arbitrary_key_from_file(self, client, file_system):
        file_system.write(CONFIGS_FILE, "CustomKey=abc")

        response = client.get("/v1/settings/customkey")

        assert response.status_code == 200
        assert response.json()["value"] == "abc"
        assert response.json()["source"] == "file"

    def test_get_unknown_key_404(self, client):
        response = client.get("/v1/settings/NoSuchKey")

        assert response.status_code == 404


class TestSnapshotEndpoints:
    """Tests for /v1/snapshot and /v1/refresh."""

    def test_snapshot_cold_does_not_read(self, client, file_system):
        file_system.write(CONFIGS_FILE, "a=1")

        data = client.get("/v1/snapshot").json()

        assert data["warm"] is False
        assert data["values"] == {}
        assert data["expires_at"] is None
        assert data["configs_file"] == CONFIGS_FILE
        assert file_system.read_count == 0

    def test_refresh_reads_file(self, client, file_system):
        file_system.write(CONFIGS_FILE, "a=1;b=2")

        response = client.post("/v1/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["warm"] is True
        assert data["values"] == {"a": "1", "b": "2"}
        assert data["expires_at"] is not None
        assert file_system.read_count == 1

    def test_refresh_failure_keeps_snapshot(self, client, provider, file_system, events):
        provider.config = {"a": "1"}
        file_system.write(CONFIGS_FILE, "a=2")
        file_system.read_error = OSError("locked")

        data = client.post("/v1/refresh").json()

        assert data["values"] == {"a": "1"}
        assert len(events.exceptions) == 1


class TestApp:
    """Tests for the full application with lifespan."""

    def test_lifespan_builds_provider(self, tmp_path):
        settings_file = tmp_path / "settings.txt"
        settings_file.write_text("TelemetryIntervalMinutes=3")
        config = ProviderConfig(
            configs_file=str(settings_file), site_name="app-site", queue_events=True
        )

        with TestClient(create_app(config)) as client:
            assert client.get("/").json()["service"] == "scm-hosting-settings"
            assert client.get("/v1/health").json()["site_name"] == "app-site"
            settings = {s["key"]: s for s in client.get("/v1/settings").json()["settings"]}
            assert settings["TelemetryIntervalMinutes"]["value"] == 3

        assert app_module._provider is None

    def test_invalid_config_refuses_start(self):
        app = create_app(ProviderConfig(site_name="s", ttl_seconds=0))

        async def start():
            async with lifespan(app):
                pass

        with pytest.raises(ValueError, match="ttl_seconds"):
            asyncio.run(start())
