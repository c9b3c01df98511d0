from datetime import datetime
import logging
from unittest.mock import Mock, patch

from fastapi.testclient import TestClient

from directory_auth.directory_auth.auth_service.directory import UserDirectory
from directory_auth.directory_auth.auth_service.config import Settings
from directory_auth.directory_auth.auth_service.main import configure_logging, create_app


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


def test_test_route(client):
    response = client.get("/test")
    assert response.status_code == 200
    assert response.json() == {"message": "Server is running"}


def test_health_ignores_body_and_headers_and_directory(settings):
    directory = Mock(spec=UserDirectory)
    with TestClient(create_app(settings, directory)) as client:
        health = client.request(
            "GET",
            "/health",
            content=b"garbage",
            headers={"Authorization": "Bearer nonsense", "Content-Type": "text/plain"},
        )
        test = client.get("/test", headers={"X-Requested-With": "XMLHttpRequest"})

    assert health.status_code == 200
    assert test.status_code == 200
    assert directory.mock_calls == []


def test_configure_logging_uses_log_level():
    settings = Settings(_env_file=None, LOG_LEVEL="warning")
    with patch("directory_auth.directory_auth.auth_service.main.logging.basicConfig") as basic_config:
        configure_logging(settings)

    basic_config.assert_called_once()
    assert basic_config.call_args.kwargs["level"] == logging.WARNING
    assert "%(levelname)s" in basic_config.call_args.kwargs["format"]
