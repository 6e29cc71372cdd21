import pytest
from fastapi.testclient import TestClient

from wordboard.main import app, settings


@pytest.fixture
def client():
    return TestClient(app)


def test_status(client):
    response = client.get("/api/status")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["maxPlayers"] == 4
    assert body["serverVersion"] == "1.0.0"
    assert body["gameActive"] is False


def test_check_known_word(client):
    response = client.get("/api/dictionary/check/cat")
    assert response.json() == {"word": "CAT", "valid": True}


def test_check_unknown_word(client):
    response = client.get("/api/dictionary/check/qxzvk")
    assert response.json() == {"word": "QXZVK", "valid": False}


def test_settings_defaults():
    assert settings.default_game_id
    assert settings.cors_origins


def test_run_serves_socket_app(monkeypatch):
    import uvicorn

    from wordboard import main

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    main.run()

    (app_arg, kwargs), = calls
    assert app_arg is main.application
    assert kwargs["host"] == settings.host
    assert kwargs["port"] == settings.port
