import importlib
import os
import sys

import pytest
from fastapi.testclient import TestClient


def _cleanup_app_modules():
    for module in [
        name for name in sys.modules if name == "padel_api.main" or name.startswith("padel_api.main.")
    ]:
        sys.modules.pop(module, None)


@pytest.fixture(autouse=True)
def app_import_isolation(monkeypatch):
    app_path = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    cleanup = _cleanup_app_modules
    cleanup()
    monkeypatch.syspath_prepend(app_path)
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    try:
        yield
    finally:
        cleanup()


def test_rejects_wildcard_with_credentials(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "*")
    monkeypatch.setenv("ALLOW_CREDENTIALS", "true")
    with pytest.raises(ValueError):
        importlib.import_module("padel_api.main")


def test_requires_allowed_origins(monkeypatch):
    monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
    monkeypatch.delenv("ALLOW_CREDENTIALS", raising=False)
    with pytest.raises(ValueError):
        importlib.import_module("padel_api.main")


def test_app_starts_with_explicit_origins(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://padel.example, http://localhost:3000")
    main = importlib.import_module("padel_api.main")

    assert main.ALLOWED_ORIGINS == ["https://padel.example", "http://localhost:3000"]
    with TestClient(main.app) as client:
        assert main.app.state.rate_limiter._task is not None
        assert client.get("/healthz").json() == {"status": "ok"}
        assert client.get(f"{main.API_PREFIX}/healthz").status_code == 200
        preflight = client.options(
            f"{main.API_PREFIX}/v0/groups/g1/streaks",
            headers={
                "Origin": "https://padel.example",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert preflight.headers["access-control-allow-origin"] == "https://padel.example"
    assert main.app.state.rate_limiter._task is None
