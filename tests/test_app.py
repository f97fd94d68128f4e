import json
import logging

import pytest
from fastapi.testclient import TestClient

import todo_api.main as main_module
from todo_api.errors import HTTP_STATUS_BY_KIND, ErrorKind, StoreError
from todo_api.generate_openapi import generate_openapi
from todo_api.main import create_app
from todo_api.repositories import InMemoryRepository
from todo_api.routers.todos import get_repository
from todo_api.settings import Settings, get_settings


class _BrokenRepository(InMemoryRepository):
    async def _find_all(self):
        raise RuntimeError("boom")


class _UnreachableRepository(InMemoryRepository):
    def __init__(self):
        super().__init__()
        self.closed = False

    async def ping(self):
        raise StoreError("localhost:27017: connection refused")

    async def close(self):
        self.closed = True


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert res.json() == {"message": "Healthy", "backend": "memory"}


class TestMiddleware:
    def test_cors_headers(self, client):
        res = client.get("/api/todos", headers={"Origin": "http://example.com"})
        assert res.status_code == 200
        assert "access-control-allow-origin" in res.headers

    def test_cors_restricted_origins(self):
        settings = Settings(
            persistence_backend="memory", cors_allow_origins=["http://allowed.test"]
        )
        with TestClient(create_app(settings)) as c:
            ok = c.get("/api/todos", headers={"Origin": "http://allowed.test"})
            assert ok.headers.get("access-control-allow-origin") == "http://allowed.test"
            other = c.get("/api/todos", headers={"Origin": "http://other.test"})
            assert "access-control-allow-origin" not in other.headers


class TestErrorHandling:
    def test_status_table(self):
        assert HTTP_STATUS_BY_KIND[ErrorKind.NOT_FOUND] == 404
        for kind in (ErrorKind.VALIDATION_ERROR, ErrorKind.INVALID_IDENTIFIER, ErrorKind.STORE_ERROR):
            assert HTTP_STATUS_BY_KIND[kind] == 500

    def test_unexpected_handler_error_is_reported(self, memory_settings):
        app = create_app(memory_settings)
        app.dependency_overrides[get_repository] = _BrokenRepository
        with TestClient(app) as c:
            res = c.get("/api/todos")
        assert res.status_code == 500
        assert res.json() == {"error": "boom"}

    def test_fallback_handler_catches_unformatted_errors(self, memory_settings, caplog):
        # Without the lifespan no repository is attached, so the dependency itself fails
        app = create_app(memory_settings)
        c = TestClient(app, raise_server_exceptions=False)
        with caplog.at_level(logging.INFO, logger="todo_api.main"):
            res = c.get("/api/todos", headers={"Origin": "http://example.com"})
        assert res.status_code == 500
        assert "repository" in res.json()["error"]
        assert "access-control-allow-origin" in res.headers
        assert any("GET /api/todos -> 500" in r.getMessage() for r in caplog.records)


class TestStartup:
    def test_unreachable_store_aborts_startup(self, memory_settings, monkeypatch):
        repo = _UnreachableRepository()
        monkeypatch.setattr(main_module, "build_repository", lambda settings: repo)

        with pytest.raises(StoreError):
            with TestClient(create_app(memory_settings)):
                pass
        assert repo.closed is True


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("HOST", "PORT", "PERSISTENCE_BACKEND", "MONGODB_URI", "CORS_ALLOW_ORIGINS", "LOG_LEVEL"):
            monkeypatch.setenv(name, "")
        settings = get_settings()
        assert settings.port == 3000
        assert settings.persistence_backend == "mongo"
        assert settings.mongodb_uri == "mongodb://localhost:27017"
        assert settings.cors_allow_origins == ["*"]
        assert settings.log_level == "INFO"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("PERSISTENCE_BACKEND", "Memory")
        monkeypatch.setenv("MONGODB_URI", "mongodb://db:27017")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
        settings = get_settings()
        assert settings.port == 8080
        assert settings.persistence_backend == "memory"
        assert settings.mongodb_uri == "mongodb://db:27017"
        assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("PORT", "not-a-port")
        monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
        settings = get_settings()
        assert settings.port == 3000
        assert settings.persistence_backend == "mongo"

    def test_values_are_stripped_and_wildcard_wins(self, monkeypatch):
        monkeypatch.setenv("HOST", "  127.0.0.1 ")
        monkeypatch.setenv("LOG_FILE", "   ")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, *")
        settings = get_settings()
        assert settings.host == "127.0.0.1"
        assert settings.log_file is None
        assert settings.cors_allow_origins == ["*"]


def test_generate_openapi(tmp_path):
    out = generate_openapi(tmp_path / "openapi.json")
    schema = json.loads(out.read_text(encoding="utf-8"))
    assert "/api/todos" in schema["paths"]
    assert "/api/todos/{todo_id}" in schema["paths"]
    assert {t["name"] for t in schema["tags"]} >= {"health", "todos"}
