"""Tests for main FastAPI application."""

import logging

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from chatfeed.db.memory import InMemoryMessageStore
from chatfeed.db.postgres import PostgresMessageStore
from chatfeed.main import create_app
from chatfeed.middleware import RequestLoggingMiddleware


def _context(value):
    manager = MagicMock()
    manager.__aenter__ = AsyncMock(return_value=value)
    manager.__aexit__ = AsyncMock(return_value=False)
    return manager


class TestMainApp:
    """Test main FastAPI application on the in-memory store."""

    @pytest.fixture
    def client(self, app):
        with TestClient(app) as client:
            yield client

    def test_create_app(self, app):
        """Test app creation."""
        assert app.title == "Chat Feed API"
        assert app.version == "1.0.0"
        assert app.docs_url == "/docs"
        assert app.redoc_url == "/redoc"
        assert app.openapi_url == "/openapi.json"

    def test_lifespan_creates_store(self, client, app):
        assert isinstance(app.state.message_store, InMemoryMessageStore)

    def test_root_endpoint(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "Chat Feed API"
        assert data["version"] == "1.0.0"
        assert data["docs"] == "/docs"
        assert data["health"] == "/health"

    def test_liveness_check(self, client):
        response = client.get("/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["store"] == "memory"
        assert "database" not in data

    def test_ready_check(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_ready_before_startup(self, app):
        """Without the lifespan there is no store yet."""
        response = TestClient(app).get("/ready")

        assert response.status_code == 503
        assert response.headers["content-type"] == "application/problem+json"
        assert response.json()["detail"] == "Service not ready"

    def test_messages_need_a_store(self, app, random_conversation_id):
        response = TestClient(app).get(f"/v1/conversations/{random_conversation_id}/messages?first=5")

        assert response.status_code == 503

    def test_cors_middleware(self, client):
        response = client.options("/", headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "GET"
        })

        assert response.status_code in [200, 204]

    def test_openapi_spec(self, client):
        response = client.get("/openapi.json")
        assert response.status_code == 200

        openapi_spec = response.json()
        assert openapi_spec["info"]["title"] == "Chat Feed API"
        assert "/v1/conversations/{conversation_id}/messages" in openapi_spec["paths"]
        assert openapi_spec["servers"][0]["url"] == "http://localhost:8000"

    def test_openapi_server_url_from_settings(self, test_settings):
        settings = test_settings.model_copy(update={"api_url": "https://chat.example.com"})

        openapi_spec = create_app(settings).openapi()

        assert openapi_spec["servers"][0]["url"] == "https://chat.example.com"

    def test_exception_handlers_registered(self, app):
        assert len(app.exception_handlers) > 0

    def test_request_logging(self, client, app, caplog, random_conversation_id):
        assert RequestLoggingMiddleware in [middleware.cls for middleware in app.user_middleware]

        with caplog.at_level(logging.INFO, logger="chatfeed.middleware.request_logging"):
            client.get("/live")
            client.get(f"/v1/conversations/{random_conversation_id}/messages", params={"first": 5})

        messages = [record.getMessage() for record in caplog.records if record.name == "chatfeed.middleware.request_logging"]
        assert len(messages) == 1
        assert "first=5" in messages[0]
        assert "-> 404" in messages[0]


class TestPostgresBackedApp:
    """Startup and health checks with a mocked PostgreSQL pool."""

    @pytest.fixture
    def postgres_settings(self, test_settings):
        return test_settings.model_copy(update={"store_backend": "postgres"})

    @pytest.fixture
    def mock_db_manager(self):
        with patch("chatfeed.main.db_manager") as mock:
            mock.initialize = AsyncMock()
            mock.close = AsyncMock()
            yield mock

    @pytest.fixture
    def mock_get_db_pool(self):
        with patch("chatfeed.main.get_db_pool", new_callable=AsyncMock) as mock:
            conn = AsyncMock()
            conn.fetchval = AsyncMock(return_value=5)
            pool = MagicMock()
            pool.acquire = MagicMock(return_value=_context(conn))
            mock.return_value = pool
            yield mock

    def test_startup_and_health(self, postgres_settings, mock_db_manager, mock_get_db_pool):
        app = create_app(postgres_settings)

        with TestClient(app) as client:
            assert isinstance(app.state.message_store, PostgresMessageStore)
            mock_db_manager.initialize.assert_awaited_once_with(postgres_settings)

            health = client.get("/health").json()
            ready = client.get("/ready").json()

        assert health["database"] == "connected"
        assert ready["database_connections"] == 5

    def test_health_check_database_failure(self, postgres_settings, mock_db_manager, mock_get_db_pool):
        app = create_app(postgres_settings)

        with TestClient(app) as client:
            mock_get_db_pool.side_effect = Exception("Database connection failed")
            response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["title"] == "Service Unavailable"
        assert data["detail"] == "Database connection failed"

    def test_ready_check_database_failure(self, postgres_settings, mock_db_manager, mock_get_db_pool):
        app = create_app(postgres_settings)

        with TestClient(app) as client:
            mock_get_db_pool.side_effect = Exception("Database connection failed")
            response = client.get("/ready")

        assert response.status_code == 503
        assert "Service not ready" in response.json()["detail"]

    def test_startup_failure(self, postgres_settings, mock_db_manager):
        mock_db_manager.initialize = AsyncMock(side_effect=Exception("DB init failed"))
        app = create_app(postgres_settings)

        with pytest.raises(Exception, match="DB init failed"):
            with TestClient(app):
                pass

    @pytest.mark.asyncio
    async def test_shutdown_error_is_logged(self, test_settings):
        app = create_app(test_settings)

        with patch.object(InMemoryMessageStore, "close", AsyncMock(side_effect=Exception("Shutdown error"))):
            async with app.router.lifespan_context(app):
                pass

