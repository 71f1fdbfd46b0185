"""Integration tests for /healthz and /metrics endpoints."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from backend.app.api.routes.health import check_db, check_generator, check_redis
from backend.app.config import Settings
from backend.app.main import app
from backend.app.utils.metrics import PrometheusWorkflowMetrics


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


class TestHealthEndpoint:
    """Test /health and /healthz endpoints."""

    def test_health_always_ok(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @patch("backend.app.api.routes.health.check_db")
    @patch("backend.app.api.routes.health.check_redis")
    def test_healthz_returns_200_when_all_ok(
        self,
        mock_check_redis: MagicMock,
        mock_check_db: MagicMock,
        client: TestClient,
    ) -> None:
        """Test /healthz returns 200 when DB and Redis are healthy."""
        mock_check_db.return_value = (True, "ok")
        mock_check_redis.return_value = (True, "ok")

        response = client.get("/healthz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["components"]["db"] == "ok"
        assert data["components"]["redis"] == "ok"
        assert data["components"]["generator"] in ("openai", "stub")

    @patch("backend.app.api.routes.health.check_db")
    @patch("backend.app.api.routes.health.check_redis")
    def test_healthz_returns_503_when_db_fails(
        self,
        mock_check_redis: MagicMock,
        mock_check_db: MagicMock,
        client: TestClient,
    ) -> None:
        """Test /healthz returns 503 when DB check fails."""
        mock_check_db.return_value = (False, "connection refused")
        mock_check_redis.return_value = (True, "ok")

        response = client.get("/healthz")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["db"] == "connection refused"

    @patch("backend.app.api.routes.health.check_db")
    @patch("backend.app.api.routes.health.check_redis")
    def test_healthz_returns_503_when_redis_fails(
        self,
        mock_check_redis: MagicMock,
        mock_check_db: MagicMock,
        client: TestClient,
    ) -> None:
        """Test /healthz returns 503 when Redis check fails."""
        mock_check_db.return_value = (True, "ok")
        mock_check_redis.return_value = (False, "timeout")

        response = client.get("/healthz")

        assert response.status_code == 503
        assert response.json()["components"]["redis"] == "timeout"


class TestHealthChecks:
    """Component checks without a live database or Redis."""

    @pytest.mark.asyncio
    async def test_db_not_configured(self) -> None:
        assert await check_db(Settings(database_url=None)) == (False, "not_configured")

    @pytest.mark.asyncio
    async def test_redis_not_configured_is_ok(self) -> None:
        assert await check_redis(Settings(redis_url=None)) == (True, "not_configured")

    def test_generator_backend(self) -> None:
        assert check_generator(Settings(openai_api_key=None)) == "stub"
        assert check_generator(Settings(openai_api_key=SecretStr("sk-test"))) == "openai"


class TestMetricsEndpoint:
    """Test /metrics endpoint."""

    def test_metrics_returns_prometheus_format(self, client: TestClient) -> None:
        """Test /metrics returns Prometheus text format."""
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]

    def test_metrics_includes_workflow_metrics(self, client: TestClient) -> None:
        """Test /metrics includes generation, credit and claim metrics."""
        metrics = PrometheusWorkflowMetrics()
        metrics.record_generation("leave", "success", 420.0)
        metrics.inc_generation_error("empty")
        metrics.inc_credits_debited("generation")
        metrics.inc_claim("success")

        response = client.get("/metrics")

        assert response.status_code == 200
        text = response.text
        assert "generation_latency_ms" in text
        assert 'generation_errors_total{reason="empty"}' in text
        assert 'credits_debited_total{source="generation"}' in text
        assert 'document_claims_total{outcome="success"}' in text
