"""Probes, metrics, configuration and seeding."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from books_api.config import PaginationConfig, Settings
from books_api.models.book import Book
from books_api.seed import SAMPLE_BOOKS, seed_books


class TestHealthEndpoints:
    """Test health, readiness, and liveness probes."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "books_api"

    @pytest.mark.asyncio
    async def test_liveness(self, client):
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    @pytest.mark.asyncio
    async def test_readiness(self, client):
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["checks"] == {"database": "ok"}


class TestMetrics:
    """Test Prometheus metrics endpoint."""

    @pytest.mark.asyncio
    async def test_metrics_endpoint(self, client):
        await client.get("/health")
        response = await client.get("/metrics")
        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert 'endpoint="/health"' in response.text


class TestSettings:
    def test_composed_dsn(self):
        settings = Settings(
            database_url=None,
            postgres_user="u",
            postgres_password="p",
            postgres_host="db",
            postgres_port=5433,
            postgres_db="books",
        )
        assert settings.database_dsn == "postgresql+asyncpg://u:p@db:5433/books"

    def test_database_url_wins(self):
        settings = Settings(database_url="sqlite+aiosqlite:///books.db")
        assert settings.database_dsn == "sqlite+aiosqlite:///books.db"

    def test_pagination_config(self):
        settings = Settings(default_page_limit=20, max_page_limit=40)
        assert settings.pagination == PaginationConfig(default_limit=20, max_limit=40)

    def test_cors_origin_list(self):
        settings = Settings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origin_list == ["http://a.test", "http://b.test"]

    def test_secrets_overlay(self, monkeypatch):
        from books_api import config

        monkeypatch.setenv("AWS_ENDPOINT_URL", "http://localstack:4566")
        monkeypatch.setattr(
            config,
            "_fetch_aws_secrets",
            lambda name, region, endpoint: {"JWT_SECRET_KEY": "from-secrets-manager"},
        )
        config.get_settings.cache_clear()
        try:
            assert config.get_settings().jwt_secret_key == "from-secrets-manager"
        finally:
            config.get_settings.cache_clear()


class TestSeed:
    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, db_session):
        assert await seed_books(db_session) == len(SAMPLE_BOOKS)
        await db_session.commit()
        assert await seed_books(db_session) == 0

        result = await db_session.execute(select(Book))
        assert len(result.scalars().all()) == len(SAMPLE_BOOKS)
