"""Shared test configuration and fixtures."""

from __future__ import annotations

import os

# Settings are read once at import time; configure before the app loads
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


def book_payload(**overrides) -> dict:
    payload = {
        "isbn13": 9780547928227,
        "authors": "J.R.R. Tolkien",
        "publication_year": 1937,
        "original_title": "The Hobbit or There and Back Again",
        "title": "The Hobbit",
        "rating_1": 0,
        "rating_2": 0,
        "rating_3": 10,
        "rating_4": 0,
        "rating_5": 0,
        "image_url": "https://images.example.com/hobbit-large.jpg",
        "image_small_url": "https://images.example.com/hobbit-small.jpg",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_book():
    return book_payload


@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory schema for each test."""
    from books_api.database import Base, engine
    from books_api.models import book, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    from books_api.database import async_session

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    """Create a test client for the FastAPI app."""
    from books_api.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def auth_headers(client):
    response = await client.post(
        "/auth/register",
        json={
            "email": "reader@example.com",
            "username": "reader",
            "password": "SecurePass123",
        },
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
