"""SQLAlchemy async engine, session, and dependency."""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from books_api.config import get_settings


settings = get_settings()


def _engine_options(dsn: str) -> dict:
    # SQLite runs on a single shared connection (in-memory test databases)
    if dsn.startswith("sqlite"):
        return {"poolclass": StaticPool}
    return {
        "pool_size": 20,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }


engine = create_async_engine(settings.database_dsn, echo=False, **_engine_options(settings.database_dsn))

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
