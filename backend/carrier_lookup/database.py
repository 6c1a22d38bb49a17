"""Database engine, session factory, and declarative base.

A single schema holds the reference data (carriers, ports) and the
services/routes that point at it.

Session dependency for FastAPI:
  - get_db()  → one session per request, committed when the handler returns
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from carrier_lookup.config import settings


def _engine_options(url: str) -> dict:
    # SQLite (local dev / tests) has no connection pool sizing
    if url.startswith("sqlite"):
        return {}
    return {"pool_size": 10, "max_overflow": 5, "pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """Yield a request-scoped session; commit on success, roll back on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
