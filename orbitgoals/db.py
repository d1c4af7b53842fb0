from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from orbitgoals.config import settings


def _normalize_url(raw_url: str) -> str:
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return raw_url


def make_session_factory(raw_url: str | None) -> async_sessionmaker[AsyncSession] | None:
    """Build a session factory, or None when no remote store is configured."""
    if not raw_url:
        return None
    engine = create_async_engine(_normalize_url(raw_url), pool_pre_ping=True)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async_session = make_session_factory(settings.database_url)
