"""
Async database access

One engine per process, created on first use from DATABASE_URL. SQLite (the
default) runs without a connection pool; PostgreSQL goes through asyncpg with
a bounded pool outside development.
"""
import uuid
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from safedrive.core.config import settings

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def generate_id() -> str:
    """Primary keys are UUID4 strings (String(36) on every backend)"""
    return str(uuid.uuid4())


def database_url() -> str:
    """DATABASE_URL with plain postgres schemes switched to asyncpg"""
    url = settings.DATABASE_URL
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return "postgresql+asyncpg://" + url[len(scheme):]
    return url


def engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {"poolclass": NullPool, "connect_args": {"check_same_thread": False}}
    if settings.is_dev_mode():
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        url = database_url()
        _engine = create_async_engine(url, echo=settings.DB_ECHO, **engine_options(url))
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )
    return _session_factory


def AsyncSessionLocal() -> AsyncSession:
    """Standalone session for the CLI and background jobs"""
    return get_session_local()()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.

    Services commit their own writes; whatever is still pending when the
    endpoint returns is committed here, and everything is rolled back if the
    request fails.
    """
    async with get_session_local()() as session:
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables"""
    import safedrive.models  # noqa: F401  registers every table on Base.metadata

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
