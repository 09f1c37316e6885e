"""
Async SQLAlchemy engine & session factory (asyncpg driver).

The finalizer opens many short sessions per run (one per company read and
one per worker write), so it is handed the factory rather than a session.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

engine_args = {
    "echo": False,
    "pool_pre_ping": True,
}

if "postgresql" in settings.DATABASE_URL:
    # One connection per concurrently processed company, plus the company listing
    engine_args.update(
        {
            "pool_size": settings.FINALIZER_MAX_CONCURRENCY + 1,
            "max_overflow": settings.FINALIZER_MAX_CONCURRENCY,
            "pool_recycle": 300,
        }
    )

engine = create_async_engine(settings.DATABASE_URL, **engine_args)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
