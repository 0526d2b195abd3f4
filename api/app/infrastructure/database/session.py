"""
Engine y sesiones async de SQLAlchemy.

Produccion usa PostgreSQL (asyncpg, con pool); los tests y el desarrollo
local pueden usar SQLite (aiosqlite, sin pool configurable).
"""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.orm import declarative_base

from app.core.config import settings


Base = declarative_base()


def _create_engine_args(database_url: str) -> dict:
    """Argumentos del engine; pool_size/max_overflow solo aplican a PostgreSQL."""
    args = {"echo": settings.DEBUG}
    if database_url.startswith("postgresql"):
        args.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=True,
        )
    return args


engine = create_async_engine(
    settings.effective_database_url,
    **_create_engine_args(settings.effective_database_url)
)

# Compartida por los requests (via get_db) y por el auto-sync (una sesion por ciclo)
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependencia FastAPI: una sesion por request.
    Hace commit al terminar el endpoint y rollback si este lanza.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Crea las tablas que falten (no altera tablas existentes: eso es trabajo de Alembic)."""
    import app.infrastructure.database.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
