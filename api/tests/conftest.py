"""
Configuración de fixtures para pytest.
"""
import os

# Antes de importar la app: base en memoria y auto-sync apagado
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ERP_AUTO_SYNC_ENABLED", "false")

from typing import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.infrastructure.database.session import Base  # noqa: E402
import app.infrastructure.database.models  # noqa: E402,F401


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# erp_connectors tal como existia antes de la migracion que agrega auto_sync
LEGACY_CONNECTORS_DDL = (
    "CREATE TABLE erp_connectors ("
    "id VARCHAR(64) PRIMARY KEY, name VARCHAR(255), type VARCHAR(100), status VARCHAR(50))"
)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Engine en memoria con el esquema actual completo."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker:
    """Session factory equivalente a AsyncSessionLocal, sobre la base de prueba."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """
    Fixture que proporciona una sesión de base de datos para tests.
    Crea una base de datos en memoria para cada test.
    """
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def legacy_session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Base en memoria cuyo erp_connectors no tiene la columna auto_sync."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.execute(text(LEGACY_CONNECTORS_DDL))
        await conn.execute(text(
            "INSERT INTO erp_connectors (id, name, type, status) VALUES "
            "('legacy-1', 'SAP legado', 'sap', 'active'), "
            "('legacy-2', 'SAP legado 2', 'sap', 'inactive')"
        ))

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def empty_session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Base en memoria sin tablas: cualquier consulta al registro falla."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()
