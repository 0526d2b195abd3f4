"""
Script para cargar conectores ERP de prueba.

Uso:
    python -m scripts.seed_erp_connectors                    # Crea conectores demo
    python -m scripts.seed_erp_connectors --endpoint URL     # Endpoint OData propio
    python -m scripts.seed_erp_connectors --dry-run          # Ver que haria sin ejecutar

Este script es idempotente: los conectores se identifican por nombre y
solo se crean si no existen.
"""
import argparse
import asyncio

from loguru import logger
from sqlalchemy import select

from app.infrastructure.database.models import ErpConnectorModel
from app.infrastructure.database.session import AsyncSessionLocal, close_db, init_db

DEFAULT_ENDPOINT = "https://sapes5.sapdevcenter.com/sap/opu/odata/iwbep/GWSAMPLE_BASIC"


def _demo_connectors(endpoint: str) -> list[dict]:
    return [
        {
            "name": "SAP ES5 (auto)",
            "type": "SAP ES5",
            "endpoint": endpoint,
            "status": "active",
            "auto_sync": True,
            "is_active": True,
            "connection_settings": {"timeout": 30000},
        },
        {
            "name": "SAP ES5 (manual)",
            "type": "SAP ES5",
            "endpoint": endpoint,
            "status": "inactive",
            "auto_sync": False,
            "is_active": False,
            "connection_settings": {"timeout": 30000},
        },
    ]


async def main(endpoint: str, dry_run: bool) -> None:
    """Función principal para sembrar conectores."""
    await init_db()
    async with AsyncSessionLocal() as session:
        for data in _demo_connectors(endpoint):
            result = await session.execute(
                select(ErpConnectorModel).where(ErpConnectorModel.name == data["name"])
            )
            if result.scalars().first():
                logger.info(f"Conector '{data['name']}' ya existe, se omite")
                continue
            if dry_run:
                logger.info(f"[dry-run] Se crearia conector '{data['name']}' (auto_sync={data['auto_sync']})")
                continue
            session.add(ErpConnectorModel(**data))
            logger.info(f"Conector '{data['name']}' creado")
        if not dry_run:
            await session.commit()
    await close_db()
    logger.success("Seed de conectores terminado")


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--endpoint", default=DEFAULT_ENDPOINT)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()
    asyncio.run(main(args.endpoint, args.dry_run))
