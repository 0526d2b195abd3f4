"""
CLI: ejecuta un unico ciclo de auto-sync de conectores ERP.

Uso recomendado:
  - Diagnostico manual o cron externo cuando el API corre con
    ERP_AUTO_SYNC_ENABLED=false.
  - El API debe estar levantado: cada sync es un POST a /erp/connectors/{id}/sync.

Ejecución:
  python scripts/run_erp_auto_sync_once.py
  python scripts/run_erp_auto_sync_once.py --dry-run
  python scripts/run_erp_auto_sync_once.py --base-url http://localhost:8080
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
# La carpeta "api" contiene el paquete raíz `app/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

load_dotenv(_API_ROOT / ".env", override=False)

from app.application.use_cases.erp_auto_sync_use_cases import ErpAutoSyncRunner
from app.core.config import settings
from app.infrastructure.database.session import AsyncSessionLocal, close_db
from app.infrastructure.external.erp.sync_invoker import ConnectorSyncInvoker
from app.infrastructure.repositories.erp_connector_repository import ErpConnectorRepository
from app.infrastructure.scheduler.auto_sync_config import AutoSyncConfig


async def _dry_run() -> int:
    async with AsyncSessionLocal() as session:
        listing = await ErpConnectorRepository(session).list_for_auto_sync()
    eligible = listing.eligible()
    logger.info(
        f"{len(eligible)} conector(es) elegible(s) de {len(listing.connectors)} "
        f"(columna auto_sync: {'si' if listing.supports_auto_sync else 'no'})"
    )
    for c in eligible:
        logger.info(f"  - {c.id} (status={c.status})")
    return 0


async def _run(config: AutoSyncConfig) -> int:
    runner = ErpAutoSyncRunner(
        config,
        ConnectorSyncInvoker(config.base_url, timeout=config.http_timeout_seconds),
        AsyncSessionLocal,
    )
    await runner.run_once()
    cycle = runner.last_cycle
    if cycle is None or cycle.error:
        return 1
    logger.info(f"Ciclo terminado: {cycle.succeeded} ok, {cycle.failed} con error")
    return 0 if cycle.failed == 0 else 2


async def _main(args: argparse.Namespace) -> int:
    config = AutoSyncConfig.from_settings(settings)
    if args.base_url:
        config = replace(config, base_url=args.base_url.rstrip("/"))
    try:
        if args.dry_run:
            return await _dry_run()
        return await _run(config)
    finally:
        await close_db()


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Solo lista los conectores elegibles (no dispara syncs).",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Origen del API a invocar (default: ERP_AUTO_SYNC_BASE_URL o http://localhost:{PORT}).",
    )
    args = parser.parse_args()
    return asyncio.run(_main(args))


if __name__ == "__main__":
    raise SystemExit(main())
