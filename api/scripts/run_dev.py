"""
Script para ejecutar el servidor en modo desarrollo.

Uso:
    python scripts/run_dev.py                 # con auto-sync segun .env
    python scripts/run_dev.py --no-auto-sync  # sin auto-sync (recomendado con --reload)
"""
import argparse
import os
import sys
from pathlib import Path

import uvicorn

API_DIR = Path(__file__).resolve().parents[1]
if str(API_DIR) not in sys.path:
    sys.path.insert(0, str(API_DIR))


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--no-auto-sync", action="store_true", help="Arranca con ERP_AUTO_SYNC_ENABLED=false")
    args = parser.parse_args()

    if args.no_auto_sync:
        # Debe fijarse antes de importar settings (y heredarse al worker de reload)
        os.environ["ERP_AUTO_SYNC_ENABLED"] = "false"

    from app.core.config import settings

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        app_dir=str(API_DIR),
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
