"""
Manejadores de eventos de inicio y cierre de la aplicacion.
"""
from typing import Callable
from fastapi import FastAPI
from loguru import logger

from app.core.config import settings
from app.application.use_cases.erp_auto_sync_use_cases import ErpAutoSyncRunner
from app.infrastructure.database.session import AsyncSessionLocal, init_db, close_db
from app.infrastructure.external.erp.sync_invoker import ConnectorSyncInvoker
from app.infrastructure.repositories.erp_connector_repository import ErpConnectorRepository
from app.infrastructure.scheduler.auto_sync_config import AutoSyncConfig
from app.infrastructure.scheduler.auto_sync_scheduler import ErpAutoSyncScheduler


def build_erp_auto_sync() -> ErpAutoSyncScheduler:
    """Construye scheduler + runner + invoker desde settings."""
    config = AutoSyncConfig.from_settings(settings)
    invoker = ConnectorSyncInvoker(config.base_url, timeout=config.http_timeout_seconds)
    runner = ErpAutoSyncRunner(config, invoker, AsyncSessionLocal)
    return ErpAutoSyncScheduler(config, runner)


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Inicializa recursos al inicio de la aplicacion."""
        try:
            logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
            logger.info(f"Entorno: {settings.ENVIRONMENT}")

            # Configurar logging adicional
            logger.add(
                settings.LOG_FILE,
                rotation="500 MB",
                retention="10 days",
                level=settings.LOG_LEVEL
            )

            # Inicializar base de datos (crea tablas si no existen)
            await init_db()
            logger.info("Base de datos inicializada")

            await _validate_schema()

            # Auto-sync de conectores ERP
            auto_sync = build_erp_auto_sync()
            app.state.erp_auto_sync = auto_sync
            auto_sync.start()
            app.state.scheduler = auto_sync.scheduler

            logger.success("Aplicacion iniciada correctamente")

            _print_available_urls()

        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


async def _validate_schema() -> None:
    """Avisa si erp_connectors no tiene auto_sync (ningun conector se auto-sincronizara)."""
    async with AsyncSessionLocal() as session:
        if not await ErpConnectorRepository(session).has_auto_sync_column():
            logger.warning(
                "CONFIG: erp_connectors no tiene la columna auto_sync; "
                "el auto-sync no sincronizara ningun conector hasta aplicar las migraciones"
            )


def _print_available_urls() -> None:
    """Imprime las URLs disponibles de la aplicacion."""
    # Determinar la URL base de acceso
    if settings.HOST == "0.0.0.0":
        access_host = "localhost"
    else:
        access_host = settings.HOST

    base_url = f"http://{access_host}:{settings.PORT}"

    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")
    logger.opt(colors=True).info("<bold><green>URLS DISPONIBLES:</green></bold>")
    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")
    logger.opt(colors=True).info(f"<cyan>  Swagger UI:  {base_url}/docs</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Health:      {base_url}/health</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Auto-sync:   {base_url}/erp/auto-sync</cyan>")
    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Libera recursos al cerrar la aplicacion."""
        logger.info("Cerrando aplicacion...")

        auto_sync = getattr(app.state, "erp_auto_sync", None)
        if auto_sync is not None:
            auto_sync.stop()

        # Cerrar conexiones de base de datos
        await close_db()
        logger.info("Conexiones de base de datos cerradas")

        logger.success("Aplicacion cerrada correctamente")

    return shutdown
