"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.use_cases.erp_sync_use_cases import ErpSyncUseCases
from app.infrastructure.database.session import get_db
from app.infrastructure.scheduler.auto_sync_scheduler import ErpAutoSyncScheduler


def get_erp_sync_use_cases(
    db: AsyncSession = Depends(get_db)
) -> ErpSyncUseCases:
    """
    Dependencia para obtener los casos de uso de sincronizacion ERP.

    Args:
        db: Sesion de base de datos

    Returns:
        ErpSyncUseCases: Instancia de casos de uso de sincronizacion
    """
    return ErpSyncUseCases(db)


def get_erp_auto_sync(request: Request) -> ErpAutoSyncScheduler:
    """
    Dependencia para obtener el scheduler de auto-sync creado en el startup.

    Raises:
        HTTPException: 503 si la app arranco sin scheduler
    """
    scheduler = getattr(request.app.state, "erp_auto_sync", None)
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Auto-sync no inicializado"
        )
    return scheduler
