"""
Endpoints de integraciones ERP.

Se montan en la raiz (/erp/...) porque el auto-sync se llama a si mismo
con POST /erp/connectors/{id}/sync.
"""
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from loguru import logger

from app.application.dto.erp_dto import (
    AutoSyncCycleDTO,
    AutoSyncRunResponseDTO,
    AutoSyncStatusDTO,
    ConnectorResponseDTO,
    ConnectorSyncRequestDTO,
    ConnectorSyncResultDTO,
)
from app.application.use_cases.erp_sync_use_cases import ErpSyncUseCases
from app.api.v1.dependencies.use_case_deps import get_erp_auto_sync, get_erp_sync_use_cases
from app.infrastructure.scheduler.auto_sync_scheduler import ErpAutoSyncScheduler


router = APIRouter(prefix="/erp", tags=["ERP"])


@router.get(
    "/connectors",
    response_model=List[ConnectorResponseDTO],
    summary="Listar conectores ERP"
)
async def list_connectors(
    use_cases: ErpSyncUseCases = Depends(get_erp_sync_use_cases)
) -> List[ConnectorResponseDTO]:
    """Lista los conectores configurados, los mas recientes primero."""
    rows = await use_cases.list_connectors()
    return [ConnectorResponseDTO(**row) for row in rows]


@router.post(
    "/connectors/{connector_id}/sync",
    response_model=ConnectorSyncResultDTO,
    status_code=status.HTTP_200_OK,
    summary="Sincronizar un conector ERP"
)
async def sync_connector(
    connector_id: str,
    target: Optional[str] = Query(default=None, description="Recurso a sincronizar (products, purchase_orders, sales_orders, transfers)"),
    dto: Optional[ConnectorSyncRequestDTO] = None,
    use_cases: ErpSyncUseCases = Depends(get_erp_sync_use_cases)
) -> ConnectorSyncResultDTO:
    """
    Descarga registros del ERP del conector y los persiste.

    - `limit` se acota a [1, 500]
    - El target del body tiene prioridad sobre `?target=`
    - Mientras dura la llamada el conector queda en status 'syncing'
    """
    return await use_cases.sync_connector(
        connector_id,
        dto or ConnectorSyncRequestDTO(),
        query_target=target,
    )


@router.get(
    "/auto-sync",
    response_model=AutoSyncStatusDTO,
    summary="Estado del auto-sync"
)
async def get_auto_sync_status(
    auto_sync: ErpAutoSyncScheduler = Depends(get_erp_auto_sync)
) -> AutoSyncStatusDTO:
    """Configuracion efectiva, proxima ejecucion y resumen del ultimo ciclo."""
    data = auto_sync.status()
    last_cycle = data.pop("last_cycle")
    return AutoSyncStatusDTO(
        **data,
        last_cycle=AutoSyncCycleDTO(**asdict(last_cycle)) if last_cycle else None,
    )


@router.post(
    "/auto-sync/run",
    response_model=AutoSyncRunResponseDTO,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Disparar un ciclo de auto-sync"
)
async def run_auto_sync(
    auto_sync: ErpAutoSyncScheduler = Depends(get_erp_auto_sync)
) -> AutoSyncRunResponseDTO:
    """
    Lanza un ciclo en segundo plano. Si ya hay uno corriendo no se lanza
    otro (accepted=false). El latch se toma antes de responder, asi que
    accepted=true garantiza que el ciclo corre.
    """
    if auto_sync.runner.run_in_background() is None:
        return AutoSyncRunResponseDTO(accepted=False, message="Ya hay un ciclo de auto-sync en curso")

    logger.info("[AutoSync] Ciclo disparado manualmente desde API")
    return AutoSyncRunResponseDTO(accepted=True, message="Ciclo de auto-sync iniciado")
