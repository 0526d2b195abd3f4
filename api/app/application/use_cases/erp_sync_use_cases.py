"""
Casos de uso para la sincronizacion de un conector ERP.

Flujo de POST /erp/connectors/{id}/sync:
1. Valida conector (existe, tiene endpoint) y target.
2. Marca status='syncing' y abre una fila en erp_sync_logs (commit inmediato,
   para que el auto-sync y la UI vean el estado mientras dura la llamada).
3. Descarga del ERP (SAP OData) en un thread.
4. Mapea y hace upsert por clave natural.
5. Cierra: status='active' y log 'completed'; o status='error' y log 'failed'.
"""
import asyncio
from typing import Any, Callable, Dict, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dto.erp_dto import ConnectorSyncRequestDTO, ConnectorSyncResultDTO
from app.core.config import settings
from app.infrastructure.database.models import ErpConnectorModel
from app.infrastructure.external.erp.record_mappers import map_records
from app.infrastructure.external.erp.sap_client import SapCredentials, SapODataClient
from app.infrastructure.repositories.erp_connector_repository import (
    ErpConnectorRepository,
    ErpRecordRepository,
    ErpSyncLogRepository,
)
from app.shared.constants.erp_constants import (
    DEFAULT_SYNC_TARGET,
    SYNC_LIMIT_DEFAULT,
    SYNC_LIMIT_MAX,
    SYNC_LIMIT_MIN,
    SyncTarget,
)
from app.shared.exceptions.erp import (
    ConnectorNotFoundException,
    ConnectorWithoutEndpointException,
    UnsupportedConnectorTypeException,
    UnsupportedSyncTargetException,
)


def clamp_limit(limit: Optional[int]) -> int:
    """limit en [1, 500]; None o 0 usa el default (50)."""
    return min(max(int(limit or SYNC_LIMIT_DEFAULT), SYNC_LIMIT_MIN), SYNC_LIMIT_MAX)


def resolve_target(body_target: Optional[str], query_target: Optional[str]) -> str:
    """Prioridad: body, query string, 'products'."""
    return str(body_target or query_target or DEFAULT_SYNC_TARGET).strip()


def resolve_timeout_seconds(connector: ErpConnectorModel, body_timeout_ms: Optional[int]) -> float:
    """Timeout del ERP: connection_settings.timeout, luego body, luego default (ms -> s)."""
    connection_settings = connector.connection_settings or {}
    raw = connection_settings.get("timeout") or body_timeout_ms or settings.ERP_DEFAULT_TIMEOUT_MS
    try:
        return float(raw) / 1000
    except (TypeError, ValueError):
        return settings.ERP_DEFAULT_TIMEOUT_MS / 1000


def build_sap_client(connector: ErpConnectorModel, timeout_s: float) -> SapODataClient:
    return SapODataClient(
        endpoint=str(connector.endpoint or "").strip(),
        credentials=SapCredentials(
            username=str(connector.username or "").strip(),
            password=str(connector.password or "").strip(),
            api_key=str(connector.api_key or "").strip(),
        ),
        timeout_s=timeout_s,
    )


class ErpSyncUseCases:
    """
    Sincroniza un conector contra su ERP.

    Args:
        db: Sesion de base de datos
        client_factory: Construye el cliente ERP (inyectable en tests)
    """

    VALID_TARGETS = [t.value for t in SyncTarget]

    def __init__(
        self,
        db: AsyncSession,
        client_factory: Callable[[ErpConnectorModel, float], Any] = build_sap_client,
    ):
        self.db = db
        self.connectors = ErpConnectorRepository(db)
        self.logs = ErpSyncLogRepository(db)
        self.records = ErpRecordRepository(db)
        self.client_factory = client_factory

    async def sync_connector(
        self,
        connector_id: str,
        dto: ConnectorSyncRequestDTO,
        query_target: Optional[str] = None,
    ) -> ConnectorSyncResultDTO:
        """
        Ejecuta la sincronizacion completa de un conector.

        Raises:
            ConnectorNotFoundException: El conector no existe.
            ConnectorWithoutEndpointException: Conector sin endpoint.
            UnsupportedSyncTargetException: Target desconocido.
            UnsupportedConnectorTypeException: Tipo de ERP sin soporte.
            ErpUpstreamException: Fallo hablando con el ERP.
        """
        connector_id = str(connector_id or "").strip()
        limit = clamp_limit(dto.limit)
        target = resolve_target(dto.target, query_target)

        connector = await self.connectors.get_by_id(connector_id)
        if not connector:
            raise ConnectorNotFoundException(connector_id)
        if not connector.endpoint:
            raise ConnectorWithoutEndpointException(connector_id)
        if target not in self.VALID_TARGETS:
            raise UnsupportedSyncTargetException(target, self.VALID_TARGETS)

        await self.connectors.mark_syncing(connector)
        log = await self.logs.start(connector_id, target)
        await self.db.commit()

        source_name = connector.type or "ERP"
        try:
            if "sap" not in (connector.type or "").lower():
                raise UnsupportedConnectorTypeException(connector.type)

            client = self.client_factory(connector, resolve_timeout_seconds(connector, dto.timeout))
            logger.info(f"[ERP] Sync {connector_id} target={target} limit={limit} ({source_name})")
            rows = await asyncio.to_thread(client.fetch, target, limit)
            records = map_records(target, rows)

            processed, new_count = 0, 0
            if records:
                processed, new_count = await self.records.upsert(target, records)

            await self.connectors.mark_active(connector, processed)
            await self.logs.complete(log, processed)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            await self._record_failure(connector_id, e)
            raise

        logger.success(
            f"[ERP] Conector {connector_id} sincronizado target={target}: "
            f"{processed} registro(s), {new_count} nuevo(s)"
        )
        return ConnectorSyncResultDTO(
            ok=True,
            connector_id=connector_id,
            processed=processed,
            source=source_name,
            target=target,
            new_count=new_count,
        )

    async def _record_failure(self, connector_id: str, error: Exception) -> None:
        """Deja el conector en 'error' y el ultimo log en 'failed'."""
        message = getattr(error, "message", None) or str(error) or type(error).__name__
        logger.error(f"[ERP] Error sincronizando conector {connector_id}: {message}")
        try:
            await self.connectors.mark_error(connector_id)
            await self.logs.fail_latest(connector_id, message)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"[ERP] No se pudo registrar el fallo de {connector_id}: {e}")

    async def list_connectors(self) -> list[Dict[str, Any]]:
        """Listado de conectores para la UI de integraciones."""
        rows = await self.connectors.list_all()
        return [
            {
                "id": c.id,
                "name": c.name,
                "type": c.type,
                "status": c.status,
                "auto_sync": c.auto_sync,
                "endpoint": c.endpoint,
                "last_sync": c.last_sync,
                "records_processed": c.records_processed or 0,
                "error_count": c.error_count or 0,
            }
            for c in rows
        ]
