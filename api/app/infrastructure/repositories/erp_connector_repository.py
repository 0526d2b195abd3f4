"""
Repositorios de conectores ERP.

- ErpConnectorRepository: registro de conectores (tabla erp_connectors).
- ErpSyncLogRepository: bitacora de corridas (tabla erp_sync_logs).
- ErpRecordRepository: upsert de registros sincronizados por clave natural.
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import inspect, select, text
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.erp_connector import ConnectorListing, ConnectorSnapshot
from app.infrastructure.database.models import (
    ErpConnectorModel,
    ErpSyncLogModel,
    ProductModel,
    PurchaseOrderModel,
    SalesOrderModel,
    TransferModel,
)
from app.shared.constants.erp_constants import ConnectorStatus, SyncLogStatus, SyncTarget
from app.shared.exceptions.erp import ConnectorRegistryError


# Mensajes de error del driver que indican que la columna auto_sync no existe
# (Postgres: 'column "auto_sync" does not exist', SQLite: 'no such column: auto_sync')
MISSING_AUTO_SYNC_COLUMN = re.compile(r"auto_sync.*does not exist|column.*auto_sync", re.IGNORECASE)

_LIST_WITH_AUTO_SYNC = text("SELECT id, status, auto_sync FROM erp_connectors")
_LIST_WITHOUT_AUTO_SYNC = text("SELECT id, status FROM erp_connectors")


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


def is_missing_auto_sync_column(error: BaseException) -> bool:
    """Indica si un error de base de datos corresponde a la columna auto_sync ausente."""
    return bool(MISSING_AUTO_SYNC_COLUMN.search(str(error)))


class ErpConnectorRepository:
    """Repositorio para gestionar conectores ERP en la base de datos."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_auto_sync(self) -> ConnectorListing:
        """
        Lista (id, status, auto_sync) de todos los conectores.

        Si la columna auto_sync no existe (esquema antiguo) reintenta sin ella
        y marca el listado como supports_auto_sync=False: ningun conector
        sera elegible.

        Raises:
            ConnectorRegistryError: Cualquier otro error de la consulta.
        """
        try:
            result = await self.db.execute(_LIST_WITH_AUTO_SYNC)
            rows = result.mappings().all()
            return ConnectorListing(
                connectors=[ConnectorSnapshot.from_row(r) for r in rows],
                supports_auto_sync=True,
            )
        except SQLAlchemyError as e:
            if not is_missing_auto_sync_column(e):
                raise ConnectorRegistryError(str(e)) from e
            logger.warning(
                "[AutoSync] Columna auto_sync inexistente en erp_connectors; "
                "no se sincronizara ningun conector en este ciclo."
            )
            await self.db.rollback()

        try:
            result = await self.db.execute(_LIST_WITHOUT_AUTO_SYNC)
            rows = result.mappings().all()
        except SQLAlchemyError as e:
            raise ConnectorRegistryError(str(e)) from e

        return ConnectorListing(
            connectors=[ConnectorSnapshot.from_row(r) for r in rows],
            supports_auto_sync=False,
        )

    async def has_auto_sync_column(self) -> bool:
        """
        Verifica explicitamente si erp_connectors tiene la columna auto_sync.
        Pensado para ejecutarse una vez al arranque.
        """
        def _columns(sync_conn) -> List[str]:
            try:
                return [c["name"] for c in inspect(sync_conn).get_columns("erp_connectors")]
            except NoSuchTableError:
                return []

        conn = await self.db.connection()
        columns = await conn.run_sync(_columns)
        return "auto_sync" in columns

    async def list_all(self) -> List[ErpConnectorModel]:
        """Obtiene todos los conectores, los mas recientes primero."""
        result = await self.db.execute(
            select(ErpConnectorModel).order_by(ErpConnectorModel.created_at.desc())
        )
        return result.scalars().all()

    async def get_by_id(self, connector_id: str) -> Optional[ErpConnectorModel]:
        """Obtiene un conector por su ID."""
        result = await self.db.execute(
            select(ErpConnectorModel).where(ErpConnectorModel.id == connector_id)
        )
        return result.scalars().first()

    async def mark_syncing(self, connector: ErpConnectorModel) -> None:
        connector.status = ConnectorStatus.SYNCING.value
        connector.updated_at = utc_now()
        await self.db.flush()

    async def mark_active(self, connector: ErpConnectorModel, processed: int) -> None:
        """Cierra una sincronizacion exitosa y acumula los registros procesados."""
        now = utc_now()
        connector.status = ConnectorStatus.ACTIVE.value
        connector.last_sync = now
        connector.records_processed = int(connector.records_processed or 0) + processed
        connector.error_count = int(connector.error_count or 0)
        connector.updated_at = now
        await self.db.flush()

    async def mark_error(self, connector_id: str) -> None:
        """Marca el conector en error e incrementa error_count."""
        connector = await self.get_by_id(connector_id)
        if not connector:
            return
        connector.status = ConnectorStatus.ERROR.value
        connector.error_count = int(connector.error_count or 0) + 1
        connector.updated_at = utc_now()
        await self.db.flush()


class ErpSyncLogRepository:
    """Gestiona la tabla erp_sync_logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def start(self, connector_id: str, target: str) -> ErpSyncLogModel:
        log = ErpSyncLogModel(
            connector_id=connector_id,
            sync_type=target,
            status=SyncLogStatus.STARTED.value,
            started_at=utc_now(),
        )
        self.db.add(log)
        await self.db.flush()
        return log

    async def complete(self, log: ErpSyncLogModel, total_records: int) -> None:
        log.status = SyncLogStatus.COMPLETED.value
        log.ended_at = utc_now()
        log.total_records = total_records
        log.error_message = None
        await self.db.flush()

    async def fail_latest(self, connector_id: str, error_message: str) -> None:
        """Marca como fallida la corrida mas reciente del conector."""
        result = await self.db.execute(
            select(ErpSyncLogModel)
            .where(ErpSyncLogModel.connector_id == connector_id)
            .order_by(ErpSyncLogModel.id.desc())
            .limit(1)
        )
        log = result.scalars().first()
        if not log:
            return
        log.status = SyncLogStatus.FAILED.value
        log.ended_at = utc_now()
        log.error_message = error_message[:2000]
        await self.db.flush()


class ErpRecordRepository:
    """
    Upsert de registros sincronizados.

    Se resuelve con SELECT + INSERT/UPDATE via ORM para funcionar igual en
    Postgres y en SQLite (tests). Dentro de un mismo lote gana la ultima
    ocurrencia de cada clave.
    """

    _MODELS: Dict[str, Tuple[Any, str]] = {
        SyncTarget.PRODUCTS.value: (ProductModel, "sku"),
        SyncTarget.PURCHASE_ORDERS.value: (PurchaseOrderModel, "po_number"),
        SyncTarget.SALES_ORDERS.value: (SalesOrderModel, "so_number"),
        SyncTarget.TRANSFERS.value: (TransferModel, "transfer_number"),
    }

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert(self, target: str, records: List[Dict[str, Any]]) -> Tuple[int, int]:
        """
        Inserta o actualiza registros por clave natural.

        Returns:
            Tuple (procesados, nuevos)
        """
        model, key = self._MODELS[target]
        by_key: Dict[str, Dict[str, Any]] = {}
        for record in records:
            by_key[record[key]] = record
        if not by_key:
            return 0, 0

        key_column = getattr(model, key)
        result = await self.db.execute(select(model).where(key_column.in_(list(by_key))))
        existing = {getattr(row, key): row for row in result.scalars().all()}

        new_count = 0
        for natural_key, record in by_key.items():
            row = existing.get(natural_key)
            if row is None:
                self.db.add(model(**record))
                new_count += 1
                continue
            for column, value in record.items():
                setattr(row, column, value)

        await self.db.flush()
        return len(by_key), new_count
