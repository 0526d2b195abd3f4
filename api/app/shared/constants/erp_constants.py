"""
Constantes relacionadas con conectores ERP y su sincronizacion.
"""
from enum import Enum


class ConnectorStatus(str, Enum):
    """Estados conocidos de un conector (la columna es texto libre)."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SYNCING = "syncing"
    ERROR = "error"


class SyncLogStatus(str, Enum):
    """Estados de una fila de erp_sync_logs."""
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


class SyncTarget(str, Enum):
    """Recursos sincronizables desde un ERP."""
    PRODUCTS = "products"
    PURCHASE_ORDERS = "purchase_orders"
    SALES_ORDERS = "sales_orders"
    TRANSFERS = "transfers"


# Entity sets OData de SAP por target
SAP_RESOURCE_BY_TARGET = {
    SyncTarget.PRODUCTS.value: "ProductSet",
    SyncTarget.PURCHASE_ORDERS.value: "PurchaseOrderSet",
    SyncTarget.SALES_ORDERS.value: "SalesOrderSet",
    SyncTarget.TRANSFERS.value: "TransferSet",
}

DEFAULT_SYNC_TARGET = SyncTarget.PRODUCTS.value

# Limites del parametro `limit` del endpoint de sync
SYNC_LIMIT_DEFAULT = 50
SYNC_LIMIT_MIN = 1
SYNC_LIMIT_MAX = 500

# Auto-sync
AUTO_SYNC_WARMUP_SECONDS = 5
AUTO_SYNC_HTTP_TIMEOUT_SECONDS = 60.0
AUTO_SYNC_DEFAULT_INTERVAL_MINUTES = 60
AUTO_SYNC_DEFAULT_LIMIT = 50
