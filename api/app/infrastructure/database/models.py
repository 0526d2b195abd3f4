"""
Modelos de base de datos (ORM).
"""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, Date, Text, JSON, Boolean, Numeric, ForeignKey
from sqlalchemy.sql import func

from app.infrastructure.database.session import Base


def _uuid_str() -> str:
    return str(uuid.uuid4())


class ErpConnectorModel(Base):
    """
    Modelo de base de datos para conectores ERP.

    Estados posibles (texto libre, el poller solo reconoce 'syncing'):
    - active: Ultima sincronizacion correcta
    - inactive: Conector deshabilitado desde la UI
    - syncing: Hay una sincronizacion en curso
    - error: La ultima sincronizacion fallo
    """

    __tablename__ = "erp_connectors"

    id = Column(String(64), primary_key=True, default=_uuid_str)
    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=True)
    endpoint = Column(String(1024), nullable=True)
    username = Column(String(255), nullable=True)
    password = Column(String(255), nullable=True)
    api_key = Column(String(512), nullable=True)
    version = Column(String(50), default="1.0")
    status = Column(String(50), default="inactive", index=True)
    auto_sync = Column(Boolean, default=False, nullable=True)
    is_active = Column(Boolean, default=False)
    sync_interval = Column(Integer, default=60)
    connection_settings = Column(JSON, nullable=True)
    records_processed = Column(Integer, default=0)
    error_count = Column(Integer, default=0)
    last_sync = Column(DateTime(timezone=True), nullable=True)
    next_sync = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<ErpConnector(id={self.id}, name={self.name}, status={self.status})>"


class ErpSyncLogModel(Base):
    """Bitacora de cada corrida de sincronizacion (started -> completed | failed)."""

    __tablename__ = "erp_sync_logs"

    id = Column(Integer, primary_key=True, index=True)
    connector_id = Column(String(64), ForeignKey("erp_connectors.id", ondelete="CASCADE"), nullable=False, index=True)
    sync_type = Column(String(50), nullable=False)
    status = Column(String(50), nullable=False, default="started")
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    total_records = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<ErpSyncLog(id={self.id}, connector={self.connector_id}, status={self.status})>"


class ProductModel(Base):
    """Catalogo de productos (target 'products')."""

    __tablename__ = "products"

    id = Column(String(64), primary_key=True, default=_uuid_str)
    sku = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    selling_price = Column(Numeric(14, 2), nullable=True)
    cost_price = Column(Numeric(14, 2), nullable=True)
    unit_of_measure = Column(String(20), default="PCS")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Product(sku={self.sku}, name={self.name})>"


class PurchaseOrderModel(Base):
    """Ordenes de compra (target 'purchase_orders')."""

    __tablename__ = "purchase_orders"

    id = Column(String(64), primary_key=True, default=_uuid_str)
    po_number = Column(String(255), nullable=False, unique=True, index=True)
    status = Column(String(50), default="confirmed")
    order_date = Column(Date, nullable=True)
    expected_date = Column(Date, nullable=True)
    total_amount = Column(Numeric(14, 2), default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class SalesOrderModel(Base):
    """Pedidos de venta (target 'sales_orders')."""

    __tablename__ = "sales_orders"

    id = Column(String(64), primary_key=True, default=_uuid_str)
    so_number = Column(String(255), nullable=False, unique=True, index=True)
    customer_name = Column(String(255), nullable=True)
    status = Column(String(50), default="confirmed")
    order_date = Column(Date, nullable=True)
    required_date = Column(Date, nullable=True)
    total_amount = Column(Numeric(14, 2), default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class TransferModel(Base):
    """Traspasos entre almacenes (target 'transfers')."""

    __tablename__ = "transfers"

    id = Column(String(64), primary_key=True, default=_uuid_str)
    transfer_number = Column(String(255), nullable=False, unique=True, index=True)
    status = Column(String(50), default="sent")
    transfer_date = Column(Date, nullable=True)
    expected_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
