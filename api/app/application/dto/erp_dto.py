"""
DTOs relacionados con conectores ERP y el auto-sync.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class ConnectorSyncRequestDTO(BaseModel):
    """Body de POST /erp/connectors/{id}/sync (todos los campos opcionales)."""

    limit: Optional[int] = Field(None, description="Maximo de registros a traer (1..500, default 50)")
    target: Optional[str] = Field(None, description="Recurso a sincronizar; tiene prioridad sobre ?target=")
    timeout: Optional[int] = Field(None, description="Timeout de la llamada al ERP en milisegundos")


class ConnectorSyncResultDTO(BaseModel):
    """Resultado de una sincronizacion de conector."""

    ok: bool = Field(..., description="True si la sincronizacion termino")
    connector_id: str = Field(..., description="ID del conector")
    processed: int = Field(..., description="Registros insertados o actualizados")
    source: str = Field(..., description="Tipo de ERP origen")
    target: str = Field(..., description="Recurso sincronizado")
    new_count: int = Field(0, description="Registros que no existian antes")


class ConnectorResponseDTO(BaseModel):
    """Conector tal como lo muestra la UI de integraciones."""

    id: str
    name: str
    type: Optional[str] = None
    status: Optional[str] = None
    auto_sync: Optional[bool] = None
    endpoint: Optional[str] = None
    last_sync: Optional[datetime] = None
    records_processed: int = 0
    error_count: int = 0

    class Config:
        """Configuración de Pydantic."""
        from_attributes = True


class AutoSyncCycleDTO(BaseModel):
    """Resumen del ultimo ciclo de auto-sync."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    eligible_connectors: int = 0
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    supports_auto_sync: bool = True
    error: Optional[str] = None
    failures: List[str] = Field(default_factory=list)

    class Config:
        """Configuración de Pydantic."""
        from_attributes = True


class AutoSyncStatusDTO(BaseModel):
    """Estado del scheduler de auto-sync."""

    enabled: bool
    scheduled: bool
    running: bool
    interval_minutes: float
    interval_ms: int
    limit: int
    targets: List[str]
    next_run_time: Optional[datetime] = None
    last_cycle: Optional[AutoSyncCycleDTO] = None


class AutoSyncRunResponseDTO(BaseModel):
    """Respuesta al disparo manual de un ciclo."""

    accepted: bool = Field(..., description="False si ya habia un ciclo en curso")
    message: str
