"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .erp_dto import (
    ConnectorSyncRequestDTO,
    ConnectorSyncResultDTO,
    ConnectorResponseDTO,
    AutoSyncCycleDTO,
    AutoSyncStatusDTO,
    AutoSyncRunResponseDTO,
)

__all__ = [
    "ConnectorSyncRequestDTO",
    "ConnectorSyncResultDTO",
    "ConnectorResponseDTO",
    "AutoSyncCycleDTO",
    "AutoSyncStatusDTO",
    "AutoSyncRunResponseDTO",
]
