"""
Entidades del dominio.
"""
from app.domain.entities.erp_connector import ConnectorSnapshot, ConnectorListing

__all__ = [
    "ConnectorSnapshot",
    "ConnectorListing",
]
