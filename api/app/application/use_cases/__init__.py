"""
Casos de uso de la aplicacion.
"""
from .erp_sync_use_cases import ErpSyncUseCases
from .erp_auto_sync_use_cases import ErpAutoSyncRunner, CycleSummary

__all__ = ["ErpSyncUseCases", "ErpAutoSyncRunner", "CycleSummary"]
