"""
Router principal de la API v1.
Agrupa todos los endpoints de la version 1.
"""
from fastapi import APIRouter

from app.api.v1.endpoints import erp


# Router principal de la API v1 (montado bajo /api)
api_router = APIRouter(prefix="/v1")
api_router.include_router(erp.router)

# Rutas ERP tambien en la raiz: el auto-sync invoca /erp/connectors/{id}/sync
root_router = APIRouter()
root_router.include_router(erp.router)
