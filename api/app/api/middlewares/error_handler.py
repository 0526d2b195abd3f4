"""
Middleware para manejo centralizado de errores no controlados.

Las AppException las resuelve el exception handler registrado en main.py;
aqui solo llega lo que escapa de los endpoints (errores de base de datos,
bugs). El cuerpo de respuesta mantiene el formato {"error", "message", "details"}.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger

from app.shared.exceptions.base import error_body


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convierte excepciones no controladas en respuestas JSON 5xx."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except SQLAlchemyError as exc:
            logger.opt(exception=exc).error(
                "Error de base de datos en {} {}", request.method, request.url.path
            )
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=error_body("DATABASE_ERROR", "Base de datos no disponible"),
            )
        except Exception as exc:
            logger.opt(exception=exc).error(
                "Error no manejado en {} {}: {}", request.method, request.url.path, exc
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_body("INTERNAL_SERVER_ERROR", "Ha ocurrido un error interno del servidor"),
            )
