"""
Excepción base de la aplicación y formato común de errores HTTP.
"""
from typing import Optional, Dict, Any


def error_body(error: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Cuerpo JSON de toda respuesta de error del API."""
    return {"error": error, "message": message, "details": details or {}}


class AppException(Exception):
    """
    Excepción base de la aplicación.

    Se traduce a una respuesta HTTP con status_code y error_body(); el
    auto-sync ve estos errores como respuestas no-2xx del endpoint de sync.

    Args:
        message: Mensaje de error descriptivo
        status_code: Código de estado HTTP
        error_code: Código de error (CONNECTOR_NOT_FOUND, ERP_UPSTREAM_ERROR, ...)
        details: Detalles adicionales del error
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return error_body(self.error_code, self.message, self.details)
