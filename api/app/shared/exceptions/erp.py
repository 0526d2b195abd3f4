"""
Excepciones relacionadas con conectores ERP y su sincronizacion.
"""
from typing import Optional

from app.shared.exceptions.base import AppException
from app.shared.exceptions.domain import DomainException, EntityNotFoundException


class ConnectorNotFoundException(EntityNotFoundException):
    """Excepcion cuando no existe el conector solicitado."""

    def __init__(self, connector_id: str):
        super().__init__("Conector", connector_id)
        self.error_code = "CONNECTOR_NOT_FOUND"
        self.status_code = 404


class ConnectorWithoutEndpointException(DomainException):
    """El conector existe pero no tiene endpoint configurado."""

    def __init__(self, connector_id: str):
        super().__init__(
            message="Conector sin endpoint",
            error_code="CONNECTOR_WITHOUT_ENDPOINT",
            details={"connector_id": connector_id}
        )


class UnsupportedConnectorTypeException(DomainException):
    """Tipo de conector sin implementacion de sincronizacion."""

    def __init__(self, connector_type: Optional[str]):
        super().__init__(
            message=f"Tipo de conector no soportado para sync: {connector_type or ''}",
            error_code="UNSUPPORTED_CONNECTOR_TYPE",
            details={"type": connector_type}
        )


class UnsupportedSyncTargetException(DomainException):
    """Target de sincronizacion desconocido."""

    def __init__(self, target: str, valid_targets: list[str]):
        super().__init__(
            message=f"Target de sincronizacion no soportado: {target}",
            error_code="UNSUPPORTED_SYNC_TARGET",
            details={"target": target, "valid_targets": valid_targets}
        )


class ErpUpstreamException(AppException):
    """Error comunicandose con el ERP externo (credenciales, timeout, 5xx)."""

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(
            message=message,
            status_code=502,
            error_code="ERP_UPSTREAM_ERROR",
            details={"upstream_status": upstream_status} if upstream_status else None
        )
        self.upstream_status = upstream_status


class ConnectorRegistryError(RuntimeError):
    """Error consultando el registro de conectores (tabla erp_connectors)."""


class ConnectorSyncInvocationError(RuntimeError):
    """
    Fallo de una llamada POST /erp/connectors/{id}/sync emitida por el auto-sync.

    Cubre respuestas no-2xx, errores de red y timeouts. Siempre lleva el
    connector_id para que el log identifique el item fallido.
    """

    def __init__(
        self,
        connector_id: str,
        target: str,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.connector_id = connector_id
        self.target = target
        self.status_code = status_code
        self.body = body
        super().__init__(f"AutoSync: fallo {connector_id} ({target}): {message}")
