"""
Cliente HTTP que dispara la sincronizacion de un conector contra el propio API.

Una llamada = un POST /erp/connectors/{id}/sync?target=... con body {"limit": N}.
Sin reintentos ni backoff: el ciclo de auto-sync decide que hacer con el fallo.
"""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from app.shared.constants.erp_constants import AUTO_SYNC_HTTP_TIMEOUT_SECONDS
from app.shared.exceptions.erp import ConnectorSyncInvocationError


@dataclass(frozen=True)
class SyncInvocationResult:
    """Respuesta 2xx del endpoint de sync."""

    status_code: int
    body: str


class ConnectorSyncInvoker:
    """
    Invoca el endpoint local de sincronizacion de conectores.

    Args:
        base_url: Origen del API, p.ej. http://localhost:8080
        timeout: Timeout de socket en segundos (default 60)
        transport: Transport httpx opcional (tests)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = AUTO_SYNC_HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def build_url(self, connector_id: str) -> str:
        return f"{self.base_url}/erp/connectors/{quote(str(connector_id), safe='')}/sync"

    async def invoke(self, connector_id: str, target: str, limit: int) -> SyncInvocationResult:
        """
        Ejecuta una sincronizacion y espera su resultado.

        Raises:
            ConnectorSyncInvocationError: Respuesta no-2xx, error de red o timeout.
        """
        url = self.build_url(connector_id)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, params={"target": target}, json={"limit": limit})
        except httpx.TimeoutException as e:
            raise ConnectorSyncInvocationError(
                connector_id, target, "timeout llamando sync endpoint"
            ) from e
        except httpx.HTTPError as e:
            raise ConnectorSyncInvocationError(connector_id, target, str(e) or type(e).__name__) from e

        if not 200 <= response.status_code < 300:
            raise ConnectorSyncInvocationError(
                connector_id,
                target,
                f"status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        return SyncInvocationResult(status_code=response.status_code, body=response.text)
