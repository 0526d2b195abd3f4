"""
Cliente minimo de SAP OData (v2/v4) para sincronizar conectores.

Requisitos cubiertos:
- requests (bloqueante; el caso de uso lo ejecuta via asyncio.to_thread)
- auth Basic (usuario + password) o Bearer (api_key)
- extraccion de resultados desde d.results, d o value
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Optional

import requests

from app.shared.constants.erp_constants import SAP_RESOURCE_BY_TARGET, SyncTarget
from app.shared.exceptions.erp import ErpUpstreamException


@dataclass(frozen=True)
class SapCredentials:
    username: str = ""
    password: str = ""
    api_key: str = ""


def build_sap_url(endpoint: str, resource: str, top: int) -> str:
    """Construye {endpoint}/{resource}?$top=N&$format=json."""
    base = str(endpoint or "").strip().rstrip("/")
    return f"{base}/{resource}?$top={int(top) or 50}&$format=json"


def build_auth_header(creds: SapCredentials) -> str:
    """Basic si hay usuario y password, Bearer si solo hay api_key, vacio si nada."""
    if creds.username and creds.password:
        token = base64.b64encode(f"{creds.username}:{creds.password}".encode("utf-8")).decode("ascii")
        return f"Basic {token}"
    if creds.api_key:
        return f"Bearer {creds.api_key}"
    return ""


def extract_results(payload: Any) -> list[dict[str, Any]]:
    """
    Normaliza la respuesta OData a una lista de filas.
    v2 usa {"d": {"results": [...]}} o {"d": {...}}; v4 usa {"value": [...]}.
    """
    if not isinstance(payload, dict):
        return []
    d = payload.get("d")
    raw = None
    if isinstance(d, dict):
        raw = d.get("results", d)
    elif d:
        raw = d
    if not raw:
        raw = payload.get("value") or []
    if isinstance(raw, list):
        return [r for r in raw if isinstance(r, dict)]
    return [raw] if isinstance(raw, dict) else []


class SapODataClient:
    """Cliente de lectura para entity sets OData de SAP."""

    def __init__(
        self,
        endpoint: str,
        credentials: SapCredentials,
        *,
        timeout_s: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._endpoint = endpoint
        self._creds = credentials
        self._timeout_s = timeout_s
        # Sesion inyectada: la cierra quien la creo. Si no, una por fetch
        self._session = session

    def fetch(self, target: str, limit: int) -> list[dict[str, Any]]:
        """
        Descarga hasta `limit` filas del entity set asociado al target.

        Raises:
            ErpUpstreamException: credenciales invalidas, status no-2xx, timeout
                o error de red.
        """
        resource = SAP_RESOURCE_BY_TARGET.get(target, SAP_RESOURCE_BY_TARGET[SyncTarget.PRODUCTS.value])
        url = build_sap_url(self._endpoint, resource, limit)
        headers = {"Accept": "application/json"}
        auth = build_auth_header(self._creds)
        if auth:
            headers["Authorization"] = auth

        session = self._session if self._session is not None else requests.Session()
        try:
            resp = session.get(url, headers=headers, timeout=self._timeout_s)
        except requests.Timeout as e:
            raise ErpUpstreamException("Timeout conectando a SAP") from e
        except requests.RequestException as e:
            raise ErpUpstreamException(f"Error de red conectando a SAP: {e}") from e
        finally:
            if session is not self._session:
                session.close()

        if resp.status_code in (401, 403):
            raise ErpUpstreamException("Credenciales inválidas o acceso denegado", resp.status_code)
        if not 200 <= resp.status_code < 300:
            raise ErpUpstreamException(f"Error {resp.status_code} conectando a SAP", resp.status_code)

        try:
            payload = resp.json()
        except ValueError:
            # Respuesta no-JSON: se trata como conjunto vacio
            payload = None
        return extract_results(payload)
