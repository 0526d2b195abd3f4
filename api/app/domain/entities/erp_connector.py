"""
Entidad de dominio: ConnectorSnapshot.

Vista minima de un conector tal como la ve el auto-sync: solo lectura,
sin I/O. La regla de elegibilidad vive aqui para poder testearla sin base
de datos.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from app.shared.constants.erp_constants import ConnectorStatus


def _db_bool(value: Any) -> Any:
    # SQLite devuelve booleanos como 0/1 en consultas crudas
    if isinstance(value, int) and not isinstance(value, bool) and value in (0, 1):
        return bool(value)
    return value


@dataclass(frozen=True)
class ConnectorSnapshot:
    """Fila (id, status, auto_sync) de erp_connectors."""

    id: str
    status: Optional[str] = None
    auto_sync: Optional[bool] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ConnectorSnapshot":
        return cls(
            id=str(row["id"]),
            status=row.get("status"),
            auto_sync=_db_bool(row.get("auto_sync")),
        )

    @property
    def is_syncing(self) -> bool:
        return str(self.status or "").lower() == ConnectorStatus.SYNCING.value

    def is_eligible(self, supports_auto_sync: bool) -> bool:
        """
        Un conector es elegible si no esta sincronizando y tiene auto_sync
        estrictamente True. Sin columna auto_sync nunca es elegible.
        """
        if not supports_auto_sync:
            return False
        return not self.is_syncing and self.auto_sync is True


@dataclass(frozen=True)
class ConnectorListing:
    """Resultado de listar el registro para un ciclo de auto-sync."""

    connectors: list[ConnectorSnapshot]
    supports_auto_sync: bool

    def eligible(self) -> list[ConnectorSnapshot]:
        """Conectores elegibles, en el orden devuelto por la consulta."""
        return [c for c in self.connectors if c.is_eligible(self.supports_auto_sync)]
