"""
Configuracion del auto-sync de conectores ERP.

Traduce las variables ERP_AUTO_SYNC_* (texto crudo en Settings) a valores
tipados. Este modulo no realiza I/O: solo parsea.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from app.shared.constants.erp_constants import (
    AUTO_SYNC_DEFAULT_INTERVAL_MINUTES,
    AUTO_SYNC_DEFAULT_LIMIT,
    AUTO_SYNC_HTTP_TIMEOUT_SECONDS,
    AUTO_SYNC_WARMUP_SECONDS,
    DEFAULT_SYNC_TARGET,
)


def parse_enabled(raw: Optional[str]) -> bool:
    """Cualquier valor distinto de 'false' (sin importar mayusculas) habilita."""
    if raw is None:
        return True
    return str(raw).lower() != "false"


def parse_interval_minutes(raw: Optional[str]) -> float:
    """Minutos entre ciclos; vacio o no numerico cae al default (60)."""
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return float(AUTO_SYNC_DEFAULT_INTERVAL_MINUTES)
    if raw is None or not math.isfinite(value):
        return float(AUTO_SYNC_DEFAULT_INTERVAL_MINUTES)
    return value


def compute_interval_ms(interval_minutes: float) -> int:
    """Intervalo en milisegundos con piso de 1 minuto."""
    return int(max(interval_minutes, 1) * 60_000)


def parse_limit(raw: Optional[str]) -> int:
    """Valor `limit` del body; vacio o no numerico cae al default (50)."""
    try:
        return int(float(str(raw).strip())) if raw not in (None, "") else AUTO_SYNC_DEFAULT_LIMIT
    except (ValueError, OverflowError):
        return AUTO_SYNC_DEFAULT_LIMIT


def parse_targets(raw_targets: Optional[str], raw_single: Optional[str] = None) -> list[str]:
    """
    Lista de targets separada por comas (trim, sin vacios).
    Si queda vacia se usa ERP_AUTO_SYNC_TARGET o 'products'.
    """
    targets = [t.strip() for t in (raw_targets or "").split(",") if t.strip()]
    if targets:
        return targets
    return [(raw_single or "").strip() or DEFAULT_SYNC_TARGET]


@dataclass(frozen=True)
class AutoSyncConfig:
    """Config efectiva del auto-sync, resuelta una vez al arranque."""

    enabled: bool = True
    interval_minutes: float = float(AUTO_SYNC_DEFAULT_INTERVAL_MINUTES)
    limit: int = AUTO_SYNC_DEFAULT_LIMIT
    targets: list[str] = field(default_factory=lambda: [DEFAULT_SYNC_TARGET])
    base_url: str = "http://localhost:8080"
    http_timeout_seconds: float = AUTO_SYNC_HTTP_TIMEOUT_SECONDS
    warmup_seconds: float = AUTO_SYNC_WARMUP_SECONDS

    @property
    def interval_ms(self) -> int:
        return compute_interval_ms(self.interval_minutes)

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000

    @classmethod
    def from_settings(cls, settings) -> "AutoSyncConfig":
        """Construye la config desde el objeto Settings (variables de entorno / .env)."""
        base_url = (settings.ERP_AUTO_SYNC_BASE_URL or "").strip().rstrip("/")
        return cls(
            enabled=parse_enabled(settings.ERP_AUTO_SYNC_ENABLED),
            interval_minutes=parse_interval_minutes(settings.ERP_AUTO_SYNC_INTERVAL_MINUTES),
            limit=parse_limit(settings.ERP_AUTO_SYNC_LIMIT),
            targets=parse_targets(settings.ERP_AUTO_SYNC_TARGETS, settings.ERP_AUTO_SYNC_TARGET),
            base_url=base_url or f"http://localhost:{settings.PORT}",
        )
