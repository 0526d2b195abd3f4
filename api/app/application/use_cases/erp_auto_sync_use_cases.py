"""
Caso de uso: ciclo de auto-sync de conectores ERP.

Un ciclo:
1. Lista (id, status, auto_sync) del registro de conectores.
2. Filtra elegibles: status != 'syncing' y auto_sync == True.
3. Para cada conector elegible y cada target configurado, en serie,
   dispara POST /erp/connectors/{id}/sync. Un fallo se loguea y se sigue.

Solo un ciclo corre a la vez por instancia de runner (latch `running`).
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional, Set

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.entities.erp_connector import ConnectorListing
from app.infrastructure.external.erp.sync_invoker import ConnectorSyncInvoker
from app.infrastructure.repositories.erp_connector_repository import ErpConnectorRepository
from app.infrastructure.scheduler.auto_sync_config import AutoSyncConfig
from app.shared.exceptions.erp import ConnectorRegistryError


@dataclass
class CycleSummary:
    """Contadores del ultimo ciclo, solo informativos (endpoint de estado)."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    eligible_connectors: int = 0
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    supports_auto_sync: bool = True
    error: Optional[str] = None
    failures: list[str] = field(default_factory=list)


class ErpAutoSyncRunner:
    """
    Ejecuta ciclos de auto-sync.

    Args:
        config: Config efectiva (targets, limit)
        invoker: Cliente del endpoint de sync
        session_factory: Fabrica de AsyncSession (se abre una por ciclo)
    """

    def __init__(
        self,
        config: AutoSyncConfig,
        invoker: ConnectorSyncInvoker,
        session_factory: Callable[[], AsyncSession],
    ):
        self.config = config
        self.invoker = invoker
        self.session_factory = session_factory
        self._running = False
        self._background: Set[asyncio.Task] = set()
        self.last_cycle: Optional[CycleSummary] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def _acquire(self) -> bool:
        # Chequeo y seteo sin await intermedio: atomico dentro del event loop
        if self._running:
            logger.debug("[AutoSync] Ciclo en curso; se omite esta ejecucion.")
            return False
        self._running = True
        return True

    async def run_once(self) -> bool:
        """
        Ejecuta un ciclo completo. Si ya hay uno en curso retorna sin hacer nada.
        No propaga errores: todo queda en el log.

        Returns:
            bool: True si el ciclo corrio, False si se omitio por otro en curso
        """
        if not self._acquire():
            return False
        await self._run_cycle()
        return True

    def run_in_background(self) -> Optional[asyncio.Task]:
        """
        Toma el latch ahora y lanza el ciclo como tarea del event loop.

        Returns:
            La tarea lanzada, o None si ya habia un ciclo en curso.
        """
        if not self._acquire():
            return None
        task = asyncio.create_task(self._run_cycle())
        # Referencia fuerte hasta que termine (evita que el GC la descarte)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _run_cycle(self) -> None:
        """Cuerpo del ciclo; se entra con el latch tomado y siempre lo libera."""
        summary = CycleSummary(started_at=datetime.now(timezone.utc))
        self.last_cycle = summary
        try:
            listing = await self._list_connectors()
            if listing is None:
                summary.error = "registry_query_failed"
                return

            summary.supports_auto_sync = listing.supports_auto_sync
            eligible = listing.eligible()
            summary.eligible_connectors = len(eligible)
            logger.info(
                f"[AutoSync] Ciclo iniciado: {len(eligible)} conector(es) elegible(s) "
                f"de {len(listing.connectors)}, targets={','.join(self.config.targets)}"
            )

            for connector in eligible:
                for target in self.config.targets:
                    summary.attempted += 1
                    try:
                        result = await self.invoker.invoke(connector.id, target, self.config.limit)
                        summary.succeeded += 1
                        logger.info(
                            f"[AutoSync] Conector {connector.id} sincronizado "
                            f"target={target} (HTTP {result.status_code})."
                        )
                    except Exception as e:
                        summary.failed += 1
                        summary.failures.append(f"{connector.id}:{target}")
                        logger.warning(
                            f"[AutoSync] Error sincronizando conector {connector.id} target={target}: {e}"
                        )
        except Exception as e:
            summary.error = str(e)
            logger.warning(f"[AutoSync] Error ejecutando ciclo: {e}")
        finally:
            summary.finished_at = datetime.now(timezone.utc)
            self._running = False

    async def _list_connectors(self) -> Optional[ConnectorListing]:
        """Lista el registro; None si la consulta falla (el ciclo se aborta)."""
        async with self.session_factory() as session:
            try:
                return await ErpConnectorRepository(session).list_for_auto_sync()
            except ConnectorRegistryError as e:
                logger.warning(f"[AutoSync] Error listando conectores: {e}")
                return None
