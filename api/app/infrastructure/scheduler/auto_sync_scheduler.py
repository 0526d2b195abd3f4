"""
Scheduler del auto-sync de conectores ERP (APScheduler, AsyncIOScheduler).

Registra dos jobs sobre el mismo runner:
- erp_auto_sync: intervalo fijo (max(minutos, 1) * 60 s)
- erp_auto_sync_warmup: una sola vez, 5 s despues de start()

Ambos jobs pueden coincidir en el tiempo; el latch del runner garantiza
que solo un ciclo corra a la vez.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from app.application.use_cases.erp_auto_sync_use_cases import ErpAutoSyncRunner
from app.infrastructure.scheduler.auto_sync_config import AutoSyncConfig


INTERVAL_JOB_ID = "erp_auto_sync"
WARMUP_JOB_ID = "erp_auto_sync_warmup"


class ErpAutoSyncScheduler:
    """Ciclo de vida (start/stop) del auto-sync, una instancia por app."""

    def __init__(
        self,
        config: AutoSyncConfig,
        runner: ErpAutoSyncRunner,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.config = config
        self.runner = runner
        self._scheduler = scheduler
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    @property
    def scheduler(self) -> Optional[AsyncIOScheduler]:
        return self._scheduler

    async def _fire(self) -> None:
        """Wrapper de job: un ciclo fallido nunca cancela el timer."""
        try:
            await self.runner.run_once()
        except Exception as e:
            logger.warning(f"[AutoSync] Ciclo terminado con error no controlado: {e}")

    def start(self) -> bool:
        """
        Programa el auto-sync si esta habilitado. Debe llamarse con un event
        loop corriendo (startup de FastAPI). Llamadas repetidas no duplican jobs.

        Returns:
            bool: True si quedo programado
        """
        if not self.config.enabled:
            logger.info("[AutoSync] Deshabilitado por ERP_AUTO_SYNC_ENABLED=false")
            return False
        if self._started:
            return True

        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(timezone=timezone.utc)

        self._scheduler.add_job(
            self._fire,
            trigger=IntervalTrigger(seconds=self.config.interval_seconds),
            id=INTERVAL_JOB_ID,
            name="ERP auto sync",
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.add_job(
            self._fire,
            trigger=DateTrigger(
                run_date=datetime.now(timezone.utc) + timedelta(seconds=self.config.warmup_seconds)
            ),
            id=WARMUP_JOB_ID,
            name="ERP auto sync (warm-up)",
            replace_existing=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        self._started = True

        logger.info(
            f"[AutoSync] Habilitado cada {self.config.interval_minutes:g} minutos "
            f"({self.config.interval_ms} ms). targets={','.join(self.config.targets)}, "
            f"limit={self.config.limit}"
        )
        return True

    def stop(self) -> None:
        """Detiene el scheduler sin esperar al ciclo en curso."""
        if not self._started or self._scheduler is None:
            return
        for job_id in (INTERVAL_JOB_ID, WARMUP_JOB_ID):
            if self._scheduler.get_job(job_id):
                self._scheduler.remove_job(job_id)
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._started = False
        logger.info("[AutoSync] Scheduler detenido")

    def next_run_time(self) -> Optional[datetime]:
        if not self._started or self._scheduler is None:
            return None
        job = self._scheduler.get_job(INTERVAL_JOB_ID)
        return job.next_run_time if job else None

    def status(self) -> Dict[str, Any]:
        """Estado actual para el endpoint de administracion."""
        return {
            "enabled": self.config.enabled,
            "scheduled": self._started,
            "running": self.runner.is_running,
            "interval_minutes": self.config.interval_minutes,
            "interval_ms": self.config.interval_ms,
            "limit": self.config.limit,
            "targets": list(self.config.targets),
            "next_run_time": self.next_run_time(),
            "last_cycle": self.runner.last_cycle,
        }
