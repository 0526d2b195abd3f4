"""
Tests unitarios para ErpAutoSyncScheduler (ciclo de vida de los jobs).
"""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.infrastructure.scheduler.auto_sync_config import AutoSyncConfig
from app.infrastructure.scheduler.auto_sync_scheduler import (
    INTERVAL_JOB_ID,
    WARMUP_JOB_ID,
    ErpAutoSyncScheduler,
)


def _runner() -> MagicMock:
    runner = MagicMock()
    runner.run_once = AsyncMock()
    runner.is_running = False
    runner.last_cycle = None
    return runner


def test_start_disabled_schedules_nothing() -> None:
    auto_sync = ErpAutoSyncScheduler(AutoSyncConfig(enabled=False), _runner())

    assert auto_sync.start() is False
    assert auto_sync.started is False
    assert auto_sync.scheduler is None
    assert auto_sync.next_run_time() is None


@pytest.mark.asyncio
async def test_start_registers_interval_and_warmup_jobs() -> None:
    auto_sync = ErpAutoSyncScheduler(AutoSyncConfig(interval_minutes=0), _runner())
    try:
        assert auto_sync.start() is True

        interval_job = auto_sync.scheduler.get_job(INTERVAL_JOB_ID)
        warmup_job = auto_sync.scheduler.get_job(WARMUP_JOB_ID)
        assert interval_job is not None
        assert warmup_job is not None
        # Piso de 1 minuto
        assert interval_job.trigger.interval.total_seconds() == 60
        assert interval_job.coalesce is True
        assert warmup_job.next_run_time < interval_job.next_run_time
    finally:
        auto_sync.stop()


@pytest.mark.asyncio
async def test_start_is_idempotent() -> None:
    auto_sync = ErpAutoSyncScheduler(AutoSyncConfig(), _runner())
    try:
        assert auto_sync.start() is True
        assert auto_sync.start() is True
        assert len(auto_sync.scheduler.get_jobs()) == 2
    finally:
        auto_sync.stop()


@pytest.mark.asyncio
async def test_stop_removes_jobs() -> None:
    auto_sync = ErpAutoSyncScheduler(AutoSyncConfig(), _runner())
    auto_sync.start()

    auto_sync.stop()

    assert auto_sync.started is False
    assert auto_sync.next_run_time() is None
    # Detener dos veces no falla
    auto_sync.stop()


@pytest.mark.asyncio
async def test_fire_never_propagates_errors() -> None:
    runner = _runner()
    runner.run_once = AsyncMock(side_effect=RuntimeError("boom"))
    auto_sync = ErpAutoSyncScheduler(AutoSyncConfig(), runner)

    await auto_sync._fire()

    runner.run_once.assert_awaited_once()


@pytest.mark.asyncio
async def test_status_reports_effective_config() -> None:
    auto_sync = ErpAutoSyncScheduler(
        AutoSyncConfig(interval_minutes=15, limit=20, targets=["products", "transfers"]),
        _runner(),
    )
    try:
        auto_sync.start()
        status = auto_sync.status()
    finally:
        auto_sync.stop()

    assert status["enabled"] is True
    assert status["scheduled"] is True
    assert status["running"] is False
    assert status["interval_ms"] == 900_000
    assert status["limit"] == 20
    assert status["targets"] == ["products", "transfers"]
    assert status["next_run_time"] is not None
    assert status["last_cycle"] is None
