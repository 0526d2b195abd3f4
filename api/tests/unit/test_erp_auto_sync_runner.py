"""
Tests unitarios para ErpAutoSyncRunner.

El registro de conectores es SQLite en memoria; el invoker se mockea para
no hacer HTTP real.
"""
from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from app.application.use_cases.erp_auto_sync_use_cases import ErpAutoSyncRunner
from app.infrastructure.database.models import ErpConnectorModel
from app.infrastructure.external.erp.sync_invoker import SyncInvocationResult
from app.infrastructure.scheduler.auto_sync_config import AutoSyncConfig
from app.shared.exceptions.erp import ConnectorSyncInvocationError


def _config(targets=("products",), limit=50) -> AutoSyncConfig:
    return AutoSyncConfig(targets=list(targets), limit=limit)


def _invoker(side_effect=None) -> AsyncMock:
    invoker = AsyncMock()
    invoker.invoke = AsyncMock(
        return_value=SyncInvocationResult(status_code=200, body="{}"),
        side_effect=side_effect,
    )
    return invoker


@pytest_asyncio.fixture
async def registry(session_factory):
    """Registro con 4 conectores; solo c1 y c4 son elegibles."""
    async with session_factory() as session:
        session.add_all([
            ErpConnectorModel(id="c1", name="SAP 1", type="sap", status="active", auto_sync=True),
            ErpConnectorModel(id="c2", name="SAP 2", type="sap", status="syncing", auto_sync=True),
            ErpConnectorModel(id="c3", name="SAP 3", type="sap", status="active", auto_sync=False),
            ErpConnectorModel(id="c4", name="SAP 4", type="sap", status="error", auto_sync=True),
        ])
        await session.commit()
    return session_factory


def _called_pairs(invoker: AsyncMock) -> list[tuple]:
    return [call.args for call in invoker.invoke.call_args_list]


@pytest.mark.asyncio
async def test_run_once_invokes_each_eligible_connector_and_target(registry) -> None:
    invoker = _invoker()
    runner = ErpAutoSyncRunner(_config(targets=("products", "prices"), limit=25), invoker, registry)

    await runner.run_once()

    assert sorted(_called_pairs(invoker)) == [
        ("c1", "prices", 25),
        ("c1", "products", 25),
        ("c4", "prices", 25),
        ("c4", "products", 25),
    ]
    # Todos los targets de un conector antes de pasar al siguiente
    connector_order = [args[0] for args in _called_pairs(invoker)]
    assert connector_order in (["c1", "c1", "c4", "c4"], ["c4", "c4", "c1", "c1"])
    target_order = [args[1] for args in _called_pairs(invoker)]
    assert target_order == ["products", "prices", "products", "prices"]

    summary = runner.last_cycle
    assert summary.eligible_connectors == 2
    assert summary.attempted == 4
    assert summary.succeeded == 4
    assert summary.failed == 0
    assert summary.finished_at is not None
    assert runner.is_running is False


@pytest.mark.asyncio
async def test_failure_does_not_stop_the_cycle(registry) -> None:
    async def fail_c1(connector_id, target, limit):
        if connector_id == "c1":
            raise ConnectorSyncInvocationError(connector_id, target, "status 500: boom", status_code=500)
        return SyncInvocationResult(status_code=200, body="{}")

    invoker = _invoker(side_effect=fail_c1)
    runner = ErpAutoSyncRunner(_config(), invoker, registry)

    await runner.run_once()

    assert invoker.invoke.await_count == 2
    assert runner.last_cycle.succeeded == 1
    assert runner.last_cycle.failed == 1
    assert runner.last_cycle.failures == ["c1:products"]
    assert runner.last_cycle.error is None


@pytest.mark.asyncio
async def test_unexpected_invoker_error_is_logged_and_latch_released(registry) -> None:
    invoker = _invoker(side_effect=RuntimeError("inesperado"))
    runner = ErpAutoSyncRunner(_config(), invoker, registry)

    await runner.run_once()

    assert runner.last_cycle.failed == 2
    assert runner.is_running is False

    # El siguiente ciclo corre normalmente
    invoker.invoke.side_effect = None
    await runner.run_once()
    assert runner.last_cycle.succeeded == 2


@pytest.mark.asyncio
async def test_overlapping_run_is_skipped(registry) -> None:
    release = asyncio.Event()
    started = asyncio.Event()

    async def slow_invoke(connector_id, target, limit):
        started.set()
        await release.wait()
        return SyncInvocationResult(status_code=200, body="{}")

    invoker = _invoker(side_effect=slow_invoke)
    runner = ErpAutoSyncRunner(_config(), invoker, registry)

    first = asyncio.create_task(runner.run_once())
    await asyncio.wait_for(started.wait(), timeout=5)
    assert runner.is_running is True

    # Segundo disparo mientras el primero sigue en curso: no hace nada
    await runner.run_once()
    assert invoker.invoke.await_count == 1

    release.set()
    await asyncio.wait_for(first, timeout=5)

    assert invoker.invoke.await_count == 2
    assert runner.is_running is False


@pytest.mark.asyncio
async def test_concurrent_triggers_run_a_single_cycle(registry) -> None:
    invoker = _invoker()
    runner = ErpAutoSyncRunner(_config(), invoker, registry)

    await asyncio.gather(runner.run_once(), runner.run_once(), runner.run_once())

    assert invoker.invoke.await_count == 2


@pytest.mark.asyncio
async def test_missing_auto_sync_column_syncs_nothing(legacy_session_factory) -> None:
    invoker = _invoker()
    runner = ErpAutoSyncRunner(_config(), invoker, legacy_session_factory)

    await runner.run_once()

    invoker.invoke.assert_not_called()
    assert runner.last_cycle.supports_auto_sync is False
    assert runner.last_cycle.eligible_connectors == 0
    assert runner.last_cycle.error is None


@pytest.mark.asyncio
async def test_registry_failure_aborts_cycle(empty_session_factory) -> None:
    invoker = _invoker()
    runner = ErpAutoSyncRunner(_config(), invoker, empty_session_factory)

    await runner.run_once()

    invoker.invoke.assert_not_called()
    assert runner.last_cycle.error == "registry_query_failed"
    assert runner.is_running is False


@pytest.mark.asyncio
async def test_empty_registry_is_a_noop(session_factory) -> None:
    invoker = _invoker()
    runner = ErpAutoSyncRunner(_config(), invoker, session_factory)

    await runner.run_once()

    invoker.invoke.assert_not_called()
    assert runner.last_cycle.eligible_connectors == 0
    assert runner.last_cycle.attempted == 0


@pytest.mark.asyncio
async def test_run_once_reports_whether_it_ran(registry) -> None:
    runner = ErpAutoSyncRunner(_config(), _invoker(), registry)

    assert await runner.run_once() is True

    runner._running = True
    assert await runner.run_once() is False


@pytest.mark.asyncio
async def test_run_in_background_takes_latch_before_task_starts(registry) -> None:
    invoker = _invoker()
    runner = ErpAutoSyncRunner(_config(), invoker, registry)

    task = runner.run_in_background()

    # Sin ceder el event loop: el latch ya esta tomado
    assert task is not None
    assert runner.is_running is True
    assert runner.run_in_background() is None
    assert await runner.run_once() is False

    await asyncio.wait_for(task, timeout=5)

    assert invoker.invoke.await_count == 2
    assert runner.is_running is False
