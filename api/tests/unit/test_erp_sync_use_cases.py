"""
Tests unitarios para ErpSyncUseCases (POST /erp/connectors/{id}/sync).

Base SQLite en memoria y cliente ERP falso inyectado via client_factory.
"""
from __future__ import annotations

from typing import Any

import pytest
from sqlalchemy import select

from app.application.dto.erp_dto import ConnectorSyncRequestDTO
from app.application.use_cases.erp_sync_use_cases import (
    ErpSyncUseCases,
    clamp_limit,
    resolve_target,
    resolve_timeout_seconds,
)
from app.infrastructure.database.models import (
    ErpConnectorModel,
    ErpSyncLogModel,
    ProductModel,
    TransferModel,
)
from app.shared.exceptions.erp import (
    ConnectorNotFoundException,
    ConnectorWithoutEndpointException,
    ErpUpstreamException,
    UnsupportedConnectorTypeException,
    UnsupportedSyncTargetException,
)


class FakeErpClient:
    """Cliente ERP en memoria: registra las llamadas y devuelve filas fijas."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, error: Exception | None = None):
        self.rows = rows or []
        self.error = error
        self.calls: list[tuple[str, int]] = []
        self.timeout_s: float | None = None

    def fetch(self, target: str, limit: int) -> list[dict[str, Any]]:
        self.calls.append((target, limit))
        if self.error:
            raise self.error
        return self.rows


def _use_cases(db_session, client: FakeErpClient) -> ErpSyncUseCases:
    def factory(connector, timeout_s):
        client.timeout_s = timeout_s
        return client

    return ErpSyncUseCases(db_session, client_factory=factory)


async def _connector(db_session, **overrides) -> ErpConnectorModel:
    values = {
        "id": "c1",
        "name": "SAP ES5",
        "type": "sap",
        "endpoint": "https://sap.example.com/odata",
        "status": "active",
        "auto_sync": True,
        "error_count": 0,
        "records_processed": 0,
    }
    values.update(overrides)
    connector = ErpConnectorModel(**values)
    db_session.add(connector)
    await db_session.commit()
    return connector


async def _logs(db_session) -> list[ErpSyncLogModel]:
    result = await db_session.execute(select(ErpSyncLogModel).order_by(ErpSyncLogModel.id))
    return result.scalars().all()


@pytest.mark.parametrize("raw, expected", [(None, 50), (0, 50), (-5, 1), (25, 25), (10_000, 500)])
def test_clamp_limit(raw, expected) -> None:
    assert clamp_limit(raw) == expected


def test_resolve_target_priority() -> None:
    assert resolve_target("transfers", "products") == "transfers"
    assert resolve_target(None, "sales_orders") == "sales_orders"
    assert resolve_target(None, None) == "products"
    assert resolve_target("", " purchase_orders ") == "purchase_orders"


def test_resolve_timeout_seconds() -> None:
    connector = ErpConnectorModel(connection_settings={"timeout": 5000})
    assert resolve_timeout_seconds(connector, 1000) == 5.0
    assert resolve_timeout_seconds(ErpConnectorModel(), 2000) == 2.0
    assert resolve_timeout_seconds(ErpConnectorModel(), None) == 30.0
    assert resolve_timeout_seconds(ErpConnectorModel(connection_settings={"timeout": "x"}), None) == 30.0


@pytest.mark.asyncio
async def test_sync_products_success(db_session) -> None:
    connector = await _connector(db_session, records_processed=4)
    db_session.add(ProductModel(sku="HT-1000", name="Viejo"))
    await db_session.commit()
    client = FakeErpClient(rows=[
        {"ProductID": "HT-1000", "Name": "Notebook Basic 15", "Price": "956"},
        {"ProductID": "HT-1001", "Name": "Notebook Basic 17", "Price": "1249"},
    ])

    result = await _use_cases(db_session, client).sync_connector(
        "c1", ConnectorSyncRequestDTO(limit=10)
    )

    assert result.ok is True
    assert result.connector_id == "c1"
    assert result.processed == 2
    assert result.new_count == 1
    assert result.source == "sap"
    assert result.target == "products"
    assert client.calls == [("products", 10)]
    assert client.timeout_s == 30.0

    await db_session.refresh(connector)
    assert connector.status == "active"
    assert connector.records_processed == 6
    assert connector.last_sync is not None

    logs = await _logs(db_session)
    assert len(logs) == 1
    assert logs[0].status == "completed"
    assert logs[0].sync_type == "products"
    assert logs[0].total_records == 2

    products = (await db_session.execute(select(ProductModel).order_by(ProductModel.sku))).scalars().all()
    assert [(p.sku, p.name) for p in products] == [
        ("HT-1000", "Notebook Basic 15"),
        ("HT-1001", "Notebook Basic 17"),
    ]


@pytest.mark.asyncio
async def test_body_target_overrides_query_target(db_session) -> None:
    await _connector(db_session)
    client = FakeErpClient(rows=[{"TransferID": "T-1"}])

    result = await _use_cases(db_session, client).sync_connector(
        "c1", ConnectorSyncRequestDTO(target="transfers"), query_target="products"
    )

    assert result.target == "transfers"
    assert client.calls == [("transfers", 50)]
    transfers = (await db_session.execute(select(TransferModel))).scalars().all()
    assert [t.transfer_number for t in transfers] == ["T-1"]


@pytest.mark.asyncio
async def test_query_target_and_clamped_limit(db_session) -> None:
    await _connector(db_session)
    client = FakeErpClient()

    result = await _use_cases(db_session, client).sync_connector(
        "c1", ConnectorSyncRequestDTO(limit=9999), query_target="sales_orders"
    )

    assert result.processed == 0
    assert result.new_count == 0
    assert client.calls == [("sales_orders", 500)]


@pytest.mark.asyncio
async def test_unknown_connector(db_session) -> None:
    with pytest.raises(ConnectorNotFoundException) as exc_info:
        await _use_cases(db_session, FakeErpClient()).sync_connector("nope", ConnectorSyncRequestDTO())

    assert exc_info.value.status_code == 404
    assert exc_info.value.error_code == "CONNECTOR_NOT_FOUND"
    assert await _logs(db_session) == []


@pytest.mark.asyncio
async def test_connector_without_endpoint(db_session) -> None:
    connector = await _connector(db_session, endpoint=None)

    with pytest.raises(ConnectorWithoutEndpointException) as exc_info:
        await _use_cases(db_session, FakeErpClient()).sync_connector("c1", ConnectorSyncRequestDTO())

    assert exc_info.value.status_code == 400
    await db_session.refresh(connector)
    assert connector.status == "active"


@pytest.mark.asyncio
async def test_unknown_target_is_rejected_before_syncing(db_session) -> None:
    connector = await _connector(db_session)
    client = FakeErpClient()

    with pytest.raises(UnsupportedSyncTargetException):
        await _use_cases(db_session, client).sync_connector(
            "c1", ConnectorSyncRequestDTO(target="prices")
        )

    assert client.calls == []
    await db_session.refresh(connector)
    assert connector.status == "active"
    assert await _logs(db_session) == []


@pytest.mark.asyncio
async def test_upstream_failure_marks_error(db_session) -> None:
    connector = await _connector(db_session, error_count=2)
    client = FakeErpClient(error=ErpUpstreamException("Credenciales inválidas o acceso denegado", 401))

    with pytest.raises(ErpUpstreamException):
        await _use_cases(db_session, client).sync_connector("c1", ConnectorSyncRequestDTO())

    await db_session.refresh(connector)
    assert connector.status == "error"
    assert connector.error_count == 3

    logs = await _logs(db_session)
    assert len(logs) == 1
    assert logs[0].status == "failed"
    assert logs[0].error_message == "Credenciales inválidas o acceso denegado"


@pytest.mark.asyncio
async def test_unsupported_connector_type_marks_error(db_session) -> None:
    connector = await _connector(db_session, type="dynamics")
    client = FakeErpClient()

    with pytest.raises(UnsupportedConnectorTypeException):
        await _use_cases(db_session, client).sync_connector("c1", ConnectorSyncRequestDTO())

    assert client.calls == []
    await db_session.refresh(connector)
    assert connector.status == "error"
    assert (await _logs(db_session))[0].status == "failed"


@pytest.mark.asyncio
async def test_list_connectors(db_session) -> None:
    await _connector(db_session)
    await _connector(db_session, id="c2", name="SAP B1", type="sap_b1", auto_sync=False)

    rows = await _use_cases(db_session, FakeErpClient()).list_connectors()

    assert {r["id"] for r in rows} == {"c1", "c2"}
    by_id = {r["id"]: r for r in rows}
    assert by_id["c1"]["auto_sync"] is True
    assert by_id["c2"]["auto_sync"] is False
    assert by_id["c2"]["records_processed"] == 0
