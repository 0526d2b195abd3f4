"""
Mapeo de filas OData de SAP a registros del WMS.

Funciones puras (sin I/O) para poder testearlas facilmente. Cada mapper
acepta los nombres de campo de varias versiones de SAP (ES5, B1, S/4) y
cae a un valor por defecto cuando el origen no trae el dato.
"""

from __future__ import annotations

import re
import secrets
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from app.shared.constants.erp_constants import SyncTarget

SYNC_NOTE = "Sincronizado desde SAP"

# Formato OData v2: /Date(1514764800000)/ o /Date(1514764800000+0000)/
_ODATA_DATE = re.compile(r"^/Date\((-?\d+)(?:[+-]\d{4})?\)/$")


def _first(row: dict[str, Any], *fields: str) -> Any:
    """Primer valor 'truthy' entre los campos dados."""
    for f in fields:
        value = row.get(f)
        if value:
            return value
    return None


def _text(row: dict[str, Any], *fields: str) -> str:
    value = _first(row, *fields)
    return str(value).strip() if value is not None else ""


def _number(row: dict[str, Any], *fields: str) -> float:
    value = _first(row, *fields)
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _fallback_key(prefix: str) -> str:
    return f"{prefix}{secrets.token_hex(3)}"


def parse_odata_date(value: Any) -> Optional[date]:
    """
    Normaliza una fecha OData (ISO8601 o /Date(ms)/) a date.
    Valores vacios o no parseables retornan None.
    """
    if not value:
        return None
    raw = str(value).strip()
    match = _ODATA_DATE.match(raw)
    if match:
        try:
            return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc).date()
        except (ValueError, OverflowError, OSError):
            return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def map_product(row: dict[str, Any]) -> dict[str, Any]:
    sku = _text(row, "ProductID", "ID", "ItemCode", "SKU")
    name = _text(row, "Name", "ItemName", "ProductName", "Name1") or "Producto"
    description = _text(row, "Description", "ShortDescription") or None
    return {
        "sku": sku or name or _fallback_key("SKU_"),
        "name": name,
        "description": description,
        "selling_price": _number(row, "Price", "SalesPrice", "UnitPrice"),
        "cost_price": _number(row, "Cost", "UnitCost", "ItemCost", "StandardCost", "PurchasePrice", "AvgPrice"),
        "unit_of_measure": "PCS",
        "is_active": True,
    }


def map_purchase_order(row: dict[str, Any]) -> dict[str, Any]:
    po_number = _text(row, "PurchaseOrderID", "DocNum", "DocEntry", "OrderNumber")
    return {
        "po_number": po_number or _fallback_key("PO-"),
        "status": "confirmed",
        "order_date": parse_odata_date(_first(row, "OrderDate", "DocumentDate", "DocDate")),
        "expected_date": parse_odata_date(_first(row, "ExpectedDate", "DueDate")),
        "total_amount": _number(row, "NetAmount", "Total", "DocTotal"),
        "notes": SYNC_NOTE,
    }


def map_sales_order(row: dict[str, Any]) -> dict[str, Any]:
    so_number = _text(row, "SalesOrderID", "DocNum", "DocEntry", "OrderNumber")
    return {
        "so_number": so_number or _fallback_key("SO-"),
        "customer_name": _text(row, "CustomerName", "CardName") or "Cliente",
        "status": "confirmed",
        "order_date": parse_odata_date(_first(row, "OrderDate", "DocumentDate", "DocDate")),
        "required_date": parse_odata_date(_first(row, "RequiredDate", "DueDate")),
        "total_amount": _number(row, "NetAmount", "Total", "DocTotal"),
        "notes": SYNC_NOTE,
    }


def map_transfer(row: dict[str, Any]) -> dict[str, Any]:
    transfer_number = _text(row, "TransferID", "DocNum", "DocEntry", "Number")
    return {
        "transfer_number": transfer_number or _fallback_key("TR-"),
        "status": "sent",
        "transfer_date": parse_odata_date(_first(row, "TransferDate", "DocumentDate", "DocDate")),
        "expected_date": parse_odata_date(_first(row, "ExpectedDate", "DueDate")),
        "notes": SYNC_NOTE,
    }


MAPPERS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    SyncTarget.PRODUCTS.value: map_product,
    SyncTarget.PURCHASE_ORDERS.value: map_purchase_order,
    SyncTarget.SALES_ORDERS.value: map_sales_order,
    SyncTarget.TRANSFERS.value: map_transfer,
}


def map_records(target: str, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Aplica el mapper del target a cada fila OData."""
    mapper = MAPPERS[target]
    return [mapper(row) for row in rows]
