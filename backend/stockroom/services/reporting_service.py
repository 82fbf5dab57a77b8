# Overview: Service-layer report builder; produces tenant-scoped report rows for external rendering.

"""
Reporting Service

Four report kinds, each yielding rows of {date, product, quantity, price, total}:

- sales:          sales with sold_at inside [start, end]; total is the
                  recorded sale total, price the product's current price
- current-stock:  every active product; no date (snapshot)
- added-stock:    stock entries with added_at inside [start, end];
                  total is current price x added quantity
- low-stock:      active products with quantity strictly below the threshold

Date bounds are inclusive on both ends. Rendering (PDF or otherwise) is the
caller's concern; this module only assembles data.
"""

from __future__ import annotations

from decimal import Decimal

from ..errors import ValidationError
from ..models import Product, Sale, StockEntry
from .tenant_service import require_tenant, scoped_query
from stockroom.models.catalog import money_str
from stockroom.time_utils import parse_iso_datetime, to_utc_z

REPORT_TITLES = {
    "sales": "Sales Report",
    "current-stock": "Current Stock Report",
    "added-stock": "Added Stock Report",
    "low-stock": "Low Stock Report",
}


def _parse_bound(value, field: str):
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {field} format")
    try:
        parsed = parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"Invalid {field} format")
    if parsed is None:
        raise ValidationError(f"Invalid {field} format")
    return parsed


def _row(date, product_name: str, quantity: int, price, total) -> dict:
    return {
        "date": date.strftime("%Y-%m-%d") if date is not None else "",
        "product": product_name,
        "quantity": quantity,
        "price": money_str(price),
        "total": money_str(total),
    }


def _sales_rows(business_id: int, start, end) -> list[dict]:
    sales = (
        scoped_query(Sale, business_id)
        .filter(Sale.sold_at >= start, Sale.sold_at <= end)
        .order_by(Sale.sold_at.asc(), Sale.id.asc())
        .all()
    )
    return [_row(s.sold_at, s.product.name, s.quantity, s.product.price, s.total) for s in sales]


def _added_stock_rows(business_id: int, start, end) -> list[dict]:
    entries = (
        scoped_query(StockEntry, business_id)
        .filter(StockEntry.added_at >= start, StockEntry.added_at <= end)
        .order_by(StockEntry.added_at.asc(), StockEntry.id.asc())
        .all()
    )
    return [
        _row(e.added_at, e.product.name, e.quantity, e.product.price, Decimal(e.product.price) * e.quantity)
        for e in entries
    ]


def _product_rows(products) -> list[dict]:
    return [_row(None, p.name, p.quantity, p.price, Decimal(p.price) * p.quantity) for p in products]


def build_report(principal, kind: str, start: str, end: str, *, low_stock_threshold: int = 10) -> dict:
    """
    Assemble report data for one tenant.

    Raises:
        ValidationError: unknown kind, unparseable bound, or start after end
    """
    business_id = require_tenant(principal)

    if not isinstance(kind, str) or kind not in REPORT_TITLES:
        raise ValidationError("Invalid report type", details={"allowed": sorted(REPORT_TITLES)})

    start_dt = _parse_bound(start, "startDate")
    end_dt = _parse_bound(end, "endDate")
    if start_dt > end_dt:
        raise ValidationError("startDate must not be after endDate")

    if kind == "sales":
        rows = _sales_rows(business_id, start_dt, end_dt)
    elif kind == "added-stock":
        rows = _added_stock_rows(business_id, start_dt, end_dt)
    elif kind == "current-stock":
        products = scoped_query(Product, business_id).order_by(Product.name.asc(), Product.id.asc()).all()
        rows = _product_rows(products)
    else:
        products = (
            scoped_query(Product, business_id)
            .filter(Product.quantity < low_stock_threshold)
            .order_by(Product.quantity.asc(), Product.name.asc())
            .all()
        )
        rows = _product_rows(products)

    summary = {"row_count": len(rows)}
    if kind == "sales":
        summary["total_items"] = sum(r["quantity"] for r in rows)
        summary["total_value"] = money_str(sum((Decimal(r["total"]) for r in rows), Decimal("0")))

    return {
        "title": REPORT_TITLES[kind],
        "kind": kind,
        "start": to_utc_z(start_dt),
        "end": to_utc_z(end_dt),
        "rows": rows,
        "summary": summary,
    }
