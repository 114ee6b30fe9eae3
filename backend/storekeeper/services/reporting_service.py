# Overview: Dashboard figures derived from products and sales.

from __future__ import annotations

from decimal import Decimal

from ..models import Product, Sale
from ..repository import Repository
from ..time_utils import to_store_local

LOW_STOCK_THRESHOLD = Decimal("10")


def _totals(sales: list[Sale]) -> dict:
    return {
        "count": len(sales),
        "revenue": sum((s.revenue for s in sales), Decimal("0")),
        "profit": sum((s.total_profit for s in sales), Decimal("0")),
    }


def low_stock_products(products: list[Product], threshold: Decimal = LOW_STOCK_THRESHOLD) -> list[Product]:
    return sorted((p for p in products if p.stock < threshold), key=lambda p: p.stock)


def dashboard_summary(repo: Repository) -> dict:
    """
    Figures for the dashboard: product and stock totals, today's and this
    month's revenue/profit, low-stock products.

    "Today" and "this month" follow the store timezone from settings.
    Revenue is sell_price * quantity, profit is per-unit profit * quantity.
    """
    snapshot = repo.snapshot()
    tz_name = snapshot.settings.timezone
    now = to_store_local(repo.now(), tz_name)

    today_sales = []
    month_sales = []
    for sale in snapshot.sales:
        when = to_store_local(sale.date, tz_name)
        if (when.year, when.month) == (now.year, now.month):
            month_sales.append(sale)
            if when.day == now.day:
                today_sales.append(sale)

    low_stock = low_stock_products(snapshot.products)
    return {
        "currency": snapshot.settings.currency,
        "total_products": len(snapshot.products),
        "total_stock": sum((p.stock for p in snapshot.products), Decimal("0")),
        "today": _totals(today_sales),
        "month": _totals(month_sales),
        "low_stock_threshold": LOW_STOCK_THRESHOLD,
        "low_stock_products": [p.to_dict() for p in low_stock],
    }
