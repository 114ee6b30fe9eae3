"""
Sales Service

A sale and its paired stock-out are written together: record_sale appends
the Sale, appends one "out" StockTransaction with the same product and
quantity, and lowers the product's stock, all in one snapshot save. A Sale
without its stock-out is never observable.

Prices and profit_percentage are copied from the product at sale time and
are not touched by later product edits.
"""

from __future__ import annotations

from datetime import datetime
import logging

from ..errors import ProductNotFound
from ..models import STOCK_OUT, Sale, User
from ..repository import Repository
from .inventory_service import _actor_name, apply_stock_transaction, coerce_quantity

logger = logging.getLogger(__name__)

SALE_NOTE = "Sale"


def record_sale(
    repo: Repository,
    product_id: str,
    quantity,
    created_by: User | str | None,
    *,
    enforce_stock: bool = False,
) -> Sale:
    """
    Record a sale of `quantity` units of a product.

    Raises ProductNotFound, InvalidQuantity and, with enforce_stock,
    InsufficientStock. Over-selling is otherwise allowed; the counter UI
    warns about it.
    """
    actor = _actor_name(created_by)

    with repo.transaction() as snapshot:
        product = snapshot.find_product(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        quantity = coerce_quantity(quantity)
        now = repo.now()

        sale = Sale(
            id=repo.new_id(),
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            buy_price=product.buy_price,
            sell_price=product.sell_price,
            profit=product.sell_price - product.buy_price,
            profit_percentage=product.profit_percentage,
            date=now,
            created_by=actor,
        )
        snapshot.add_sale(sale)

        apply_stock_transaction(
            snapshot,
            transaction_id=repo.new_id(),
            product_id=product.id,
            type=STOCK_OUT,
            quantity=quantity,
            date=now,
            created_by=actor,
            sell_price=sale.sell_price,
            notes=SALE_NOTE,
            enforce_stock=enforce_stock,
        )

    logger.info("Sale %s: %s x %s by %s", sale.id, sale.quantity, sale.product_name, actor)
    return sale


def list_sales(
    repo: Repository,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    product_id: str | None = None,
) -> list[Sale]:
    """Sales newest first; start is inclusive, end is exclusive."""
    sales = repo.get_sales()
    if start is not None:
        sales = [s for s in sales if s.date >= start]
    if end is not None:
        sales = [s for s in sales if s.date < end]
    if product_id is not None:
        sales = [s for s in sales if s.product_id == product_id]
    return sorted(sales, key=lambda s: s.date, reverse=True)
