# Overview: Service-layer operations for inventory; products and the stock ledger.

# backend/storekeeper/services/inventory_service.py
"""
Inventory Invariants (authoritative)

Stock model:
- Product.stock is a stored signed quantity. It changes only when a
  StockTransaction is recorded: "in" adds quantity, "out" subtracts it.
- The transaction and the stock change are written in the same snapshot
  save; if the product is missing neither happens.
- Transactions are immutable once recorded.
- Stock may go negative unless enforce_stock=True (ENFORCE_STOCK_LEVELS).

Pricing:
- profit_percentage = (sell - buy) / buy * 100 to two places, and 0 when buy is 0.
- It is computed on create. update_product stores what the caller passes and
  does not recompute it when only one price changes.

Opening stock:
- create_product does not touch stock on its own. Callers record the opening
  quantity as an "in" transaction, or pass opening_stock to have both written
  in one save.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
import logging

from ..errors import InsufficientStock, InvalidQuantity, ProductNotFound
from ..models import STOCK_IN, STOCK_OUT, STOCK_TYPES, Product, Snapshot, StockTransaction, User
from ..repository import Repository
from ..validation import ValidationError, coerce_decimal, coerce_price, coerce_text

logger = logging.getLogger(__name__)

OPENING_STOCK_NOTE = "Opening stock"
PERCENT_PLACES = Decimal("0.01")

# Fields update_product accepts; stock is deliberately absent
UPDATABLE_FIELDS = {"name", "sku", "unit", "buy_price", "sell_price", "profit_percentage"}


def calculate_profit_percentage(buy_price, sell_price) -> Decimal:
    buy = Decimal(buy_price)
    sell = Decimal(sell_price)
    if buy == 0:
        return Decimal("0.00")
    return ((sell - buy) / buy * 100).quantize(PERCENT_PLACES)


def coerce_quantity(value) -> Decimal:
    """Quantities are positive magnitudes; direction comes from the transaction type."""
    try:
        quantity = coerce_decimal("quantity", value)
    except ValidationError as e:
        raise InvalidQuantity(str(e)) from e
    if quantity <= 0:
        raise InvalidQuantity("quantity must be greater than 0", details={"quantity": str(quantity)})
    return quantity


def _actor_name(actor: User | str | None) -> str:
    if actor is None:
        return ""
    if isinstance(actor, User):
        return actor.username
    return str(actor)


def apply_stock_transaction(
    snapshot: Snapshot,
    *,
    transaction_id: str,
    product_id: str,
    type: str,
    quantity: Decimal,
    date: datetime,
    created_by: str,
    buy_price: Decimal | None = None,
    sell_price: Decimal | None = None,
    notes: str | None = None,
    enforce_stock: bool = False,
) -> StockTransaction:
    """
    Append a stock transaction and move the product's stock by its delta.

    Works on an already-loaded snapshot so callers can pair it with other
    writes (a sale, a new product) inside one Repository.transaction().
    """
    if type not in STOCK_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(STOCK_TYPES)}")

    product = snapshot.find_product(product_id)
    if product is None:
        raise ProductNotFound(product_id)

    if type == STOCK_IN and buy_price is None:
        buy_price = product.buy_price
    if type == STOCK_OUT and sell_price is None:
        sell_price = product.sell_price

    transaction = StockTransaction(
        id=transaction_id,
        product_id=product.id,
        product_name=product.name,
        type=type,
        quantity=quantity,
        date=date,
        created_by=created_by,
        buy_price=buy_price if type == STOCK_IN else None,
        sell_price=sell_price if type == STOCK_OUT else None,
        notes=notes,
    )

    new_stock = product.stock + transaction.delta
    if enforce_stock and new_stock < 0:
        raise InsufficientStock(product.id, product.stock, quantity)

    product.stock = new_stock
    snapshot.add_stock_transaction(transaction)
    return transaction


def record_stock_transaction(
    repo: Repository,
    product_id: str,
    type: str,
    quantity,
    *,
    created_by: User | str | None,
    buy_price=None,
    sell_price=None,
    notes: str | None = None,
    enforce_stock: bool = False,
) -> StockTransaction:
    """
    Record a stock-in or stock-out for one product.

    Raises InvalidQuantity, ProductNotFound, ValidationError and, with
    enforce_stock, InsufficientStock. On any failure nothing is saved.
    """
    quantity = coerce_quantity(quantity)
    buy = coerce_price("buy_price", buy_price) if buy_price is not None else None
    sell = coerce_price("sell_price", sell_price) if sell_price is not None else None

    with repo.transaction() as snapshot:
        transaction = apply_stock_transaction(
            snapshot,
            transaction_id=repo.new_id(),
            product_id=product_id,
            type=type,
            quantity=quantity,
            date=repo.now(),
            created_by=_actor_name(created_by),
            buy_price=buy,
            sell_price=sell,
            notes=notes,
            enforce_stock=enforce_stock,
        )
    return transaction


def create_product(
    repo: Repository,
    *,
    name: str,
    buy_price,
    sell_price,
    created_by: User | str | None,
    sku: str = "",
    unit: str = "pcs",
    opening_stock=None,
) -> Product:
    """
    Create a product with zero stock and a computed profit_percentage.

    With opening_stock, an "in" transaction for that quantity is recorded in
    the same save.
    """
    name = coerce_text("name", name)
    buy = coerce_price("buy_price", buy_price)
    sell = coerce_price("sell_price", sell_price)
    opening = coerce_quantity(opening_stock) if opening_stock not in (None, 0, "0", "") else None
    actor = _actor_name(created_by)

    with repo.transaction() as snapshot:
        now = repo.now()
        product = snapshot.upsert_product(
            repo.new_id(),
            {
                "name": name,
                "sku": (sku or "").strip(),
                "unit": (unit or "").strip(),
                "buy_price": buy,
                "sell_price": sell,
                "profit_percentage": calculate_profit_percentage(buy, sell),
                "stock": Decimal("0"),
                "created_at": now,
                "created_by": actor,
            },
        )
        if opening is not None:
            apply_stock_transaction(
                snapshot,
                transaction_id=repo.new_id(),
                product_id=product.id,
                type=STOCK_IN,
                quantity=opening,
                date=now,
                created_by=actor,
                buy_price=buy,
                notes=OPENING_STOCK_NOTE,
            )

    logger.info("Product %s (%s) created by %s", product.id, product.name, actor)
    return product


def update_product(
    repo: Repository,
    product_id: str,
    patch: dict,
    *,
    updated_by: User | str | None,
) -> Product:
    """
    Apply a partial update.

    profit_percentage is NOT recomputed here; pass it in the patch when the
    prices change. Stock cannot be patched.
    """
    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(sorted(unknown))}")

    clean: dict = {}
    for key, value in patch.items():
        if key in ("buy_price", "sell_price"):
            clean[key] = coerce_price(key, value)
        elif key == "profit_percentage":
            clean[key] = coerce_decimal(key, value)
        elif key == "name":
            clean[key] = coerce_text(key, value)
        else:
            clean[key] = (value or "").strip()

    with repo.transaction() as snapshot:
        if snapshot.find_product(product_id) is None:
            raise ProductNotFound(product_id)
        clean["updated_at"] = repo.now()
        clean["updated_by"] = _actor_name(updated_by)
        return snapshot.upsert_product(product_id, clean)


def delete_product(repo: Repository, product_id: str) -> bool:
    """Remove a product; its ledger history stays. Unknown ids are a no-op."""
    return repo.delete_product(product_id)


def get_product(repo: Repository, product_id: str) -> Product:
    product = repo.get_product(product_id)
    if product is None:
        raise ProductNotFound(product_id)
    return product


def list_products(repo: Repository) -> list[Product]:
    return sorted(repo.get_products(), key=lambda p: p.name.lower())


def list_stock_transactions(
    repo: Repository,
    *,
    product_id: str | None = None,
    type: str | None = None,
) -> list[StockTransaction]:
    """Ledger entries, newest first."""
    if type is not None and type not in STOCK_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(STOCK_TYPES)}")
    transactions = repo.get_stock_transactions()
    if product_id is not None:
        transactions = [t for t in transactions if t.product_id == product_id]
    if type is not None:
        transactions = [t for t in transactions if t.type == type]
    return sorted(transactions, key=lambda t: t.date, reverse=True)
