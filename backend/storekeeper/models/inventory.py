from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from .serialization import dump_datetime, dump_decimal, load_datetime, load_decimal

STOCK_IN = "in"
STOCK_OUT = "out"
STOCK_TYPES = (STOCK_IN, STOCK_OUT)


@dataclass
class Product:
    """
    Product master data.

    stock is a signed decimal quantity and only ever changes through a
    StockTransaction. profit_percentage is stored, not derived on read: it is
    computed when the product is created and whenever a caller supplies it.
    """
    id: str
    name: str
    sku: str
    unit: str
    buy_price: Decimal
    sell_price: Decimal
    profit_percentage: Decimal
    stock: Decimal
    created_at: datetime
    created_by: str
    updated_at: datetime | None = None
    updated_by: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "unit": self.unit,
            "buy_price": dump_decimal(self.buy_price),
            "sell_price": dump_decimal(self.sell_price),
            "profit_percentage": dump_decimal(self.profit_percentage),
            "stock": dump_decimal(self.stock),
            "created_at": dump_datetime(self.created_at),
            "created_by": self.created_by,
            "updated_at": dump_datetime(self.updated_at),
            "updated_by": self.updated_by,
        }

    @classmethod
    def from_document(cls, data: dict) -> "Product":
        return cls(
            id=data["id"],
            name=data["name"],
            sku=data.get("sku", ""),
            unit=data.get("unit", ""),
            buy_price=load_decimal(data["buy_price"]),
            sell_price=load_decimal(data["sell_price"]),
            profit_percentage=load_decimal(data["profit_percentage"]),
            stock=load_decimal(data["stock"]),
            created_at=load_datetime(data["created_at"]),
            created_by=data.get("created_by", ""),
            updated_at=load_datetime(data.get("updated_at")),
            updated_by=data.get("updated_by"),
        )


@dataclass(frozen=True)
class StockTransaction:
    """Immutable ledger entry: one stock increase ("in") or decrease ("out")."""
    id: str
    product_id: str
    product_name: str
    type: str
    quantity: Decimal
    date: datetime
    created_by: str
    buy_price: Decimal | None = None
    sell_price: Decimal | None = None
    notes: str | None = None

    @property
    def delta(self) -> Decimal:
        return self.quantity if self.type == STOCK_IN else -self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "type": self.type,
            "quantity": dump_decimal(self.quantity),
            "buy_price": dump_decimal(self.buy_price),
            "sell_price": dump_decimal(self.sell_price),
            "date": dump_datetime(self.date),
            "created_by": self.created_by,
            "notes": self.notes,
        }

    @classmethod
    def from_document(cls, data: dict) -> "StockTransaction":
        return cls(
            id=data["id"],
            product_id=data["product_id"],
            product_name=data.get("product_name", ""),
            type=data["type"],
            quantity=load_decimal(data["quantity"]),
            date=load_datetime(data["date"]),
            created_by=data.get("created_by", ""),
            buy_price=load_decimal(data.get("buy_price")),
            sell_price=load_decimal(data.get("sell_price")),
            notes=data.get("notes"),
        )
