from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from .serialization import dump_datetime, dump_decimal, load_datetime, load_decimal


@dataclass(frozen=True)
class Sale:
    """
    A recorded sale. Prices and profit_percentage are copied from the product
    at sale time; profit is per unit.
    """
    id: str
    product_id: str
    product_name: str
    quantity: Decimal
    buy_price: Decimal
    sell_price: Decimal
    profit: Decimal
    profit_percentage: Decimal
    date: datetime
    created_by: str

    @property
    def revenue(self) -> Decimal:
        return self.sell_price * self.quantity

    @property
    def total_profit(self) -> Decimal:
        return self.profit * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": dump_decimal(self.quantity),
            "buy_price": dump_decimal(self.buy_price),
            "sell_price": dump_decimal(self.sell_price),
            "profit": dump_decimal(self.profit),
            "profit_percentage": dump_decimal(self.profit_percentage),
            "date": dump_datetime(self.date),
            "created_by": self.created_by,
        }

    @classmethod
    def from_document(cls, data: dict) -> "Sale":
        return cls(
            id=data["id"],
            product_id=data["product_id"],
            product_name=data.get("product_name", ""),
            quantity=load_decimal(data["quantity"]),
            buy_price=load_decimal(data["buy_price"]),
            sell_price=load_decimal(data["sell_price"]),
            profit=load_decimal(data["profit"]),
            profit_percentage=load_decimal(data["profit_percentage"]),
            date=load_datetime(data["date"]),
            created_by=data.get("created_by", ""),
        )
