"""
The whole store as one document.

A Snapshot is what the document store loads and saves. Services mutate a
Snapshot inside Repository.transaction(); the helpers here are plain list and
dict operations with O(n) lookups, which is fine for one shop's data.
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields, replace

from .auth import LoginAttempt, User
from .inventory import Product, StockTransaction
from .sales import Sale
from .settings import Settings
from ..validation import ValidationError

DOCUMENT_VERSION = 1


class DuplicateIdError(ValueError):
    """An append-only entity was added twice under the same id."""


@dataclass
class Snapshot:
    users: list[User] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    stock_transactions: list[StockTransaction] = field(default_factory=list)
    sales: list[Sale] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    login_attempts: dict[str, LoginAttempt] = field(default_factory=dict)

    # -- users ---------------------------------------------------------------

    def find_user(self, user_id: str) -> User | None:
        return next((u for u in self.users if u.id == user_id), None)

    def find_user_by_username(self, username: str) -> User | None:
        return next((u for u in self.users if u.username == username), None)

    def upsert_user(self, user_id: str, patch: dict) -> User:
        return _upsert(self.users, User, user_id, patch)

    def delete_user(self, user_id: str) -> bool:
        return _delete(self.users, user_id)

    # -- products ------------------------------------------------------------

    def find_product(self, product_id: str) -> Product | None:
        return next((p for p in self.products if p.id == product_id), None)

    def upsert_product(self, product_id: str, patch: dict) -> Product:
        return _upsert(self.products, Product, product_id, patch)

    def delete_product(self, product_id: str) -> bool:
        return _delete(self.products, product_id)

    # -- append-only ledgers -------------------------------------------------

    def add_stock_transaction(self, transaction: StockTransaction) -> StockTransaction:
        return _append(self.stock_transactions, transaction)

    def add_sale(self, sale: Sale) -> Sale:
        return _append(self.sales, sale)

    # -- (de)serialization ---------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "version": DOCUMENT_VERSION,
            "users": [u.to_document() for u in self.users],
            "products": [p.to_dict() for p in self.products],
            "stock_transactions": [t.to_dict() for t in self.stock_transactions],
            "sales": [s.to_dict() for s in self.sales],
            "settings": self.settings.to_dict(),
            "login_attempts": {
                username: attempt.to_document()
                for username, attempt in self.login_attempts.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "Snapshot":
        if not data:
            return cls()
        return cls(
            users=[User.from_document(u) for u in data.get("users", [])],
            products=[Product.from_document(p) for p in data.get("products", [])],
            stock_transactions=[
                StockTransaction.from_document(t) for t in data.get("stock_transactions", [])
            ],
            sales=[Sale.from_document(s) for s in data.get("sales", [])],
            settings=Settings.from_document(data.get("settings")),
            login_attempts={
                username: LoginAttempt.from_document(attempt)
                for username, attempt in (data.get("login_attempts") or {}).items()
            },
        )


def _upsert(items: list, cls, entity_id: str, patch: dict):
    """Patch the entity with this id, or create it when the patch carries every required field."""
    known = {f.name for f in fields(cls)} - {"id"}
    unknown = sorted(set(patch) - known)
    if unknown:
        raise ValidationError(f"Unknown {cls.__name__} fields: {', '.join(unknown)}")
    for index, item in enumerate(items):
        if item.id == entity_id:
            items[index] = replace(item, **patch)
            return items[index]
    missing = sorted(
        f.name for f in fields(cls)
        if f.name in known and f.name not in patch
        and f.default is MISSING and f.default_factory is MISSING
    )
    if missing:
        raise ValidationError(f"Missing {cls.__name__} fields: {', '.join(missing)}")
    item = cls(id=entity_id, **patch)
    items.append(item)
    return item


def _delete(items: list, entity_id: str) -> bool:
    for index, item in enumerate(items):
        if item.id == entity_id:
            del items[index]
            return True
    return False


def _append(items: list, entity):
    if any(item.id == entity.id for item in items):
        raise DuplicateIdError(f"{type(entity).__name__} {entity.id} already exists")
    items.append(entity)
    return entity
