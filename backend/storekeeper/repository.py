"""
Entity repository over the document store.

Every operation loads the full snapshot, mutates an in-memory copy and
saves the full snapshot back. Cross-entity writes go through transaction(),
which performs exactly one load and one save; if the block raises, nothing
is saved.

The Repository is the application-state object: create_app builds one and
hands it to services explicitly. It also owns the clock and the id
generator so tests can control time and identity.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterator

from .document_store import DocumentStore
from .models import (
    LoginAttempt,
    Product,
    Sale,
    Settings,
    Snapshot,
    StockTransaction,
    User,
)
from .time_utils import Clock, utcnow
from .validation import ValidationError


def new_id() -> str:
    return uuid.uuid4().hex


class Repository:
    def __init__(
        self,
        store: DocumentStore,
        *,
        clock: Clock = utcnow,
        id_factory: Callable[[], str] = new_id,
    ):
        self.store = store
        self._clock = clock
        self._id_factory = id_factory

    def now(self) -> datetime:
        return self._clock()

    def new_id(self) -> str:
        return self._id_factory()

    def snapshot(self) -> Snapshot:
        return Snapshot.from_dict(self.store.load())

    @contextmanager
    def transaction(self) -> Iterator[Snapshot]:
        """Load once, let the caller mutate, save once on clean exit."""
        snapshot = self.snapshot()
        yield snapshot
        self.store.save(snapshot.to_dict())

    # -- lists ---------------------------------------------------------------

    def get_users(self) -> list[User]:
        return self.snapshot().users

    def get_products(self) -> list[Product]:
        return self.snapshot().products

    def get_stock_transactions(self) -> list[StockTransaction]:
        return self.snapshot().stock_transactions

    def get_sales(self) -> list[Sale]:
        return self.snapshot().sales

    # -- lookups -------------------------------------------------------------

    def get_user(self, user_id: str) -> User | None:
        return self.snapshot().find_user(user_id)

    def find_user_by_username(self, username: str) -> User | None:
        return self.snapshot().find_user_by_username(username)

    def get_product(self, product_id: str) -> Product | None:
        return self.snapshot().find_product(product_id)

    # -- writes --------------------------------------------------------------

    def upsert_user(self, user_id: str, patch: dict) -> User:
        with self.transaction() as snapshot:
            return snapshot.upsert_user(user_id, patch)

    def delete_user(self, user_id: str) -> bool:
        """Deleting an unknown id is a no-op."""
        with self.transaction() as snapshot:
            return snapshot.delete_user(user_id)

    def upsert_product(self, product_id: str, patch: dict) -> Product:
        """Stock is not patchable; a new product starts at zero."""
        if "stock" in patch:
            raise ValidationError("stock only changes through a stock transaction")
        with self.transaction() as snapshot:
            if snapshot.find_product(product_id) is None:
                patch = {"stock": Decimal("0"), **patch}
            return snapshot.upsert_product(product_id, patch)

    def delete_product(self, product_id: str) -> bool:
        with self.transaction() as snapshot:
            return snapshot.delete_product(product_id)

    def add_stock_transaction(self, transaction: StockTransaction) -> StockTransaction:
        with self.transaction() as snapshot:
            return snapshot.add_stock_transaction(transaction)

    def add_sale(self, sale: Sale) -> Sale:
        with self.transaction() as snapshot:
            return snapshot.add_sale(sale)

    # -- settings ------------------------------------------------------------

    def get_settings(self) -> Settings:
        return self.snapshot().settings

    def patch_settings(self, partial: dict) -> Settings:
        unknown = set(partial) - set(Settings.field_names())
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        with self.transaction() as snapshot:
            for key, value in partial.items():
                setattr(snapshot.settings, key, value)
            return snapshot.settings

    # -- login attempts ------------------------------------------------------

    def get_login_attempt(self, username: str) -> LoginAttempt | None:
        return self.snapshot().login_attempts.get(username)

    def put_login_attempt(self, attempt: LoginAttempt) -> LoginAttempt:
        with self.transaction() as snapshot:
            snapshot.login_attempts[attempt.username] = attempt
            return attempt

    def clear_login_attempt(self, username: str) -> bool:
        with self.transaction() as snapshot:
            return snapshot.login_attempts.pop(username, None) is not None
