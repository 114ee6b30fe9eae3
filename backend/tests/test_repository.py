"""
Repository and snapshot tests.

Verifies:
- Upsert creates then patches; delete of an unknown id is a no-op
- A transaction saves once on success and nothing on error
- Append-only ledgers refuse reused ids
- Settings are a patched singleton
"""

from decimal import Decimal

import pytest

from storekeeper.models import DuplicateIdError, Sale, Snapshot
from storekeeper.repository import Repository, new_id
from storekeeper.validation import ValidationError


class CountingStore:
    """MemoryDocumentStore stand-in that counts loads and saves."""

    def __init__(self):
        self.document = None
        self.loads = 0
        self.saves = 0

    def load(self):
        self.loads += 1
        return self.document

    def save(self, document):
        self.saves += 1
        self.document = document


def make_sale(repo, sale_id="s-1"):
    return Sale(
        id=sale_id,
        product_id="p-1",
        product_name="Kopi",
        quantity=Decimal("1"),
        buy_price=Decimal("2000"),
        sell_price=Decimal("3000"),
        profit=Decimal("1000"),
        profit_percentage=Decimal("50"),
        date=repo.now(),
        created_by="owner",
    )


class TestSnapshotDocument:

    def test_empty_store_gives_default_snapshot(self, repo):
        snapshot = repo.snapshot()
        assert snapshot.users == []
        assert snapshot.login_attempts == {}
        assert snapshot.settings.currency == "IDR"

    def test_document_layout(self, repo, product):
        document = repo.snapshot().to_dict()

        assert document["version"] == 1
        assert set(document) >= {"users", "products", "stock_transactions", "sales", "settings"}
        assert document["products"][0]["stock"] == "10"
        assert document["products"][0]["created_at"] == "2026-03-14T09:30:00Z"
        assert "password_hash" in document["users"][0]

    def test_from_dict_tolerates_missing_sections(self):
        snapshot = Snapshot.from_dict({"version": 1, "settings": {"theme": "dark", "legacy": 1}})
        assert snapshot.products == []
        assert snapshot.settings.theme == "dark"


class TestUpsertAndDelete:

    def test_upsert_creates_then_patches(self, repo, owner):
        repo.upsert_user(owner.id, {"email": "new@toko.test"})

        user = repo.get_user(owner.id)
        assert user.email == "new@toko.test"
        assert user.username == "owner"
        assert len(repo.get_users()) == 1

    def test_delete_unknown_is_noop(self, repo, owner):
        before = repo.snapshot().to_dict()
        assert repo.delete_user("nobody") is False
        assert repo.snapshot().to_dict() == before

    def test_find_user_by_username_is_exact(self, repo, owner):
        assert repo.find_user_by_username("owner").id == owner.id
        assert repo.find_user_by_username("OWNER") is None

    def test_partial_patch_for_new_id_rejected(self, repo):
        with pytest.raises(ValidationError) as excinfo:
            repo.upsert_product("p-new", {"name": "Gula"})
        assert "buy_price" in str(excinfo.value)
        assert repo.get_products() == []

    def test_unknown_field_rejected(self, repo, product):
        before = repo.snapshot().to_dict()
        for patch in ({"colour": "red"}, {"id": "other"}):
            with pytest.raises(ValidationError):
                repo.upsert_product(product.id, patch)
        with pytest.raises(ValidationError):
            repo.upsert_user("u-new", {"nickname": "x"})
        assert repo.snapshot().to_dict() == before

    def test_stock_not_patchable(self, repo, product):
        with pytest.raises(ValidationError):
            repo.upsert_product(product.id, {"stock": Decimal("99")})
        assert repo.get_product(product.id).stock == Decimal("10")

    def test_new_product_starts_at_zero_stock(self, repo, clock):
        created = repo.upsert_product(
            "p-new",
            {
                "name": "Gula",
                "sku": "",
                "unit": "kg",
                "buy_price": Decimal("12000"),
                "sell_price": Decimal("14000"),
                "profit_percentage": Decimal("16.67"),
                "created_at": clock(),
                "created_by": "owner",
            },
        )
        assert created.stock == Decimal("0")
        assert repo.get_product("p-new").name == "Gula"


class TestTransaction:

    def test_one_load_one_save(self, clock):
        store = CountingStore()
        repo = Repository(store, clock=clock)

        with repo.transaction() as snapshot:
            snapshot.add_sale(make_sale(repo, "a"))
            snapshot.add_sale(make_sale(repo, "b"))

        assert (store.loads, store.saves) == (1, 1)
        assert len(repo.get_sales()) == 2

    def test_error_inside_block_saves_nothing(self, repo, product):
        before = repo.snapshot().to_dict()

        with pytest.raises(RuntimeError):
            with repo.transaction() as snapshot:
                snapshot.find_product(product.id).stock = Decimal("0")
                raise RuntimeError("boom")

        assert repo.snapshot().to_dict() == before

    def test_duplicate_sale_id_rejected(self, repo):
        repo.add_sale(make_sale(repo))

        with pytest.raises(DuplicateIdError):
            repo.add_sale(make_sale(repo))
        assert len(repo.get_sales()) == 1


class TestSettings:

    def test_patch_updates_in_place(self, repo):
        settings = repo.patch_settings({"store_name": "Toko Makmur", "theme": "dark"})

        assert settings.store_name == "Toko Makmur"
        assert repo.get_settings().theme == "dark"
        assert repo.get_settings().language == "id"

    def test_unknown_key_rejected(self, repo):
        with pytest.raises(ValueError):
            repo.patch_settings({"colour": "red"})


class TestLoginAttempts:

    def test_clear_reports_whether_record_existed(self, repo):
        from storekeeper.models import LoginAttempt

        repo.put_login_attempt(LoginAttempt(username="ghost", count=1, last_attempt=repo.now()))

        assert repo.get_login_attempt("ghost").count == 1
        assert repo.clear_login_attempt("ghost") is True
        assert repo.clear_login_attempt("ghost") is False


def test_default_ids_are_unique_hex():
    first, second = new_id(), new_id()
    assert first != second
    assert len(first) == 32
    int(first, 16)
