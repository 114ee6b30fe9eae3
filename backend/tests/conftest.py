"""
Pytest fixtures for storekeeper backend tests.

Provides an in-memory repository with a controllable clock, the Flask app and
test client wired to it, and owner/admin users with bearer headers.
"""

from datetime import datetime, timedelta
from itertools import count

import pytest

from storekeeper import create_app
from storekeeper.document_store import MemoryDocumentStore
from storekeeper.models import ROLE_ADMIN, ROLE_OWNER
from storekeeper.repository import Repository
from storekeeper.services import auth_service, inventory_service


OWNER_PASSWORD = "owner-pass"
ADMIN_PASSWORD = "admin-pass"


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


def sequential_ids(prefix: str = "id"):
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost keeps the suite fast; hashing behaviour is unchanged."""
    monkeypatch.setattr(auth_service, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 14, 9, 30, 0))


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def repo(store, clock):
    return Repository(store, clock=clock, id_factory=sequential_ids())


@pytest.fixture
def owner(repo):
    return auth_service.create_user(
        repo,
        username="owner",
        password=OWNER_PASSWORD,
        role=ROLE_OWNER,
        email="owner@toko.test",
    )


@pytest.fixture
def admin(repo, owner):
    return auth_service.create_user(
        repo,
        username="kasir",
        password=ADMIN_PASSWORD,
        role=ROLE_ADMIN,
        created_by=owner,
    )


@pytest.fixture
def product(repo, owner):
    """Product {buy 1000, sell 1500, stock 10} with its opening stock-in."""
    return inventory_service.create_product(
        repo,
        name="Beras 5kg",
        sku="BRS-5",
        unit="sak",
        buy_price=1000,
        sell_price=1500,
        opening_stock=10,
        created_by=owner,
    )


@pytest.fixture
def app(repo):
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test",
            "DOCUMENT_STORE": "memory",
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "MAIL_DEFAULT_SENDER": "noreply@toko.test",
        },
        repository=repo,
    )
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username: str, password: str):
    return client.post("/api/auth/login", json={"username": username, "password": password})


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers(client, owner):
    response = login(client, owner.username, OWNER_PASSWORD)
    assert response.status_code == 200, response.get_json()
    return auth_headers(response.get_json()["token"])


@pytest.fixture
def admin_headers(client, admin):
    response = login(client, admin.username, ADMIN_PASSWORD)
    assert response.status_code == 200, response.get_json()
    return auth_headers(response.get_json()["token"])
