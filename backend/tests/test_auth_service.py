"""
User management tests.

Verifies:
- Passwords are stored as bcrypt hashes and never exposed
- Only the owner manages users; admins are refused
- Usernames stay unique; the owner cannot delete themselves
- Bearer tokens resolve only for existing users
"""

import pytest

from storekeeper.errors import PermissionDenied
from storekeeper.models import ROLE_ADMIN, ROLE_OWNER
from storekeeper.services import auth_service, session_service
from storekeeper.services.auth_service import (
    PasswordValidationError,
    UserError,
    UserNotFoundError,
)

from conftest import ADMIN_PASSWORD, OWNER_PASSWORD


class TestPasswords:

    def test_hash_is_bcrypt_and_verifies(self):
        hashed = auth_service.hash_password("rahasia")

        assert hashed.startswith("$2")
        assert hashed != "rahasia"
        assert auth_service.verify_password("rahasia", hashed)
        assert not auth_service.verify_password("Rahasia", hashed)

    def test_malformed_hash_does_not_verify(self):
        assert auth_service.verify_password("x", "not-a-bcrypt-hash") is False

    @pytest.mark.parametrize("password", ["", None])
    def test_empty_password_rejected(self, password):
        with pytest.raises(PasswordValidationError):
            auth_service.hash_password(password)

    def test_public_dict_hides_hash(self, owner):
        assert "password_hash" not in owner.to_dict()


class TestCreateUser:

    def test_owner_creates_admin(self, repo, owner, admin):
        assert admin.role == ROLE_ADMIN
        assert admin.created_by == "owner"
        assert auth_service.verify_password(ADMIN_PASSWORD, admin.password_hash)

    def test_admin_cannot_create_users(self, repo, admin):
        with pytest.raises(PermissionDenied):
            auth_service.create_user(repo, username="new", password="pw", created_by=admin)
        assert repo.find_user_by_username("new") is None

    def test_duplicate_username_rejected(self, repo, owner, admin):
        with pytest.raises(UserError) as excinfo:
            auth_service.create_user(repo, username="kasir", password="pw", created_by=owner)
        assert excinfo.value.details == {"username": "kasir"}

    def test_username_differs_only_by_case(self, repo, owner, admin):
        user = auth_service.create_user(repo, username="Kasir", password="pw", created_by=owner)
        assert user.username == "Kasir"

    def test_unknown_role_rejected(self, repo, owner):
        with pytest.raises(UserError):
            auth_service.create_user(
                repo, username="x", password="pw", role="manager", created_by=owner
            )

    def test_bootstrap_owner_is_idempotent(self, repo):
        first = auth_service.bootstrap_owner(repo, username="boss", password="pw")
        second = auth_service.bootstrap_owner(repo, username="boss2", password="pw")

        assert first.role == ROLE_OWNER
        assert second is None
        assert [u.username for u in repo.get_users()] == ["boss"]


class TestUpdateAndDelete:

    def test_owner_changes_password(self, repo, owner, admin):
        auth_service.update_user(repo, admin.id, actor=owner, password="baru")

        stored = repo.get_user(admin.id)
        assert auth_service.verify_password("baru", stored.password_hash)
        assert not auth_service.verify_password(ADMIN_PASSWORD, stored.password_hash)

    def test_rename_to_taken_username_rejected(self, repo, owner, admin):
        with pytest.raises(UserError):
            auth_service.update_user(repo, admin.id, actor=owner, username="owner")

    def test_update_unknown_user(self, repo, owner):
        with pytest.raises(UserNotFoundError):
            auth_service.update_user(repo, "missing", actor=owner, email="a@b.c")

    def test_admin_cannot_update(self, repo, owner, admin):
        with pytest.raises(PermissionDenied):
            auth_service.update_user(repo, owner.id, actor=admin, password="hijack")
        assert auth_service.verify_password(OWNER_PASSWORD, repo.get_user(owner.id).password_hash)

    def test_owner_cannot_delete_self(self, repo, owner):
        with pytest.raises(UserError):
            auth_service.delete_user(repo, owner.id, actor=owner)
        assert repo.get_user(owner.id) is not None

    def test_delete_admin_then_unknown_is_noop(self, repo, owner, admin):
        assert auth_service.delete_user(repo, admin.id, actor=owner) is True
        assert auth_service.delete_user(repo, admin.id, actor=owner) is False


class TestSessionTokens:

    def test_token_resolves_to_user(self, repo, owner):
        token = session_service.issue_token("secret", owner)

        context = session_service.resolve_token(repo, "secret", token, max_age=60)

        assert context.user.id == owner.id
        assert context.token == token

    def test_wrong_secret_or_garbage_rejected(self, repo, owner):
        token = session_service.issue_token("secret", owner)
        assert session_service.resolve_token(repo, "other", token, max_age=60) is None
        assert session_service.resolve_token(repo, "secret", "garbage", max_age=60) is None

    def test_deleted_user_token_stops_resolving(self, repo, owner, admin):
        token = session_service.issue_token("secret", admin)
        auth_service.delete_user(repo, admin.id, actor=owner)
        assert session_service.resolve_token(repo, "secret", token, max_age=60) is None
