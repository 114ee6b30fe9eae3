# Overview: Service-layer operations for users and passwords.

"""
User accounts and password handling.

Passwords are hashed with bcrypt and checked with bcrypt.checkpw, which is
constant-time. Plaintext passwords are never stored or logged.

Only an owner may create, edit or delete users. An owner can never delete
their own account.
"""

import logging

import bcrypt

from ..errors import PermissionDenied, StoreError
from ..models import ROLE_ADMIN, ROLE_OWNER, ROLES, User
from ..repository import Repository

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 1


class PasswordValidationError(StoreError):
    """Raised when a password doesn't meet the minimum requirements."""


class UserError(StoreError):
    """Raised for user management conflicts (duplicate name, self-deletion, ...)."""


class UserNotFoundError(UserError):
    pass


def validate_password_strength(password: str) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError("Password cannot be empty")


def hash_password(password: str) -> str:
    """Validate, then hash with a fresh bcrypt salt."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if password matches hash, False otherwise (including malformed hashes)."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def require_owner(actor: User) -> None:
    if not actor.is_owner:
        raise PermissionDenied("Only the owner can perform this action")


def _normalize_username(username) -> str:
    if not isinstance(username, str) or not username.strip():
        raise UserError("username is required")
    # Case-sensitive; only surrounding whitespace is dropped
    return username.strip()


def create_user(
    repo: Repository,
    *,
    username: str,
    password: str,
    role: str = ROLE_ADMIN,
    email: str | None = None,
    created_by: User | None = None,
) -> User:
    """
    Create a user. created_by must be an owner unless this is the bootstrap
    owner (created_by=None).

    Raises PermissionDenied, UserError, PasswordValidationError.
    """
    if created_by is not None:
        require_owner(created_by)
    if role not in ROLES:
        raise UserError(f"role must be one of: {', '.join(ROLES)}")
    username = _normalize_username(username)
    password_hash = hash_password(password)

    with repo.transaction() as snapshot:
        if snapshot.find_user_by_username(username) is not None:
            raise UserError("Username already exists", details={"username": username})
        user = snapshot.upsert_user(
            repo.new_id(),
            {
                "username": username,
                "password_hash": password_hash,
                "role": role,
                "email": email or None,
                "created_at": repo.now(),
                "created_by": created_by.username if created_by else None,
            },
        )

    logger.info("User %s created with role %s", user.username, user.role)
    return user


def update_user(
    repo: Repository,
    user_id: str,
    *,
    actor: User,
    username: str | None = None,
    password: str | None = None,
    email: str | None = None,
) -> User:
    """Change username, password and/or email. Owner only."""
    require_owner(actor)
    patch: dict = {}
    if username is not None:
        patch["username"] = _normalize_username(username)
    if password is not None:
        patch["password_hash"] = hash_password(password)
    if email is not None:
        patch["email"] = email.strip() or None

    with repo.transaction() as snapshot:
        user = snapshot.find_user(user_id)
        if user is None:
            raise UserNotFoundError("User not found", details={"user_id": user_id})
        new_name = patch.get("username")
        if new_name is not None and new_name != user.username:
            if snapshot.find_user_by_username(new_name) is not None:
                raise UserError("Username already exists", details={"username": new_name})
        return snapshot.upsert_user(user_id, patch)


def delete_user(repo: Repository, user_id: str, *, actor: User) -> bool:
    """
    Delete a user. Owner only; deleting yourself is refused.

    Returns False when the id is unknown (no-op). The last owner is not
    protected beyond the self-deletion rule.
    """
    require_owner(actor)
    if user_id == actor.id:
        raise UserError("You cannot delete your own account")
    deleted = repo.delete_user(user_id)
    if deleted:
        logger.info("User %s deleted by %s", user_id, actor.username)
    return deleted


def list_users(repo: Repository) -> list[User]:
    return repo.get_users()


def bootstrap_owner(
    repo: Repository,
    *,
    username: str,
    password: str,
    email: str | None = None,
) -> User | None:
    """
    Create the default owner when the store has no users yet.

    Idempotent: returns None if any user already exists.
    """
    if repo.get_users():
        return None
    return create_user(repo, username=username, password=password, role=ROLE_OWNER, email=email)
