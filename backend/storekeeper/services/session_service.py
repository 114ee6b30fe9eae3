# Overview: Service-layer operations for session tokens.

"""
Bearer tokens for the HTTP API.

Tokens are signed and timestamped with itsdangerous (the signer Flask itself
uses), carry only the user id, and expire after SESSION_MAX_AGE_SECONDS.
Nothing is stored server-side; a deleted user's token stops resolving because
the user lookup fails.
"""

from dataclasses import dataclass

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..models import User
from ..repository import Repository

TOKEN_SALT = "storekeeper-session"


@dataclass
class SessionContext:
    user: User
    token: str


def _serializer(secret_key: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)


def issue_token(secret_key: str, user: User) -> str:
    return _serializer(secret_key).dumps({"uid": user.id})


def resolve_token(
    repo: Repository,
    secret_key: str,
    token: str,
    max_age: int,
) -> SessionContext | None:
    """Return the session for a valid, unexpired token whose user still exists."""
    try:
        payload = _serializer(secret_key).loads(token, max_age=max_age)
    except (SignatureExpired, BadSignature):
        return None

    user_id = payload.get("uid") if isinstance(payload, dict) else None
    if not user_id:
        return None
    user = repo.get_user(user_id)
    if user is None:
        return None
    return SessionContext(user=user, token=token)
