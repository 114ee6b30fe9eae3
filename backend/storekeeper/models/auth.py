from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .serialization import dump_datetime, load_datetime

ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"
ROLES = (ROLE_OWNER, ROLE_ADMIN)


@dataclass
class User:
    """
    A person allowed to sign in.

    Usernames are unique and case-sensitive. Only a bcrypt hash of the
    password is kept; see services.auth_service.
    """
    id: str
    username: str
    password_hash: str
    role: str
    created_at: datetime
    email: str | None = None
    created_by: str | None = None

    @property
    def is_owner(self) -> bool:
        return self.role == ROLE_OWNER

    def to_dict(self) -> dict:
        """Public representation; never includes the password hash."""
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "email": self.email,
            "created_at": dump_datetime(self.created_at),
            "created_by": self.created_by,
        }

    def to_document(self) -> dict:
        data = self.to_dict()
        data["password_hash"] = self.password_hash
        return data

    @classmethod
    def from_document(cls, data: dict) -> "User":
        return cls(
            id=data["id"],
            username=data["username"],
            password_hash=data["password_hash"],
            role=data["role"],
            created_at=load_datetime(data["created_at"]),
            email=data.get("email"),
            created_by=data.get("created_by"),
        )


@dataclass
class LoginAttempt:
    """
    Failed-login bookkeeping for one username (known or not).

    Created on the first failure, bumped on every further failure, removed on
    successful sign-in or successful email verification.
    """
    username: str
    count: int
    last_attempt: datetime
    locked_until: datetime | None = None
    requires_email_verification: bool = False
    verification_code_hash: str | None = None
    verification_expires_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "username": self.username,
            "count": self.count,
            "last_attempt": dump_datetime(self.last_attempt),
            "locked_until": dump_datetime(self.locked_until),
            "requires_email_verification": self.requires_email_verification,
        }

    def to_document(self) -> dict:
        data = self.to_dict()
        data["verification_code_hash"] = self.verification_code_hash
        data["verification_expires_at"] = dump_datetime(self.verification_expires_at)
        return data

    @classmethod
    def from_document(cls, data: dict) -> "LoginAttempt":
        return cls(
            username=data["username"],
            count=int(data["count"]),
            last_attempt=load_datetime(data["last_attempt"]),
            locked_until=load_datetime(data.get("locked_until")),
            requires_email_verification=bool(data.get("requires_email_verification", False)),
            verification_code_hash=data.get("verification_code_hash"),
            verification_expires_at=load_datetime(data.get("verification_expires_at")),
        )
