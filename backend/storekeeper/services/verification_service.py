# Overview: Out-of-band email verification that lifts the NEEDS_VERIFICATION throttle state.

"""
Email verification codes.

A username that reached NEEDS_VERIFICATION can ask for a one-time code. The
code is generated with `secrets`, only its SHA-256 hash is stored on the
LoginAttempt, and it expires after a configurable TTL. The plaintext code
leaves this module only through the `send` callable.

A correct code removes the LoginAttempt record entirely, after which normal
login resumes. Wrong codes do not count as login failures.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import timedelta
from typing import Callable

from ..errors import StoreError
from ..repository import Repository
from .login_throttle_service import needs_verification

logger = logging.getLogger(__name__)

CODE_LENGTH = 6
DEFAULT_CODE_TTL = timedelta(minutes=15)

# send(recipient_email, code)
SendCode = Callable[[str, str], None]


class VerificationError(StoreError):
    """Base for verification failures."""


class VerificationNotRequired(VerificationError):
    pass


class NoVerificationAddress(VerificationError):
    pass


class InvalidVerificationCode(VerificationError):
    pass


def generate_code() -> str:
    return "".join(secrets.choice("0123456789") for _ in range(CODE_LENGTH))


def hash_code(code: str) -> str:
    # Codes are short-lived and single-use; SHA-256 keeps them out of the document
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def request_verification(
    repo: Repository,
    username: str,
    send: SendCode,
    *,
    ttl: timedelta = DEFAULT_CODE_TTL,
) -> str:
    """
    Issue a fresh code for username and dispatch it.

    The code goes to the user's email, or to the owner email from settings
    when the user has none (or the username does not exist). A new request
    replaces any earlier code.

    Returns the recipient address.
    """
    with repo.transaction() as snapshot:
        attempt = snapshot.login_attempts.get(username)
        if not needs_verification(attempt):
            raise VerificationNotRequired("Email verification is not required for this account")

        user = snapshot.find_user_by_username(username)
        recipient = (user.email if user else None) or snapshot.settings.owner_email
        if not recipient:
            raise NoVerificationAddress("No email address on file for verification")

        code = generate_code()
        attempt.verification_code_hash = hash_code(code)
        attempt.verification_expires_at = repo.now() + ttl

    send(recipient, code)
    logger.info("Verification code for %s sent", username)
    return recipient


def verify_email(repo: Repository, username: str, code: str) -> None:
    """
    Check a code. On success the LoginAttempt record is cleared.

    Raises VerificationNotRequired or InvalidVerificationCode.
    """
    with repo.transaction() as snapshot:
        attempt = snapshot.login_attempts.get(username)
        if not needs_verification(attempt):
            raise VerificationNotRequired("Email verification is not required for this account")

        if attempt.verification_code_hash is None or attempt.verification_expires_at is None:
            raise InvalidVerificationCode("No verification code has been issued")
        if attempt.verification_expires_at <= repo.now():
            raise InvalidVerificationCode("Verification code has expired")
        if not isinstance(code, str) or not hmac.compare_digest(
            hash_code(code.strip()), attempt.verification_code_hash
        ):
            raise InvalidVerificationCode("Invalid verification code")

        del snapshot.login_attempts[username]

    logger.info("Email verification for %s succeeded; login attempts cleared", username)
