"""
Login Throttling Service

Escalating penalty for repeated failed logins, tracked per username. Unknown
usernames are throttled exactly like known ones so probing for accounts
gains nothing.

States per username:
- CLEAN: no LoginAttempt record
- WARNED: 1-2 failures, login still permitted
- LOCKED: 3-9 failures; rejected until locked_until passes. Expiry does not
  reset the counter, so the next failure locks again.
- NEEDS_VERIFICATION: 10+ failures; rejected regardless of password or lock
  timer until email verification (verification_service) clears the record.

Attempts made while locked or awaiting verification are not counted.
A successful login removes the record.
"""

from datetime import datetime, timedelta
from enum import Enum
import logging

from ..errors import StoreError
from ..models import LoginAttempt, Snapshot, User
from ..repository import Repository
from .auth_service import verify_password

logger = logging.getLogger(__name__)


# Configuration constants
LOCK_AFTER_FAILURES = 3
VERIFY_AFTER_FAILURES = 10
LOCKOUT_DURATION = timedelta(minutes=5)


class ThrottleState(str, Enum):
    CLEAN = "CLEAN"
    WARNED = "WARNED"
    LOCKED = "LOCKED"
    NEEDS_VERIFICATION = "NEEDS_VERIFICATION"


class LoginError(StoreError):
    """Base for every failed login outcome."""

    def __init__(self, message: str, *, username: str, failed_attempts: int, details: dict | None = None):
        super().__init__(message, details={"failed_attempts": failed_attempts, **(details or {})})
        self.username = username
        self.failed_attempts = failed_attempts


class UserNotFound(LoginError):
    def __init__(self, username: str, failed_attempts: int):
        super().__init__("Username not found", username=username, failed_attempts=failed_attempts)


class WrongPassword(LoginError):
    def __init__(self, username: str, failed_attempts: int):
        remaining = max(LOCK_AFTER_FAILURES - failed_attempts, 0)
        super().__init__(
            "Wrong password",
            username=username,
            failed_attempts=failed_attempts,
            details={"attempts_before_lock": remaining},
        )
        self.attempts_before_lock = remaining


class AccountLocked(LoginError):
    def __init__(self, username: str, failed_attempts: int, remaining_seconds: int, message: str | None = None):
        minutes = -(-remaining_seconds // 60)
        super().__init__(
            message or f"Account locked. Try again in {minutes} minute(s).",
            username=username,
            failed_attempts=failed_attempts,
            details={"remaining_seconds": remaining_seconds},
        )
        self.remaining_seconds = remaining_seconds


class VerificationRequired(LoginError):
    def __init__(self, username: str, failed_attempts: int):
        super().__init__(
            "Too many failed attempts. Email verification required.",
            username=username,
            failed_attempts=failed_attempts,
            details={"requires_email_verification": True},
        )


def needs_verification(attempt: LoginAttempt | None) -> bool:
    if attempt is None:
        return False
    return attempt.requires_email_verification or attempt.count >= VERIFY_AFTER_FAILURES


def seconds_until_unlock(attempt: LoginAttempt | None, now: datetime) -> int | None:
    if attempt is None or attempt.locked_until is None or attempt.locked_until <= now:
        return None
    # Round up so "locked" never reports 0 seconds
    delta = attempt.locked_until - now
    return max(int(-(-delta.total_seconds() // 1)), 1)


def classify(attempt: LoginAttempt | None, now: datetime) -> ThrottleState:
    if attempt is None:
        return ThrottleState.CLEAN
    if needs_verification(attempt):
        return ThrottleState.NEEDS_VERIFICATION
    if seconds_until_unlock(attempt, now) is not None:
        return ThrottleState.LOCKED
    return ThrottleState.WARNED


def _record_failure(snapshot: Snapshot, username: str, now: datetime) -> LoginAttempt:
    previous = snapshot.login_attempts.get(username)
    count = (previous.count if previous else 0) + 1

    attempt = LoginAttempt(username=username, count=count, last_attempt=now)
    if count >= VERIFY_AFTER_FAILURES:
        attempt.requires_email_verification = True
        if previous is not None and previous.requires_email_verification:
            attempt.verification_code_hash = previous.verification_code_hash
            attempt.verification_expires_at = previous.verification_expires_at
        if count == VERIFY_AFTER_FAILURES:
            logger.warning("Login for %s now requires email verification", username)
    elif count >= LOCK_AFTER_FAILURES:
        attempt.locked_until = now + LOCKOUT_DURATION
        logger.warning("Login for %s locked until %s after %d failures", username, attempt.locked_until, count)

    snapshot.login_attempts[username] = attempt
    return attempt


def _failure_for(username: str, attempt: LoginAttempt, now: datetime) -> LoginError:
    """Pick the failure tier for a freshly recorded wrong password."""
    if needs_verification(attempt):
        return VerificationRequired(username, attempt.count)
    if attempt.count >= LOCK_AFTER_FAILURES:
        minutes = int(LOCKOUT_DURATION.total_seconds() // 60)
        return AccountLocked(
            username,
            attempt.count,
            seconds_until_unlock(attempt, now) or int(LOCKOUT_DURATION.total_seconds()),
            message=f"Wrong password. Account locked for {minutes} minutes.",
        )
    return WrongPassword(username, attempt.count)


def attempt_login(repo: Repository, username: str, password: str) -> User:
    """
    Authenticate username/password under the throttle rules.

    Returns the User on success and clears the failure record. Otherwise
    raises UserNotFound, WrongPassword, AccountLocked or VerificationRequired.
    Failures are persisted before the exception leaves this function.
    """
    failure: LoginError | None = None

    with repo.transaction() as snapshot:
        now = repo.now()
        user = snapshot.find_user_by_username(username)
        attempt = snapshot.login_attempts.get(username)

        # Lock and verification apply to every username, known or not, and do not count
        if seconds_until_unlock(attempt, now) is not None:
            failure = AccountLocked(username, attempt.count, seconds_until_unlock(attempt, now))
        elif needs_verification(attempt):
            failure = VerificationRequired(username, attempt.count)
        elif user is None:
            recorded = _record_failure(snapshot, username, now)
            failure = UserNotFound(username, recorded.count)
        elif verify_password(password, user.password_hash):
            snapshot.login_attempts.pop(username, None)
        else:
            recorded = _record_failure(snapshot, username, now)
            failure = _failure_for(username, recorded, now)

    if failure is not None:
        raise failure
    logger.info("User %s logged in", user.username)
    return user


def get_lockout_status(repo: Repository, username: str) -> dict:
    """
    Get detailed lockout status for a username.
    """
    now = repo.now()
    attempt = repo.get_login_attempt(username)
    return {
        "username": username,
        "state": classify(attempt, now).value,
        "failed_attempts": attempt.count if attempt else 0,
        "locked": seconds_until_unlock(attempt, now) is not None,
        "seconds_until_unlock": seconds_until_unlock(attempt, now),
        "requires_email_verification": needs_verification(attempt),
        "lock_after_failures": LOCK_AFTER_FAILURES,
        "verify_after_failures": VERIFY_AFTER_FAILURES,
        "lockout_duration_minutes": int(LOCKOUT_DURATION.total_seconds() / 60),
    }


def clear_attempts(repo: Repository, username: str) -> bool:
    """Manual unlock. Returns False if there was nothing to clear."""
    cleared = repo.clear_login_attempt(username)
    if cleared:
        logger.info("Login attempts for %s cleared", username)
    return cleared
