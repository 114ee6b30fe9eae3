"""
Login throttle state machine tests.

Verifies:
- Two failures still allow a correct login, which clears the record
- The third failure locks for five minutes; lock expiry alone keeps the count
- Ten failures demand email verification regardless of password or timer
- Unknown usernames are throttled like known ones
"""

import pytest

from storekeeper.services import auth_service
from storekeeper.services import login_throttle_service as throttle
from storekeeper.services.login_throttle_service import (
    AccountLocked,
    ThrottleState,
    UserNotFound,
    VerificationRequired,
    WrongPassword,
)

from conftest import OWNER_PASSWORD


def fail(repo, username, password="wrong-password"):
    with pytest.raises(throttle.LoginError) as excinfo:
        throttle.attempt_login(repo, username, password)
    return excinfo.value


def state_of(repo, username):
    return throttle.classify(repo.get_login_attempt(username), repo.now())


class TestSuccessfulLogin:

    def test_correct_password_returns_user(self, repo, owner):
        user = throttle.attempt_login(repo, "owner", OWNER_PASSWORD)
        assert user.id == owner.id
        assert repo.get_login_attempt("owner") is None

    def test_username_is_case_sensitive(self, repo, owner):
        error = fail(repo, "Owner", OWNER_PASSWORD)
        assert isinstance(error, UserNotFound)

    def test_two_failures_then_correct_password_succeeds_and_clears(self, repo, owner):
        first = fail(repo, "owner")
        second = fail(repo, "owner")
        assert isinstance(first, WrongPassword) and first.failed_attempts == 1
        assert isinstance(second, WrongPassword) and second.attempts_before_lock == 1
        assert state_of(repo, "owner") is ThrottleState.WARNED

        throttle.attempt_login(repo, "owner", OWNER_PASSWORD)

        assert repo.get_login_attempt("owner") is None
        assert state_of(repo, "owner") is ThrottleState.CLEAN


class TestLockout:

    def test_third_failure_locks_for_five_minutes(self, repo, owner, clock):
        fail(repo, "owner")
        fail(repo, "owner")
        third = fail(repo, "owner")

        assert isinstance(third, AccountLocked)
        assert third.remaining_seconds == 300
        attempt = repo.get_login_attempt("owner")
        assert attempt.count == 3
        assert attempt.locked_until == clock() + throttle.LOCKOUT_DURATION
        assert state_of(repo, "owner") is ThrottleState.LOCKED

    def test_correct_password_rejected_while_locked(self, repo, owner, clock):
        for _ in range(3):
            fail(repo, "owner")
        clock.advance(minutes=2)

        error = fail(repo, "owner", OWNER_PASSWORD)

        assert isinstance(error, AccountLocked)
        assert error.remaining_seconds == 180

    def test_attempts_while_locked_do_not_count_or_extend(self, repo, owner, clock):
        for _ in range(3):
            fail(repo, "owner")
        locked_until = repo.get_login_attempt("owner").locked_until

        for _ in range(5):
            fail(repo, "owner")

        attempt = repo.get_login_attempt("owner")
        assert attempt.count == 3
        assert attempt.locked_until == locked_until

    def test_login_succeeds_after_lock_expires_and_record_is_removed(self, repo, owner, clock):
        for _ in range(3):
            fail(repo, "owner", "x")
        assert isinstance(fail(repo, "owner", OWNER_PASSWORD), AccountLocked)

        clock.advance(minutes=5, seconds=1)
        user = throttle.attempt_login(repo, "owner", OWNER_PASSWORD)

        assert user.username == "owner"
        assert repo.get_login_attempt("owner") is None

    def test_lock_expiry_keeps_counter_and_next_failure_relocks(self, repo, owner, clock):
        for _ in range(3):
            fail(repo, "owner")
        clock.advance(minutes=6)
        assert state_of(repo, "owner") is ThrottleState.WARNED
        assert repo.get_login_attempt("owner").count == 3

        error = fail(repo, "owner")

        assert isinstance(error, AccountLocked)
        assert repo.get_login_attempt("owner").count == 4


class TestVerificationRequired:

    def _fail_ten_times(self, repo, clock, username="owner"):
        errors = []
        for _ in range(10):
            errors.append(fail(repo, username))
            clock.advance(minutes=6)
        return errors

    def test_tenth_failure_requires_verification(self, repo, owner, clock):
        errors = self._fail_ten_times(repo, clock)

        assert isinstance(errors[-1], VerificationRequired)
        attempt = repo.get_login_attempt("owner")
        assert attempt.count == 10
        assert attempt.requires_email_verification is True
        assert attempt.locked_until is None
        assert state_of(repo, "owner") is ThrottleState.NEEDS_VERIFICATION

    def test_correct_password_rejected_until_cleared(self, repo, owner, clock):
        self._fail_ten_times(repo, clock)
        clock.advance(days=3)

        for password in (OWNER_PASSWORD, "wrong-password"):
            error = fail(repo, "owner", password)
            assert isinstance(error, VerificationRequired)
        assert repo.get_login_attempt("owner").count == 10

        throttle.clear_attempts(repo, "owner")
        assert throttle.attempt_login(repo, "owner", OWNER_PASSWORD).username == "owner"


class TestUnknownUsername:

    def test_unknown_username_records_failure(self, repo, owner):
        error = fail(repo, "ghost")
        assert isinstance(error, UserNotFound)
        assert repo.get_login_attempt("ghost").count == 1

    def test_unknown_username_is_locked_after_three_failures(self, repo, owner):
        for _ in range(3):
            fail(repo, "ghost")
        attempt = repo.get_login_attempt("ghost")
        assert attempt.count == 3
        assert attempt.locked_until is not None

    def test_locked_unknown_username_answers_like_locked_account(self, repo, owner, clock):
        for _ in range(3):
            fail(repo, "owner")
            fail(repo, "ghost")
        locked_until = repo.get_login_attempt("ghost").locked_until
        clock.advance(minutes=4)

        known = fail(repo, "owner")
        unknown = fail(repo, "ghost")

        assert type(known) is type(unknown) is AccountLocked
        assert unknown.remaining_seconds == 60
        attempt = repo.get_login_attempt("ghost")
        assert attempt.count == 3
        assert attempt.locked_until == locked_until

    def test_unknown_username_needs_verification_after_ten_failures(self, repo, owner, clock):
        for _ in range(10):
            fail(repo, "ghost")
            clock.advance(minutes=6)

        error = fail(repo, "ghost")

        assert isinstance(error, VerificationRequired)
        assert repo.get_login_attempt("ghost").count == 10


class TestLockoutStatus:

    def test_clean_status(self, repo, owner):
        status = throttle.get_lockout_status(repo, "owner")
        assert status["state"] == "CLEAN"
        assert status["failed_attempts"] == 0
        assert status["locked"] is False

    def test_locked_status(self, repo, owner, clock):
        for _ in range(3):
            fail(repo, "owner")
        clock.advance(seconds=30)

        status = throttle.get_lockout_status(repo, "owner")

        assert status["state"] == "LOCKED"
        assert status["seconds_until_unlock"] == 270
        assert status["lock_after_failures"] == 3
        assert status["verify_after_failures"] == 10


class TestLockWindowScenario:

    def test_bob_locked_then_admitted_after_window(self, repo, owner, clock):
        auth_service.create_user(repo, username="bob", password="y", created_by=owner)
        for _ in range(3):
            fail(repo, "bob", "x")

        locked = fail(repo, "bob", "y")
        assert isinstance(locked, AccountLocked)

        clock.advance(seconds=locked.remaining_seconds + 1)
        assert throttle.attempt_login(repo, "bob", "y").username == "bob"
        assert repo.get_login_attempt("bob") is None
