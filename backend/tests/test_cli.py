"""CLI command tests (flask system/users/attempts)."""

from storekeeper.models import ROLE_OWNER

from conftest import login


def test_system_init_creates_owner_once(app, repo):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["system", "init", "--username", "boss", "--password", "pw"])
    second = runner.invoke(args=["system", "init", "--username", "other", "--password", "pw"])

    assert first.exit_code == 0, first.output
    assert "Created owner: boss" in first.output
    assert "skipping owner bootstrap" in second.output
    assert [(u.username, u.role) for u in repo.get_users()] == [("boss", ROLE_OWNER)]


def test_system_init_uses_default_owner_config(app, repo):
    app.config.update(DEFAULT_OWNER_USERNAME="pemilik", DEFAULT_OWNER_PASSWORD="rahasia")

    result = app.test_cli_runner().invoke(args=["system", "init"])

    assert result.exit_code == 0, result.output
    assert repo.find_user_by_username("pemilik").is_owner


def test_system_init_without_credentials_fails(app, repo):
    result = app.test_cli_runner().invoke(args=["system", "init"])
    assert result.exit_code != 0
    assert repo.get_users() == []


def test_users_create_and_list(app, owner):
    runner = app.test_cli_runner()

    created = runner.invoke(args=["users", "create", "--username", "kasir1", "--password", "pw"])
    listed = runner.invoke(args=["users", "list"])

    assert created.exit_code == 0, created.output
    assert "kasir1" in listed.output
    assert "owner" in listed.output


def test_users_create_duplicate_fails(app, owner):
    result = app.test_cli_runner().invoke(
        args=["users", "create", "--username", "owner", "--password", "pw"]
    )
    assert result.exit_code != 0
    assert "already exists" in result.output


def test_attempts_status_and_clear(app, client, owner):
    for _ in range(3):
        login(client, "owner", "x")
    runner = app.test_cli_runner()

    status = runner.invoke(args=["attempts", "status", "owner"])
    cleared = runner.invoke(args=["attempts", "clear", "owner"])
    again = runner.invoke(args=["attempts", "clear", "owner"])

    assert "LOCKED" in status.output
    assert "failures=3" in status.output
    assert "Cleared login attempts for owner" in cleared.output
    assert "No login attempts recorded" in again.output
