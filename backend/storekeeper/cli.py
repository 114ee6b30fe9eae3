# Overview: Flask CLI command groups for bootstrap, user inspection, and login-attempt maintenance.

# backend/storekeeper/cli.py
# Commands Legend (run from the project root):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP (PowerShell: $env:FLASK_APP="storekeeper:create_app").
#
# System bootstrap:
# - flask system init [--username owner --password "secret" --email owner@example.com]
#   Create the document table (sql store) and the default owner if no users exist.
#   Falls back to DEFAULT_OWNER_* config when options are omitted.
#
# Users:
# - flask users list
# - flask users create --username kasir1 --password "secret1" [--email ...] [--role admin]
#
# Login attempts:
# - flask attempts status USERNAME
# - flask attempts clear USERNAME
#   Manual unlock; also lifts the email verification requirement.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import StoreError
from .extensions import db, get_repository
from .models import ROLE_ADMIN, ROLES
from .services import auth_service, login_throttle_service


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@click.option('--username', default=None, help='Owner username')
@click.option('--password', default=None, help='Owner password')
@click.option('--email', default=None, help='Owner email (used for verification codes)')
@with_appcontext
def init_system(username, password, email):
    """Prepare storage and create the default owner (idempotent)."""
    if current_app.config["DOCUMENT_STORE"] == "sql":
        db.create_all()
        click.echo("PASS Document table ready")

    repo = get_repository()
    username = username or current_app.config.get("DEFAULT_OWNER_USERNAME")
    password = password or current_app.config.get("DEFAULT_OWNER_PASSWORD")
    email = email or current_app.config.get("DEFAULT_OWNER_EMAIL")

    if repo.get_users():
        click.echo("PASS Users already exist, skipping owner bootstrap")
    elif not username or not password:
        raise click.UsageError(
            "No users yet: pass --username/--password or set DEFAULT_OWNER_USERNAME/DEFAULT_OWNER_PASSWORD"
        )
    else:
        try:
            owner = auth_service.bootstrap_owner(repo, username=username, password=password, email=email)
        except StoreError as e:
            raise click.ClickException(str(e))
        click.echo(f"PASS Created owner: {owner.username}")

    settings = repo.get_settings()
    click.echo(f"PASS Store: {settings.store_name} ({settings.currency}, {settings.timezone})")


@click.group('users')
def users_group():
    """User inspection and creation."""


@users_group.command('list')
@with_appcontext
def list_users():
    users = auth_service.list_users(get_repository())
    if not users:
        click.echo("No users")
        return
    for user in users:
        click.echo(f"{user.id}  {user.username:<20} {user.role:<6} {user.email or '-'}")


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--email', default=None)
@click.option('--role', type=click.Choice(ROLES), default=ROLE_ADMIN, show_default=True)
@with_appcontext
def create_user(username, password, email, role):
    try:
        user = auth_service.create_user(
            get_repository(), username=username, password=password, role=role, email=email
        )
    except StoreError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user: {user.username} ({user.role})")


@click.group('attempts')
def attempts_group():
    """Login throttle inspection and manual unlock."""


@attempts_group.command('status')
@click.argument('username')
@with_appcontext
def attempts_status(username):
    status = login_throttle_service.get_lockout_status(get_repository(), username)
    click.echo(
        f"{username}: {status['state']} "
        f"(failures={status['failed_attempts']}, "
        f"unlock_in={status['seconds_until_unlock'] or 0}s)"
    )


@attempts_group.command('clear')
@click.argument('username')
@with_appcontext
def attempts_clear(username):
    if login_throttle_service.clear_attempts(get_repository(), username):
        click.echo(f"PASS Cleared login attempts for {username}")
    else:
        click.echo(f"WARN No login attempts recorded for {username}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(attempts_group)
