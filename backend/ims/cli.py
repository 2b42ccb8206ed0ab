# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/ims/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables and the first Admin (BOOTSTRAP_ADMIN_USERNAME / BOOTSTRAP_ADMIN_PASSWORD).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with their roles.
# - python -m flask users create --username sales --full-name "Sales One" --password "sales123" --role FSSALE
#   Create a user (prompts if options are omitted).
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --retention-days 30
#   Delete expired/revoked sessions older than the retention window.
# - python -m flask maintenance cleanup-security-events --retention-days 90
#   Delete security events older than the retention window.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import UniqueConstraintViolation, ValidationError
from .extensions import db
from .permissions import ROLES, ROLE_LABELS
from .services import auth_service
from .services import maintenance_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the IMS database and bootstrap administrator.

    Idempotent: tables that exist are left alone, and no Admin is created
    when one already exists.

    SECURITY: Change the bootstrap password immediately in production!
    """
    click.echo("START Initializing IMS...")

    db.create_all()
    click.echo("PASS Tables ready")

    username = current_app.config["BOOTSTRAP_ADMIN_USERNAME"]
    password = current_app.config["BOOTSTRAP_ADMIN_PASSWORD"]
    try:
        admin = auth_service.ensure_bootstrap_admin(username, password)
    except (ValidationError, UniqueConstraintViolation) as e:
        click.echo(f"FAIL Could not create bootstrap admin: {e}")
        raise SystemExit(1)

    if admin:
        click.echo(f"PASS Created admin user: {admin.username}")
        click.echo("SECURITY Password securely hashed with bcrypt")
    else:
        click.echo("PASS Admin user already exists")

    click.echo("DONE IMS initialized")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--full-name', prompt=True, help='Full name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(username, full_name, password, role):
    """Create a staff account."""
    try:
        user = auth_service.create_user({
            "username": username,
            "full_name": full_name,
            "password": password,
            "role": role,
        })
    except ValidationError as e:
        click.echo(f"FAIL Validation failed: {e}")
        raise SystemExit(1)
    except UniqueConstraintViolation as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    click.echo(f"PASS Created user: {user.username} ({ROLE_LABELS[user.role]})")
    click.echo("SECURITY Password securely hashed with bcrypt")


@users_group.command('list')
@with_appcontext
def list_users_cli():
    """List all users with their roles."""
    users = auth_service.list_users()
    if not users:
        click.echo("No users found. Run 'python -m flask system init' first.")
        return

    for user in users:
        last_login = user.last_login_at.isoformat() if user.last_login_at else "never"
        click.echo(f"{user.username:<20} {user.role:<7} {user.full_name:<30} last login: {last_login}")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(retention_days):
    """Delete expired or revoked sessions older than the retention window."""
    deleted = maintenance_service.cleanup_sessions(retention_days=retention_days)
    click.echo(f"Deleted {deleted} sessions older than {retention_days} days.")


@maintenance_group.command('cleanup-security-events')
@click.option('--retention-days', type=int, default=90, show_default=True)
@with_appcontext
def cleanup_security_events_cli(retention_days):
    """
    Cleanup old security events.

    Default retention: 90 days.
    """
    deleted = maintenance_service.cleanup_security_events(retention_days=retention_days)
    click.echo(f"Deleted {deleted} security events older than {retention_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
