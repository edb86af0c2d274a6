# Overview: Flask CLI commands for setting up the shop database, users and permissions.

# backend/laundrydesk/cli.py
# Commands (from backend/, with FLASK_APP=wsgi.py):
#
# Setup and maintenance:
# - python -m flask system init [--username admin] [--password "..."]
#   Safe to re-run: ensures tables, the business settings row and one super admin.
# - python -m flask system reset-db --yes
#   Local development only; recreates an empty schema.
# - python -m flask system cleanup-sessions
#   Delete expired and revoked session records.
#
# Accounts:
# - python -m flask users list
# - python -m flask users create --username alice --password "Secret123" --role admin
# - python -m flask users set-role alice employee
#
# Permission inspection:
# - python -m flask perms list [--role admin]
# - python -m flask perms check alice orders:delete

import click
from flask.cli import with_appcontext

from .errors import ApiError
from .extensions import db
from .models import SessionToken, User
from .permissions import (
    ALL_CATEGORIES,
    ALL_ROLES,
    Role,
    effective_permissions,
    get_permissions_by_category,
    get_role_permissions,
    role_has_permission,
)
from .services import auth_service, settings_service
from .time_utils import utcnow
from .validation import validate_password, validate_username


@click.group('system')
def system_group():
    """Database setup and housekeeping."""


@system_group.command('init')
@click.option('--username', default='superadmin', show_default=True, help='First super admin username')
@click.option('--password', default='Admin123', show_default=True, help='First super admin password')
@with_appcontext
def init_system(username, password):
    """
    Initialize the database and bootstrap a super admin.

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing laundry back office...")

    db.create_all()
    click.echo("PASS Tables ensured")

    settings = settings_service.get_current()
    click.echo(f"PASS Business settings: {settings.business_name}")

    if db.session.query(User).filter_by(role=Role.SUPER_ADMIN).first():
        click.echo("PASS Super admin already exists")
        return

    try:
        user = auth_service.create_user(validate_username(username), validate_password(password), Role.SUPER_ADMIN)
    except ApiError as exc:
        raise click.ClickException(exc.message)
    click.echo(f"PASS Created super admin: {user.username}")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@with_appcontext
def reset_db(yes):
    """Drop and recreate every table. Orders, expenses and users are lost."""
    if not yes:
        click.confirm("WARN Every order, expense and user will be deleted. Continue?", abort=True)

    db.drop_all()
    db.create_all()
    click.echo("PASS Schema recreated. Next: python -m flask system init")


@system_group.command('cleanup-sessions')
@with_appcontext
def cleanup_sessions():
    """Delete expired or revoked session records."""
    deleted = (
        db.session.query(SessionToken)
        .filter((SessionToken.is_revoked.is_(True)) | (SessionToken.expires_at < utcnow()))
        .delete(synchronize_session=False)
    )
    db.session.commit()
    click.echo(f"PASS Removed {deleted} session records")


@click.group('users')
def users_group():
    """Staff account management."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ALL_ROLES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(username, password, role):
    """Create a user with the given role."""
    try:
        user = auth_service.create_user(validate_username(username), validate_password(password), role)
    except ApiError as exc:
        raise click.ClickException(exc.message)
    click.echo(f"PASS Created user {user.username} (ID: {user.id}, role: {user.role})")


@users_group.command('list')
@with_appcontext
def list_users():
    """Print every account with its role and creation date."""
    users = db.session.query(User).order_by(User.id).all()
    if not users:
        click.echo("(no accounts)")
        return

    click.echo(f"{'ID':<5} {'Username':<25} {'Role':<15} Created")
    for user in users:
        created = user.created_at.strftime("%Y-%m-%d") if user.created_at else "-"
        click.echo(f"{user.id:<5} {user.username:<25} {user.role:<15} {created}")


@users_group.command('set-role')
@click.argument('username')
@click.argument('role', type=click.Choice(list(ALL_ROLES)))
@with_appcontext
def set_role(username, role):
    """Change a user's role. Refuses to demote the last super admin."""
    user = auth_service.find_user_by_username(username)
    if not user:
        raise click.ClickException(f"User not found: {username}")

    if user.role == Role.SUPER_ADMIN and role != Role.SUPER_ADMIN:
        remaining = db.session.query(User).filter_by(role=Role.SUPER_ADMIN).count()
        if remaining <= 1:
            raise click.ClickException("Cannot demote the last super admin")

    user.role = role
    db.session.commit()
    click.echo(f"PASS {user.username} is now {role}")


@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
@click.option('--role', type=click.Choice(list(ALL_ROLES)), help='Only show permissions held by this role')
@with_appcontext
def list_permissions(role):
    """List permission tokens by category, or the tokens one role holds."""
    if role:
        declared = sorted(get_role_permissions(role))
        click.echo(f"{role}: declared {', '.join(declared)}")
        for token in effective_permissions(role):
            click.echo(f"  {token}")
        return

    for category in ALL_CATEGORIES:
        click.echo(f"[{category}]")
        for token in get_permissions_by_category(category):
            holders = [r for r in ALL_ROLES if role_has_permission(r, token)]
            click.echo(f"  {token:<28} {', '.join(holders)}")



@perms_group.command('check')
@click.argument('username')
@click.argument('token')
@with_appcontext
def check_permission_cli(username, token):
    """Check whether a user holds a permission token."""
    user = auth_service.find_user_by_username(username)
    if not user:
        raise click.ClickException(f"User not found: {username}")

    if user.has_permission(token):
        click.echo(f"PASS {username} ({user.role}) has {token}")
    else:
        click.echo(f"FAIL {username} ({user.role}) does not have {token}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
