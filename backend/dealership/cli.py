# Overview: Flask CLI command groups for bootstrap, inspection and account maintenance.

# Commands Legend:
# - flask --app dealership system init
#   Create missing tables, the three roles and the permission vocabulary (idempotent).
# - flask --app dealership users create-admin --username admin --name "Admin"
#   Create the first admin account (refused once an admin exists).
# - flask --app dealership users create --as admin --role Salesperson --username bob ...
#   Create an account with a temporary password.
# - flask --app dealership users list --as admin
#   List users with role, active flag, failed attempts and permissions.
# - flask --app dealership users unlock bob --as admin
#   Reactivate a locked account and clear its failed-attempt counter.
# - flask --app dealership perms list [--user bob]
#   List the permission vocabulary, or one user's flags (unstored ones at their display default).
# - flask --app dealership perms set bob SELL_VEHICLE SEARCH_VEHICLES --as admin
#   Replace a user's permissions.
# - flask --app dealership reset-requests list --as admin
#   Show self-service password reset requests.
# - flask --app dealership sandbox check
#   Enter sandbox mode, log in as the fixture admin, exit, and confirm
#   production row counts did not change.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import AccessError
from .permissions import PERMISSION_DEFINITIONS, PERMISSION_DISPLAY_DEFAULTS, RoleName
from .persistence import SANDBOX_PASSWORD
from .services import auth_service, lockout_service, permission_service


def _access():
    return current_app.extensions["access"]


def _login_admin(access, username):
    password = click.prompt(f"Password for {username}", hide_input=True)
    try:
        principal = access.login(username, password)
    except AccessError as e:
        raise click.ClickException(str(e))
    if not principal.is_admin:
        raise click.ClickException(f"{username} is not an admin")
    return principal


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create missing tables and seed roles and permissions."""
    access = _access()
    result = access.initialize_store()
    click.echo(f"PASS Store: {access.sandbox.database_path}")
    click.echo(f"PASS Roles created: {result['roles_created']}")
    click.echo(f"PASS Permissions created: {result['permissions_created']}")

    with access.store.session() as session:
        if not auth_service.count_admins(session):
            click.echo("WARN No admin account yet; run `flask users create-admin`")


@click.group('users')
def users_group():
    """User inspection and maintenance."""


@users_group.command('create-admin')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--name', prompt=True, help='Full name')
@click.option('--email', default=None, help='Email address')
@click.option('--phone', default=None, help='Phone number')
@with_appcontext
def create_admin(username, password, name, email, phone):
    """Create the first admin account."""
    try:
        user = _access().bootstrap_admin(
            username=username, password=password, name=name, email=email, phone=phone
        )
    except AccessError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created admin {user.username} (ID: {user.id})")


@users_group.command('create')
@click.option('--as', 'admin_username', required=True, help='Acting admin username')
@click.option('--role', type=click.Choice([r.value for r in RoleName]), prompt=True, help='Role')
@click.option('--username', prompt=True, help='Username')
@click.option('--name', prompt=True, help='Full name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--phone', prompt=True, help='Phone number')
@click.option('--temp-password', default=None, help='Temporary password (generated if omitted)')
@with_appcontext
def create_user_cmd(admin_username, role, username, name, email, phone, temp_password):
    """Create an account with a temporary password."""
    access = _access()
    actor = _login_admin(access, admin_username)
    temp_password = temp_password or auth_service.generate_temp_password()
    try:
        user = access.create_user(actor, role, username, temp_password, name, email, phone)
    except AccessError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created {role} {user.username} (ID: {user.id})")
    click.echo(f"Temporary Password: {temp_password}")


@users_group.command('list')
@click.option('--as', 'admin_username', required=True, help='Acting admin username')
@with_appcontext
def list_users(admin_username):
    """List all users with role, status and permissions."""
    access = _access()
    actor = _login_admin(access, admin_username)
    try:
        users = access.list_users(actor)
    except AccessError as e:
        raise click.ClickException(str(e))

    for user in users:
        status = "active" if user["is_active"] else "LOCKED"
        click.echo(
            f"{user['id']:>4}  {user['username']:<16} {user['role']:<12} {status:<7} "
            f"attempts={user['failed_attempts']}  temp={'yes' if user['is_temp_password'] else 'no'}  "
            f"joined={user['join_date']}  perms={','.join(user['permissions']) or '-'}"
        )


@users_group.command('unlock')
@click.argument('username')
@click.option('--as', 'admin_username', required=True, help='Acting admin username')
@with_appcontext
def unlock_user(username, admin_username):
    """Reactivate a locked account (no-op for active accounts)."""
    access = _access()
    actor = _login_admin(access, admin_username)

    with access.store.session() as session:
        user = auth_service.find_user(session, username)
        if user is None:
            raise click.ClickException(f"User {username} not found")
        status = lockout_service.get_lockout_status(session, user, access.max_failed_attempts)

    if not status["locked"] and user.is_active:
        click.echo(f"PASS {user.username} is already active (failed attempts: {status['failed_attempts']})")
        return

    try:
        access.toggle_active(actor, user.username)
    except AccessError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS {user.username} reactivated and login attempts have been reset")


@click.group('perms')
def perms_group():
    """Permission inspection and editing."""


@perms_group.command('list')
@click.option('--user', 'username', default=None, help='Show stored flags for this user')
@with_appcontext
def list_perms(username):
    """List permissions (optionally one user's flags)."""
    if username is None:
        for code, name, description, category in PERMISSION_DEFINITIONS:
            click.echo(f"{code:<22} {category:<11} {description}")
        return

    access = _access()
    with access.store.session() as session:
        user = auth_service.find_user(session, username)
        if user is None:
            raise click.ClickException(f"User {username} not found")
        permissions = permission_service.load_permissions(session, user.id)

    for code, _name, _description, _category in PERMISSION_DEFINITIONS:
        # No stored row: show what the dashboard assumes for that permission
        stored = code in permissions.as_dict()
        enabled = permissions.has_permission(code, PERMISSION_DISPLAY_DEFAULTS.get(code))
        mark = "x" if enabled else " "
        click.echo(f"[{mark}] {code}" + ("" if stored else "  (default)"))


@perms_group.command('set')
@click.argument('username')
@click.argument('codes', nargs=-1)
@click.option('--as', 'admin_username', required=True, help='Acting admin username')
@with_appcontext
def set_perms(username, codes, admin_username):
    """Replace a user's permissions with CODES (none clears them all)."""
    access = _access()
    actor = _login_admin(access, admin_username)

    with access.store.session() as session:
        user = auth_service.find_user(session, username)
        if user is None:
            raise click.ClickException(f"User {username} not found")

    try:
        permissions = access.replace_permissions(actor, user.id, codes)
    except AccessError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Permissions updated for {user.username}: {', '.join(permissions.enabled()) or 'none'}")


@click.group('reset-requests')
def reset_requests_group():
    """Password reset request log."""


@reset_requests_group.command('list')
@click.option('--as', 'admin_username', required=True, help='Acting admin username')
@with_appcontext
def list_reset_requests(admin_username):
    """Show pending password reset requests."""
    access = _access()
    actor = _login_admin(access, admin_username)
    try:
        requests = access.list_password_reset_requests(actor)
    except AccessError as e:
        raise click.ClickException(str(e))
    if not requests:
        click.echo("No password reset requests pending.")
        return
    for request in requests:
        click.echo(f"{request.username:<16} {request.request_date}")


@click.group('sandbox')
def sandbox_group():
    """Sandbox mode diagnostics."""


@sandbox_group.command('check')
@with_appcontext
def sandbox_check():
    """Round-trip through sandbox mode and verify production is untouched."""
    access = _access()
    if access.is_sandbox_active():
        raise click.ClickException("Sandbox mode is already active")

    before = access.store.row_counts()
    try:
        access.enter_sandbox()
        principal = access.login("testadmin", SANDBOX_PASSWORD)
        click.echo(f"PASS Logged in to sandbox as {principal.username} ({principal.role.value})")
        sandbox_counts = access.store.row_counts()
        click.echo(f"PASS Sandbox rows: users={sandbox_counts.get('users', 0)}, "
                   f"vehicles={sandbox_counts.get('vehicles', 0)}, sales={sandbox_counts.get('sales', 0)}")
    except AccessError as e:
        raise click.ClickException(str(e))
    finally:
        access.exit_sandbox()

    after = access.store.row_counts()
    if before != after:
        raise click.ClickException(f"Production row counts changed: {before} -> {after}")
    click.echo("PASS Production store unchanged")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(reset_requests_group)
    app.cli.add_command(sandbox_group)
