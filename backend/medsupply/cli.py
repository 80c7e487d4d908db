# Overview: Flask CLI command groups for bootstrap, user management and invoice export.

# backend/medsupply/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default company settings.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
#   List all staff accounts.
# - python -m flask users create --email staff@example.com --password "secret1"
#   Create a staff account (prompts if options are omitted).
#
# Invoices:
# - python -m flask invoices render 12 --out ./invoices
#   Write the PDF invoice for sale 12 into ./invoices.

import os

import click
from flask.cli import with_appcontext

from .console import get_console
from .extensions import db
from .models import User
from .services.auth_service import create_user, AuthError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the database and company settings.

    Safe to run repeatedly: existing tables and settings are left alone.
    """
    click.echo("START Initializing medical supply console...")

    db.create_all()
    click.echo("PASS Tables ready")

    store = get_console().settings
    settings = store.fetch()
    if store.error:
        raise click.ClickException(store.error)
    click.echo(f"PASS Company settings: {settings['name']}")

    click.echo("\nNext: python -m flask users create")


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

    get_console().close()
    db.session.remove()

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """Staff account commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_user_cmd(email, password):
    """Create a staff account."""
    try:
        user = create_user(email, password)
    except AuthError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user: {user.email} (ID: {user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all staff accounts."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Email':<40} {'Last login'}")
    click.echo("="*80)

    for user in users:
        last_login = user.last_login_at.isoformat() if user.last_login_at else "never"
        click.echo(f"{user.id:<5} {user.email:<40} {last_login}")


@click.group('invoices')
def invoices_group():
    """Invoice export commands."""


@invoices_group.command('render')
@click.argument('sale_id', type=int)
@click.option('--out', 'out_dir', default='.', type=click.Path(file_okay=False), help='Output directory')
@with_appcontext
def render_invoice(sale_id, out_dir):
    """Render the PDF invoice for a sale."""
    console = get_console()
    sale = console.sales.get(sale_id)
    if console.sales.error:
        raise click.ClickException(console.sales.error)
    if sale is None:
        raise click.ClickException(f"Sale {sale_id} not found")

    rendered = console.renderer.render(console.invoice_for(sale))

    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, rendered.filename)
    with open(path, "wb") as fh:
        fh.write(rendered.content)
    click.echo(f"PASS Wrote {path} ({len(rendered.pages)} pages)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(invoices_group)
