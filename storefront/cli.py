# storefront/cli.py
import click
from flask.cli import with_appcontext
from flask import current_app

from storefront.bootstrap import init_database


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create tables, move legacy images into the gallery, seed the default admin."""
    init_database()
    click.echo("✅ Database initialized")


@click.command("create-admin")
@click.option("--username", default=None, help="Admin username (defaults to ADMIN_USERNAME)")
@click.option("--password", default=None,
              help="Password (prompted for when omitted)")
@click.option("--force", is_flag=True, default=False,
              help="Reset the password if the admin already exists")
@with_appcontext
def create_admin_command(username: str | None, password: str | None, force: bool):
    """Create an admin account, or reset its password with --force."""
    username = username or current_app.config.get("ADMIN_USERNAME", "admin")
    if not password:
        password = click.prompt("Password", hide_input=True, confirmation_prompt=True)

    _, written = current_app.extensions["admin_auth"].ensure_admin(username, password, force=force)
    if not written:
        click.echo(f"❗ Admin '{username}' already exists. Use --force to reset the password.")
        return
    click.echo(f"✅ Admin ready: {username}")


def register_cli(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)
