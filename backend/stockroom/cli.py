# Overview: Flask CLI command group for local bootstrap.

# backend/stockroom/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py and JWT_SECRET_KEY to a long random string.
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (idempotent). Use `flask db upgrade` for managed schemas.
# - python -m flask system create-admin --first-name Ada --last-name Admin --email admin@example.com --password secret
#   Create an unassigned admin user (prompts if options are omitted).

import click
from flask.cli import with_appcontext

from .errors import ServiceError
from .extensions import db
from .models import ROLE_ADMIN
from .services.auth_service import create_user


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    from . import models  # noqa: F401

    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('create-admin')
@click.option('--first-name', prompt=True, help='First name')
@click.option('--last-name', prompt=True, help='Last name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_admin(first_name, last_name, email, password):
    """
    Create an admin user.

    Admins start without a business; sign in and POST /api/business to
    create one, which links the admin to it.
    """
    try:
        user = create_user(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            role=ROLE_ADMIN,
        )
    except ServiceError as e:
        raise click.ClickException(f"Failed to create admin: {e.message}")

    click.echo(f"PASS Created admin: {user.email} (ID: {user.id})")
    click.echo("SECURITY Password securely hashed with bcrypt")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
