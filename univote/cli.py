# univote/cli.py

import click
from flask import current_app
from flask.cli import with_appcontext

from univote.authentication import accounts
from univote.clock import current_clock
from univote.elections.status import reconcile_statuses
from univote.errors import VotingSystemError


@click.command('reconcile-statuses')
@with_appcontext
def reconcile_statuses_command():
    """Run one election status sweep now."""
    summary = reconcile_statuses(current_clock().now())
    click.echo(
        f"Closed {summary['closed']}, activated {summary['activated']}, "
        f"deactivated {summary['deactivated']}. "
        f"Active: {summary['total_active']}, Upcoming: {summary['total_upcoming']}, "
        f"Closed: {summary['total_closed']}"
    )


@click.command('create-admin')
@click.option('--name', default='Admin User', show_default=True)
@click.option('--email', prompt=True)
@click.option('--registration-number', prompt=True)
@click.password_option()
@with_appcontext
def create_admin_command(name, email, registration_number, password):
    """Create an administrator account."""
    try:
        current_app.extensions['univote_password_hasher'].check_policy(password)
        admin = accounts.create_admin(name, email, password, registration_number)
    except VotingSystemError as e:
        raise click.ClickException(e.message)
    click.echo(f"Admin user {admin.email} created successfully.")


def register_commands(app):
    app.cli.add_command(reconcile_statuses_command)
    app.cli.add_command(create_admin_command)
