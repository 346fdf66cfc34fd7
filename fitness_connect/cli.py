import json
from getpass import getpass
from pathlib import Path

import click

from fitness_connect.clients.garmin import DATA_TYPES
from fitness_connect.database import init_db
from fitness_connect.exceptions import FitnessConnectError
from fitness_connect.logger import get_logger
from fitness_connect.services.account import AccountService
from fitness_connect.services.download import DownloadService


def _fail(e):
    status = getattr(e, 'status_code', None)
    if status is not None:
        click.echo(f"Error: {e} (HTTP {status})", err=True)
    else:
        click.echo(f"Error: {e}", err=True)
    raise click.Abort()


def _client(username, password=None):
    try:
        return AccountService().get_client(username, password)
    except (FitnessConnectError, ValueError) as e:
        _fail(e)


def _echo_json(data):
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


password_option = click.option(
    '--password',
    envvar='FITNESS_PASSWORD',
    help='Password (defaults to the stored one; only used if the cached session expired)',
)


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Log to the console')
@click.option('--log-file', is_flag=True, help='Also write logs under the logs directory')
@click.pass_context
def cli(ctx, verbose, log_file):
    """Garmin Connect client with cached SSO sessions."""
    ctx.ensure_object(dict)
    if verbose or log_file:
        get_logger(log_to_file=log_file)
    init_db()


@cli.group()
def config():
    """Manage stored accounts."""
    pass


@config.command()
@click.argument('username')
def configure(username):
    """Store the password of an account."""
    password = getpass(f"Enter password for {username}: ")
    confirm = getpass("Confirm password: ")

    if password != confirm:
        click.echo("Error: Passwords do not match!", err=True)
        raise click.Abort()

    try:
        AccountService().configure(username, password)
        click.echo(f"✓ Account {username} configured successfully")
    except ValueError as e:
        _fail(e)


@config.command('show')
def show_config():
    """Show all stored accounts."""
    accounts = AccountService().list_accounts()

    if not accounts:
        click.echo("No accounts configured.")
        return

    click.echo("\nConfigured Accounts:")
    click.echo("-" * 60)
    for acc in accounts:
        click.echo(f"{acc['username']:<30} {acc['identifier']}")


@config.command()
@click.argument('username')
def remove(username):
    """Remove a stored account and its cached session."""
    if AccountService().remove_account(username):
        click.echo(f"✓ Account {username} removed")
    else:
        click.echo(f"No account found for {username}")


@cli.command()
@click.argument('username')
@password_option
def login(username, password):
    """Authenticate, reusing the cached session when possible."""
    client = _client(username, password)
    if client.manager.used_cached_session:
        click.echo(f"✓ Cached session for {username} is still valid")
    else:
        click.echo(f"✓ Logged in as {username}")


@cli.command()
@click.argument('username')
def logout(username):
    """Forget the cached session of an account."""
    AccountService().clear_session(username)
    click.echo(f"✓ Cached session for {username} cleared")


@cli.command()
@click.argument('username')
@password_option
def types(username, password):
    """Print the activity type catalog."""
    client = _client(username, password)
    try:
        _echo_json(client.get_activity_types())
    except FitnessConnectError as e:
        _fail(e)


@cli.command()
@click.argument('username')
@click.option('--start', default=0, show_default=True, help='Index of the first activity')
@click.option('--limit', default=10, show_default=True, help='Number of activities')
@password_option
def activities(username, start, limit, password):
    """Print a page of activities."""
    client = _client(username, password)
    try:
        _echo_json(client.get_activity_list(start, limit))
    except FitnessConnectError as e:
        _fail(e)


@cli.command()
@click.argument('username')
@click.argument('activity_id')
@password_option
def summary(username, activity_id, password):
    """Print the summary of an activity."""
    client = _client(username, password)
    try:
        _echo_json(client.get_activity_summary(activity_id))
    except FitnessConnectError as e:
        _fail(e)


@cli.command()
@click.argument('username')
@click.argument('activity_id')
@click.option('--extended', is_flag=True, help='Use the chart-enabled details service')
@password_option
def details(username, activity_id, extended, password):
    """Print the details of an activity."""
    client = _client(username, password)
    try:
        if extended:
            _echo_json(client.get_extended_activity_details(activity_id))
        else:
            _echo_json(client.get_activity_details(activity_id))
    except FitnessConnectError as e:
        _fail(e)


@cli.command('file')
@click.argument('username')
@click.argument('activity_id')
@click.option('--type', 'data_type', default='tcx', type=click.Choice(DATA_TYPES))
@click.option('--output', type=click.Path(), help='Write to this file instead of stdout')
@password_option
def data_file(username, activity_id, data_type, output, password):
    """Fetch the tcx/gpx/kml export of an activity."""
    client = _client(username, password)
    try:
        if output:
            path = client.download_activity(activity_id, data_type, Path(output))
            click.echo(f"✓ Saved to {path}")
        else:
            click.echo(client.get_data_file(data_type, activity_id))
    except FitnessConnectError as e:
        _fail(e)


@cli.command()
@click.argument('username')
@click.option('--start', default=0, show_default=True, help='Index of the first activity')
@click.option('--limit', default=10, show_default=True, help='Number of activities')
@click.option('--type', 'data_type', default='tcx', type=click.Choice(DATA_TYPES))
@click.option('--save-dir', type=click.Path(), help='Directory to save files to')
@password_option
def download(username, start, limit, data_type, save_dir, password):
    """Download a page of activities to disk."""
    client = _client(username, password)
    try:
        result = DownloadService(client).download(
            start=start,
            limit=limit,
            data_type=data_type,
            save_dir=Path(save_dir) if save_dir else None,
        )
    except FitnessConnectError as e:
        _fail(e)

    click.echo("\nDownload Summary:")
    click.echo(f"  Total: {result['total']}")
    click.echo(f"  Downloaded: {result['downloaded']}")
    click.echo(f"  Skipped: {result['skipped']}")
    click.echo(f"  Failed: {result['failed']}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
