"""Manage the stored LeanMCP API key.

Usage:
    leanmcp auth login --api-key KEY   # Store an API key
    leanmcp auth logout                # Remove stored credentials
    leanmcp auth whoami                # Show the stored key
    leanmcp auth status                # Test the API connection
"""

import click

from ..platform.auth import (
    clear_credentials,
    is_authenticated,
    load_credentials,
    mask_api_key,
    store_credentials,
    update_last_used,
)
from ..platform.client import PlatformAPIError, PlatformClient
from ..platform.config import CLIConfig
from ..utils import format_timestamp
from . import LOGIN_HINT, fail


@click.group()
def auth():
    """Manage authentication."""
    pass


@auth.command()
@click.option("--api-key", required=True, help="API key for authentication")
@click.pass_obj
def login(config: CLIConfig, api_key: str) -> None:
    """Store an API key.

    The key must start with 'airtrain_' and is saved in the CLI config file
    (~/.leanmcp-cli/config.yaml by default).

    Examples:
        leanmcp auth login --api-key airtrain_your_key_here
    """
    try:
        store_credentials(config, api_key)
    except ValueError as e:
        fail(f"invalid API key format: {e}")

    click.echo(click.style("Successfully stored API key!", fg="green"))
    click.echo(f"Your API key has been stored in {config.path}")


@auth.command()
@click.pass_obj
def logout(config: CLIConfig) -> None:
    """Remove stored credentials."""
    if not is_authenticated(config):
        click.echo("Not logged in.")
        return

    clear_credentials(config)
    click.echo(click.style("Successfully logged out!", fg="green"))


@auth.command()
@click.pass_obj
def whoami(config: CLIConfig) -> None:
    """Show the stored API key and account details."""
    if not is_authenticated(config):
        click.echo(click.style("Not authenticated", fg="red"))
        click.echo(f"Run '{LOGIN_HINT}' to authenticate.")
        return

    creds = load_credentials(config)
    click.echo(click.style("Authenticated", fg="green"))
    click.echo(f"API Key: {mask_api_key(creds.api_key)}")
    if creds.user_email:
        click.echo(f"Email:   {creds.user_email}")
    if creds.scopes:
        click.echo(f"Scopes:  {', '.join(creds.scopes)}")
    if creds.stored_at:
        click.echo(f"Stored:  {format_timestamp(creds.stored_at)}")


@auth.command()
@click.pass_obj
def status(config: CLIConfig) -> None:
    """Test the connection to the API with the stored key."""
    if not is_authenticated(config):
        click.echo(click.style("Not authenticated", fg="red"))
        click.echo(f"Run '{LOGIN_HINT}' to authenticate.")
        return

    click.echo("Testing API connection...")
    client = PlatformClient(config)
    try:
        client.test_connection()
    except PlatformAPIError as e:
        click.echo(f"{click.style('Connection failed', fg='red')}: {e.message}")
        return

    click.echo(click.style("API connection successful!", fg="green"))
    update_last_used(config)
