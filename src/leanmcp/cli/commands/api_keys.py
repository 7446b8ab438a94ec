"""CLI commands for inspecting API keys."""

import json

import click

from ..platform.client import PlatformAPIError, PlatformClient
from ..platform.config import CLIConfig
from ..platform.types import APIKeyInfo
from ..utils import format_timestamp
from . import report_api_error

_SCOPE_COLORS = {"ADMIN": "red", "BUILD_AND_DEPLOY": "yellow"}


@click.group("api-keys")
def api_keys():
    """Inspect API keys."""
    pass


def _fetch_key_info(config: CLIConfig) -> APIKeyInfo:
    client = PlatformClient(config)
    try:
        return client.get_api_key_info()
    except PlatformAPIError as e:
        report_api_error(e, "get API key info")


def _print_key_info(info: APIKeyInfo) -> None:
    scopes = ", ".join(
        click.style(scope, fg=_SCOPE_COLORS.get(scope, "green")) for scope in info.scopes
    )
    click.echo(f"ID:      {info.id}")
    click.echo(f"Name:    {info.name}")
    click.echo(f"Scopes:  {scopes}")
    click.echo(f"Status:  {'Active' if info.is_active else 'Inactive'}")
    click.echo(f"Created: {format_timestamp(info.created_at)}")
    click.echo(f"Expires: {format_timestamp(info.expires_at) if info.expires_at else 'Never'}")


@api_keys.command("info")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def key_info(config: CLIConfig, as_json: bool):
    """Show details of the API key in use."""
    info = _fetch_key_info(config)
    if as_json:
        click.echo(json.dumps(info.model_dump(by_alias=True), indent=2))
        return
    click.echo(click.style("API Key Details:", fg="green"))
    _print_key_info(info)


@api_keys.command("list")
@click.pass_obj
def list_keys(config: CLIConfig):
    """List API keys visible to the current key.

    The API only exposes the key used to authenticate, so this shows a
    single entry.
    """
    info = _fetch_key_info(config)
    click.echo(f"{'ID':<28} {'NAME':<25} {'ACTIVE':<8} {'CREATED':<20}")
    click.echo("-" * 84)
    created = info.created_at[:10] if info.created_at else ""
    active = "yes" if info.is_active else "no"
    click.echo(f"{info.id:<28} {info.name:<25} {active:<8} {created:<20}")
