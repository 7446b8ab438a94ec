"""CLI command groups and shared helpers."""

import sys
from typing import NoReturn

import click
from questionary import Style

from ..platform.exceptions import PlatformAPIError

LOGIN_HINT = "leanmcp auth login --api-key <your-key>"

# Pastel prompt style
PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#b48ead"),
        ("question", "fg:#d8dee9 bold"),
        ("answer", "fg:#e8915a"),
        ("pointer", "fg:#b48ead bold"),
        ("highlighted", "fg:#88c0d0 bold"),
        ("instruction", "fg:#4c566a"),
    ]
)


def fail(message: str) -> NoReturn:
    """Print an error message and exit with status 1."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def report_api_error(e: PlatformAPIError, action: str) -> NoReturn:
    """Print a friendly message for a failed API call and exit.

    Args:
        e: The API error.
        action: What was being attempted, e.g. "list projects".
    """
    if e.status_code == 401:
        click.echo(click.style("Authentication failed", fg="red"), err=True)
        click.echo("Your API key is invalid or has expired.", err=True)
        click.echo(f"Please run: {LOGIN_HINT}", err=True)
    elif e.status_code == 403:
        click.echo(click.style("Access denied", fg="red"), err=True)
        click.echo(f"Your API key doesn't have permission to {action}.", err=True)
    elif e.status_code == 404:
        click.echo(f"Error: failed to {action}: not found", err=True)
    elif e.status_code == 0:
        click.echo(f"Error: failed to {action}: {e.message}", err=True)
        click.echo("Hint: Check your internet connection and try again.", err=True)
    else:
        click.echo(f"Error: failed to {action}: {e.message}", err=True)
    sys.exit(1)
