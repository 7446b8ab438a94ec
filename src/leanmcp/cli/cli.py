#!/usr/bin/env python3
"""LeanMCP CLI - manage LeanMCP projects, chats and deployments

Usage:
    leanmcp auth login|logout|whoami|status
    leanmcp create [--name NAME] [--path PATH]
    leanmcp projects list|show|create|delete|builds|build
    leanmcp chats list|show|history|create|delete
    leanmcp api-keys info|list
    leanmcp deploy-stream --project-id ID
"""

import logging
import sys

import click
import requests

from .commands.api_keys import api_keys
from .commands.auth import auth
from .commands.chats import chats
from .commands.deploy import deploy_stream
from .commands.projects import create_project, projects
from .platform.client import PlatformAPIError
from .platform.config import CLI_VERSION, CLIConfig
from .platform.exceptions import LeanMCPError


@click.group()
@click.version_option(version=CLI_VERSION)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: ~/.leanmcp-cli/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool):
    """LeanMCP CLI - manage LeanMCP projects, chats and deployments"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.obj = CLIConfig.load(config_path)


@cli.command()
def version():
    """Show the CLI version."""
    click.echo(f"leanmcp-cli {CLI_VERSION}")


# Authentication
cli.add_command(auth)
cli.add_command(api_keys)

# Projects
cli.add_command(projects)
cli.add_command(create_project)

# Chats & deployment
cli.add_command(chats)
cli.add_command(deploy_stream)


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except PlatformAPIError as e:
        click.echo(f"Error: {e.message}", err=True)
        hint = {
            401: "Hint: Run 'leanmcp auth login --api-key <your-key>' to authenticate.",
            403: "Hint: Your API key doesn't have permission for this action.",
            404: "Hint: Run 'leanmcp projects list' to see your projects.",
            409: "Hint: Use a different name or delete the existing resource first.",
            422: "Hint: Check your input and try again.",
            429: "Hint: Too many requests. Please wait and try again.",
            500: "Hint: This is a server issue. Please try again later.",
            502: "Hint: The server is temporarily unavailable. Please try again later.",
            503: "Hint: The service is temporarily unavailable. Please try again later.",
        }.get(e.status_code)
        if hint:
            click.echo(hint, err=True)
        sys.exit(1)
    except LeanMCPError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except requests.exceptions.SSLError:
        click.echo("Error: SSL certificate verification failed.", err=True)
        click.echo("Hint: Check your network or try again later.", err=True)
        sys.exit(1)
    except requests.ConnectionError:
        click.echo("Error: Could not connect to LeanMCP API.", err=True)
        click.echo("Hint: Check your internet connection and try again.", err=True)
        sys.exit(1)
    except requests.Timeout:
        click.echo("Error: Request timed out.", err=True)
        click.echo("Hint: The server may be busy. Please try again.", err=True)
        sys.exit(1)
    except requests.RequestException:
        click.echo("Error: Network request failed.", err=True)
        click.echo("Hint: Check your connection and try again.", err=True)
        sys.exit(1)
    except (click.Abort, KeyboardInterrupt):
        click.echo(err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        click.echo(
            "Hint: If this persists, try updating with 'pip install -U leanmcp-cli'.",
            err=True,
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
