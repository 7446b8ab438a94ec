"""Deploy a project with real-time progress from the deployment stream.

Usage:
    leanmcp deploy-stream --project-id ID
    leanmcp deploy-stream --project-id ID --port 3000 --secrets s1,s2
"""

import logging
import sys

import click

from ..platform.client import PlatformAPIError, PlatformClient
from ..platform.config import CLIConfig
from ..platform.exceptions import DeploymentFailedError, ProjectConfigError
from ..platform.project_config import get_current_project_id
from ..platform.types import DeployStreamRequest, StreamEvent
from ..utils import progress_bar, sanitize_terminal_output, step_label

logger = logging.getLogger(__name__)

_COMPLETED_STEPS = {"COMPLETED", "COMPLETE"}
_PROGRESS_STEPS = {"BUILDING", "DEPLOYING"}


def failure_message(event: StreamEvent) -> str:
    """Pick the most useful explanation from a failed event."""
    if event.error:
        return event.error
    if event.message:
        return event.message
    if event.build_status == "failed":
        return (
            f"Build failed (BuildID: {event.build_id or ''}). "
            "Check server logs for details."
        )
    return "Unknown error occurred"


def _render_progress(event: StreamEvent) -> None:
    progress = event.progress or 0.0
    line = (
        f"\r{step_label(event.current_step)} ({progress:.1f}%) - {progress_bar(progress)}"
    )
    if event.eta_seconds and event.eta_seconds > 0:
        line += f" - ETA: {event.eta_seconds}s"
    click.echo(line, nl=False)


def render_event(event: StreamEvent) -> None:
    """Print a deployment stream event.

    Args:
        event: Decoded stream event.

    Raises:
        DeploymentFailedError: If the event reports a failed build or deployment.
    """
    if event.is_failure:
        raise DeploymentFailedError(failure_message(event), build_id=event.build_id)

    if event.kind == "error":
        message = sanitize_terminal_output(failure_message(event))
        click.echo("\n" + click.style(f"Deployment error: {message}", fg="red"), err=True)
        return

    step = (event.current_step or "").upper()
    if step in _PROGRESS_STEPS:
        _render_progress(event)
    elif step in _COMPLETED_STEPS:
        click.echo("\n" + click.style("Deployment completed successfully!", fg="green"))
        if event.deployment_url:
            click.echo(f"Your application is live at: {event.deployment_url}")
        if event.deployment_id:
            click.echo(f"Deployment ID: {event.deployment_id}")
    elif event.progress:
        _render_progress(event)
    elif event.message:
        click.echo(sanitize_terminal_output(event.message))


def _parse_secrets(value: str | None) -> list[str]:
    if not value:
        return []
    return [s.strip() for s in value.split(",") if s.strip()]


@click.command("deploy-stream")
@click.option(
    "--project-id",
    default=None,
    help="Project to deploy (defaults to the project in .leanmcp/config.json)",
)
@click.option("--port", type=int, default=None, help="Container port")
@click.option("--secrets", default=None, help="Comma-separated secret IDs")
@click.pass_obj
def deploy_stream(
    config: CLIConfig, project_id: str | None, port: int | None, secrets: str | None
):
    """Deploy a project end-to-end with real-time progress.

    Runs the full pipeline (build, containerize, deploy) and prints each
    step as the server reports it.

    Examples:
        leanmcp deploy-stream --project-id proj_123
        leanmcp deploy-stream --project-id proj_123 --port 3000 --secrets s1,s2
    """
    if not project_id:
        try:
            project_id = get_current_project_id()
        except ProjectConfigError:
            click.echo("Error: --project-id is required", err=True)
            sys.exit(1)

    secret_ids = _parse_secrets(secrets)
    request = DeployStreamRequest(
        project_id=project_id, container_port=port, secret_ids=secret_ids or None
    )

    click.echo(f"Starting end-to-end deployment for project: {project_id}")
    if port:
        click.echo(f"Container port: {port}")
    if secret_ids:
        click.echo(f"Secrets: {', '.join(secret_ids)}")
    click.echo("Connecting to deployment stream...\n")
    logger.debug(f"Deploy request payload: {request.to_payload()}")

    client = PlatformClient(config)

    try:
        client.deploy_and_stream(request, render_event)
    except DeploymentFailedError as e:
        click.echo()
        click.echo(f"Build failed: {e.message}", err=True)
        if e.build_id:
            click.echo(f"Build ID: {e.build_id}", err=True)
            click.echo("Contact support with this Build ID for detailed logs", err=True)
        sys.exit(1)
    except PlatformAPIError as e:
        click.echo()
        click.echo(f"Error: deployment failed: {e.message}", err=True)
        if e.status_code == 401:
            click.echo("Hint: Run 'leanmcp auth login --api-key <your-key>'.", err=True)
        sys.exit(1)
