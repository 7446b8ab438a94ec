"""CLI commands for managing LeanMCP projects."""

import json
import os
import sys
from pathlib import Path

import click
import questionary

from ..platform.client import PlatformAPIError, PlatformClient
from ..platform.config import CLIConfig
from ..platform.exceptions import LeanMCPError
from ..platform.packaging import ProjectPackager, human_readable_size
from ..platform.project_config import save_project_config
from ..platform.scanner import validate_directory
from ..platform.types import Project
from ..utils import Spinner, format_timestamp, short_id, status_color, truncate
from . import PROMPT_STYLE, fail, report_api_error

MAX_NAME_LENGTH = 100
PREVIEW_LIMIT = 10
PREVIEW_SHOWN = 5


@click.group()
def projects():
    """Manage projects."""
    pass


@projects.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_projects(config: CLIConfig, as_json: bool):
    """List all projects."""
    client = PlatformClient(config)

    try:
        project_list = client.list_projects()
    except PlatformAPIError as e:
        report_api_error(e, "list projects")

    if as_json:
        click.echo(
            json.dumps([p.model_dump(by_alias=True) for p in project_list], indent=2)
        )
        return

    if not project_list:
        click.echo("No projects found. Create one with: leanmcp create")
        return

    click.echo(f"Found {len(project_list)} project(s):\n")
    click.echo(
        f"{'ID':<12} {'NAME':<25} {'FRAMEWORK':<12} {'STATUS':<10} {'CREATED':<14}"
    )
    click.echo("-" * 77)

    for project in project_list:
        created = format_timestamp(project.created_at, short=True)
        framework = project.framework or "-"
        click.echo(
            f"{short_id(project.id):<12} {truncate(project.name, 25):<25} "
            f"{framework:<12} {project.status:<10} {created:<14}"
        )


def _print_project(project: Project) -> None:
    status = click.style(project.status, fg=status_color(project.status))
    click.echo(f"Project:      {click.style(project.name, bold=True)}")
    click.echo(f"ID:           {project.id}")
    click.echo(f"Status:       {status}")
    if project.description:
        click.echo(f"Description:  {project.description}")
    if project.framework:
        click.echo(f"Framework:    {project.framework}")
    if project.repository_url:
        click.echo(f"Repository:   {project.repository_url}")
    if project.s3_location:
        click.echo(f"S3 Location:  {project.s3_location}")
    if project.user_id:
        click.echo(f"User ID:      {project.user_id}")
    click.echo(f"Created:      {format_timestamp(project.created_at)}")
    click.echo(f"Updated:      {format_timestamp(project.updated_at)}")


@projects.command("show")
@click.argument("project_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def show_project(config: CLIConfig, project_id: str, as_json: bool):
    """Show details of a project."""
    client = PlatformClient(config)

    try:
        project = client.get_project(project_id)
    except PlatformAPIError as e:
        report_api_error(e, "get project")

    if as_json:
        click.echo(json.dumps(project.model_dump(by_alias=True), indent=2))
        return
    _print_project(project)


def _ask(question) -> str:
    answer = question.ask()
    if answer is None:
        click.echo("Cancelled.", err=True)
        sys.exit(1)
    return answer


def _validate_name(value: str) -> bool | str:
    name = value.strip()
    if not name:
        return "Project name cannot be empty"
    if len(name) > MAX_NAME_LENGTH:
        return f"Project name too long (max {MAX_NAME_LENGTH} characters)"
    return True


def _prompt_path() -> str:
    cwd = os.getcwd()
    choice = _ask(
        questionary.select(
            "Project directory:",
            choices=[
                questionary.Choice(f"Current directory ({cwd})", value="cwd"),
                questionary.Choice("Enter custom path", value="custom"),
            ],
            style=PROMPT_STYLE,
        )
    )
    if choice == "cwd":
        return cwd
    return _ask(
        questionary.path("Path:", only_directories=True, style=PROMPT_STYLE)
    )


@click.command("create")
@click.option("--name", "-n", default=None, help="Project name")
@click.option("--description", "-d", default=None, help="Project description")
@click.option(
    "--path",
    "-p",
    "project_path",
    default=None,
    help="Path to project directory (defaults to current directory)",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_obj
def create_project(
    config: CLIConfig,
    name: str | None,
    description: str | None,
    project_path: str | None,
    yes: bool,
):
    """Create a project and upload files from a directory.

    Missing details are prompted for when running in a terminal. The
    directory is scanned (honouring .gitignore), zipped, uploaded, and the
    project details are saved to .leanmcp/config.json.

    Examples:
        leanmcp create
        leanmcp projects create --name my-server --path ./my-server -y
    """
    interactive = sys.stdin.isatty()

    # --- Details ---
    if name is None:
        if not interactive:
            fail("--name is required")
        name = _ask(
            questionary.text("Project name:", validate=_validate_name, style=PROMPT_STYLE)
        )
    name = name.strip()
    valid = _validate_name(name)
    if valid is not True:
        fail(valid)

    if description is None:
        description = ""
        if interactive:
            description = _ask(
                questionary.text("Description (optional):", style=PROMPT_STYLE)
            )
    description = description.strip()

    if project_path is None:
        project_path = _prompt_path() if interactive else os.getcwd()

    try:
        root = validate_directory(Path(project_path).expanduser().absolute())
    except LeanMCPError as e:
        fail(e.message)

    # --- Preview ---
    packager = ProjectPackager(root)
    try:
        preview, stats = packager.preview_files(PREVIEW_LIMIT)
    except LeanMCPError as e:
        fail(f"failed to scan directory: {e.message}")

    click.echo(f"Found {stats.total_files} files ({human_readable_size(stats.total_size)})")
    for entry in preview[:PREVIEW_SHOWN]:
        click.echo(f"  {truncate(entry.rel_path, 60)}")
    if stats.total_files > PREVIEW_SHOWN:
        click.echo(f"  ... and {stats.total_files - PREVIEW_SHOWN} more files")
    click.echo()

    if interactive and not yes:
        click.echo(f"Name:        {name}")
        click.echo(f"Description: {description or '(none)'}")
        click.echo(f"Path:        {root}")
        if not questionary.confirm("Continue?", default=True, style=PROMPT_STYLE).ask():
            click.echo("Project creation cancelled.")
            return

    client = PlatformClient(config)
    status = Spinner(indent=2)

    try:
        status.start(f"Creating project '{name}'...")
        project = client.create_project(name, description)
        status.done()

        status.start(f"Packaging {stats.total_files} files...")
        archive = packager.build_archive()
        status.done(suffix=f"({human_readable_size(len(archive.data))})")

        status.start("Uploading files...")
        project = client.upload_project_archive(project.id, archive.data)
        status.done()
    except PlatformAPIError as e:
        status.fail()
        report_api_error(e, "create project")
    except LeanMCPError as e:
        status.fail()
        fail(e.message)

    try:
        save_project_config(root, project)
    except OSError as e:
        fail(f"failed to save local config: {e}")

    click.echo()
    click.echo(click.style(f"Project '{name}' created successfully!", fg="green"))
    click.echo(f"Project ID: {project.id}")
    click.echo("\nNext steps:")
    click.echo(f"  leanmcp projects build {project.id}")
    click.echo(f"  leanmcp deploy-stream --project-id {project.id}")


projects.add_command(create_project)


@projects.command("delete")
@click.argument("project_id")
@click.option("--force", is_flag=True, help="Confirm deletion")
@click.pass_obj
def delete_project(config: CLIConfig, project_id: str, force: bool):
    """Delete a project and all associated data."""
    if not force:
        click.echo(
            click.style(
                "WARNING: This will permanently delete the project and all "
                "associated data.",
                fg="yellow",
            )
        )
        click.echo("Use --force to confirm deletion.")
        return

    client = PlatformClient(config)

    try:
        client.delete_project(project_id)
    except PlatformAPIError as e:
        report_api_error(e, "delete project")

    click.echo(click.style("Project deleted successfully!", fg="green"))


@projects.command("builds")
@click.argument("project_id")
@click.pass_obj
def list_builds(config: CLIConfig, project_id: str):
    """List builds of a project."""
    client = PlatformClient(config)

    try:
        builds = client.get_project_builds(project_id)
    except PlatformAPIError as e:
        report_api_error(e, "list builds")

    if not builds:
        click.echo("No builds found.")
        return

    click.echo(f"Found {len(builds)} build(s):\n")
    click.echo(f"{'ID':<12} {'STATUS':<12} {'CREATED':<14} {'UPDATED':<14}")
    click.echo("-" * 55)
    for build in builds:
        created = format_timestamp(build.created_at, short=True)
        updated = format_timestamp(build.updated_at, short=True)
        click.echo(f"{short_id(build.id):<12} {build.status:<12} {created:<14} {updated:<14}")


@projects.command("build")
@click.argument("project_id")
@click.pass_obj
def start_build(config: CLIConfig, project_id: str):
    """Start a build for a project."""
    client = PlatformClient(config)

    click.echo(f"Starting build for project {project_id}...")
    try:
        build = client.start_build(project_id)
    except PlatformAPIError as e:
        report_api_error(e, "start build")

    click.echo(click.style("Build started successfully!", fg="green"))
    click.echo(f"Build ID: {build.id}")
    click.echo(f"Status:   {build.status}")
    click.echo(f"Created:  {format_timestamp(build.created_at)}")
