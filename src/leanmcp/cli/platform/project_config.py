"""Local project configuration stored in ``.leanmcp/config.json``."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import CLI_VERSION, PROJECT_CONFIG_DIR, PROJECT_CONFIG_FILE
from .exceptions import ProjectConfigError
from .types import Project


class ProjectInfo(BaseModel):
    """Project details copied from the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    description: str = ""
    framework: str = ""
    status: str = ""
    s3_location: str = Field("", alias="s3Location")
    repository_url: str = Field("", alias="repositoryUrl")
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")


class CLIInfo(BaseModel):
    """Local CLI metadata."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = ""
    last_sync: str = Field("", alias="lastSync")
    project_path: str = Field("", alias="projectPath")


class ProjectConfig(BaseModel):
    """Contents of ``.leanmcp/config.json``."""

    project: ProjectInfo
    cli: CLIInfo = Field(default_factory=CLIInfo)


def _config_path(project_path: str | Path) -> Path:
    return Path(project_path) / PROJECT_CONFIG_DIR / PROJECT_CONFIG_FILE


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _write(project_path: str | Path, config: ProjectConfig) -> Path:
    path = _config_path(project_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(by_alias=True, indent=2))
    return path


def save_project_config(project_path: str | Path, project: Project) -> Path:
    """Save project details to ``.leanmcp/config.json``.

    Args:
        project_path: Project directory.
        project: Project returned by the API.

    Returns:
        Path of the written file.
    """
    config = ProjectConfig(
        project=ProjectInfo(
            id=project.id,
            name=project.name,
            description=project.description,
            framework=project.framework,
            status=project.status,
            s3_location=project.s3_location,
            repository_url=project.repository_url,
            created_at=project.created_at,
            updated_at=project.updated_at,
        ),
        cli=CLIInfo(
            version=CLI_VERSION,
            last_sync=_now(),
            project_path=str(project_path),
        ),
    )
    return _write(project_path, config)


def load_project_config(project_path: str | Path) -> ProjectConfig:
    """Load ``.leanmcp/config.json`` from a project directory.

    Raises:
        ProjectConfigError: If the file is missing, unreadable or invalid.
    """
    path = _config_path(project_path)
    if not path.exists():
        raise ProjectConfigError(
            "Project not initialized in this directory. "
            "Run 'leanmcp projects create' first."
        )
    try:
        return ProjectConfig.model_validate_json(path.read_text())
    except OSError as e:
        raise ProjectConfigError(f"Failed to read project config: {e}") from e
    except ValidationError as e:
        raise ProjectConfigError(f"Invalid project configuration: {e}") from e


def has_project_config(project_path: str | Path) -> bool:
    """Check whether a project directory has a local config."""
    return _config_path(project_path).exists()


def update_project_config(project_path: str | Path, **fields: str) -> ProjectConfig:
    """Update non-empty project fields and refresh the sync time.

    Args:
        project_path: Project directory.
        **fields: ``ProjectInfo`` field names and new values; empty values
            are ignored.

    Returns:
        The updated config.
    """
    config = load_project_config(project_path)
    updates = {key: value for key, value in fields.items() if value}
    unknown = set(updates) - set(ProjectInfo.model_fields)
    if unknown:
        raise ProjectConfigError(f"Unknown project fields: {', '.join(sorted(unknown))}")
    config.project = config.project.model_copy(update=updates)
    config.cli.last_sync = _now()
    _write(project_path, config)
    return config


def get_current_project_id(cwd: str | Path | None = None) -> str:
    """Get the project ID recorded in the given (or current) directory."""
    return load_project_config(cwd or Path.cwd()).project.id
