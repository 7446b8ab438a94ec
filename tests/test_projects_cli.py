"""Tests for leanmcp projects, chats and api-keys CLI commands."""

import json
from unittest.mock import MagicMock, patch

import pytest

from leanmcp.cli.cli import cli
from leanmcp.cli.platform.client import PlatformAPIError
from leanmcp.cli.platform.exceptions import SizeLimitError
from leanmcp.cli.platform.types import (
    APIKeyInfo,
    Build,
    Chat,
    ChatMessage,
    Project,
)


@pytest.fixture
def invoke(runner, logged_in_config):
    """Run the CLI against the temporary config."""

    def _invoke(*args, **kwargs):
        return runner.invoke(cli, ["--config", str(logged_in_config.path), *args], **kwargs)

    return _invoke


def _make_project(**overrides) -> Project:
    """Helper to create a Project with defaults."""
    defaults = {
        "id": "proj_1234567890",
        "name": "my-server",
        "status": "active",
        "framework": "node",
        "createdAt": "2026-01-01T00:00:00Z",
        "updatedAt": "2026-01-02T00:00:00Z",
    }
    defaults.update(overrides)
    return Project.model_validate(defaults)


# ==================== Projects ====================


class TestProjectsList:
    """Tests for leanmcp projects list."""

    def test_list_table(self, invoke):
        """Projects are shown in a table."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.list_projects.return_value = [_make_project()]
            mock_client_cls.return_value = mock_client

            result = invoke("projects", "list")

        assert result.exit_code == 0
        assert "Found 1 project(s)" in result.output
        assert "proj_123..." in result.output
        assert "my-server" in result.output

    def test_list_json(self, invoke):
        """--json prints API field names."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.list_projects.return_value = [_make_project()]
            mock_client_cls.return_value = mock_client

            result = invoke("projects", "list", "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[0]["id"] == "proj_1234567890"
        assert data[0]["createdAt"] == "2026-01-01T00:00:00Z"

    def test_list_empty(self, invoke):
        """An empty account gets a hint."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.list_projects.return_value = []
            mock_client_cls.return_value = mock_client

            result = invoke("projects", "list")

        assert result.exit_code == 0
        assert "No projects found" in result.output

    def test_list_unauthorized(self, invoke):
        """A rejected key tells the user to log in again."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.list_projects.side_effect = PlatformAPIError(401, "Unauthorized")
            mock_client_cls.return_value = mock_client

            result = invoke("projects", "list")

        assert result.exit_code == 1
        assert "Authentication failed" in result.output
        assert "leanmcp auth login" in result.output


class TestProjectsShow:
    """Tests for leanmcp projects show."""

    def test_show(self, invoke):
        """Project details are printed."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.get_project.return_value = _make_project(
                description="MCP server", s3Location="s3://b/k"
            )
            mock_client_cls.return_value = mock_client

            result = invoke("projects", "show", "proj_1234567890")

        assert result.exit_code == 0
        mock_client.get_project.assert_called_once_with("proj_1234567890")
        assert "MCP server" in result.output
        assert "s3://b/k" in result.output

    def test_show_not_found(self, invoke):
        """A missing project exits with an error."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.get_project.side_effect = PlatformAPIError(404, "Not found")
            mock_client_cls.return_value = mock_client

            result = invoke("projects", "show", "nope")

        assert result.exit_code == 1
        assert "not found" in result.output


class TestProjectsCreate:
    """Tests for leanmcp create / projects create."""

    def _mock_client(self):
        mock_client = MagicMock()
        mock_client.create_project.return_value = _make_project()
        mock_client.upload_project_archive.return_value = _make_project(
            s3Location="s3://b/k"
        )
        return mock_client

    @pytest.mark.parametrize("command", [["create"], ["projects", "create"]])
    def test_create_uploads_and_saves_config(self, invoke, project_dir, command):
        """The project is created, uploaded and recorded locally."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = self._mock_client()
            mock_client_cls.return_value = mock_client

            result = invoke(
                *command, "--name", "my-server", "--path", str(project_dir), "-d", "demo"
            )

        assert result.exit_code == 0, result.output
        assert "Found 4 files" in result.output
        assert "created successfully" in result.output
        mock_client.create_project.assert_called_once_with("my-server", "demo")
        project_id, data = mock_client.upload_project_archive.call_args.args
        assert project_id == "proj_1234567890"
        assert data[:2] == b"PK"

        saved = json.loads((project_dir / ".leanmcp" / "config.json").read_text())
        assert saved["project"]["s3Location"] == "s3://b/k"

    def test_create_requires_name_without_tty(self, invoke, project_dir):
        """Non-interactive runs need --name."""
        result = invoke("create", "--path", str(project_dir))
        assert result.exit_code == 1
        assert "--name is required" in result.output

    def test_create_rejects_missing_directory(self, invoke, tmp_path):
        """A missing path is reported before anything is created."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            result = invoke("create", "--name", "x", "--path", str(tmp_path / "nope"))

        assert result.exit_code == 1
        assert "does not exist" in result.output
        mock_client_cls.assert_not_called()

    def test_create_with_only_ignored_files(self, invoke, tmp_path):
        """A tree with nothing to upload fails after the project record is made."""
        root = tmp_path / "empty-project"
        (root / "node_modules").mkdir(parents=True)
        (root / "node_modules" / "a.js").write_text("x")

        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = self._mock_client()
            mock_client_cls.return_value = mock_client

            result = invoke("create", "--name", "x", "--path", str(root))

        assert result.exit_code == 1
        assert "no files found to zip" in result.output
        mock_client.upload_project_archive.assert_not_called()

    def test_create_upload_failure(self, invoke, project_dir):
        """An upload error exits without saving local config."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = self._mock_client()
            mock_client.upload_project_archive.side_effect = PlatformAPIError(
                403, "Upload failed"
            )
            mock_client_cls.return_value = mock_client

            result = invoke("create", "--name", "x", "--path", str(project_dir))

        assert result.exit_code == 1
        assert not (project_dir / ".leanmcp").exists()

    def test_create_archive_too_large(self, invoke, project_dir):
        """A size-limit error is reported as a plain failure."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = self._mock_client()
            mock_client.upload_project_archive.side_effect = SizeLimitError(
                600 * 1024 * 1024, 500
            )
            mock_client_cls.return_value = mock_client

            result = invoke("create", "--name", "x", "--path", str(project_dir))

        assert result.exit_code == 1
        assert "zip file too large" in result.output
        assert not (project_dir / ".leanmcp").exists()


class TestProjectsDelete:
    """Tests for leanmcp projects delete."""

    def test_delete_requires_force(self, invoke):
        """Without --force nothing is deleted."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            result = invoke("projects", "delete", "proj_1")

        assert result.exit_code == 0
        assert "Use --force" in result.output
        mock_client_cls.assert_not_called()

    def test_delete_with_force(self, invoke):
        """--force deletes the project."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client_cls.return_value = mock_client

            result = invoke("projects", "delete", "proj_1", "--force")

        assert result.exit_code == 0
        mock_client.delete_project.assert_called_once_with("proj_1")
        assert "deleted successfully" in result.output


class TestBuilds:
    """Tests for leanmcp projects builds / build."""

    def test_builds_table(self, invoke):
        """Builds are listed."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.get_project_builds.return_value = [
                Build(id="build_abcdefgh12", status="completed")
            ]
            mock_client_cls.return_value = mock_client

            result = invoke("projects", "builds", "proj_1")

        assert result.exit_code == 0
        assert "build_ab..." in result.output
        assert "completed" in result.output

    def test_start_build(self, invoke):
        """A build is started."""
        with patch("leanmcp.cli.commands.projects.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.start_build.return_value = Build(id="build_1", status="pending")
            mock_client_cls.return_value = mock_client

            result = invoke("projects", "build", "proj_1")

        assert result.exit_code == 0
        assert "Build ID: build_1" in result.output


# ==================== Chats ====================


class TestChats:
    """Tests for leanmcp chats."""

    def test_list(self, invoke):
        """Chats are listed with message counts."""
        with patch("leanmcp.cli.commands.chats.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.list_chats.return_value = [
                Chat(id="chat_123456789", title="Hello", messageCount=3)
            ]
            mock_client_cls.return_value = mock_client

            result = invoke("chats", "list")

        assert result.exit_code == 0
        assert "Hello" in result.output
        assert "N/A" in result.output

    def test_history_limit_keeps_last_messages(self, invoke):
        """--limit shows the most recent messages."""
        messages = [
            ChatMessage(id=f"m{i}", role="user", content=f"message {i}", messageIndex=i)
            for i in range(5)
        ]
        with patch("leanmcp.cli.commands.chats.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.get_chat_history.return_value = messages
            mock_client_cls.return_value = mock_client

            result = invoke("chats", "history", "c1", "--limit", "2")

        assert result.exit_code == 0
        assert "Showing 2 message(s)" in result.output
        assert "message 4" in result.output
        assert "message 2" not in result.output

    def test_create_requires_title(self, invoke):
        """A title is required."""
        result = invoke("chats", "create")
        assert result.exit_code == 1
        assert "--title is required" in result.output

    def test_create(self, invoke):
        """A chat is created with the given model."""
        with patch("leanmcp.cli.commands.chats.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.create_chat.return_value = Chat(id="c1", title="T")
            mock_client_cls.return_value = mock_client

            result = invoke("chats", "create", "--title", "T", "--model", "gpt")

        assert result.exit_code == 0
        mock_client.create_chat.assert_called_once_with("T", "gpt")

    def test_delete_requires_force(self, invoke):
        """Without --force the chat is kept."""
        with patch("leanmcp.cli.commands.chats.PlatformClient") as mock_client_cls:
            result = invoke("chats", "delete", "c1")

        assert "Use --force" in result.output
        mock_client_cls.assert_not_called()


# ==================== API keys ====================


class TestAPIKeys:
    """Tests for leanmcp api-keys."""

    def test_info(self, invoke):
        """Key details are shown."""
        with patch("leanmcp.cli.commands.api_keys.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.get_api_key_info.return_value = APIKeyInfo(
                id="key_1", name="ci", scopes=["BUILD_AND_DEPLOY"], isActive=True
            )
            mock_client_cls.return_value = mock_client

            result = invoke("api-keys", "info")

        assert result.exit_code == 0
        assert "key_1" in result.output
        assert "BUILD_AND_DEPLOY" in result.output
        assert "Active" in result.output
        assert "Never" in result.output

    def test_list(self, invoke):
        """The current key is listed."""
        with patch("leanmcp.cli.commands.api_keys.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.get_api_key_info.return_value = APIKeyInfo(id="key_1", name="ci")
            mock_client_cls.return_value = mock_client

            result = invoke("api-keys", "list")

        assert result.exit_code == 0
        assert "key_1" in result.output
