"""Tests for leanmcp deploy-stream CLI command."""

from unittest.mock import MagicMock, patch

import pytest

from leanmcp.cli.cli import cli
from leanmcp.cli.commands.deploy import failure_message, render_event
from leanmcp.cli.platform.exceptions import DeploymentFailedError, TransportError
from leanmcp.cli.platform.project_config import save_project_config
from leanmcp.cli.platform.types import Project, StreamEvent
from leanmcp.cli.utils import progress_bar, step_label


@pytest.fixture
def invoke(runner, logged_in_config):
    """Run the CLI against the temporary config."""

    def _invoke(*args):
        return runner.invoke(cli, ["--config", str(logged_in_config.path), *args])

    return _invoke


def _streaming(*events):
    """deploy_and_stream side effect that feeds events to the handler."""

    def _run(request, handler):
        for event in events:
            handler(event)
            if event.is_terminal:
                break

    return _run


def _event(**fields) -> StreamEvent:
    return StreamEvent.model_validate(fields)


# ==================== Rendering ====================


class TestProgressRendering:
    """Tests for progress helpers."""

    @pytest.mark.parametrize(
        "progress,expected",
        [
            (0, "[>                   ]"),
            (50, "[==========>         ]"),
            (100, "[====================]"),
            (150, "[====================]"),
        ],
    )
    def test_progress_bar(self, progress, expected):
        """The bar fills proportionally with a leading arrow."""
        assert progress_bar(progress) == expected

    @pytest.mark.parametrize(
        "step,expected",
        [
            ("build", "BUILDING"),
            ("CONTAINER", "CONTAINERIZING"),
            ("deploy", "DEPLOYING"),
            ("COMPLETE", "COMPLETED"),
            ("mystery", "unknown"),
            (None, "unknown"),
        ],
    )
    def test_step_label(self, step, expected):
        """Step names are normalized."""
        assert step_label(step) == expected

    def test_failure_message_precedence(self):
        """Error text wins over message, which wins over the build hint."""
        assert failure_message(_event(error="e", message="m")) == "e"
        assert failure_message(_event(message="m", buildStatus="failed")) == "m"
        assert "BuildID: b1" in failure_message(_event(buildStatus="failed", buildId="b1"))
        assert failure_message(_event(currentStep="FAILED")) == "Unknown error occurred"

    def test_render_failure_raises(self):
        """A failed event aborts the stream."""
        with pytest.raises(DeploymentFailedError) as exc_info:
            render_event(_event(currentStep="FAILED", error="OOM", buildId="b1"))
        assert exc_info.value.message == "OOM"
        assert exc_info.value.build_id == "b1"


# ==================== deploy-stream ====================


class TestDeployStreamCommand:
    """Tests for leanmcp deploy-stream."""

    def test_successful_deployment(self, invoke):
        """Progress and the live URL are printed."""
        with patch("leanmcp.cli.commands.deploy.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.deploy_and_stream.side_effect = _streaming(
                _event(currentStep="BUILDING", progress=50, estimatedTimeRemaining=30),
                _event(type="log", message="\x1b[2Jpulling image"),
                _event(
                    currentStep="COMPLETED",
                    progress=100,
                    deploymentUrl="https://demo.leanmcp.app",
                    deploymentId="dep_1",
                ),
            )
            mock_client_cls.return_value = mock_client

            result = invoke("deploy-stream", "--project-id", "proj_1")

        assert result.exit_code == 0, result.output
        assert "BUILDING (50.0%)" in result.output
        assert "ETA: 30s" in result.output
        assert "pulling image" in result.output
        assert "\x1b[2J" not in result.output
        assert "https://demo.leanmcp.app" in result.output
        assert "Deployment ID: dep_1" in result.output

    def test_request_payload(self, invoke):
        """Port and secrets are passed through."""
        with patch("leanmcp.cli.commands.deploy.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.deploy_and_stream.side_effect = _streaming(
                _event(type="complete")
            )
            mock_client_cls.return_value = mock_client

            result = invoke(
                "deploy-stream", "--project-id", "proj_1", "--port", "3000",
                "--secrets", "s1, s2",
            )

        assert result.exit_code == 0
        request = mock_client.deploy_and_stream.call_args.args[0]
        assert request.to_payload() == {
            "projectId": "proj_1",
            "containerPort": 3000,
            "secretIds": ["s1", "s2"],
        }
        assert "Container port: 3000" in result.output

    def test_failed_build_exits_nonzero(self, invoke):
        """A failed build is reported with its build ID."""
        with patch("leanmcp.cli.commands.deploy.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.deploy_and_stream.side_effect = _streaming(
                _event(currentStep="BUILDING", progress=10),
                _event(buildStatus="failed", buildId="build_9"),
                _event(currentStep="COMPLETED"),
            )
            mock_client_cls.return_value = mock_client

            result = invoke("deploy-stream", "--project-id", "proj_1")

        assert result.exit_code == 1
        assert "Build failed" in result.output
        assert "Build ID: build_9" in result.output
        assert "completed successfully" not in result.output

    def test_error_event_is_reported(self, invoke):
        """A terminal error event prints its text and ends the stream."""
        with patch("leanmcp.cli.commands.deploy.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.deploy_and_stream.side_effect = _streaming(
                _event(currentStep="BUILDING", progress=10),
                _event(type="error", error="quota exceeded"),
                _event(currentStep="COMPLETED"),
            )
            mock_client_cls.return_value = mock_client

            result = invoke("deploy-stream", "--project-id", "proj_1")

        assert result.exit_code == 0
        assert "Deployment error: quota exceeded" in result.output
        assert "completed successfully" not in result.output

    def test_transport_error_exits_nonzero(self, invoke):
        """Connection problems fail the command."""
        with patch("leanmcp.cli.commands.deploy.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.deploy_and_stream.side_effect = TransportError(
                502, "deployment failed (status 502): bad gateway"
            )
            mock_client_cls.return_value = mock_client

            result = invoke("deploy-stream", "--project-id", "proj_1")

        assert result.exit_code == 1
        assert "bad gateway" in result.output

    def test_project_id_from_local_config(self, invoke, tmp_path, monkeypatch):
        """Without --project-id the recorded project is deployed."""
        save_project_config(tmp_path, Project(id="proj_local", name="x"))
        monkeypatch.chdir(tmp_path)

        with patch("leanmcp.cli.commands.deploy.PlatformClient") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.deploy_and_stream.side_effect = _streaming(
                _event(type="complete")
            )
            mock_client_cls.return_value = mock_client

            result = invoke("deploy-stream")

        assert result.exit_code == 0
        request = mock_client.deploy_and_stream.call_args.args[0]
        assert request.project_id == "proj_local"

    def test_project_id_required(self, invoke, tmp_path, monkeypatch):
        """Outside a project directory --project-id is required."""
        monkeypatch.chdir(tmp_path)
        result = invoke("deploy-stream")
        assert result.exit_code == 1
        assert "--project-id is required" in result.output
