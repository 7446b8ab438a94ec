"""Shared fixtures for leanmcp tests."""

import pytest
from click.testing import CliRunner

from leanmcp.cli.platform.config import CLIConfig

TEST_API_KEY = "airtrain_test_key_1234567890"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's API URL override out of tests."""
    monkeypatch.delenv("LEANMCP_API_URL", raising=False)


@pytest.fixture
def runner():
    """Provide a CLI runner."""
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Path of an isolated CLI config file."""
    return tmp_path / "home" / "config.yaml"


@pytest.fixture
def config(config_file):
    """CLI config bound to a temporary file, without credentials."""
    return CLIConfig.load(config_file)


@pytest.fixture
def logged_in_config(config_file):
    """CLI config with a stored API key, saved to disk."""
    cfg = CLIConfig.load(config_file)
    cfg.api_key = TEST_API_KEY
    cfg.save()
    return cfg


@pytest.fixture
def project_dir(tmp_path):
    """A small project tree with ignorable clutter."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "index.ts").write_text("export const x = 1;\n")
    (root / "src" / "util.ts").write_text("export const y = 2;\n")
    (root / "package.json").write_text('{"name": "demo"}\n')
    (root / "README.md").write_text("# demo\n")
    (root / "node_modules" / "left-pad").mkdir(parents=True)
    (root / "node_modules" / "left-pad" / "index.js").write_text("module.exports = 1;\n")
    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (root / "debug.log").write_text("noise\n")
    (root / ".env").write_text("SECRET=1\n")
    return root
