"""Platform API configuration constants and the persisted CLI config."""

from __future__ import annotations

import logging
import os
from importlib.metadata import version
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, PrivateAttr, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.leanmcp.ai"
PLATFORM_API_URL = os.environ.get("LEANMCP_API_URL", DEFAULT_API_URL)
CONFIG_DIR = Path.home() / ".leanmcp-cli"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_DIR = ".leanmcp"
PROJECT_CONFIG_FILE = "config.json"
CLI_VERSION = version("leanmcp-cli")
USER_AGENT = f"leanmcp-cli/{CLI_VERSION}"
DEFAULT_TIMEOUT = 30  # seconds
UPLOAD_TIMEOUT = 10 * 60  # seconds
MAX_ARCHIVE_MB = 500


class CLIConfig(BaseModel):
    """User-level CLI settings and stored credentials.

    Loaded explicitly with :meth:`load` and written back with :meth:`save`;
    callers pass the instance to the client and credential helpers instead
    of reading global state.
    """

    base_url: str = PLATFORM_API_URL
    api_key: str = ""
    user_email: str = ""
    scopes: list[str] = Field(default_factory=list)
    stored_at: str = ""
    last_used: str = ""

    _path: Path = PrivateAttr(default=CONFIG_FILE)

    @property
    def path(self) -> Path:
        return self._path

    @classmethod
    def load(cls, path: Path | str | None = None) -> CLIConfig:
        """Load config from a YAML file.

        A missing or unreadable file yields the defaults, so first runs and
        broken files never block commands like ``auth login``.

        Args:
            path: Config file path (defaults to ~/.leanmcp-cli/config.yaml).

        Returns:
            Loaded config bound to ``path``.
        """
        config_path = Path(path) if path else CONFIG_FILE
        data: dict = {}
        if config_path.exists():
            try:
                loaded = yaml.safe_load(config_path.read_text())
                if isinstance(loaded, dict):
                    data = loaded
                else:
                    logger.warning(f"Ignoring non-mapping config file {config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Could not read config file {config_path}: {e}")

        env_url = os.environ.get("LEANMCP_API_URL")
        if env_url:
            data["base_url"] = env_url

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid config file {config_path}, using defaults: {e}")
            config = cls()
        config._path = config_path
        return config

    def save(self) -> None:
        """Write the config back to its file (owner-only permissions)."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(yaml.safe_dump(self.model_dump(), sort_keys=False))
        self._path.chmod(0o600)
        logger.debug(f"Saved config to {self._path}")
