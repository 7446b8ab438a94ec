"""LeanMCP Platform API client, packaging and deployment streaming."""

from .auth import (
    clear_credentials,
    is_authenticated,
    load_credentials,
    store_credentials,
)
from .client import PlatformClient
from .config import CONFIG_FILE, PLATFORM_API_URL, CLIConfig
from .exceptions import (
    EmptyInputError,
    FileAccessError,
    HandlerError,
    LeanMCPError,
    MalformedEventError,
    PlatformAPIError,
    SizeLimitError,
    TransportError,
)
from .ignore import DEFAULT_EXCLUDES, IgnoreRules, matches
from .packaging import ArchiveResult, ProjectPackager, build_archive, validate_size
from .scanner import DirectoryScanner, FileEntry, ScanStats
from .types import (
    Build,
    Chat,
    ChatMessage,
    Credentials,
    DeployStreamRequest,
    Project,
    StreamEvent,
)

__all__ = [
    # Auth
    "store_credentials",
    "load_credentials",
    "clear_credentials",
    "is_authenticated",
    # Client
    "PlatformClient",
    # Config
    "CLIConfig",
    "PLATFORM_API_URL",
    "CONFIG_FILE",
    # Errors
    "LeanMCPError",
    "PlatformAPIError",
    "TransportError",
    "HandlerError",
    "MalformedEventError",
    "FileAccessError",
    "EmptyInputError",
    "SizeLimitError",
    # Scanning & packaging
    "DEFAULT_EXCLUDES",
    "IgnoreRules",
    "matches",
    "DirectoryScanner",
    "FileEntry",
    "ScanStats",
    "ProjectPackager",
    "ArchiveResult",
    "build_archive",
    "validate_size",
    # Types
    "Credentials",
    "Project",
    "Build",
    "Chat",
    "ChatMessage",
    "DeployStreamRequest",
    "StreamEvent",
]
