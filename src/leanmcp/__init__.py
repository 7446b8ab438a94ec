"""LeanMCP CLI - manage LeanMCP projects, chats and deployments.

Core API:
    - DirectoryScanner: walk a project directory honouring ignore rules
    - ProjectPackager: build the in-memory zip uploaded for a project
    - PlatformClient: REST and deployment-stream client

Example:
    from leanmcp import ProjectPackager, validate_size

    result = ProjectPackager("./my-server").build_archive()
    validate_size(result.data)
"""

import importlib.metadata

from leanmcp.cli.platform.client import PlatformClient
from leanmcp.cli.platform.packaging import ProjectPackager, validate_size
from leanmcp.cli.platform.scanner import DirectoryScanner

try:
    __version__ = importlib.metadata.version("leanmcp-cli")
except importlib.metadata.PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "DirectoryScanner",
    "PlatformClient",
    "ProjectPackager",
    "validate_size",
    "__version__",
]
