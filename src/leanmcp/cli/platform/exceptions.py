"""Exception classes for the LeanMCP CLI."""

from __future__ import annotations

from typing import Any


class LeanMCPError(Exception):
    """Base exception for all LeanMCP CLI errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PlatformAPIError(LeanMCPError):
    """Platform API error with status code and message."""

    def __init__(
        self, status_code: int, message: str, details: dict[str, Any] | None = None
    ) -> None:
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.message}"


class TransportError(PlatformAPIError):
    """Connection-level failure while opening or reading the deployment stream.

    Raised for transport errors (DNS, TLS, reset), non-2xx responses and
    failures reading the response body. ``status_code`` is 0 when no HTTP
    response was received.
    """


class NotAuthenticatedError(LeanMCPError):
    """No stored API key was found."""

    def __init__(
        self,
        message: str = "Not authenticated. Run 'leanmcp auth login --api-key <your-key>' first.",
    ) -> None:
        super().__init__(message)


class FileAccessError(LeanMCPError):
    """A file or directory could not be read while scanning or archiving.

    Attributes:
        path: The offending path.
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")


class EmptyInputError(LeanMCPError):
    """No files remain to archive after ignore filtering."""

    def __init__(
        self,
        message: str = (
            "no files found to zip "
            "(directory might be empty or all files are ignored)"
        ),
    ) -> None:
        super().__init__(message)


class SizeLimitError(LeanMCPError):
    """An archive exceeds the configured maximum size.

    Attributes:
        size: Archive size in bytes.
        max_mb: Configured limit in MiB.
    """

    def __init__(self, size: int, max_mb: int) -> None:
        self.size = size
        self.max_mb = max_mb
        super().__init__(f"zip file too large: {size} bytes (max {max_mb} MB)")


class MalformedEventError(LeanMCPError):
    """A deployment stream payload is not a valid event.

    Recovered by the stream decoder, which turns the raw payload into a
    ``log`` event instead of failing.
    """

    def __init__(self, payload: str) -> None:
        self.payload = payload
        super().__init__(f"malformed stream event: {payload!r}")


class HandlerError(LeanMCPError):
    """Raised by a stream event handler to abort a deployment stream."""


class DeploymentFailedError(HandlerError):
    """The deployment stream reported a failed build or deployment.

    Attributes:
        build_id: Build ID reported by the server, if any.
    """

    def __init__(self, message: str, build_id: str | None = None) -> None:
        self.build_id = build_id
        super().__init__(message)


class ProjectConfigError(LeanMCPError):
    """The local project config is missing or invalid."""
