"""HTTP client for the LeanMCP Platform API."""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from .config import DEFAULT_TIMEOUT, UPLOAD_TIMEOUT, USER_AGENT, CLIConfig
from .exceptions import (
    MalformedEventError,
    NotAuthenticatedError,
    PlatformAPIError,
    TransportError,
)
from .packaging import ProjectPackager, validate_size
from .types import (
    APIKeyInfo,
    Build,
    Chat,
    ChatMessage,
    DeployStreamRequest,
    Project,
    StreamEvent,
    UploadURLResponse,
)

logger = logging.getLogger(__name__)

DEPLOY_STREAM_ENDPOINT = "/api-key/end-to-end/deploy-stream"
ARCHIVE_FILE_NAME = "project.zip"
ARCHIVE_CONTENT_TYPE = "application/zip"

__all__ = [
    "PlatformAPIError",
    "PlatformClient",
    "TransportError",
    "decode_stream_payload",
]


def decode_stream_payload(payload: str) -> StreamEvent:
    """Parse a ``data:`` payload into a stream event.

    Args:
        payload: Text after the ``data: `` prefix.

    Returns:
        Decoded event.

    Raises:
        MalformedEventError: If the payload is not a JSON event object.
    """
    try:
        return StreamEvent.model_validate_json(payload)
    except ValidationError as e:
        raise MalformedEventError(payload) from e


class PlatformClient:
    """HTTP client for the LeanMCP Platform API."""

    def __init__(
        self,
        config: CLIConfig | None = None,
        base_url: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the Platform API client.

        Args:
            config: CLI config holding the base URL and API key. Loaded from
                the default location when omitted.
            base_url: Override for the config's base URL.
            timeout: Request timeout in seconds for ordinary API calls.
        """
        self.config = config if config is not None else CLIConfig.load()
        self.base_url = (base_url or self.config.base_url).rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()

    def _get_headers(self, authenticated: bool = True) -> dict[str, str]:
        """Get request headers.

        Raises:
            NotAuthenticatedError: If authenticated=True but no API key is stored.
        """
        headers = {
            "User-Agent": USER_AGENT,
            "Content-Type": "application/json",
        }
        if authenticated:
            if not self.config.api_key:
                raise NotAuthenticatedError()
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        json_data: dict | None = None,
        params: dict | None = None,
        authenticated: bool = True,
    ) -> requests.Response:
        """Make request to Platform API.

        Args:
            method: HTTP method.
            endpoint: API endpoint path.
            json_data: JSON body data.
            params: URL query parameters.
            authenticated: Whether to include auth header.

        Returns:
            Response object.

        Raises:
            PlatformAPIError: On API errors or connection issues.
        """
        url = f"{self.base_url}{endpoint}"
        headers = self._get_headers(authenticated)
        logger.debug(f"{method} {url}")

        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                json=json_data,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            raise PlatformAPIError(0, "Cannot connect to LeanMCP API") from e
        except requests.exceptions.Timeout as e:
            raise PlatformAPIError(0, "Request timed out") from e
        except requests.exceptions.RequestException as e:
            raise PlatformAPIError(0, "Network request failed") from e

        if response.status_code >= 400:
            try:
                error_data = response.json() if response.content else {}
            except (json.JSONDecodeError, ValueError):
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {}
            detail = error_data.get("message") or error_data.get("error")
            if detail and not isinstance(detail, str):
                detail = json.dumps(detail)
            raise PlatformAPIError(
                response.status_code,
                detail or response.text or response.reason or "Request failed",
                error_data.get("details"),
            )
        return response

    @staticmethod
    def _safe_json(resp: requests.Response) -> Any:
        """Parse JSON from response, raising PlatformAPIError on failure."""
        try:
            return resp.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise PlatformAPIError(
                resp.status_code,
                "Unexpected response from server. Please try again.",
            ) from e

    _T = TypeVar("_T", bound=BaseModel)

    @staticmethod
    def _safe_validate(model_cls: type[_T], data: Any) -> _T:
        """Validate data against a Pydantic model, raising PlatformAPIError on failure."""
        try:
            return model_cls.model_validate(data)
        except ValidationError as e:
            raise PlatformAPIError(
                0,
                "Unexpected response format from server. "
                "Try updating: pip install -U leanmcp-cli",
            ) from e

    def _validate_list(self, model_cls: type[_T], resp: requests.Response) -> list[_T]:
        data = self._safe_json(resp)
        if not isinstance(data, list):
            raise PlatformAPIError(
                resp.status_code, "Unexpected response format from server."
            )
        return [self._safe_validate(model_cls, item) for item in data]

    # ==================== AUTH ====================

    def test_connection(self) -> None:
        """Check that the API is reachable with the stored key.

        Raises:
            PlatformAPIError: If the health check fails.
        """
        self._request("GET", "/health")

    def get_api_key_info(self) -> APIKeyInfo:
        """Get information about the current API key."""
        resp = self._request("GET", "/api/projects/api-key/info")
        return self._safe_validate(APIKeyInfo, self._safe_json(resp))

    # ==================== PROJECTS ====================

    def list_projects(self) -> list[Project]:
        """List all projects for the authenticated user."""
        resp = self._request("GET", "/api/projects")
        return self._validate_list(Project, resp)

    def get_project(self, project_id: str) -> Project:
        """Get a project by ID."""
        resp = self._request("GET", f"/api/projects/{project_id}")
        return self._safe_validate(Project, self._safe_json(resp))

    def create_project(self, name: str, description: str = "") -> Project:
        """Create a project record.

        Args:
            name: Project name.
            description: Optional description.

        Returns:
            Created project.
        """
        body: dict[str, str] = {"name": name}
        if description:
            body["description"] = description
        resp = self._request("POST", "/api/projects", json_data=body)
        return self._safe_validate(Project, self._safe_json(resp))

    def delete_project(self, project_id: str) -> None:
        """Delete a project."""
        self._request("DELETE", f"/api/projects/{project_id}")

    def get_project_builds(self, project_id: str) -> list[Build]:
        """List builds for a project."""
        resp = self._request("GET", f"/api/projects/{project_id}/builds")
        return self._validate_list(Build, resp)

    def start_build(self, project_id: str) -> Build:
        """Start a new build for a project."""
        resp = self._request("POST", f"/api/projects/{project_id}/build")
        return self._safe_validate(Build, self._safe_json(resp))

    def get_upload_url(
        self, project_id: str, file_name: str, file_size: int
    ) -> UploadURLResponse:
        """Get a pre-signed URL for uploading a project archive.

        Args:
            project_id: Project ID.
            file_name: Archive file name.
            file_size: Archive size in bytes.

        Returns:
            Upload URL and the storage location to record afterwards.
        """
        resp = self._request(
            "POST",
            f"/api/projects/{project_id}/upload-url",
            json_data={
                "fileName": file_name,
                "fileType": ARCHIVE_CONTENT_TYPE,
                "fileSize": file_size,
            },
        )
        return self._safe_validate(UploadURLResponse, self._safe_json(resp))

    def upload_archive(self, upload_url: str, data: bytes) -> None:
        """PUT archive bytes to a pre-signed URL.

        The URL carries its own credentials, so no auth header is sent.

        Raises:
            PlatformAPIError: If the upload fails or times out.
        """
        logger.debug(f"Uploading {len(data)} bytes")
        try:
            resp = self._session.put(
                upload_url,
                data=data,
                headers={"Content-Type": ARCHIVE_CONTENT_TYPE},
                timeout=UPLOAD_TIMEOUT,
            )
        except requests.exceptions.Timeout as e:
            raise PlatformAPIError(0, "Upload timed out") from e
        except requests.exceptions.RequestException as e:
            raise PlatformAPIError(0, "Upload failed") from e

        if resp.status_code != 200:
            raise PlatformAPIError(
                resp.status_code, f"Upload failed: {resp.text or resp.reason}"
            )

    def update_s3_location(self, project_id: str, s3_location: str) -> Project:
        """Record the uploaded archive's storage location on the project."""
        resp = self._request(
            "POST",
            f"/api/projects/{project_id}/s3-location",
            json_data={"s3Location": s3_location},
        )
        return self._safe_validate(Project, self._safe_json(resp))

    def upload_project_files(self, project_id: str, project_path: str | Path) -> Project:
        """Zip a directory, upload it and record its location.

        Args:
            project_id: Project to attach the archive to.
            project_path: Project directory.

        Returns:
            Updated project.
        """
        result = ProjectPackager(project_path).build_archive()
        return self.upload_project_archive(project_id, result.data)

    def upload_project_archive(self, project_id: str, data: bytes) -> Project:
        """Upload a built archive and record its location on the project.

        Raises:
            SizeLimitError: If the archive exceeds the upload limit.
            PlatformAPIError: If any of the upload requests fail.
        """
        validate_size(data)
        upload = self.get_upload_url(project_id, ARCHIVE_FILE_NAME, len(data))
        self.upload_archive(upload.url, data)
        return self.update_s3_location(project_id, upload.s3_location)

    def create_project_with_upload(
        self, name: str, description: str, project_path: str | Path
    ) -> Project:
        """Create a project and upload its files in one operation."""
        project = self.create_project(name, description)
        return self.upload_project_files(project.id, project_path)

    # ==================== CHATS ====================

    def list_chats(self) -> list[Chat]:
        """List all chats for the authenticated user."""
        resp = self._request("GET", "/api/chats")
        return self._validate_list(Chat, resp)

    def get_chat(self, chat_id: str) -> Chat:
        """Get a chat by ID."""
        resp = self._request("GET", f"/api/chats/id/{chat_id}")
        return self._safe_validate(Chat, self._safe_json(resp))

    def get_chat_history(self, chat_id: str) -> list[ChatMessage]:
        """Get the message history of a chat."""
        resp = self._request("GET", f"/api/chats/id/{chat_id}/history/raw")
        return self._validate_list(ChatMessage, resp)

    def create_chat(self, title: str, model: str = "") -> Chat:
        """Create a chat.

        Args:
            title: Chat title.
            model: Optional model identifier.
        """
        body: dict[str, str] = {"title": title}
        if model:
            body["modelUsed"] = model
        resp = self._request("POST", "/api/chats", json_data=body)
        return self._safe_validate(Chat, self._safe_json(resp))

    def delete_chat(self, chat_id: str) -> None:
        """Delete a chat."""
        self._request("DELETE", f"/api/chats/id/{chat_id}")

    # ==================== DEPLOYMENT STREAM ====================

    def _open_deploy_stream(self, request: DeployStreamRequest) -> requests.Response:
        """Issue the deploy request and return the open streaming response.

        Raises:
            TransportError: On connection failure or a non-200/201 status.
        """
        headers = self._get_headers()
        headers["Accept"] = "text/event-stream"
        headers["Cache-Control"] = "no-cache"
        url = f"{self.base_url}{DEPLOY_STREAM_ENDPOINT}"
        logger.debug(f"POST {url} (stream)")

        try:
            resp = self._session.post(
                url,
                headers=headers,
                json=request.to_payload(),
                stream=True,
                timeout=None,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(0, f"failed to start deployment stream: {e}") from e

        if resp.status_code not in (200, 201):
            try:
                body = resp.text
            finally:
                resp.close()
            raise TransportError(
                resp.status_code,
                f"deployment failed (status {resp.status_code}): {body}",
            )
        return resp

    @staticmethod
    def _iter_lines(resp: requests.Response) -> Iterator[str]:
        """Yield body lines as they arrive.

        Uses iter_content(chunk_size=None) for real-time streaming instead of
        iter_lines() which buffers in 512-byte chunks.
        """
        buffer = ""
        # Event streams are always UTF-8 whatever the Content-Type says
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            for chunk in resp.iter_content(chunk_size=None):
                buffer += decoder.decode(chunk)
                while "\n" in buffer:
                    line, buffer = buffer.split("\n", 1)
                    yield line
        except requests.exceptions.RequestException as e:
            raise TransportError(0, f"error reading stream: {e}") from e
        buffer += decoder.decode(b"", final=True)
        if buffer:
            yield buffer

    def stream_deployment(self, request: DeployStreamRequest) -> Iterator[StreamEvent]:
        """Start a deployment and yield its progress events.

        The connection is opened on first iteration and closed when a
        terminal event has been consumed, when the stream ends, or when the
        iterator is closed early.

        Args:
            request: Deployment parameters.

        Yields:
            Stream events in arrival order. Payloads that are not valid
            events arrive as ``log`` events carrying the raw text.

        Raises:
            TransportError: On connection, status or read failures.
        """
        resp = self._open_deploy_stream(request)
        try:
            for raw_line in self._iter_lines(resp):
                line = raw_line.strip()
                if not line or line.startswith(":"):
                    continue
                if not line.startswith("data: "):
                    continue

                payload = line[len("data: ") :]
                if not payload or payload == "[DONE]":
                    continue

                try:
                    event = decode_stream_payload(payload)
                except MalformedEventError:
                    logger.warning(f"Non-JSON stream payload treated as log: {payload!r}")
                    event = StreamEvent(kind="log", message=payload)

                logger.debug(f"Stream event: {event.model_dump(exclude_none=True)}")
                yield event

                if event.is_terminal:
                    break
        finally:
            resp.close()

    def deploy_and_stream(
        self,
        request: DeployStreamRequest,
        handler: Callable[[StreamEvent], None],
    ) -> None:
        """Start a deployment and pass each progress event to ``handler``.

        Stops after the first terminal event. An exception raised by the
        handler closes the stream and propagates unchanged.

        Args:
            request: Deployment parameters.
            handler: Called once per event, in order.

        Raises:
            TransportError: On connection, status or read failures.
        """
        events = self.stream_deployment(request)
        try:
            for event in events:
                handler(event)
        finally:
            events.close()
