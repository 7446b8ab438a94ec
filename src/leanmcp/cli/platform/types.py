"""Data types for Platform API contracts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

TERMINAL_EVENT_TYPES = frozenset({"complete", "error"})
TERMINAL_STEPS = frozenset({"COMPLETED", "FAILED"})
FAILED_BUILD_STATUS = "failed"


class _APIModel(BaseModel):
    """Base for camelCase API payloads."""

    model_config = ConfigDict(populate_by_name=True)


class Credentials(BaseModel):
    """Stored authentication credentials."""

    api_key: str
    user_email: str = ""
    scopes: list[str] = Field(default_factory=list)
    stored_at: str = ""
    last_used: str = ""


class UserInfo(BaseModel):
    """User information attached to stored credentials."""

    email: str = ""
    scopes: list[str] = Field(default_factory=list)


class APIKeyInfo(_APIModel):
    """Information about the current API key."""

    id: str
    name: str = ""
    scopes: list[str] = Field(default_factory=list)
    is_active: bool = Field(False, alias="isActive")
    created_at: str = Field("", alias="createdAt")
    expires_at: str | None = Field(None, alias="expiresAt")


class Project(_APIModel):
    """A LeanMCP project."""

    id: str
    name: str
    description: str = ""
    status: str = ""
    framework: str = ""
    repository_url: str = Field("", alias="repositoryUrl")
    s3_location: str = Field("", alias="s3Location")
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")
    user_id: str = Field("", alias="userId")


class Build(_APIModel):
    """A project build."""

    id: str
    project_id: str = Field("", alias="projectId")
    status: str = ""
    build_log: str = Field("", alias="buildLog")
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")


class Chat(_APIModel):
    """A chat conversation."""

    id: str
    title: str = ""
    summary: str = ""
    model_used: str = Field("", alias="modelUsed")
    message_count: int = Field(0, alias="messageCount")
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")
    user_id: str = Field("", alias="userId")


class ChatMessage(_APIModel):
    """A single message in a chat."""

    id: str
    chat_id: str = Field("", alias="chatId")
    role: str = ""
    content: str = ""
    message_index: int = Field(0, alias="messageIndex")
    created_at: str = Field("", alias="createdAt")


class UploadURLResponse(_APIModel):
    """Pre-signed upload target for a project archive."""

    url: str
    s3_location: str = Field("", alias="s3Location")


class DeployStreamRequest(_APIModel):
    """Body of the end-to-end deploy-stream request."""

    project_id: str = Field(..., alias="projectId")
    container_port: int | None = Field(None, alias="containerPort")
    secret_ids: list[str] | None = Field(None, alias="secretIds")

    def to_payload(self) -> dict:
        """Serialize with API field names, omitting unset optional fields."""
        payload = self.model_dump(by_alias=True, exclude_none=True)
        if not payload.get("containerPort"):
            payload.pop("containerPort", None)
        if not payload.get("secretIds"):
            payload.pop("secretIds", None)
        return payload


class StreamEvent(_APIModel):
    """A progress update decoded from the deployment stream."""

    kind: str = Field("progress", alias="type")
    deployment_id: str | None = Field(None, alias="deploymentId")
    current_step: str | None = Field(None, alias="currentStep")
    build_id: str | None = Field(None, alias="buildId")
    build_status: str | None = Field(None, alias="buildStatus")
    progress: float | None = None
    eta_seconds: int | None = Field(None, alias="estimatedTimeRemaining")
    message: str | None = None
    error: str | None = None
    deployment_url: str | None = Field(None, alias="deploymentUrl")

    @field_validator("kind", mode="before")
    @classmethod
    def _default_kind(cls, value: object) -> object:
        return "progress" if value is None else value

    @property
    def is_terminal(self) -> bool:
        """True when no further events are expected after this one."""
        return (
            self.kind in TERMINAL_EVENT_TYPES
            or self.current_step in TERMINAL_STEPS
            or self.build_status == FAILED_BUILD_STATUS
        )

    @property
    def is_failure(self) -> bool:
        """True when the event reports a failed build or deployment."""
        return self.build_status == FAILED_BUILD_STATUS or self.current_step == "FAILED"
