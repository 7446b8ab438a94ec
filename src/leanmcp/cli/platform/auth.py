"""Authentication helpers for Platform API."""

from datetime import UTC, datetime

from .config import CLIConfig
from .exceptions import NotAuthenticatedError
from .types import Credentials, UserInfo

API_KEY_PREFIX = "airtrain_"
MIN_API_KEY_LENGTH = 20


def validate_api_key_format(api_key: str) -> None:
    """Check that an API key looks valid before storing it.

    Args:
        api_key: Key to check.

    Raises:
        ValueError: If the key is empty, has the wrong prefix or is too short.
    """
    if not api_key:
        raise ValueError("API key cannot be empty")
    if not api_key.startswith(API_KEY_PREFIX):
        raise ValueError(f"API key must start with '{API_KEY_PREFIX}'")
    if len(api_key) < MIN_API_KEY_LENGTH:
        raise ValueError("API key appears to be too short")


def store_credentials(
    config: CLIConfig, api_key: str, user_info: UserInfo | None = None
) -> Credentials:
    """Save an API key (and optional user info) to the config file.

    Args:
        config: CLI config to update and save.
        api_key: API key to store.
        user_info: Optional user details to store alongside the key.

    Returns:
        The stored credentials.
    """
    validate_api_key_format(api_key)
    config.api_key = api_key
    config.user_email = user_info.email if user_info else ""
    config.scopes = list(user_info.scopes) if user_info else []
    config.stored_at = datetime.now(UTC).isoformat()
    config.save()
    return load_credentials(config)


def load_credentials(config: CLIConfig) -> Credentials:
    """Read stored credentials from the config.

    Raises:
        NotAuthenticatedError: If no API key is stored.
    """
    if not config.api_key:
        raise NotAuthenticatedError()
    return Credentials(
        api_key=config.api_key,
        user_email=config.user_email,
        scopes=config.scopes,
        stored_at=config.stored_at,
        last_used=config.last_used,
    )


def clear_credentials(config: CLIConfig) -> None:
    """Remove stored credentials."""
    config.api_key = ""
    config.user_email = ""
    config.scopes = []
    config.stored_at = ""
    config.save()


def update_last_used(config: CLIConfig) -> None:
    """Record that the stored key was just used successfully."""
    config.last_used = datetime.now(UTC).isoformat()
    config.save()


def is_authenticated(config: CLIConfig) -> bool:
    """Check if an API key is stored."""
    return bool(config.api_key)


def mask_api_key(api_key: str) -> str:
    """Mask an API key for display, keeping only its ends."""
    if len(api_key) <= 12:
        return "***"
    return f"{api_key[:8]}...{api_key[-4:]}"
