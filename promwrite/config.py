"""Configuration models using Pydantic for validation."""
import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from promwrite import __version__

DEFAULT_ENDPOINT = "https://prometheus-us-central1.grafana.net/api/prom/push"
DEFAULT_TIMEOUT_S = 15.0
MAX_ERROR_MESSAGE_LEN = 256
DEFAULT_USER_AGENT = f"promwrite/{__version__}"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ClientConfig(BaseModel):
    """Credentials and endpoint for a hosted metrics instance.

    Set once at startup and never mutated afterwards.
    """
    model_config = ConfigDict(frozen=True)

    instance_id: str
    api_key: str
    endpoint: str = DEFAULT_ENDPOINT
    timeout_s: float = Field(default=DEFAULT_TIMEOUT_S, gt=0)
    max_error_message_len: int = Field(default=MAX_ERROR_MESSAGE_LEN, gt=0)
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("instance_id", "api_key")
    @classmethod
    def validate_not_blank(cls, v, info):
        """Credentials must be non-empty."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v):
        """Only http(s) endpoints can receive remote-write requests."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"endpoint must be an http(s) URL, got {v!r}")
        return v


class LoggingConfig(BaseModel):
    """Logging settings for the CLI."""
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"),
        validate_default=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return level


def load_client_config(instance_id: str, api_key: str, **overrides) -> ClientConfig:
    """Build and validate the client configuration."""
    try:
        return ClientConfig(instance_id=instance_id, api_key=api_key, **overrides)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}") from e
