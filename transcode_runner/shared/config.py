"""Run configuration with validation and source resolution.

Settings are resolved once at startup from exactly one source, chosen by
precedence:

1. A config file named with ``--config``
2. ``config.json`` in the working directory
3. Individual command line flags

Environment variables prefixed with ``TRANSCODE_RUNNER_`` fill any value the
chosen source leaves out. All required values are validated before any
network activity happens.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

DEFAULT_CONFIG_FILE = "config.json"

# camelCase keys accepted in config files
FILE_KEY_ALIASES: dict[str, str] = {
    "accessKeyId": "access_key_id",
    "secretAccessKey": "secret_access_key",
    "queueUrl": "queue_url",
    "queue": "queue_url",
    "pipelineId": "pipeline_id",
    "pipeline": "pipeline_id",
}

# Command line flag that supplies each required setting
FLAG_FOR_FIELD: dict[str, str] = {
    "access_key_id": "--access-key",
    "secret_access_key": "--secret",
    "region": "--region",
    "bucket": "--bucket",
    "prefix": "--prefix",
    "queue_url": "--queue",
    "pipeline_id": "--pipeline",
}

REQUIRED_FIELDS = tuple(FLAG_FOR_FIELD)


class RunnerSettings(BaseSettings):
    """Resolved settings for a single run.

    Example:
        >>> settings = RunnerSettings(bucket="media-in", ...)
        >>> settings.poll_interval_seconds
        10.0
    """

    model_config = SettingsConfigDict(
        env_prefix="TRANSCODE_RUNNER_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Credentials and service addresses
    access_key_id: str = Field(description="AWS access key id")
    secret_access_key: SecretStr = Field(description="AWS secret access key")
    region: str = Field(description="AWS region for S3, Elastic Transcoder and SQS")
    bucket: str = Field(description="S3 bucket receiving the source file")
    prefix: str = Field(description="Key prefix for uploaded sources and outputs")
    queue_url: str = Field(description="SQS queue subscribed to pipeline notifications")
    pipeline_id: str = Field(description="Elastic Transcoder pipeline id")

    # Polling
    poll_interval_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=3600.0,
        description="Interval between queue polls",
    )
    wait_time_seconds: int = Field(
        default=5,
        ge=0,
        le=20,
        description="SQS long-poll wait per receive call",
    )
    visibility_timeout_seconds: int = Field(
        default=30,
        ge=0,
        le=43200,
        description="How long a received message stays hidden from other consumers",
    )
    delete_foreign_messages: bool = Field(
        default=False,
        description="Delete notifications for other jobs instead of leaving them queued",
    )

    # Job layout
    segment_duration_seconds: int = Field(
        default=10,
        ge=1,
        le=60,
        description="HLS segment duration for every rendition",
    )
    playlist_name: str = Field(
        default="index",
        min_length=1,
        description="Name of the HLS master playlist",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("access_key_id", "region", "bucket", "queue_url", "pipeline_id", mode="before")
    @classmethod
    def validate_not_blank(cls, v: Any) -> Any:
        """Reject empty or whitespace-only values."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("must not be empty")
        return v

    @field_validator("secret_access_key", mode="before")
    @classmethod
    def validate_secret_not_blank(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("prefix", mode="before")
    @classmethod
    def validate_prefix(cls, v: Any) -> Any:
        """Normalize the key prefix to have no surrounding slashes."""
        if isinstance(v, str):
            v = v.strip().strip("/")
            if not v:
                raise ValueError("must not be empty")
        return v

    @field_validator("queue_url", mode="after")
    @classmethod
    def validate_queue_url(cls, v: str) -> str:
        """Ensure the queue address is an SQS queue URL."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("queue address must be a queue URL starting with https://")
        return v


class ConfigSource(str, Enum):
    """Where the resolved settings came from."""

    CONFIG_FLAG = "config_flag"
    DEFAULT_FILE = "default_file"
    FLAGS = "flags"


class ResolvedConfig(BaseModel):
    """Result of config resolution."""

    model_config = ConfigDict(frozen=True)

    settings: RunnerSettings
    source: ConfigSource
    path: Path | None = None


def resolve_config(
    options: Mapping[str, Any],
    cwd: Path | None = None,
) -> ResolvedConfig:
    """Resolve run settings from a config file or command line flags.

    Args:
        options: Parsed command line options. ``config`` holds the explicit
            config file path; the remaining keys are setting field names.
        cwd: Directory searched for the default config file

    Returns:
        ResolvedConfig with the validated settings and their source

    Raises:
        ConfigurationError: If an explicit config file is missing, a file is
            not valid JSON, or required values are missing or empty
    """
    cwd = cwd or Path.cwd()
    explicit = options.get("config")

    if explicit:
        path = Path(explicit)
        if not path.is_absolute():
            path = cwd / path
        if not path.is_file():
            raise ConfigurationError(
                f"Config file not found: {path}",
                {"path": str(path)},
            )
        return ResolvedConfig(
            settings=_build_settings(load_config_file(path), ConfigSource.CONFIG_FLAG),
            source=ConfigSource.CONFIG_FLAG,
            path=path,
        )

    default_path = cwd / DEFAULT_CONFIG_FILE
    if default_path.is_file():
        return ResolvedConfig(
            settings=_build_settings(load_config_file(default_path), ConfigSource.DEFAULT_FILE),
            source=ConfigSource.DEFAULT_FILE,
            path=default_path,
        )

    values = {
        key: value
        for key, value in options.items()
        if key != "config" and value is not None
    }
    return ResolvedConfig(
        settings=_build_settings(values, ConfigSource.FLAGS),
        source=ConfigSource.FLAGS,
    )


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON config file and normalize its keys to setting names."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Cannot read config file {path}: {e}",
            {"path": str(path)},
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a JSON object",
            {"path": str(path)},
        )

    return {FILE_KEY_ALIASES.get(key, key): value for key, value in data.items()}


def _build_settings(values: dict[str, Any], source: ConfigSource) -> RunnerSettings:
    try:
        return RunnerSettings(**values)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        missing = [f for f in fields if f in REQUIRED_FIELDS]

        if source == ConfigSource.FLAGS and missing:
            flags = ", ".join(FLAG_FOR_FIELD[f] for f in missing)
            message = f"No config file found; missing required flags: {flags}"
        else:
            message = f"Invalid configuration values: {', '.join(fields)}"

        raise ConfigurationError(
            message,
            {
                "source": source.value,
                "fields": fields,
                "errors": [
                    {"field": ".".join(str(p) for p in err["loc"]), "reason": err["msg"]}
                    for err in e.errors()
                ],
            },
        ) from e
