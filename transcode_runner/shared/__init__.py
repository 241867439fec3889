"""Shared utilities for the transcode runner."""

from .config import ConfigSource, ResolvedConfig, RunnerSettings, resolve_config
from .exceptions import (
    TranscodeRunnerError,
    ConfigurationError,
    UploadError,
    JobSubmissionError,
    QueueError,
    NotificationParseError,
)
from .job_id_cell import JobIdCell
from .models import (
    UploadTarget,
    UploadedObject,
    Rendition,
    TranscodeJobRequest,
    QueueMessage,
    JobState,
    JobNotification,
    PollerState,
    PollOutcome,
)

__all__ = [
    # Config
    "ConfigSource",
    "ResolvedConfig",
    "RunnerSettings",
    "resolve_config",
    # Exceptions
    "TranscodeRunnerError",
    "ConfigurationError",
    "UploadError",
    "JobSubmissionError",
    "QueueError",
    "NotificationParseError",
    # Concurrency
    "JobIdCell",
    # Models
    "UploadTarget",
    "UploadedObject",
    "Rendition",
    "TranscodeJobRequest",
    "QueueMessage",
    "JobState",
    "JobNotification",
    "PollerState",
    "PollOutcome",
]
