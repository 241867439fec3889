"""Pydantic models for data validation and serialization.

This module defines the data structures passed between the runner stages:
- Upload target keys and uploaded object descriptors
- Rendition ladder and job request models
- Queue messages, job notifications and poll outcomes

All models use Pydantic v2 for validation and serialization.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UploadTarget(BaseModel):
    """Keys derived once per run for the uploaded source and its outputs.

    The input key and the output prefix are built from the same captured
    timestamp so outputs can always be traced back to their source.
    """

    model_config = ConfigDict(frozen=True)

    prefix: str = Field(
        description="Configured key prefix without surrounding slashes",
    )
    timestamp_ms: int = Field(
        ge=0,
        description="Process start time in epoch milliseconds",
    )
    extension: str = Field(
        default="",
        description="Source file extension including the dot (e.g., '.mp4')",
    )

    @property
    def base_key(self) -> str:
        """Key stem shared by input and outputs (e.g., 'videos/1700000000000')."""
        if self.prefix:
            return f"{self.prefix}/{self.timestamp_ms}"
        return str(self.timestamp_ms)

    @property
    def input_key(self) -> str:
        """S3 key of the uploaded source file."""
        return f"{self.base_key}{self.extension}"

    @property
    def output_prefix(self) -> str:
        """Output key prefix for every rendition and the master playlist."""
        return f"{self.base_key}/"


class UploadedObject(BaseModel):
    """Location descriptor for a stored source object."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    region: str | None = None
    size_bytes: int | None = Field(default=None, ge=0)

    @property
    def s3_uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

    @property
    def location(self) -> str:
        """HTTPS URL of the object."""
        if self.region and self.region != "us-east-1":
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{self.key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{self.key}"


class Rendition(BaseModel):
    """A single output variant produced by the transcoding pipeline.

    Each rendition maps to an Elastic Transcoder preset and becomes one
    entry of the HLS master playlist.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        min_length=1,
        pattern=r"^[a-z0-9_]+$",
        description="Output key stem (e.g., 'hls_2000k')",
    )
    preset_id: str = Field(
        pattern=r"^\d{13}-\w{6}$",
        description="Elastic Transcoder preset id",
    )
    bitrate_kbps: int = Field(
        gt=0,
        le=50000,
        description="Nominal total bitrate of the preset",
    )
    audio_only: bool = Field(
        default=False,
        description="Whether the preset drops the video stream",
    )


class TranscodeJobRequest(BaseModel):
    """Request to create an Elastic Transcoder job."""

    model_config = ConfigDict(frozen=True)

    pipeline_id: str = Field(
        min_length=1,
        description="Elastic Transcoder pipeline id",
    )
    input_key: str = Field(
        min_length=1,
        description="S3 key of the uploaded source",
    )
    output_prefix: str = Field(
        min_length=1,
        description="Key prefix for all outputs",
    )
    renditions: list[Rendition] = Field(
        min_length=1,
        description="Renditions to generate",
    )
    playlist_name: str = Field(
        default="index",
        min_length=1,
        description="HLS master playlist name",
    )
    segment_duration_seconds: int = Field(
        default=10,
        ge=1,
        le=60,
        description="HLS segment duration",
    )


class QueueMessage(BaseModel):
    """Envelope of a received SQS message."""

    model_config = ConfigDict(frozen=True)

    receipt_handle: str
    body: str
    message_id: str | None = None


class JobState(str, Enum):
    """Job states reported in pipeline notifications."""

    PROGRESSING = "PROGRESSING"
    COMPLETED = "COMPLETED"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CANCELED = "CANCELED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.ERROR, JobState.CANCELED})


class JobNotification(BaseModel):
    """Decoded job state change notification."""

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(description="Job id the notification refers to")
    state: str = Field(description="Reported job state, upper-cased; unknown values are kept")
    subject: str = Field(default="", description="Notification subject line")
    output_key_prefix: str | None = Field(
        default=None,
        description="Output key prefix, present on completion",
    )
    error_code: int | str | None = Field(
        default=None,
        description="Error code, present on failures",
    )
    message_details: str | None = Field(
        default=None,
        description="Failure details reported by the pipeline",
    )
    raw: dict[str, Any] = Field(
        default_factory=dict,
        description="Full decoded notification payload",
    )

    @property
    def job_state(self) -> JobState | None:
        """Known job state, or None for states this runner does not model."""
        try:
            return JobState(self.state)
        except ValueError:
            return None


class PollerState(str, Enum):
    """Lifecycle of the queue poller."""

    WAITING_FOR_JOB_ID = "WAITING_FOR_JOB_ID"
    POLLING = "POLLING"
    TERMINATED = "TERMINATED"


class PollOutcome(BaseModel):
    """Terminal result of polling for a job."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    state: JobState
    exit_code: int = Field(ge=0, le=255)
    output_location: str | None = Field(
        default=None,
        description="Output key prefix of a completed job",
    )
    notification: JobNotification
    finished_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_success(self) -> bool:
        return self.state == JobState.COMPLETED
