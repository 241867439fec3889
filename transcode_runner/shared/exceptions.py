"""Custom exception hierarchy for the transcode runner.

All runner-specific exceptions inherit from TranscodeRunnerError so the CLI
can turn any of them into a logged failure and a non-zero exit status.

Exception hierarchy:
    TranscodeRunnerError (base)
    ├── ConfigurationError
    ├── UploadError
    ├── JobSubmissionError
    ├── QueueError
    └── NotificationParseError
"""

from typing import Any


class TranscodeRunnerError(Exception):
    """Base exception for all runner errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for log filtering
        details: Additional context as key-value pairs
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for structured logging.

        Uses 'error_message' instead of 'message' because the logging
        module reserves 'message' on log records.
        """
        return {
            "error_code": self.error_code,
            "error_message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.error_code!r}, {self.message!r})"


class ConfigurationError(TranscodeRunnerError):
    """Raised when the run configuration cannot be resolved.

    This covers:
    - Explicit config file that does not exist
    - Config file that is not valid JSON
    - Missing or empty required values
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "CONFIGURATION_ERROR", details)


class UploadError(TranscodeRunnerError):
    """Raised when streaming the source file to S3 fails."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "UPLOAD_ERROR", details)


class JobSubmissionError(TranscodeRunnerError):
    """Raised when Elastic Transcoder rejects or fails the job submission.

    This covers:
    - API errors from Elastic Transcoder
    - Unknown pipeline or preset ids
    - IAM permission errors
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "JOB_SUBMISSION_ERROR", details)


class QueueError(TranscodeRunnerError):
    """Raised when an SQS receive or delete call fails."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        if original_error:
            error_details["original_error"] = str(original_error)
            error_details["original_error_type"] = type(original_error).__name__

        super().__init__(message, "QUEUE_ERROR", error_details)
        self.original_error = original_error


class NotificationParseError(TranscodeRunnerError):
    """Raised when a queue message body is not a job notification."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "NOTIFICATION_PARSE_ERROR", details)
