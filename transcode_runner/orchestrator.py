"""Run orchestration: upload, then submit and poll until the job settles.

Flow:
1. Upload the source file (blocking)
2. Start job submission on a worker thread
3. Start the recurring poll timer at the same time
4. Wait for a terminal job state or a fatal error

A ``TranscodeRun`` is built once per process and owns every piece of run
state: the upload target, the job id cell, the poller and its timer.
"""

import threading
from datetime import datetime
from typing import Any, BinaryIO

from aws_lambda_powertools import Logger

from .job_submitter import JobSubmitter, submit_in_background
from .queue_poller import QueuePoller, RecurringTimer, SqsNotificationQueue
from .shared.aws_clients import (
    create_session,
    get_s3_client,
    get_sqs_client,
    get_transcoder_client,
)
from .shared.config import RunnerSettings
from .shared.job_id_cell import JobIdCell
from .shared.logging_config import SERVICE_NAME
from .shared.models import PollerState, PollOutcome, UploadedObject, UploadTarget
from .uploader import S3Uploader, build_upload_target

logger = Logger(service=SERVICE_NAME, child=True)


class TranscodeRun:
    """One upload-transcode-poll run for a single source file."""

    def __init__(
        self,
        target: UploadTarget,
        uploader: S3Uploader,
        submitter: JobSubmitter,
        queue: Any,
        *,
        poll_interval_seconds: float = 10.0,
        delete_foreign_messages: bool = False,
    ) -> None:
        self._target = target
        self._uploader = uploader
        self._submitter = submitter
        self._job_ids = JobIdCell()
        self._timer = RecurringTimer(poll_interval_seconds, self.poll_once)
        self._poller = QueuePoller(
            queue,
            self._job_ids,
            stop_polling=self._timer.cancel,
            delete_foreign_messages=delete_foreign_messages,
            output_location=target.output_prefix,
        )
        self._finished = threading.Event()
        self._error: Exception | None = None
        self._uploaded: UploadedObject | None = None

    @classmethod
    def from_settings(
        cls,
        settings: RunnerSettings,
        file_path: str,
        started_at: datetime | None = None,
    ) -> "TranscodeRun":
        """Wire a run to real AWS clients built from the settings."""
        session = create_session(settings)

        return cls(
            target=build_upload_target(settings.prefix, file_path, started_at),
            uploader=S3Uploader(get_s3_client(session), settings.bucket, settings.region),
            submitter=JobSubmitter(
                get_transcoder_client(session),
                settings.pipeline_id,
                playlist_name=settings.playlist_name,
                segment_duration_seconds=settings.segment_duration_seconds,
            ),
            queue=SqsNotificationQueue(
                get_sqs_client(session),
                settings.queue_url,
                visibility_timeout_seconds=settings.visibility_timeout_seconds,
                wait_time_seconds=settings.wait_time_seconds,
            ),
            poll_interval_seconds=settings.poll_interval_seconds,
            delete_foreign_messages=settings.delete_foreign_messages,
        )

    @property
    def target(self) -> UploadTarget:
        return self._target

    @property
    def job_id(self) -> str | None:
        return self._job_ids.get()

    @property
    def poller_state(self) -> PollerState:
        return self._poller.state

    @property
    def polling(self) -> bool:
        return self._timer.is_alive() and not self._timer.cancelled

    @property
    def uploaded(self) -> UploadedObject | None:
        return self._uploaded

    def execute(self, stream: BinaryIO, size: int | None = None) -> int:
        """Run the whole pipeline and return the process exit code.

        Raises:
            TranscodeRunnerError: On any fatal upload, submission or queue error
        """
        self.upload(stream, size)
        self.start()
        return self.wait().exit_code

    def upload(self, stream: BinaryIO, size: int | None = None) -> UploadedObject:
        self._uploaded = self._uploader.upload(stream, self._target, size=size)
        return self._uploaded

    def start(self) -> None:
        """Launch job submission and polling together."""
        logger.info(
            "Starting job submission and polling",
            extra={
                "input_key": self._target.input_key,
                "output_prefix": self._target.output_prefix,
                "poll_interval_seconds": self._timer.interval,
            },
        )
        submit_in_background(self._submitter, self._target, self._job_ids)
        self._timer.start()

    def poll_once(self) -> PollOutcome | None:
        """Advance polling by one tick; any error ends the run."""
        if self._finished.is_set():
            return None

        try:
            outcome = self._poller.tick()
        except Exception as e:
            self._timer.cancel()
            self._error = e
            self._finished.set()
            return None

        if outcome is not None:
            self._timer.cancel()
            self._finished.set()
        return outcome

    def wait(self, timeout: float | None = None) -> PollOutcome:
        """Block until the job reaches a terminal state.

        Raises:
            TimeoutError: If ``timeout`` elapses first
            Exception: The fatal error that ended polling
            RuntimeError: If the run ended without an outcome or an error
        """
        if not self._finished.wait(timeout):
            raise TimeoutError("job did not reach a terminal state in time")

        if self._error is not None:
            raise self._error

        outcome = self._poller.outcome
        if outcome is None:
            raise RuntimeError("run finished without a poll outcome")
        return outcome

    def stop(self) -> None:
        """Cancel polling without waiting for a terminal state."""
        self._timer.cancel()
