"""Submit the transcoding job for an uploaded source.

Submission is fire-and-forget from the orchestrator's point of view: it runs
on its own thread alongside the queue poller and hands the job id over
through a ``JobIdCell``. The poller treats ticks before the id arrives as
no-ops, so early notifications are never misread.
"""

import threading
from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from ..shared.exceptions import JobSubmissionError
from ..shared.job_id_cell import JobIdCell
from ..shared.logging_config import SERVICE_NAME
from ..shared.models import Rendition, TranscodeJobRequest, UploadTarget
from .job_builder import build_transcoder_job, master_playlist_key
from .renditions import get_renditions

logger = Logger(service=SERVICE_NAME, child=True)


class JobSubmitter:
    """Creates Elastic Transcoder jobs on a fixed pipeline."""

    def __init__(
        self,
        transcoder_client: Any,
        pipeline_id: str,
        renditions: list[Rendition] | None = None,
        playlist_name: str = "index",
        segment_duration_seconds: int = 10,
    ) -> None:
        self._client = transcoder_client
        self._pipeline_id = pipeline_id
        self._renditions = renditions or get_renditions()
        self._playlist_name = playlist_name
        self._segment_duration_seconds = segment_duration_seconds

    def build_request(self, target: UploadTarget) -> TranscodeJobRequest:
        return TranscodeJobRequest(
            pipeline_id=self._pipeline_id,
            input_key=target.input_key,
            output_prefix=target.output_prefix,
            renditions=self._renditions,
            playlist_name=self._playlist_name,
            segment_duration_seconds=self._segment_duration_seconds,
        )

    def submit(self, target: UploadTarget) -> str:
        """Submit a job for the uploaded source.

        Args:
            target: Upload target whose input key and output prefix the job uses

        Returns:
            Job id assigned by Elastic Transcoder

        Raises:
            JobSubmissionError: If the API call fails or returns no job id
        """
        request = self.build_request(target)
        params = build_transcoder_job(request)

        logger.info(
            "Submitting transcoding job",
            extra={
                "pipeline_id": request.pipeline_id,
                "input_key": request.input_key,
                "output_prefix": request.output_prefix,
                "renditions": [r.name for r in request.renditions],
            },
        )

        try:
            response = self._client.create_job(**params)
        except (ClientError, BotoCoreError) as e:
            raise JobSubmissionError(
                f"Job submission failed: {e}",
                {
                    "pipeline_id": request.pipeline_id,
                    "input_key": request.input_key,
                    "error": str(e),
                },
            ) from e

        job_id = response.get("Job", {}).get("Id")
        if not job_id:
            raise JobSubmissionError(
                "Job submission returned no job id",
                {"pipeline_id": request.pipeline_id, "input_key": request.input_key},
            )

        logger.info(
            "Transcoding job submitted",
            extra={
                "job_id": job_id,
                "master_playlist": master_playlist_key(request),
            },
        )

        return job_id


def submit_in_background(
    submitter: JobSubmitter,
    target: UploadTarget,
    cell: JobIdCell,
) -> threading.Thread:
    """Run ``submitter.submit`` on a daemon thread and resolve ``cell``.

    Returns:
        The started thread
    """

    def _submit() -> None:
        try:
            cell.set(submitter.submit(target))
        except JobSubmissionError as e:
            logger.error("Job submission failed", extra=e.to_dict())
            cell.fail(e)
        except Exception as e:
            logger.exception("Unexpected job submission failure")
            cell.fail(
                JobSubmissionError(
                    f"Unexpected job submission failure: {e}",
                    {"error_type": type(e).__name__},
                )
            )

    thread = threading.Thread(target=_submit, name="job-submitter", daemon=True)
    thread.start()
    return thread
