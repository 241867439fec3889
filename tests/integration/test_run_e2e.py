"""End-to-end run against moto S3, a mocked transcoder and a scripted queue.

Elastic Transcoder is not covered by moto, so job creation is a MagicMock
returning a fixed job id. Everything else runs through the real uploader,
submitter, poller and timer threads.
"""

import io
from unittest.mock import MagicMock, patch

import pytest

from transcode_runner.job_submitter import JobSubmitter
from transcode_runner.orchestrator import TranscodeRun
from transcode_runner.shared.models import PollerState
from transcode_runner.uploader import S3Uploader, build_upload_target

TEST_PIPELINE_ID = "1111111111111-abcde1"

CONTENT = b"fake video content" * 4096


@pytest.fixture
def transcoder_client():
    client = MagicMock()
    client.create_job.return_value = {"Job": {"Id": "J1", "Status": "Submitted"}}
    return client


def _build_run(s3_client, s3_bucket, transcoder_client, queue) -> TranscodeRun:
    return TranscodeRun(
        build_upload_target("uploads", "movie.mp4"),
        S3Uploader(s3_client, s3_bucket, region="us-east-1"),
        JobSubmitter(transcoder_client, TEST_PIPELINE_ID),
        queue,
        poll_interval_seconds=0.01,
    )


class TestRunEndToEnd:
    def test_completed_job(self, s3_client, s3_bucket, transcoder_client, scripted_queue, message_factory):
        queue = scripted_queue([
            [],
            [message_factory("J1", "COMPLETED", receipt_handle="rh-done", outputKeyPrefix="out/")],
        ])
        run = _build_run(s3_client, s3_bucket, transcoder_client, queue)

        with patch("transcode_runner.queue_poller.poller.logger") as poller_logger:
            exit_code = run.execute(io.BytesIO(CONTENT), size=len(CONTENT))

        assert exit_code == 0
        assert queue.receive_calls == 2
        assert queue.deleted == ["rh-done"]
        assert run.poller_state == PollerState.TERMINATED

        head = s3_client.head_object(Bucket=s3_bucket, Key=run.target.input_key)
        assert head["ContentLength"] == len(CONTENT)

        params = transcoder_client.create_job.call_args.kwargs
        assert params["PipelineId"] == TEST_PIPELINE_ID
        assert params["Input"]["Key"] == run.target.input_key
        assert params["OutputKeyPrefix"] == run.target.output_prefix

        completion_logs = [c.args[0] for c in poller_logger.info.call_args_list]
        assert any("out/" in line for line in completion_logs)

    def test_foreign_notifications_are_left_queued(
        self, s3_client, s3_bucket, transcoder_client, scripted_queue, message_factory
    ):
        queue = scripted_queue([
            [message_factory("OTHER", "COMPLETED", receipt_handle="rh-other")],
            [message_factory("J1", "PROGRESSING", receipt_handle="rh-progress")],
            [message_factory("J1", "ERROR", receipt_handle="rh-error", errorCode=4000)],
        ])
        run = _build_run(s3_client, s3_bucket, transcoder_client, queue)

        exit_code = run.execute(io.BytesIO(CONTENT), size=len(CONTENT))

        assert exit_code == 1
        assert queue.deleted == ["rh-progress", "rh-error"]
        assert run.wait(timeout=1).notification.error_code == 4000
