"""Pytest configuration and shared fixtures.

This module provides:
- AWS credential mocking for moto
- Mocked S3 and SQS clients with a test bucket and queue
- Resolved run settings
- A scripted in-memory notification queue and message builders
"""

import os
import threading
from typing import Any, Generator

import boto3
import pytest
from moto import mock_aws

from transcode_runner.queue_poller.notifications import build_notification_body
from transcode_runner.shared.config import RunnerSettings
from transcode_runner.shared.models import QueueMessage

# Dummy AWS credentials so no client ever reaches a real account
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"

TEST_BUCKET = "test-input-bucket"
TEST_QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/transcode-events"
TEST_PIPELINE_ID = "1111111111111-abcde1"


# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def clean_runner_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep TRANSCODE_RUNNER_* variables from leaking into settings."""
    for key in list(os.environ):
        if key.upper().startswith("TRANSCODE_RUNNER_"):
            monkeypatch.delenv(key)


# =============================================================================
# AWS Fixtures
# =============================================================================


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def s3_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Mocked S3 client."""
    with mock_aws():
        yield boto3.client("s3", region_name="us-east-1")


@pytest.fixture
def sqs_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Mocked SQS client."""
    with mock_aws():
        yield boto3.client("sqs", region_name="us-east-1")


@pytest.fixture
def s3_bucket(s3_client: Any) -> str:
    """Create the test upload bucket."""
    s3_client.create_bucket(Bucket=TEST_BUCKET)
    return TEST_BUCKET


@pytest.fixture
def queue_url(sqs_client: Any) -> str:
    """Create the test notification queue."""
    response = sqs_client.create_queue(QueueName="transcode-events")
    return response["QueueUrl"]


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def settings_values() -> dict[str, Any]:
    """Complete set of required settings values."""
    return {
        "access_key_id": "testing",
        "secret_access_key": "testing",
        "region": "us-east-1",
        "bucket": TEST_BUCKET,
        "prefix": "uploads",
        "queue_url": TEST_QUEUE_URL,
        "pipeline_id": TEST_PIPELINE_ID,
    }


@pytest.fixture
def settings(settings_values: dict[str, Any]) -> RunnerSettings:
    """Resolved settings with a fast poll interval."""
    return RunnerSettings(**settings_values, poll_interval_seconds=0.01, wait_time_seconds=0)


# =============================================================================
# Notification queue
# =============================================================================


def make_message(
    job_id: str,
    state: str,
    receipt_handle: str = "rh-1",
    **payload: Any,
) -> QueueMessage:
    """Build a queue message carrying a double-encoded job notification."""
    body = build_notification_body(
        {"jobId": job_id, "state": state, **payload},
        subject=f"Job {job_id} is {state.lower()}",
    )
    return QueueMessage(receipt_handle=receipt_handle, body=body, message_id=f"msg-{receipt_handle}")


class ScriptedQueue:
    """In-memory notification queue returning scripted receive batches.

    Each receive call pops the next batch; once the script runs out every
    receive returns no messages.
    """

    def __init__(self, batches: list[list[QueueMessage]] | None = None) -> None:
        self.batches = list(batches or [])
        self.receive_calls = 0
        self.max_messages: list[int] = []
        self.deleted: list[str] = []
        self._lock = threading.Lock()

    def receive(self, max_messages: int = 1) -> list[QueueMessage]:
        with self._lock:
            self.receive_calls += 1
            self.max_messages.append(max_messages)
            return self.batches.pop(0) if self.batches else []

    def delete(self, receipt_handle: str) -> None:
        with self._lock:
            self.deleted.append(receipt_handle)


@pytest.fixture
def scripted_queue() -> type[ScriptedQueue]:
    return ScriptedQueue


@pytest.fixture
def message_factory() -> Any:
    return make_message
