"""SQS access for notification polling."""

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from ..shared.exceptions import QueueError
from ..shared.models import QueueMessage


class SqsNotificationQueue:
    """Receives and acknowledges notifications on one SQS queue.

    Every API failure is raised as QueueError; the caller treats it as fatal.
    """

    def __init__(
        self,
        sqs_client: Any,
        queue_url: str,
        *,
        visibility_timeout_seconds: int = 30,
        wait_time_seconds: int = 5,
    ) -> None:
        self._client = sqs_client
        self._queue_url = queue_url
        self._visibility_timeout_seconds = visibility_timeout_seconds
        self._wait_time_seconds = wait_time_seconds

    @property
    def queue_url(self) -> str:
        return self._queue_url

    def receive(self, max_messages: int = 1) -> list[QueueMessage]:
        """Receive up to ``max_messages``; returns an empty list if none arrive."""
        try:
            resp = self._client.receive_message(
                QueueUrl=self._queue_url,
                MaxNumberOfMessages=min(max_messages, 10),
                VisibilityTimeout=self._visibility_timeout_seconds,
                WaitTimeSeconds=self._wait_time_seconds,
            )
        except (ClientError, BotoCoreError) as e:
            raise QueueError(
                f"Receive from {self._queue_url} failed",
                original_error=e,
                details={"queue_url": self._queue_url},
            ) from e

        return [
            QueueMessage(
                receipt_handle=msg["ReceiptHandle"],
                body=msg["Body"],
                message_id=msg.get("MessageId"),
            )
            for msg in resp.get("Messages") or []
        ]

    def delete(self, receipt_handle: str) -> None:
        """Remove a processed message from the queue."""
        try:
            self._client.delete_message(
                QueueUrl=self._queue_url,
                ReceiptHandle=receipt_handle,
            )
        except (ClientError, BotoCoreError) as e:
            raise QueueError(
                f"Delete from {self._queue_url} failed",
                original_error=e,
                details={"queue_url": self._queue_url},
            ) from e
