"""Queue poller state machine.

Each tick requests at most one notification, correlates it with the job id
and decides what happens to the message and to the run:

    WAITING_FOR_JOB_ID --(job id known)--> POLLING --(terminal state)--> TERMINATED

Message handling for the job being watched:
- COMPLETED: stop polling, log the output location, delete, exit code 0
- ERROR / CANCELED: stop polling, log the payload, delete, exit code 1
- anything else: delete and keep polling

Messages for other jobs, and bodies that are not notifications, are left on
the queue unless ``delete_foreign_messages`` is set; they become visible
again once their visibility timeout expires.
"""

import threading
from typing import Callable, Protocol

from aws_lambda_powertools import Logger

from ..shared.exceptions import NotificationParseError
from ..shared.job_id_cell import JobIdCell
from ..shared.logging_config import SERVICE_NAME
from ..shared.models import (
    JobNotification,
    JobState,
    PollerState,
    PollOutcome,
    QueueMessage,
)
from .notifications import parse_notification

logger = Logger(service=SERVICE_NAME, child=True)

EXIT_CODES: dict[JobState, int] = {
    JobState.COMPLETED: 0,
    JobState.ERROR: 1,
    JobState.CANCELED: 1,
}


class NotificationQueue(Protocol):
    def receive(self, max_messages: int = 1) -> list[QueueMessage]: ...

    def delete(self, receipt_handle: str) -> None: ...


class QueuePoller:
    """Advances the polling state machine one tick at a time.

    ``tick`` is safe to call from a timer thread. A tick that starts while
    another is still waiting on the queue returns immediately, so two
    receive calls are never in flight together.

    ``output_location`` is reported for a COMPLETED job whose notification
    carries no ``outputKeyPrefix``.
    """

    def __init__(
        self,
        queue: NotificationQueue,
        job_ids: JobIdCell,
        *,
        stop_polling: Callable[[], None] | None = None,
        delete_foreign_messages: bool = False,
        output_location: str | None = None,
    ) -> None:
        self._queue = queue
        self._output_location = output_location
        self._job_ids = job_ids
        self._stop_polling = stop_polling or (lambda: None)
        self._delete_foreign_messages = delete_foreign_messages
        self._in_flight = threading.Lock()
        self._state = PollerState.WAITING_FOR_JOB_ID
        self._outcome: PollOutcome | None = None

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def outcome(self) -> PollOutcome | None:
        return self._outcome

    def tick(self) -> PollOutcome | None:
        """Run one poll.

        Returns:
            The PollOutcome on the tick that observes a terminal state,
            None otherwise

        Raises:
            JobSubmissionError: If the job submission failed
            QueueError: If receiving or deleting a message failed
        """
        if not self._in_flight.acquire(blocking=False):
            logger.debug("Previous poll still in flight, skipping tick")
            return None

        try:
            return self._poll()
        finally:
            self._in_flight.release()

    def _poll(self) -> PollOutcome | None:
        if self._state == PollerState.TERMINATED:
            return None

        job_id = self._job_ids.get()
        if job_id is None:
            logger.debug("Job id not known yet, skipping poll")
            return None

        if self._state == PollerState.WAITING_FOR_JOB_ID:
            logger.info("Polling for job notifications", extra={"job_id": job_id})
            self._state = PollerState.POLLING

        messages = self._queue.receive(max_messages=1)
        if not messages:
            return None

        message = messages[0]
        try:
            notification = parse_notification(message.body)
        except NotificationParseError as e:
            logger.warning(
                "Ignoring message that is not a job notification",
                extra={"message_id": message.message_id, **e.to_dict()},
            )
            self._skip(message)
            return None

        if notification.job_id != job_id:
            logger.debug(
                "Ignoring notification for another job",
                extra={"job_id": job_id, "notification_job_id": notification.job_id},
            )
            self._skip(message)
            return None

        return self._handle(message, notification)

    def _handle(self, message: QueueMessage, notification: JobNotification) -> PollOutcome | None:
        state = notification.job_state

        if state == JobState.COMPLETED:
            self._terminate()
            location = notification.output_key_prefix or self._output_location
            logger.info(
                f"Transcoding complete, output location: {location}",
                extra={
                    "job_id": notification.job_id,
                    "output_location": location,
                    "subject": notification.subject,
                },
            )
            self._queue.delete(message.receipt_handle)
            return self._finish(state, notification, output_location=location)

        if state in (JobState.ERROR, JobState.CANCELED):
            self._terminate()
            logger.error(
                f"Transcoding job {state.value.lower()}",
                extra={
                    "job_id": notification.job_id,
                    "subject": notification.subject,
                    "error_code": notification.error_code,
                    "message_details": notification.message_details,
                    "notification": notification.raw,
                },
            )
            self._queue.delete(message.receipt_handle)
            return self._finish(state, notification)

        logger.info(
            "Job progress",
            extra={
                "job_id": notification.job_id,
                "state": notification.state,
                "subject": notification.subject,
            },
        )
        self._queue.delete(message.receipt_handle)
        return None

    def _skip(self, message: QueueMessage) -> None:
        if self._delete_foreign_messages:
            self._queue.delete(message.receipt_handle)

    def _terminate(self) -> None:
        self._state = PollerState.TERMINATED
        self._stop_polling()

    def _finish(
        self,
        state: JobState,
        notification: JobNotification,
        output_location: str | None = None,
    ) -> PollOutcome:
        self._outcome = PollOutcome(
            job_id=notification.job_id,
            state=state,
            exit_code=EXIT_CODES[state],
            output_location=output_location,
            notification=notification,
        )
        return self._outcome
