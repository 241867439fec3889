"""Queue poller module for the transcode runner.

This module watches the notification queue for the submitted job:
- Notification decoding
- SQS receive/delete
- Poll state machine and recurring timer
"""

from .notifications import build_notification_body, parse_notification
from .poller import EXIT_CODES, QueuePoller
from .sqs_queue import SqsNotificationQueue
from .timer import RecurringTimer

__all__ = [
    "build_notification_body",
    "parse_notification",
    "EXIT_CODES",
    "QueuePoller",
    "SqsNotificationQueue",
    "RecurringTimer",
]
