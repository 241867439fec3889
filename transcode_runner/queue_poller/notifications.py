"""Decoding of pipeline notifications delivered through SNS to SQS.

The notification is JSON-encoded twice: the SQS body is the SNS envelope,
whose ``Message`` field is itself a JSON string holding the job payload::

    Body    = {"Subject": "...", "Message": "<json>", ...}
    Message = {"jobId": "...", "state": "COMPLETED", "outputKeyPrefix": "...", ...}
"""

import json
from typing import Any

from pydantic import ValidationError

from ..shared.exceptions import NotificationParseError
from ..shared.models import JobNotification


def parse_notification(body: str) -> JobNotification:
    """Parse an SQS message body into a job notification.

    Args:
        body: Raw SQS message body (SNS envelope)

    Returns:
        Decoded JobNotification

    Raises:
        NotificationParseError: If either JSON layer is invalid or the
            payload lacks a job id or state, or a field has an unexpected type
    """
    envelope = _load_object(body, "message body")

    message = envelope.get("Message")
    if not isinstance(message, str):
        raise NotificationParseError(
            "Notification envelope has no Message string",
            {"keys": sorted(envelope)},
        )

    payload = _load_object(message, "notification message")

    job_id = payload.get("jobId")
    state = payload.get("state")
    if not job_id or not state:
        raise NotificationParseError(
            "Notification is missing jobId or state",
            {"keys": sorted(payload)},
        )

    try:
        return JobNotification(
            job_id=str(job_id),
            state=str(state).upper(),
            subject=envelope.get("Subject") or "",
            output_key_prefix=payload.get("outputKeyPrefix"),
            error_code=payload.get("errorCode"),
            message_details=payload.get("messageDetails"),
            raw=payload,
        )
    except ValidationError as e:
        raise NotificationParseError(
            "Notification has fields of unexpected type",
            {
                "job_id": str(job_id),
                "fields": sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]}),
            },
        ) from e


def build_notification_body(payload: dict[str, Any], subject: str = "") -> str:
    """Encode a job payload the way SNS delivers it to SQS."""
    return json.dumps(
        {
            "Type": "Notification",
            "Subject": subject,
            "Message": json.dumps(payload),
        }
    )


def _load_object(text: str, what: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise NotificationParseError(f"Invalid JSON in {what}: {e}") from e

    if not isinstance(data, dict):
        raise NotificationParseError(
            f"Expected a JSON object in {what}",
            {"type": type(data).__name__},
        )
    return data
