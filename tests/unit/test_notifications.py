"""Unit tests for notification decoding."""

import json

import pytest

from transcode_runner.queue_poller.notifications import build_notification_body, parse_notification
from transcode_runner.shared.exceptions import NotificationParseError
from transcode_runner.shared.models import JobState


class TestParseNotification:
    """Tests for the double-encoded SNS-over-SQS format."""

    def test_parse_completed_notification(self):
        body = json.dumps({
            "Type": "Notification",
            "Subject": "Amazon Elastic Transcoder has finished transcoding job 1700000000000-abcdef.",
            "Message": json.dumps({
                "state": "COMPLETED",
                "version": "2012-09-25",
                "jobId": "1700000000000-abcdef",
                "pipelineId": "1111111111111-abcde1",
                "input": {"key": "uploads/1700000000000.mp4"},
                "outputKeyPrefix": "uploads/1700000000000/",
                "outputs": [{"id": "1", "presetId": "1351620000001-200010", "status": "Complete"}],
            }),
        })

        notification = parse_notification(body)

        assert notification.job_id == "1700000000000-abcdef"
        assert notification.state == "COMPLETED"
        assert notification.job_state == JobState.COMPLETED
        assert notification.output_key_prefix == "uploads/1700000000000/"
        assert notification.subject.startswith("Amazon Elastic Transcoder")
        assert notification.raw["pipelineId"] == "1111111111111-abcde1"

    def test_parse_error_notification(self):
        body = build_notification_body({
            "state": "ERROR",
            "jobId": "J1",
            "errorCode": 4000,
            "messageDetails": "The input file is not a supported container.",
        })

        notification = parse_notification(body)

        assert notification.job_state == JobState.ERROR
        assert notification.error_code == 4000
        assert "not a supported container" in notification.message_details

    def test_unknown_state_is_kept_verbatim(self):
        notification = parse_notification(build_notification_body({"state": "QUEUED", "jobId": "J1"}))

        assert notification.state == "QUEUED"
        assert notification.job_state is None

    def test_state_is_normalized_to_upper_case(self):
        notification = parse_notification(build_notification_body({"state": "completed", "jobId": "J1"}))

        assert notification.job_state == JobState.COMPLETED
        assert notification.state == "COMPLETED"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("messageDetails", {"code": 1}),
            ("outputKeyPrefix", ["out/"]),
            ("errorCode", {"code": 4000}),
        ],
    )
    def test_unexpected_field_types_raise_parse_error(self, field, value):
        body = build_notification_body({"state": "ERROR", "jobId": "J1", field: value})

        with pytest.raises(NotificationParseError) as exc_info:
            parse_notification(body)

        assert exc_info.value.details["job_id"] == "J1"

    def test_non_string_subject_raises_parse_error(self):
        body = json.dumps({"Subject": 42, "Message": json.dumps({"state": "COMPLETED", "jobId": "J1"})})

        with pytest.raises(NotificationParseError, match="unexpected type"):
            parse_notification(body)

    def test_subject_is_optional(self):
        body = json.dumps({"Message": json.dumps({"state": "PROGRESSING", "jobId": "J1"})})

        assert parse_notification(body).subject == ""

    @pytest.mark.parametrize(
        "body",
        [
            "not json",
            json.dumps(["a", "list"]),
            json.dumps({"Subject": "no message"}),
            json.dumps({"Message": {"jobId": "J1", "state": "COMPLETED"}}),
            json.dumps({"Message": "not json"}),
            json.dumps({"Message": json.dumps({"state": "COMPLETED"})}),
            json.dumps({"Message": json.dumps({"jobId": "J1"})}),
        ],
    )
    def test_invalid_bodies_raise(self, body):
        with pytest.raises(NotificationParseError):
            parse_notification(body)


class TestJobState:
    def test_terminal_states(self):
        assert JobState.COMPLETED.is_terminal
        assert JobState.ERROR.is_terminal
        assert JobState.CANCELED.is_terminal
        assert not JobState.PROGRESSING.is_terminal
        assert not JobState.WARNING.is_terminal
