"""AWS client construction for a single run.

All clients come from one boto3 session built from the resolved settings,
so the configured credentials and region apply to S3, Elastic Transcoder
and SQS alike. Retries are disabled: every failed call is fatal for the run.
"""

from typing import Any

import boto3
from botocore.config import Config

from .config import RunnerSettings

# Read timeout must stay above the longest SQS long-poll wait (20s)
AWS_CONFIG = Config(
    retries={
        "max_attempts": 1,
        "mode": "standard",
    },
    connect_timeout=5,
    read_timeout=60,
)


def create_session(settings: RunnerSettings) -> boto3.session.Session:
    """Create a boto3 session from the configured credentials.

    Args:
        settings: Resolved run settings

    Returns:
        Session bound to the configured credentials and region
    """
    return boto3.session.Session(
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key.get_secret_value(),
        region_name=settings.region,
    )


def get_s3_client(session: boto3.session.Session) -> Any:
    """Get an S3 client for uploads."""
    return session.client("s3", config=AWS_CONFIG)


def get_transcoder_client(session: boto3.session.Session) -> Any:
    """Get an Elastic Transcoder client for job submission."""
    return session.client("elastictranscoder", config=AWS_CONFIG)


def get_sqs_client(session: boto3.session.Session) -> Any:
    """Get an SQS client for notification polling."""
    return session.client("sqs", config=AWS_CONFIG)
