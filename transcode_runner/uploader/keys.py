"""Deterministic S3 key derivation for the uploaded source and its outputs."""

import os
from datetime import datetime, timezone

from ..shared.models import UploadTarget


def build_upload_target(
    prefix: str,
    file_path: str | os.PathLike[str],
    started_at: datetime | None = None,
) -> UploadTarget:
    """Build the upload target for a run.

    The timestamp is captured here exactly once; both the input key and the
    output prefix of the returned target derive from it.

    Args:
        prefix: Configured key prefix
        file_path: Local path of the file to upload (only the extension is used)
        started_at: Process start time, defaults to now (UTC)

    Returns:
        UploadTarget for the run

    Example:
        >>> target = build_upload_target("videos", "clip.MP4", started_at)
        >>> target.input_key, target.output_prefix
        ('videos/1700000000000.mp4', 'videos/1700000000000/')
    """
    started_at = started_at or datetime.now(timezone.utc)
    _, extension = os.path.splitext(os.fspath(file_path))

    return UploadTarget(
        prefix=prefix.strip().strip("/"),
        timestamp_ms=int(started_at.timestamp() * 1000),
        extension=extension.lower(),
    )
