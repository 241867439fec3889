"""Stream the source file to S3.

Uses the boto3 managed transfer so large files go up as multipart uploads
without seeking the source stream. Any failure aborts the run; nothing is
retried.
"""

import mimetypes
from typing import Any, BinaryIO

from aws_lambda_powertools import Logger
from boto3.exceptions import S3UploadFailedError
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..shared.exceptions import UploadError
from ..shared.logging_config import SERVICE_NAME
from ..shared.models import UploadedObject, UploadTarget
from .progress import UploadProgress

logger = Logger(service=SERVICE_NAME, child=True)

# Multipart threshold and part size for the managed transfer
TRANSFER_CONFIG = TransferConfig(
    multipart_threshold=16 * 1024 * 1024,
    multipart_chunksize=16 * 1024 * 1024,
    max_concurrency=4,
)


class S3Uploader:
    """Uploads a readable byte stream under a target key."""

    def __init__(
        self,
        s3_client: Any,
        bucket: str,
        region: str | None = None,
        transfer_config: TransferConfig = TRANSFER_CONFIG,
    ) -> None:
        self._client = s3_client
        self._bucket = bucket
        self._region = region
        self._transfer_config = transfer_config

    def upload(
        self,
        stream: BinaryIO,
        target: UploadTarget,
        size: int | None = None,
        progress: UploadProgress | None = None,
    ) -> UploadedObject:
        """Upload ``stream`` to the target's input key.

        Args:
            stream: Readable binary stream positioned at the start of the file
            target: Upload target for this run
            size: Total size in bytes if known, used for progress reporting
            progress: Progress callback, created when not supplied

        Returns:
            Location descriptor of the stored object

        Raises:
            UploadError: On any transport or authorization failure
        """
        key = target.input_key
        progress = progress or UploadProgress(total_bytes=size, description=key)

        extra_args: dict[str, Any] = {}
        content_type, _ = mimetypes.guess_type(key)
        if content_type:
            extra_args["ContentType"] = content_type

        logger.info(
            "Uploading source file",
            extra={"bucket": self._bucket, "key": key, "size_bytes": size},
        )

        try:
            self._client.upload_fileobj(
                stream,
                self._bucket,
                key,
                ExtraArgs=extra_args or None,
                Callback=progress,
                Config=self._transfer_config,
            )
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            raise UploadError(
                f"Upload to s3://{self._bucket}/{key} failed: {e}",
                {"bucket": self._bucket, "key": key, "error": str(e)},
            ) from e
        finally:
            progress.close()

        uploaded = UploadedObject(
            bucket=self._bucket,
            key=key,
            region=self._region,
            size_bytes=progress.transferred if progress.started else size,
        )

        logger.info(
            "Upload complete",
            extra={"object_url": uploaded.location, "s3_uri": uploaded.s3_uri},
        )

        return uploaded
