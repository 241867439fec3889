"""Uploader module for the transcode runner.

This module handles getting the source file into S3:
- Deterministic key derivation
- Streaming managed upload
- Progress reporting
"""

from .keys import build_upload_target
from .progress import UploadProgress
from .s3_uploader import S3Uploader

__all__ = [
    "build_upload_target",
    "UploadProgress",
    "S3Uploader",
]
