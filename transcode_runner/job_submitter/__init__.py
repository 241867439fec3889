"""Job submitter module for the transcode runner.

This module handles Elastic Transcoder job creation:
- HLS rendition ladder
- Job parameter builder
- Background submission
"""

from .job_builder import build_transcoder_job
from .renditions import HLS_RENDITIONS, get_renditions
from .submitter import JobSubmitter, submit_in_background

__all__ = [
    "build_transcoder_job",
    "HLS_RENDITIONS",
    "get_renditions",
    "JobSubmitter",
    "submit_in_background",
]
