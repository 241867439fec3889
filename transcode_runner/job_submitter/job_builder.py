"""Elastic Transcoder job builder.

Constructs the ``CreateJob`` parameters for an uploaded source.

Output structure (under the job's output key prefix):
- ``<rendition>/index.m3u8`` plus segments for every rendition
- ``<playlist>.m3u8`` master playlist referencing all renditions
"""

from typing import Any

from ..shared.models import Rendition, TranscodeJobRequest

PLAYLIST_FORMAT = "HLSv3"


def build_transcoder_job(request: TranscodeJobRequest) -> dict[str, Any]:
    """Build complete Elastic Transcoder job parameters.

    Args:
        request: TranscodeJobRequest with keys and renditions

    Returns:
        Keyword arguments for the ``create_job`` API call

    Example:
        >>> params = build_transcoder_job(request)
        >>> transcoder.create_job(**params)
    """
    outputs = [_build_output(request, rendition) for rendition in request.renditions]

    return {
        "PipelineId": request.pipeline_id,
        "Input": _build_input(request),
        "OutputKeyPrefix": request.output_prefix,
        "Outputs": outputs,
        "Playlists": [
            {
                "Name": request.playlist_name,
                "Format": PLAYLIST_FORMAT,
                "OutputKeys": [output["Key"] for output in outputs],
            }
        ],
    }


def _build_input(request: TranscodeJobRequest) -> dict[str, Any]:
    """Build input configuration; container and frame settings are detected."""
    return {
        "Key": request.input_key,
        "FrameRate": "auto",
        "Resolution": "auto",
        "AspectRatio": "auto",
        "Interlaced": "auto",
        "Container": "auto",
    }


def _build_output(request: TranscodeJobRequest, rendition: Rendition) -> dict[str, Any]:
    """Build the output for a single rendition."""
    return {
        "Key": f"{rendition.name}/index",
        "PresetId": rendition.preset_id,
        "SegmentDuration": str(request.segment_duration_seconds),
    }


def master_playlist_key(request: TranscodeJobRequest) -> str:
    """Full key of the master playlist the job will write."""
    return f"{request.output_prefix}{request.playlist_name}.m3u8"
