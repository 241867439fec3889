"""HLS rendition ladder.

Every job produces the same set of renditions, one per Elastic Transcoder
system HLS preset, plus a master playlist that references all of them.
Players pick a rendition based on available bandwidth.
"""

from ..shared.models import Rendition


# =============================================================================
# Elastic Transcoder system presets (HLS, version 3)
# =============================================================================

HLS_RENDITIONS: list[Rendition] = [
    # 2M - Desktop/TV
    Rendition(name="hls_2000k", preset_id="1351620000001-200010", bitrate_kbps=2000),
    # 1.5M - Tablet
    Rendition(name="hls_1500k", preset_id="1351620000001-200020", bitrate_kbps=1500),
    # 1M - Good mobile connection
    Rendition(name="hls_1000k", preset_id="1351620000001-200030", bitrate_kbps=1000),
    # 600k - Mobile
    Rendition(name="hls_600k", preset_id="1351620000001-200040", bitrate_kbps=600),
    # 400k - Poor connection
    Rendition(name="hls_400k", preset_id="1351620000001-200050", bitrate_kbps=400),
    # 160k audio only - App Store requirement for cellular streams
    Rendition(
        name="hls_audio_160k",
        preset_id="1351620000001-200060",
        bitrate_kbps=160,
        audio_only=True,
    ),
]


def get_renditions(include_audio_only: bool = True) -> list[Rendition]:
    """Return the rendition ladder, highest bitrate first.

    Args:
        include_audio_only: Whether to keep the audio-only fallback rendition

    Returns:
        List of renditions sorted by bitrate (descending)
    """
    renditions = [r for r in HLS_RENDITIONS if include_audio_only or not r.audio_only]
    return sorted(renditions, key=lambda r: -r.bitrate_kbps)
