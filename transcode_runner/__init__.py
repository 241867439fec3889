"""Upload a media file, transcode it and wait for the job to finish."""

__version__ = "1.0.0"
