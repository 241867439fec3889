"""Command line entry point.

Usage:
    transcode-runner movie.mp4

    # Explicit config file
    transcode-runner movie.mp4 --config prod.json

    # No config file: every value comes from flags
    transcode-runner movie.mp4 --access-key AKIA... --secret ... --region eu-west-1 \\
        --bucket media-in --prefix uploads --pipeline 1111111111111-abcde1 \\
        --queue https://sqs.eu-west-1.amazonaws.com/123456789012/transcode-events

Exit status is 0 when the job completes and 1 on any fatal error or when the
job ends in ERROR or CANCELED.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Sequence

from .orchestrator import TranscodeRun
from .shared.config import DEFAULT_CONFIG_FILE, resolve_config
from .shared.exceptions import ConfigurationError, TranscodeRunnerError
from .shared.logging_config import configure_logging, flush_logs, logger

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transcode-runner",
        description="Upload a media file to S3, transcode it and wait for the job to finish",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Settings come from --config, else ./{DEFAULT_CONFIG_FILE}, else the flags below.
Without a config file every flag is required.
        """,
    )

    parser.add_argument("file", help="Path of the media file to upload")
    parser.add_argument(
        "-c",
        "--config",
        help=f"JSON config file (default: ./{DEFAULT_CONFIG_FILE} when present)",
    )
    parser.add_argument("--access-key", dest="access_key_id", help="AWS access key id")
    parser.add_argument("--secret", dest="secret_access_key", help="AWS secret access key")
    parser.add_argument("--bucket", help="S3 bucket for the uploaded source")
    parser.add_argument("--region", help="AWS region")
    parser.add_argument("--prefix", help="Key prefix for uploads and outputs")
    parser.add_argument("--queue", dest="queue_url", help="SQS queue URL receiving job notifications")
    parser.add_argument("--pipeline", dest="pipeline_id", help="Elastic Transcoder pipeline id")

    return parser


def run(argv: Sequence[str] | None = None, cwd: Path | None = None) -> int:
    """Run the tool and return the process exit status."""
    args = build_parser().parse_args(argv)
    options = {key: value for key, value in vars(args).items() if key != "file"}

    try:
        resolved = resolve_config(options, cwd=cwd)
        settings = resolved.settings
        configure_logging(settings.log_level)

        file_path = Path(args.file)
        if not file_path.is_file():
            raise ConfigurationError(
                f"File not found: {file_path}",
                {"path": str(file_path)},
            )

        logger.info(
            "Configuration resolved",
            extra={
                "source": resolved.source.value,
                "config_path": str(resolved.path) if resolved.path else None,
                "bucket": settings.bucket,
                "region": settings.region,
                "pipeline_id": settings.pipeline_id,
            },
        )

        transcode_run = TranscodeRun.from_settings(settings, str(file_path))
        with open(file_path, "rb") as stream:
            return transcode_run.execute(stream, size=os.path.getsize(file_path))

    except TranscodeRunnerError as e:
        logger.error(e.message, extra=e.to_dict())
        return EXIT_FAILURE
    except OSError as e:
        logger.error(f"Cannot read {args.file}: {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted, job state unknown")
        return EXIT_INTERRUPTED
    except Exception:
        logger.exception("Unexpected failure")
        return EXIT_FAILURE
    finally:
        flush_logs()


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
