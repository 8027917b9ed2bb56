"""Main module for the image optimizer CLI."""

import sys
import asyncio
import argparse
from typing import List, Mapping, Optional

from . import __version__
from .backfill import run_backfill
from .core.config import BackfillConfig
from .core.logging_config import get_logger, set_debug_logging

QUICK_PRESET = {
    "skip_existing": True,
    "use_lambda": False,
    "batch_size": 5,
    "delay_ms": 500,
}


def _add_connection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source-bucket",
        default=None,
        help="Source S3 bucket (default: $SOURCE_BUCKET_NAME)",
    )
    parser.add_argument(
        "--optimized-bucket",
        default=None,
        help="Destination S3 bucket for optimized images (default: $OPTIMIZED_BUCKET_NAME)",
    )
    parser.add_argument(
        "--region", default=None, help="AWS region (default: $AWS_REGION or us-east-2)"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with the backfill, quick and version subcommands."""
    parser = argparse.ArgumentParser(
        prog="image-optimizer",
        description="Image Optimizer - web-optimize images between S3 buckets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Optimize every image that has no optimized version yet
  image-optimizer backfill

  # Only one prefix, smaller batches
  image-optimizer backfill --prefix=products/ --force --batch-size=5

  # Let the Lambda function do the work by re-triggering its events
  image-optimizer backfill --use-lambda --delay=2000

  # Safe defaults (batch size 5, 500ms between batches)
  image-optimizer quick
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    backfill_parser = subparsers.add_parser(
        "backfill", help="Optimize images already stored in the source bucket"
    )
    _add_connection_args(backfill_parser)
    backfill_parser.add_argument(
        "--prefix",
        default="",
        help="Process only images with this prefix (e.g. --prefix=products/)",
    )
    backfill_parser.add_argument(
        "--force",
        action="store_true",
        help="Process all images, even if an optimized version exists",
    )
    backfill_parser.add_argument(
        "--use-lambda",
        action="store_true",
        help="Re-trigger the Lambda function instead of processing directly",
    )
    backfill_parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Number of images to process concurrently (default: 10)",
    )
    backfill_parser.add_argument(
        "--delay",
        type=int,
        default=1000,
        help="Delay between batches in milliseconds (default: 1000)",
    )

    quick_parser = subparsers.add_parser(
        "quick", help="Backfill with safe defaults (batch size 5, 500ms delay)"
    )
    _add_connection_args(quick_parser)

    subparsers.add_parser("version", help="Show version information")

    return parser


def config_from_args(
    args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None
) -> BackfillConfig:
    """Merge parsed CLI flags over the environment into a BackfillConfig."""
    connection = {
        "source_bucket": args.source_bucket,
        "optimized_bucket": args.optimized_bucket,
        "region": args.region,
        "debug": args.debug,
    }
    if args.command == "quick":
        return BackfillConfig.from_env(environ, **connection, **QUICK_PRESET)

    return BackfillConfig.from_env(
        environ,
        **connection,
        prefix=args.prefix,
        skip_existing=not args.force,
        use_lambda=args.use_lambda,
        batch_size=args.batch_size,
        delay_ms=args.delay,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the ``image-optimizer`` command.

    Exits with status 1 on configuration or other fatal errors. Per-image
    failures do not change the exit status; they are reported in the summary.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in ("backfill", "quick"):
        logger = get_logger("cli")
        try:
            config = config_from_args(args)
            if config.debug:
                set_debug_logging("cli", "backfill", "storage", "transform")
            asyncio.run(run_backfill(config))
        except KeyboardInterrupt:
            logger.warning("Processing interrupted by user.")
            sys.exit(130)
        except Exception as e:
            logger.error(f"Fatal error: {e}", exc_info=True)
            sys.exit(1)

    elif args.command == "version":
        print("Image Optimizer CLI")
        print(f"Version {__version__}")
        sys.exit(0)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
