"""Object-created event handler.

Each record of an S3 notification is optimized independently. The handler
performs no retries of its own: a failing record is logged and its error is
raised once every record has been attempted, so the invoking platform's
redelivery policy re-runs the invocation.
"""

import asyncio
import json
import urllib.parse
from typing import Any, Dict, List, Optional, Tuple

from .core.config import HandlerConfig
from .core.exceptions import EventParseError
from .core.factories import S3ClientFactory
from .core.image_utils import is_supported_image, optimize_image
from .core.logging_config import get_logger
from .core.models import ItemStatus, RecordResult, SkipReason, build_artifact
from .core.protocols import ClientFactory
from .core.storage import S3ObjectStore


def decode_object_key(raw_key: str) -> str:
    """Decode an S3 event key: percent-encoding, with ``+`` standing for a space."""
    return urllib.parse.unquote_plus(raw_key)


def parse_record(record: Dict[str, Any]) -> Tuple[str, str]:
    """Extract ``(bucket, decoded key)`` from one notification record."""
    try:
        bucket = record["s3"]["bucket"]["name"]
        raw_key = record["s3"]["object"]["key"]
    except (KeyError, TypeError) as e:
        raise EventParseError(f"Malformed S3 event record: missing {e}") from e
    return bucket, decode_object_key(raw_key)


async def process_record(
    record: Dict[str, Any], config: HandlerConfig, storage: S3ObjectStore
) -> RecordResult:
    """Fetch, optimize and store the object named by one record.

    Every failure, a malformed record included, is logged here before it is
    re-raised.
    """
    logger = get_logger("handler")
    source_key = "<malformed record>"

    try:
        source_bucket, source_key = parse_record(record)
        logger.info(f"Processing: {source_key} from bucket: {source_bucket}")

        if not is_supported_image(source_key):
            logger.info(f"Skipping unsupported file: {source_key}")
            return RecordResult(
                source_bucket=source_bucket,
                source_key=source_key,
                status=ItemStatus.SKIPPED,
                skip_reason=SkipReason.UNSUPPORTED_FORMAT,
            )

        if source_bucket == config.optimized_bucket:
            logger.info(f"Skipping file already in optimized bucket: {source_key}")
            return RecordResult(
                source_bucket=source_bucket,
                source_key=source_key,
                status=ItemStatus.SKIPPED,
                skip_reason=SkipReason.ALREADY_OPTIMIZED_BUCKET,
            )

        source = await storage.fetch(source_bucket, source_key)
        optimized = await asyncio.to_thread(
            optimize_image, source.body, source_key, config.transform
        )
        artifact = build_artifact(source, optimized)
        await storage.store(config.optimized_bucket, artifact)
    except Exception as e:
        logger.error(f"Error processing {source_key}: {e}", exc_info=True)
        raise

    logger.info(f"Successfully processed: {source_key} -> {artifact.key}")
    logger.info(f"Size reduction: {source.size} -> {artifact.size} bytes")

    return RecordResult(
        source_bucket=source_bucket,
        source_key=source_key,
        status=ItemStatus.PROCESSED,
        optimized_key=artifact.key,
        original_size=source.size,
        optimized_size=artifact.size,
    )


async def handle_event(
    event: Dict[str, Any], config: HandlerConfig, storage: S3ObjectStore
) -> Dict[str, int]:
    """
    Process every record of an event concurrently.

    Returns:
        Counts of processed and skipped records

    Raises:
        The last error raised by a record, after all records were attempted.
    """
    logger = get_logger("handler")
    logger.debug(f"Processing S3 event: {json.dumps(event, indent=2, default=str)}")

    records: List[Dict[str, Any]] = event.get("Records") or []
    outcomes = await asyncio.gather(
        *(process_record(record, config, storage) for record in records),
        return_exceptions=True,
    )

    failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
    if failures:
        logger.error(f"{len(failures)} of {len(records)} record(s) failed")
        raise failures[-1]

    results = [outcome for outcome in outcomes if isinstance(outcome, RecordResult)]
    summary = {
        "processed": sum(1 for r in results if r.status == ItemStatus.PROCESSED),
        "skipped": sum(1 for r in results if r.status == ItemStatus.SKIPPED),
    }
    logger.info(f"All images processed successfully: {summary}")
    return summary


def create_handler(config: HandlerConfig, client_factory: Optional[ClientFactory] = None):
    """
    Build a synchronous ``handler(event, context)`` for the Lambda Python runtime.

    Args:
        config: Handler configuration, built once at startup
        client_factory: Returns an async S3 client context manager; defaults
            to an aioboto3 client in ``config.region``
    """
    if client_factory is None:

        def client_factory():
            return S3ClientFactory.create_s3_client(region=config.region)

    async def _run(event: Dict[str, Any]) -> Dict[str, int]:
        async with client_factory() as s3_client:
            return await handle_event(event, config, S3ObjectStore(s3_client))

    def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, int]:
        return asyncio.run(_run(event))

    return handler
