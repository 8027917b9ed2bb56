"""Backfill driver: optimize objects that already exist in the source bucket.

Objects are listed up front, then processed in sequential batches. Items in a
batch run concurrently, the driver waits for the whole batch and pauses
before the next one. Per-item failures are counted, never raised.
"""

import asyncio
import time
from typing import Awaitable, Callable, List, Optional

from .core.config import BackfillConfig
from .core.error_handling import BatchFailureReport
from .core.factories import S3ClientFactory
from .core.image_utils import generate_optimized_key, is_supported_image, optimize_image
from .core.logging_config import get_logger
from .core.models import (
    PNG_CONTENT_TYPE,
    WEBP_CONTENT_TYPE,
    ItemResult,
    ItemStatus,
    ProcessingStats,
    build_artifact,
    utc_timestamp,
)
from .core.protocols import ClientFactory
from .core.storage import S3ObjectStore

BATCH_PROCESSOR_TAG = "batch-processor"

Sleep = Callable[[float], Awaitable[None]]


def split_batches(keys: List[str], batch_size: int) -> List[List[str]]:
    """Partition keys into consecutive batches of at most ``batch_size``."""
    return [keys[i : i + batch_size] for i in range(0, len(keys), batch_size)]


class BackfillProcessor:
    """Runs one backfill over ``config.source_bucket``."""

    def __init__(
        self,
        storage: S3ObjectStore,
        config: BackfillConfig,
        sleep: Sleep = asyncio.sleep,
    ):
        self._storage = storage
        self._config = config
        self._sleep = sleep
        self._logger = get_logger("backfill")

    async def list_images(self) -> List[str]:
        """All supported image keys under the configured prefix, in listing order."""
        keys = await self._storage.list_keys(
            self._config.source_bucket, self._config.prefix
        )
        return [key for key in keys if is_supported_image(key)]

    async def optimized_version_exists(self, key: str) -> bool:
        """True if either the WebP or the PNG derivative is already in the optimized bucket."""
        for content_type in (WEBP_CONTENT_TYPE, PNG_CONTENT_TYPE):
            candidate = generate_optimized_key(key, content_type)
            if await self._storage.exists(self._config.optimized_bucket, candidate):
                return True
        return False

    async def process_image_direct(self, key: str) -> ItemResult:
        """Fetch, optimize and store one object in-process."""
        self._logger.info(f"Processing: {key}")
        source = await self._storage.fetch(self._config.source_bucket, key)
        optimized = await asyncio.to_thread(
            optimize_image, source.body, key, self._config.transform
        )
        artifact = build_artifact(
            source, optimized, extra_metadata={"processed-by": BATCH_PROCESSOR_TAG}
        )
        await self._storage.store(self._config.optimized_bucket, artifact)

        self._logger.info(f"Processed: {key} -> {artifact.key}")
        self._logger.info(
            f"   Size: {source.size} -> {artifact.size} bytes "
            f"({artifact.size / source.size * 100:.1f}%)"
        )
        return ItemResult(
            source_key=key,
            status=ItemStatus.PROCESSED,
            optimized_key=artifact.key,
            original_size=source.size,
            optimized_size=artifact.size,
        )

    async def trigger_reprocessing(self, key: str) -> ItemResult:
        """Copy the object onto itself so the event handler picks it up again."""
        self._logger.info(f"Triggering Lambda for: {key}")
        await self._storage.copy_to_self(
            self._config.source_bucket,
            key,
            {"reprocessed-at": utc_timestamp(), "trigger": BATCH_PROCESSOR_TAG},
        )
        self._logger.info(f"Triggered Lambda for: {key}")
        return ItemResult(source_key=key, status=ItemStatus.TRIGGERED)

    async def process_item(self, key: str, stats: ProcessingStats) -> ItemResult:
        """Skip, process or trigger one key.

        Failures become FAILED results; the run reports them together at the end.
        """
        try:
            if self._config.skip_existing and await self.optimized_version_exists(key):
                self._logger.info(f"Skipping (already optimized): {key}")
                result = ItemResult(source_key=key, status=ItemStatus.SKIPPED)
            elif self._config.use_lambda:
                result = await self.trigger_reprocessing(key)
            else:
                result = await self.process_image_direct(key)
        except Exception as e:  # noqa: BLE001
            self._logger.debug(f"Failure details for {key}", exc_info=True)
            result = ItemResult(
                source_key=key, status=ItemStatus.FAILED, error=f"{type(e).__name__}: {e}"
            )

        stats.record(result)
        return result

    async def run(self) -> ProcessingStats:
        """Process every listed image. Listing failures propagate."""
        config = self._config
        self._log_configuration()

        stats = ProcessingStats()
        start_time = time.time()

        self._logger.info("Listing all images...")
        keys = await self.list_images()
        stats.total = len(keys)
        self._logger.info(f"Found {len(keys)} images to process")

        batches = split_batches(keys, config.batch_size)
        done = 0

        with BatchFailureReport("Backfill", logger=self._logger) as failure_report:
            for index, batch in enumerate(batches, start=1):
                self._logger.info(
                    f"Processing batch {index}/{len(batches)} ({len(batch)} images)"
                )
                results = await asyncio.gather(
                    *(self.process_item(key, stats) for key in batch)
                )
                for result in results:
                    failure_report.add(result)

                done += len(batch)
                self._logger.info(
                    f"Progress: {done / len(keys) * 100:.1f}% ({done}/{len(keys)})"
                )

                if index < len(batches) and config.delay_ms > 0:
                    self._logger.info(
                        f"Waiting {config.delay_ms}ms before next batch..."
                    )
                    await self._sleep(config.delay_ms / 1000)

        self._log_final_statistics(stats, time.time() - start_time)
        return stats

    def _log_configuration(self) -> None:
        config = self._config
        self._logger.info("Starting batch processing of existing images...")
        self._logger.info("Configuration:")
        self._logger.info(f"   Source: s3://{config.source_bucket}/{config.prefix}")
        self._logger.info(f"   Destination: s3://{config.optimized_bucket}")
        self._logger.info(f"   Prefix: {config.prefix or 'all images'}")
        self._logger.info(f"   Skip existing: {config.skip_existing}")
        self._logger.info(f"   Use Lambda: {config.use_lambda}")
        self._logger.info(f"   Batch size: {config.batch_size}")
        self._logger.info(f"   Delay between batches: {config.delay_ms}ms")

    def _log_final_statistics(self, stats: ProcessingStats, total_time: float) -> None:
        self._logger.info("=" * 80)
        self._logger.info("PROCESSING COMPLETED")
        self._logger.info("=" * 80)
        self._logger.info(f"Total execution time: {total_time:.1f}s")
        for line in stats.summary_lines(include_sizes=not self._config.use_lambda):
            self._logger.info(f"   {line}")
        if stats.errors > 0:
            self._logger.warning(
                "Some images failed to process. Check the logs above for details."
            )


async def run_backfill(
    config: BackfillConfig, client_factory: Optional[ClientFactory] = None
) -> ProcessingStats:
    """Open an S3 client for the run and process the whole bucket."""
    if client_factory is None:

        def client_factory():
            return S3ClientFactory.create_s3_client(
                region=config.region,
                aws_access_key_id=config.aws_access_key_id,
                aws_secret_access_key=config.aws_secret_access_key,
            )

    async with client_factory() as s3_client:
        processor = BackfillProcessor(S3ObjectStore(s3_client), config)
        return await processor.run()
