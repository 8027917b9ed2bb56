"""Shared data models for the image optimizer."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

WEBP_CONTENT_TYPE = "image/webp"
PNG_CONTENT_TYPE = "image/png"
CACHE_CONTROL = "public, max-age=31536000, immutable"

OptimizedContentType = Literal["image/webp", "image/png"]


class SourceObject(BaseModel):
    """An object read from the source bucket."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    body: bytes
    metadata: Dict[str, str] = Field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.body)


class OptimizedImage(BaseModel):
    """Output of the optimization policy for one image."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    content_type: OptimizedContentType
    key: str
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.data)


class OptimizedArtifact(BaseModel):
    """An optimized image ready to be written to the destination bucket."""

    model_config = ConfigDict(frozen=True)

    key: str
    body: bytes
    content_type: OptimizedContentType
    metadata: Dict[str, str]
    cache_control: str = CACHE_CONTROL

    @property
    def size(self) -> int:
        return len(self.body)


def format_compression_ratio(original_size: int, optimized_size: int) -> str:
    """Optimized size as a percentage of the original, two decimals."""
    if original_size <= 0:
        return "0.00"
    return f"{optimized_size / original_size * 100:.2f}"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def build_artifact(
    source: SourceObject,
    optimized: OptimizedImage,
    extra_metadata: Optional[Dict[str, str]] = None,
    now: Optional[datetime] = None,
) -> OptimizedArtifact:
    """Merge source metadata with the derived size/ratio/timestamp entries."""
    metadata = dict(source.metadata)
    metadata.update(
        {
            "original-size": str(source.size),
            "optimized-size": str(optimized.size),
            "compression-ratio": format_compression_ratio(source.size, optimized.size),
            "processed-at": utc_timestamp(now),
        }
    )
    if extra_metadata:
        metadata.update(extra_metadata)

    return OptimizedArtifact(
        key=optimized.key,
        body=optimized.data,
        content_type=optimized.content_type,
        metadata=metadata,
    )


class SkipReason(str, Enum):
    """Why an object was skipped without being treated as an error."""

    UNSUPPORTED_FORMAT = "unsupported_format"
    ALREADY_OPTIMIZED_BUCKET = "already_optimized_bucket"
    ALREADY_OPTIMIZED = "already_optimized"


class ItemStatus(str, Enum):
    PROCESSED = "processed"
    TRIGGERED = "triggered"
    SKIPPED = "skipped"
    FAILED = "failed"


class RecordResult(BaseModel):
    """Outcome of one inbound notification record."""

    source_bucket: str
    source_key: str
    status: ItemStatus
    skip_reason: Optional[SkipReason] = None
    optimized_key: str = ""
    original_size: int = 0
    optimized_size: int = 0


class ItemResult(BaseModel):
    """Outcome of one object in a backfill run."""

    source_key: str
    status: ItemStatus
    optimized_key: str = ""
    original_size: int = 0
    optimized_size: int = 0
    error: str = ""

    @property
    def success(self) -> bool:
        return self.status in (ItemStatus.PROCESSED, ItemStatus.TRIGGERED)


class ProcessingStats(BaseModel):
    """Counters for one backfill run. Lives only for the duration of the run."""

    total: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    total_size_before: int = 0
    total_size_after: int = 0

    def record(self, result: ItemResult) -> None:
        """Fold a completed item into the counters."""
        if result.success:
            self.processed += 1
            if result.status == ItemStatus.PROCESSED:
                self.total_size_before += result.original_size
                self.total_size_after += result.optimized_size
        elif result.status == ItemStatus.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1

    @property
    def compression_ratio(self) -> float:
        if self.total_size_before == 0:
            return 0.0
        return self.total_size_after / self.total_size_before * 100

    @property
    def saved_bytes(self) -> int:
        return self.total_size_before - self.total_size_after

    def summary_lines(self, include_sizes: bool = True) -> List[str]:
        """Human readable end-of-run summary."""
        lines = [
            f"Total images found: {self.total}",
            f"Successfully processed: {self.processed}",
            f"Skipped (already optimized): {self.skipped}",
            f"Errors: {self.errors}",
        ]
        if include_sizes and self.total_size_before > 0:
            mb = 1024 * 1024
            lines.extend(
                [
                    f"Total size before: {self.total_size_before / mb:.2f} MB",
                    f"Total size after: {self.total_size_after / mb:.2f} MB",
                    f"Compression ratio: {self.compression_ratio:.1f}%",
                    f"Space saved: {self.saved_bytes / mb:.2f} MB",
                ]
            )
        return lines
