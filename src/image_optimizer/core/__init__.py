"""Core utilities and shared components for the image optimizer."""

from .config import BackfillConfig, HandlerConfig, TransformSettings
from .exceptions import (
    ImageOptimizerError,
    ConfigurationError,
    EventParseError,
    S3Error,
    FetchError,
    StoreError,
    ListError,
    CopyError,
    ImageProcessingError,
    DecodeError,
    EncodeError,
)
from .image_utils import (
    SUPPORTED_FORMATS,
    calculate_resize_dimensions,
    generate_optimized_key,
    has_alpha_channel,
    is_supported_image,
    optimize_image,
)
from .logging_config import get_logger, setup_logger
from .models import (
    ItemResult,
    ItemStatus,
    OptimizedArtifact,
    OptimizedImage,
    ProcessingStats,
    RecordResult,
    SkipReason,
    SourceObject,
    build_artifact,
)

__all__ = [
    "BackfillConfig",
    "HandlerConfig",
    "TransformSettings",
    "ImageOptimizerError",
    "ConfigurationError",
    "EventParseError",
    "S3Error",
    "FetchError",
    "StoreError",
    "ListError",
    "CopyError",
    "ImageProcessingError",
    "DecodeError",
    "EncodeError",
    "SUPPORTED_FORMATS",
    "calculate_resize_dimensions",
    "generate_optimized_key",
    "has_alpha_channel",
    "is_supported_image",
    "optimize_image",
    "get_logger",
    "setup_logger",
    "ItemResult",
    "ItemStatus",
    "OptimizedArtifact",
    "OptimizedImage",
    "ProcessingStats",
    "RecordResult",
    "SkipReason",
    "SourceObject",
    "build_artifact",
]
