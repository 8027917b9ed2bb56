"""Custom exceptions for the image optimizer."""


class ImageOptimizerError(Exception):
    """Base exception for all image optimizer errors."""


class ConfigurationError(ImageOptimizerError):
    """Error raised for missing or invalid configuration."""


class EventParseError(ImageOptimizerError):
    """Error raised when an inbound notification record is malformed."""


class S3Error(ImageOptimizerError):
    """Error raised for S3 related failures."""


class FetchError(S3Error):
    """The source object is missing or could not be read."""


class StoreError(S3Error):
    """Writing the optimized object to the destination bucket failed."""


class ListError(S3Error):
    """Listing the source bucket failed."""


class CopyError(S3Error):
    """Copy-to-self used to re-trigger the event handler failed."""


class ImageProcessingError(ImageOptimizerError):
    """Error raised when optimizing a single image fails."""


class DecodeError(ImageProcessingError):
    """The input bytes could not be parsed as an image."""


class EncodeError(ImageProcessingError):
    """Re-encoding the decoded image failed."""
