"""Testing utilities and fakes for the image optimizer."""

from .fakes import (
    FakeAsyncS3Client,
    FakeS3Paginator,
    FakeStreamingBody,
    S3Bucket,
    S3Object,
    client_error,
    create_test_image,
    make_s3_event,
    make_s3_record,
    setup_test_s3_environment,
)

__all__ = [
    "FakeAsyncS3Client",
    "FakeS3Paginator",
    "FakeStreamingBody",
    "S3Bucket",
    "S3Object",
    "client_error",
    "create_test_image",
    "make_s3_event",
    "make_s3_record",
    "setup_test_s3_environment",
]
