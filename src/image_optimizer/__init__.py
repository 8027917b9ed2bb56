"""Web-optimizes images written to an S3 bucket, on upload or in bulk."""

__version__ = "0.1.0"
