"""Factories for creating configured S3 clients."""

from typing import Any, Optional

import aioboto3


class S3ClientFactory:
    """Factory for creating async S3 client instances."""

    @staticmethod
    def create_s3_client(
        region: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Create an aioboto3 S3 client context manager.

        Explicit credentials are optional; without them the default boto
        credential chain applies. Use as ``async with factory(...) as s3``.
        """
        session = aioboto3.Session(
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key,
            region_name=region,
        )
        return session.client("s3", **kwargs)
