"""S3 storage capabilities used by the event handler and the backfill driver."""

from typing import Dict, List

from .error_handling import with_error_handling
from .exceptions import CopyError, FetchError, ListError, StoreError
from .logging_config import get_logger
from .models import OptimizedArtifact, SourceObject
from .protocols import AsyncS3ClientProtocol

LIST_PAGE_SIZE = 1000


class S3ObjectStore:
    """Thin async wrapper around an S3 client.

    Every method except ``exists`` raises an ``S3Error`` subclass on failure.
    """

    def __init__(self, s3_client: AsyncS3ClientProtocol):
        self._s3_client = s3_client
        self._logger = get_logger("storage")

    @with_error_handling(FetchError)
    async def fetch(self, bucket: str, key: str) -> SourceObject:
        """Download an object together with its user metadata."""
        self._logger.debug(f"Downloading s3://{bucket}/{key}")
        response = await self._s3_client.get_object(Bucket=bucket, Key=key)

        body = response.get("Body")
        if body is None:
            raise FetchError(f"No body in S3 response for s3://{bucket}/{key}")

        async with body as stream:
            data = await stream.read()

        return SourceObject(
            bucket=bucket,
            key=key,
            body=data,
            metadata=response.get("Metadata") or {},
        )

    @with_error_handling(StoreError)
    async def store(self, bucket: str, artifact: OptimizedArtifact) -> None:
        """Upload an optimized artifact with its content type, metadata and cache directive."""
        self._logger.debug(f"Uploading to s3://{bucket}/{artifact.key}")
        await self._s3_client.put_object(
            Bucket=bucket,
            Key=artifact.key,
            Body=artifact.body,
            ContentType=artifact.content_type,
            Metadata=artifact.metadata,
            CacheControl=artifact.cache_control,
        )

    @with_error_handling(ListError)
    async def list_keys(
        self, bucket: str, prefix: str = "", page_size: int = LIST_PAGE_SIZE
    ) -> List[str]:
        """List every key under ``prefix``, following continuation tokens."""
        self._logger.debug(f"Listing s3://{bucket}/{prefix}")
        keys: List[str] = []
        paginator = self._s3_client.get_paginator("list_objects_v2")
        async for page in paginator.paginate(
            Bucket=bucket, Prefix=prefix, PaginationConfig={"PageSize": page_size}
        ):
            for obj in page.get("Contents", []):
                keys.append(obj["Key"])
        return keys

    @with_error_handling(CopyError)
    async def copy_to_self(self, bucket: str, key: str, metadata: Dict[str, str]) -> None:
        """Copy an object onto itself replacing its metadata, emitting a new created event."""
        self._logger.debug(f"Copying s3://{bucket}/{key} onto itself")
        await self._s3_client.copy_object(
            Bucket=bucket,
            Key=key,
            CopySource={"Bucket": bucket, "Key": key},
            MetadataDirective="REPLACE",
            Metadata=metadata,
        )

    async def exists(self, bucket: str, key: str) -> bool:
        """
        Best-effort existence probe.

        Any failure (404, access denied, transport error) counts as "does not
        exist" and is never raised.
        """
        try:
            await self._s3_client.head_object(Bucket=bucket, Key=key)
        except Exception as e:  # noqa: BLE001
            self._logger.debug(f"Probe for s3://{bucket}/{key} inconclusive: {e}")
            return False
        return True
