"""Protocol definitions for dependency injection and testability."""

from typing import Any, AsyncContextManager, Callable, Dict, Protocol


class AsyncS3ClientProtocol(Protocol):
    """The subset of the aioboto3 S3 client the optimizer calls."""

    async def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    async def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object metadata from S3."""
        ...

    async def put_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Put object to S3."""
        ...

    async def copy_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Copy object within S3."""
        ...

    def get_paginator(self, operation_name: str) -> Any:
        """Get paginator for S3 operations."""
        ...


# Zero-argument callable returning ``async with``-able client, e.g. session.client("s3")
ClientFactory = Callable[[], AsyncContextManager[AsyncS3ClientProtocol]]
