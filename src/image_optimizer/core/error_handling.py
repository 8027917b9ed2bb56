# src/image_optimizer/core/error_handling.py

import functools
import logging
from typing import Any, Awaitable, Callable, List, Optional, Type, TypeVar

from .exceptions import ImageOptimizerError, S3Error
from .logging_config import get_logger
from .models import ItemResult, ItemStatus

T = TypeVar("T")


def with_error_handling(
    error_cls: Type[S3Error],
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator for async storage calls.

    Errors already in the ImageOptimizerError hierarchy pass through untouched;
    anything else (botocore ClientError, transport errors) is logged and
    re-raised as ``error_cls`` with the original chained as ``__cause__``.
    No retries are attempted here.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            logger = logging.getLogger(func.__module__ + "." + func.__name__)
            try:
                return await func(*args, **kwargs)
            except ImageOptimizerError:
                raise
            except Exception as e:  # noqa: BLE001
                logger.error(f"Error in '{func.__name__}': {e}", exc_info=True)
                raise error_cls(f"S3 operation failed in {func.__name__}: {e}") from e

        return wrapper

    return decorator


class BatchFailureReport:
    """
    Collects the failed items of a bulk run and reports them when it ends.

    Per-item failures are reported only here, one ERROR line per item, so a
    run's failures read as a single block after the progress output.
    Exceptions escaping the ``with`` block are never suppressed.
    """

    def __init__(self, operation_name: str = "Backfill", logger: Optional[logging.Logger] = None):
        self.operation_name = operation_name
        self.failures: List[ItemResult] = []
        self.logger = logger or get_logger("backfill")

    def __enter__(self) -> "BatchFailureReport":
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def add(self, result: ItemResult) -> None:
        """Keep ``result`` if it is a failure; other outcomes are ignored."""
        if result.status == ItemStatus.FAILED:
            self.failures.append(result)

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        count = len(self.failures)
        if exc_type is not None:
            self.logger.warning(
                f"{self.operation_name} interrupted after {count} failed item(s): {exc_val!r}"
            )
        if count:
            self.logger.warning(f"{self.operation_name} finished with {count} failed item(s):")
            for index, failure in enumerate(self.failures, start=1):
                self.logger.error(f"  [{index}/{count}] {failure.source_key}: {failure.error}")
        elif exc_type is None:
            self.logger.info(f"{self.operation_name} finished with no failed items.")
        return False
