"""Immutable configuration for the event handler and the backfill driver."""

import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError

DEFAULT_REGION = "us-east-2"


class TransformSettings(BaseModel):
    """Fixed encoder settings for the optimization policy."""

    model_config = ConfigDict(frozen=True)

    max_width: int = Field(default=800, gt=0)
    quality: int = Field(default=85, ge=1, le=100)
    png_compress_level: int = Field(default=9, ge=0, le=9)
    webp_method: int = Field(default=6, ge=0, le=6)


class HandlerConfig(BaseModel):
    """Configuration for the object-created event handler."""

    model_config = ConfigDict(frozen=True)

    optimized_bucket: str = Field(min_length=1)
    region: str = DEFAULT_REGION
    transform: TransformSettings = Field(default_factory=TransformSettings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HandlerConfig":
        """Build the config from environment variables, failing fast if incomplete."""
        env = os.environ if environ is None else environ
        optimized_bucket = env.get("OPTIMIZED_BUCKET_NAME")
        if not optimized_bucket:
            raise ConfigurationError("OPTIMIZED_BUCKET_NAME must be set")
        return _build(
            cls,
            optimized_bucket=optimized_bucket,
            region=env.get("AWS_REGION") or DEFAULT_REGION,
        )


class BackfillConfig(BaseModel):
    """Configuration for a single backfill run over an existing bucket."""

    model_config = ConfigDict(frozen=True)

    source_bucket: str = Field(min_length=1)
    optimized_bucket: str = Field(min_length=1)
    region: str = DEFAULT_REGION
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    prefix: str = ""
    skip_existing: bool = True
    use_lambda: bool = False
    batch_size: int = Field(default=10, ge=1)
    delay_ms: int = Field(default=1000, ge=0)
    debug: bool = False
    transform: TransformSettings = Field(default_factory=TransformSettings)

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any
    ) -> "BackfillConfig":
        """
        Build the config from environment variables plus explicit overrides.

        Overrides whose value is ``None`` are ignored so CLI flags that were
        not given fall back to the environment or the model defaults.

        Raises:
            ConfigurationError: if a bucket name is missing or a value is invalid.
        """
        env = os.environ if environ is None else environ
        values: dict = {
            "source_bucket": env.get("SOURCE_BUCKET_NAME"),
            "optimized_bucket": env.get("OPTIMIZED_BUCKET_NAME"),
            "region": env.get("AWS_REGION") or DEFAULT_REGION,
            "aws_access_key_id": env.get("AWS_ACCESS_KEY_ID"),
            "aws_secret_access_key": env.get("AWS_SECRET_ACCESS_KEY"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        if not values["source_bucket"]:
            raise ConfigurationError("SOURCE_BUCKET_NAME must be set")
        if not values["optimized_bucket"]:
            raise ConfigurationError("OPTIMIZED_BUCKET_NAME must be set")

        return _build(cls, **values)


def _build(model: Any, **values: Any) -> Any:
    try:
        return model(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {model.__name__}: {e}") from e
