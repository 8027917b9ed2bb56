"""Tests for config.py."""

import pytest

from image_optimizer.core.config import (
    DEFAULT_REGION,
    BackfillConfig,
    HandlerConfig,
    TransformSettings,
)
from image_optimizer.core.exceptions import ConfigurationError


class TestTransformSettings:
    def test_defaults(self):
        settings = TransformSettings()
        assert settings.max_width == 800
        assert settings.quality == 85
        assert settings.png_compress_level == 9
        assert settings.webp_method == 6


class TestHandlerConfig:
    """Tests for HandlerConfig.from_env."""

    def test_from_env(self):
        config = HandlerConfig.from_env(
            {"OPTIMIZED_BUCKET_NAME": "optimized", "AWS_REGION": "eu-west-1"}
        )

        assert config.optimized_bucket == "optimized"
        assert config.region == "eu-west-1"
        assert config.transform == TransformSettings()

    def test_default_region(self):
        config = HandlerConfig.from_env({"OPTIMIZED_BUCKET_NAME": "optimized"})
        assert config.region == DEFAULT_REGION == "us-east-2"

    @pytest.mark.parametrize("environ", [{}, {"OPTIMIZED_BUCKET_NAME": ""}])
    def test_missing_bucket_fails_fast(self, environ):
        with pytest.raises(ConfigurationError, match="OPTIMIZED_BUCKET_NAME"):
            HandlerConfig.from_env(environ)

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("OPTIMIZED_BUCKET_NAME", "from-os")
        monkeypatch.delenv("AWS_REGION", raising=False)

        assert HandlerConfig.from_env().optimized_bucket == "from-os"

    def test_immutable(self):
        config = HandlerConfig(optimized_bucket="optimized")
        with pytest.raises(Exception):
            config.optimized_bucket = "other"


class TestBackfillConfig:
    """Tests for BackfillConfig.from_env."""

    ENV = {
        "SOURCE_BUCKET_NAME": "source",
        "OPTIMIZED_BUCKET_NAME": "optimized",
        "AWS_ACCESS_KEY_ID": "AKIA_TEST",
        "AWS_SECRET_ACCESS_KEY": "secret",
    }

    def test_defaults(self):
        config = BackfillConfig.from_env(self.ENV)

        assert config.source_bucket == "source"
        assert config.optimized_bucket == "optimized"
        assert config.region == "us-east-2"
        assert config.aws_access_key_id == "AKIA_TEST"
        assert config.aws_secret_access_key == "secret"
        assert config.prefix == ""
        assert config.skip_existing is True
        assert config.use_lambda is False
        assert config.batch_size == 10
        assert config.delay_ms == 1000

    def test_overrides_win_and_none_is_ignored(self):
        config = BackfillConfig.from_env(
            self.ENV,
            source_bucket="cli-source",
            optimized_bucket=None,
            prefix="products/",
            batch_size=5,
        )

        assert config.source_bucket == "cli-source"
        assert config.optimized_bucket == "optimized"
        assert config.prefix == "products/"
        assert config.batch_size == 5

    def test_missing_source_bucket(self):
        with pytest.raises(ConfigurationError, match="SOURCE_BUCKET_NAME"):
            BackfillConfig.from_env({"OPTIMIZED_BUCKET_NAME": "optimized"})

    def test_missing_optimized_bucket(self):
        with pytest.raises(ConfigurationError, match="OPTIMIZED_BUCKET_NAME"):
            BackfillConfig.from_env({"SOURCE_BUCKET_NAME": "source"})

    @pytest.mark.parametrize("overrides", [{"batch_size": 0}, {"delay_ms": -1}])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError, match="Invalid BackfillConfig"):
            BackfillConfig.from_env(self.ENV, **overrides)
