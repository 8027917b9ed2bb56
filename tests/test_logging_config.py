"""Tests for logging_config.py utility functions."""

import os
import logging
import pytest
from unittest.mock import patch

from image_optimizer.core.logging_config import (
    get_logger,
    logger,
    set_debug_logging,
    setup_logger,
)


class TestSetupLogger:
    """Tests for setup_logger function."""

    def test_setup_logger_default_parameters(self):
        test_logger = setup_logger()
        assert test_logger.name == "image-optimizer"
        assert len(test_logger.handlers) == 1
        assert not test_logger.propagate

    def test_setup_logger_custom_level_by_parameter(self):
        test_logger = setup_logger(name="test-param-level", level="DEBUG")
        assert test_logger.level == logging.DEBUG

    def test_setup_logger_custom_level_by_env_var(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            test_logger = setup_logger(name="test-env-level")
            assert test_logger.level == logging.WARNING

    def test_setup_logger_invalid_level_defaults_to_info(self):
        test_logger = setup_logger(name="test-invalid-level", level="INVALID_LEVEL")
        assert test_logger.level == logging.INFO

    def test_setup_logger_structured_format(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LOG_FORMAT", None)
            test_logger = setup_logger(name="test-structured", format_type="structured")
        format_string = test_logger.handlers[0].formatter._fmt
        assert "%(filename)s" in format_string
        assert "%(funcName)s" in format_string

    def test_setup_logger_simple_format_from_env(self):
        with patch.dict(os.environ, {"LOG_FORMAT": "simple"}):
            test_logger = setup_logger(name="test-simple-env")
        format_string = test_logger.handlers[0].formatter._fmt
        assert format_string == "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def test_setup_logger_no_duplicate_handlers(self):
        first = setup_logger(name="test-duplicates")
        second = setup_logger(name="test-duplicates")
        assert first is second
        assert len(second.handlers) == 1


class TestGetLogger:
    def test_get_logger_configures_named_logger(self):
        named = get_logger("handler-test")
        assert named.name == "handler-test"
        assert named.handlers

    def test_module_logger_exists(self):
        assert logger.name == "image-optimizer"


def test_set_debug_logging():
    root = logging.getLogger()
    previous = root.level
    try:
        set_debug_logging("debug-test")
        assert logging.getLogger("debug-test").level == logging.DEBUG
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)


class TestDebugLevelPersists:
    """A level switched at runtime must survive later logger lookups."""

    @pytest.fixture(autouse=True)
    def restore_levels(self):
        names = ("backfill", "storage", "level-fresh")
        saved = {name: logging.getLogger(name).level for name in names}
        root_level = logging.getLogger().level
        yield
        for name, level in saved.items():
            logging.getLogger(name).setLevel(level)
        logging.getLogger().setLevel(root_level)

    def test_get_logger_keeps_debug_level(self):
        set_debug_logging("backfill")

        assert get_logger("backfill").level == logging.DEBUG
        assert logging.getLogger("backfill").isEnabledFor(logging.DEBUG)

    def test_constructing_store_keeps_debug_level(self):
        from image_optimizer.core.storage import S3ObjectStore

        set_debug_logging("storage")
        S3ObjectStore(object())

        assert logging.getLogger("storage").level == logging.DEBUG

    def test_env_level_applies_only_on_first_use(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            assert get_logger("level-fresh").level == logging.WARNING
        with patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}):
            assert get_logger("level-fresh").level == logging.WARNING

    def test_explicit_level_always_applies(self):
        get_logger("level-fresh")
        assert setup_logger("level-fresh", level="ERROR").level == logging.ERROR
