"""
Unit Tests for logging_utils
"""

import io
import logging

import pytest

from notemod.utils.logging_utils import configure_logging


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger("notemod")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_configure_when_called_twice_then_single_handler(self):
        """Reconfiguring replaces the console handler."""
        configure_logging()
        configure_logging(verbose=True)
        names = [h.get_name() for h in logging.getLogger("notemod").handlers]
        assert names.count("notemod-console") == 1

    def test_configure_when_verbose_then_debug_emitted(self):
        stream = io.StringIO()
        configure_logging(verbose=True, stream=stream)
        logging.getLogger("notemod.test").debug("detail")
        assert "detail" in stream.getvalue()

    def test_configure_when_not_verbose_then_debug_suppressed(self):
        stream = io.StringIO()
        configure_logging(stream=stream)
        logging.getLogger("notemod.test").debug("detail")
        logging.getLogger("notemod.test").info("milestone")
        assert "detail" not in stream.getvalue()
        assert "milestone" in stream.getvalue()
