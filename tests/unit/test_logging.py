"""Tests for logging configuration and behavior."""

import logging as std_logging

import pytest

from marketeconomy import logging
from marketeconomy.logging import DEEP_DEBUG, EconLogger, configure_logging, getLogger
from tests.helpers.factories import FakeHost, make_engine


@pytest.fixture
def restore_levels():
    """Put marketeconomy logger levels back after a test reconfigures them."""
    names = [
        "marketeconomy",
        "marketeconomy.events.adjust_wages",
        "marketeconomy.events.update_market_prices",
        logging.DIAGNOSTICS_LOGGER,
    ]
    saved = {name: std_logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        std_logging.getLogger(name).setLevel(level)


class TestEconLogger:
    """Test custom EconLogger functionality."""

    def test_loggers_have_deep_method(self):
        logger = getLogger("marketeconomy.tests.deep_method")
        assert isinstance(logger, EconLogger)
        assert callable(logger.deep)

    def test_deep_level_exists(self):
        """DEEP_DEBUG level should be registered."""
        assert DEEP_DEBUG == 5
        assert std_logging.getLevelName(DEEP_DEBUG) == "DEEP"

    def test_deep_logging_when_enabled(self, caplog):
        logger = getLogger("marketeconomy.tests.deep_on")
        with caplog.at_level(DEEP_DEBUG, logger="marketeconomy.tests.deep_on"):
            logger.deep("ratio=%.2f", 1.5)
        assert "ratio=1.50" in caplog.text

    def test_deep_logging_when_disabled(self, caplog):
        logger = getLogger("marketeconomy.tests.deep_off")
        with caplog.at_level(std_logging.INFO, logger="marketeconomy.tests.deep_off"):
            logger.deep("Should not appear")
        assert "Should not appear" not in caplog.text


class TestLoggingConfiguration:
    """configure_logging applies the ``logging`` config section."""

    def test_default_level(self, restore_levels):
        configure_logging({"default_level": "WARNING"})
        assert std_logging.getLogger("marketeconomy").level == std_logging.WARNING

    def test_deep_alias(self, restore_levels):
        configure_logging({"default_level": "DEEP_DEBUG"})
        assert std_logging.getLogger("marketeconomy").level == DEEP_DEBUG

    def test_per_event_levels(self, restore_levels):
        configure_logging(
            {
                "default_level": "INFO",
                "events": {"adjust_wages": "DEBUG", "update_market_prices": "ERROR"},
            }
        )
        assert (
            std_logging.getLogger("marketeconomy.events.adjust_wages").level
            == std_logging.DEBUG
        )
        assert (
            std_logging.getLogger("marketeconomy.events.update_market_prices").level
            == std_logging.ERROR
        )

    def test_diagnostics_file_receives_trace(self, tmp_path, restore_levels):
        path = tmp_path / "diagnostics.log"
        diag = std_logging.getLogger(logging.DIAGNOSTICS_LOGGER)
        before = list(diag.handlers)
        try:
            engine = make_engine(
                FakeHost.populated(),
                logging={"default_level": "INFO", "diagnostics_file": str(path)},
            )
            # configuring twice does not stack handlers
            configure_logging(engine.config.logging)
            added = [h for h in diag.handlers if h not in before]
            assert len(added) == 1

            engine.step()
            added[0].flush()
            text = path.read_text(encoding="utf-8")
            assert "[wages] tick=1 citywide" in text
            assert "[workforce] tick=1 1" in text
        finally:
            for handler in diag.handlers:
                if handler not in before:
                    diag.removeHandler(handler)
                    handler.close()

    def test_event_logger_follows_config(self, restore_levels):
        engine = make_engine(
            FakeHost.populated(), logging={"events": {"adjust_wages": "DEBUG"}}
        )
        logger = engine.get_event("adjust_wages").get_logger()
        assert logger.isEnabledFor(std_logging.DEBUG)
