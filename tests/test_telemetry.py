import logging

from rich.logging import RichHandler

from tw_bridge.telemetry import configure_logging


def test_configure_logging_installs_rich_handler() -> None:
    logger = logging.getLogger("tw_bridge")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    try:
        configure_logging("debug")
        configure_logging("warning")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.level == logging.WARNING
        assert logger.propagate is False
        assert logging.getLogger("tw_bridge.bridge").getEffectiveLevel() == logging.WARNING
    finally:
        handlers, level, propagate = saved
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate
