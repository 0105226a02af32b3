import logging

import pytest

from app.components.logger.logger import Logger


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.mark.unit
def test_get_logger_returns_named_logger() -> None:
    logger = Logger(log_level="INFO").get_logger("RelayService")

    assert isinstance(logger, logging.Logger)
    assert logger.name == "RelayService"


@pytest.mark.unit
def test_level_is_applied_to_root_logger() -> None:
    Logger(log_level="warning")

    assert logging.getLogger().level == logging.WARNING


@pytest.mark.unit
def test_unknown_level_raises() -> None:
    with pytest.raises(ValueError):
        Logger(log_level="CHATTY")


@pytest.mark.unit
def test_repeated_construction_reuses_handler() -> None:
    root = logging.getLogger()
    before = len(root.handlers)

    Logger(log_format="%(message)s")
    Logger(log_format="%(name)s %(message)s")

    assert len(root.handlers) == before + 1
    handler = root.handlers[-1]
    assert handler is Logger._handler
    assert handler.formatter is not None
    assert handler.formatter._fmt == "%(name)s %(message)s"
