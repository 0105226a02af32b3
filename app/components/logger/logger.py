import logging
import sys

from app.components.logger.logger_interface import LoggerInterface

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Logger(LoggerInterface):
    # One stream handler for the whole process, shared by every instance.
    _handler: logging.Handler | None = None

    def __init__(self, log_format: str = DEFAULT_LOG_FORMAT, log_level: str = "INFO"):
        self.log_format = log_format
        self.log_level = self._resolve_level(log_level)
        self._configure_root()

    @staticmethod
    def _resolve_level(log_level: str) -> int:
        level = logging.getLevelName(str(log_level).strip().upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {log_level}")
        return level

    def _configure_root(self) -> None:
        root = logging.getLogger()
        root.setLevel(self.log_level)

        if Logger._handler is None:
            Logger._handler = logging.StreamHandler(sys.stderr)
        if Logger._handler not in root.handlers:
            root.addHandler(Logger._handler)

        Logger._handler.setFormatter(logging.Formatter(self.log_format))

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)
