import logging
import os
import sys
import traceback

from concurrent_log_handler import ConcurrentRotatingFileHandler

from image_server.config import Settings

LOGGER_NAME = "image_server"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SystemLogger:
    """Configures the ``image_server`` logger tree.

    Console output goes to stderr: in stdio mode stdout carries the MCP protocol.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.logger = logging.getLogger(LOGGER_NAME)
        self.console_handler = None
        self.file_handler = None
        self.configure_logging()

    def configure_logging(self):
        level = getattr(logging, self.settings.LOG_LEVEL.upper(), logging.INFO)
        self.logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT)

        # Reconfiguring replaces the handlers installed by a previous call
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        self.console_handler = logging.StreamHandler(sys.stderr)
        self.console_handler.setLevel(level)
        self.console_handler.setFormatter(formatter)
        self.logger.addHandler(self.console_handler)

        if self.settings.LOG_DIR:
            os.makedirs(self.settings.LOG_DIR, exist_ok=True)
            self.file_handler = ConcurrentRotatingFileHandler(
                os.path.join(self.settings.LOG_DIR, "image_server.log"),
                maxBytes=self.settings.MAX_LOG_FILE_SIZE,
                backupCount=self.settings.BACKUP_COUNT,
                encoding="utf-8",
            )
            self.file_handler.setLevel(level)
            self.file_handler.setFormatter(formatter)
            self.logger.addHandler(self.file_handler)

    def _log(self, level, message, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        exc_info = kwargs.pop("exc_info", None)

        if exc_info:
            extra["traceback"] = traceback.format_exc()

        self.logger.log(level, message, *args, extra=extra, exc_info=exc_info, **kwargs)

    def debug(self, message, *args, **kwargs):
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message, *args, **kwargs):
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)


_system_logger = None


def configure_logging(settings: Settings) -> SystemLogger:
    global _system_logger
    _system_logger = SystemLogger(settings)
    return _system_logger


def get_logger():
    """The configured SystemLogger, or the plain ``image_server`` logger before start-up."""
    return _system_logger or logging.getLogger(LOGGER_NAME)
