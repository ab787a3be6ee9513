"""Bridge from the stdlib ``logging`` tree into a LogStore."""

import logging

from ..enums import LogLevel
from .store import LogStore

APP_TAG = "AutoGLM"

# Below logging.DEBUG; written to file as VERBOSE
VERBOSE = 5
logging.addLevelName(VERBOSE, "VERBOSE")

# The store's own diagnostics must not loop back into it
_STORE_LOGGER_PREFIX = __name__.rsplit(".", 1)[0]

_EXC_FORMATTER = logging.Formatter()


def to_log_level(levelno: int) -> LogLevel:
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARN
    if levelno >= logging.INFO:
        return LogLevel.INFO
    if levelno >= logging.DEBUG:
        return LogLevel.DEBUG
    return LogLevel.VERBOSE


class LogStoreHandler(logging.Handler):
    """Writes each record as ``AutoGLM/<logger name>`` into a LogStore."""

    def __init__(self, store: LogStore, app_tag: str = APP_TAG, level: int = logging.NOTSET):
        super().__init__(level)
        self.store = store
        self.app_tag = app_tag
        self.addFilter(lambda record: not record.name.startswith(_STORE_LOGGER_PREFIX))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            error = None
            if record.exc_info and record.exc_info[0] is not None:
                error = _EXC_FORMATTER.formatException(record.exc_info)
            self.store.write(
                to_log_level(record.levelno),
                f"{self.app_tag}/{record.name}",
                record.getMessage(),
                error,
            )
        except Exception:
            self.handleError(record)
