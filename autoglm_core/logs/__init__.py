"""Log file storage for autoglm-core."""

from .store import LogStore, format_size, DEFAULT_KEEP_DAYS, MAX_FILE_SIZE_BYTES
from .handler import LogStoreHandler, VERBOSE

__all__ = [
    "LogStore",
    "LogStoreHandler",
    "format_size",
    "DEFAULT_KEEP_DAYS",
    "MAX_FILE_SIZE_BYTES",
    "VERBOSE",
]
