"""
Centralized logging configuration for autoglm-core.

Call setup_logging() once at process start (AppContext.create does
this). Every source module then gets its own logger via:

    import logging
    logger = logging.getLogger(__name__)

Passing a LogStore also mirrors every record into the daily log
files, tagged ``AutoGLM/<logger name>``.

Level mapping (file level in brackets):
  VERBOSE (5) – [VERBOSE] per-step traces
  DEBUG       – [DEBUG] config loads/saves, profile CRUD
  INFO        – [INFO] imports, migrations, exports
  WARNING     – [WARN] fallbacks (plain secret storage, bad stored values)
  ERROR       – [ERROR] unparseable stored JSON, failed exports
"""

import logging
import sys
from typing import Optional

from .logs.handler import LogStoreHandler
from .logs.store import LogStore


def setup_logging(level: str = "INFO", log_store: Optional[LogStore] = None) -> None:
    """Configure root logger and quiet noisy third-party loggers."""
    fmt = "[%(name)s] %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        stream=sys.stdout,
        force=True,
    )

    if log_store is not None:
        logging.getLogger().addHandler(LogStoreHandler(log_store))

    # Quiet noisy third-party loggers
    for name in (
        "keyring",
        "urllib3",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)
