"""Tests for the logging -> LogStore bridge and setup_logging."""

import logging

import pytest

from autoglm_core.enums import LogLevel
from autoglm_core.logging_config import setup_logging
from autoglm_core.logs.handler import VERBOSE, LogStoreHandler, to_log_level


@pytest.fixture
def bridged_logger(log_store):
    """A private logger wired only to a LogStoreHandler."""
    log = logging.getLogger("autoglm_test.bridge")
    log.setLevel(VERBOSE)
    log.propagate = False
    handler = LogStoreHandler(log_store)
    log.addHandler(handler)
    yield log
    log.removeHandler(handler)
    log.propagate = True


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLevelMapping:
    @pytest.mark.parametrize("levelno,expected", [
        (VERBOSE, LogLevel.VERBOSE),
        (logging.DEBUG, LogLevel.DEBUG),
        (logging.INFO, LogLevel.INFO),
        (logging.WARNING, LogLevel.WARN),
        (logging.ERROR, LogLevel.ERROR),
        (logging.CRITICAL, LogLevel.ERROR),
    ])
    def test_to_log_level(self, levelno, expected):
        assert to_log_level(levelno) is expected


class TestLogStoreHandler:
    def test_writes_tagged_entry(self, bridged_logger, log_store):
        bridged_logger.warning("careful with %s", "that")

        text = log_store.current_log_file().read_text(encoding="utf-8")
        assert text.endswith("[WARN] AutoGLM/autoglm_test.bridge: careful with that\n")

    def test_verbose_level(self, bridged_logger, log_store):
        bridged_logger.log(VERBOSE, "step trace")
        assert "[VERBOSE] AutoGLM/autoglm_test.bridge: step trace" in (
            log_store.current_log_file().read_text(encoding="utf-8")
        )

    def test_exception_traceback_written(self, bridged_logger, log_store):
        try:
            raise RuntimeError("kaput")
        except RuntimeError:
            bridged_logger.exception("operation failed")

        text = log_store.current_log_file().read_text(encoding="utf-8")
        assert "[ERROR] AutoGLM/autoglm_test.bridge: operation failed" in text
        assert "RuntimeError: kaput" in text

    def test_store_own_records_not_forwarded(self, log_store):
        handler = LogStoreHandler(log_store)
        record = logging.LogRecord(
            "autoglm_core.logs.store", logging.WARNING, __file__, 1, "internal", None, None
        )
        handler.handle(record)
        assert log_store.log_files() == []


class TestSetupLogging:
    def test_attaches_store_handler(self, restore_root_logging, log_store):
        setup_logging("DEBUG", log_store)

        root = restore_root_logging
        assert root.level == logging.DEBUG
        assert any(isinstance(h, LogStoreHandler) for h in root.handlers)

        logging.getLogger("autoglm_test.setup").info("through root")
        assert "[INFO] AutoGLM/autoglm_test.setup: through root" in (
            log_store.current_log_file().read_text(encoding="utf-8")
        )

    def test_without_store(self, restore_root_logging):
        setup_logging("warning")
        root = restore_root_logging
        assert root.level == logging.WARNING
        assert not any(isinstance(h, LogStoreHandler) for h in root.handlers)
        assert logging.getLogger("keyring").level == logging.WARNING
