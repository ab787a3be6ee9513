"""
Rotating daily log files for diagnostics.

Logs live in one directory, one file per calendar day named
``autoglm_YYYY-MM-DD.log``. When the active file grows past the size
cap it is renamed to ``autoglm_YYYY-MM-DD_<epochMillis>.log`` and a
fresh file is started under the daily name. Files older than the
retention window are deleted when the store is opened.

Writing is best-effort: an I/O failure is dropped at the write site and
never reaches the caller.

Usage:
    store = LogStore(Config.DATA_DIR / "logs")
    store.open()
    store.write(LogLevel.INFO, "AutoGLM/Agent", "Task started")
    archive = store.export()
    store.close()
"""

import logging
import os
import platform
import threading
import traceback
import zipfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..enums import LogLevel

# Records from this logger are never forwarded back into the store
logger = logging.getLogger(__name__)

LOG_FILE_PREFIX = "autoglm_"
LOG_FILE_EXTENSION = ".log"
MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024  # 5 MB
DEFAULT_KEEP_DAYS = 7

DATE_FORMAT = "%Y-%m-%d"
EXPORT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEVICE_INFO_NAME = "device_info.txt"


def format_size(size_bytes: int) -> str:
    """Format a byte count as "512 B", "1.5 KB" or "5.0 MB"."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def format_timestamp(moment: datetime) -> str:
    """``YYYY-MM-DD HH:MM:SS.mmm``"""
    return f"{moment:%Y-%m-%d %H:%M:%S}.{moment.microsecond // 1000:03d}"


class LogStore:
    """Handle over the log directory.

    Construct once at process start, ``open()`` it, and pass it to
    whatever needs to log or export. All writes, rotations, cleanups
    and clears go through one lock.
    """

    def __init__(
        self,
        log_dir: Path,
        max_file_bytes: int = MAX_FILE_SIZE_BYTES,
        keep_days: int = DEFAULT_KEEP_DAYS,
        export_dir: Optional[Path] = None,
        app_version: str = "",
        build_type: str = "release",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.log_dir = Path(log_dir)
        self.export_dir = Path(export_dir) if export_dir else self.log_dir.parent / "export"
        self.max_file_bytes = max_file_bytes
        self.keep_days = keep_days
        self.app_version = app_version
        self.build_type = build_type
        self._clock = clock

        self._lock = threading.RLock()
        self._opened = False
        self._enabled = True

    # Lifecycle

    def open(self) -> "LogStore":
        """Create the log directory and drop expired files. Safe to call again.

        If the directory cannot be created the store stays closed and
        every write is a no-op.
        """
        with self._lock:
            try:
                self.log_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning(f"File logging disabled, cannot create {self.log_dir}: {e}")
                return self
            first_open = not self._opened
            self._opened = True
        if first_open:
            self.cleanup()
        return self

    def close(self) -> None:
        with self._lock:
            self._opened = False

    @property
    def is_open(self) -> bool:
        return self._opened

    def __enter__(self) -> "LogStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def set_enabled(self, enabled: bool) -> None:
        """Turn file logging on or off without closing the store."""
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    # Writing

    def write(
        self,
        level: Union[LogLevel, str],
        tag: str,
        message: str,
        error: Union[BaseException, str, None] = None,
    ) -> None:
        """Append one entry to today's log file.

        The entry is ``<timestamp> [<LEVEL>] <tag>: <message>`` followed
        by the stack trace when ``error`` is given. Never raises.
        """
        if not self._enabled or not self._opened:
            return

        with self._lock:
            try:
                # Recreated if something removed it while open
                self.log_dir.mkdir(parents=True, exist_ok=True)
                log_file = self.current_log_file()
                if log_file.exists() and log_file.stat().st_size > self.max_file_bytes:
                    self._rotate(log_file)

                entry = f"{format_timestamp(self._clock())} [{level}] {tag}: {message}\n"
                if error is not None:
                    entry += _stack_trace(error).rstrip("\n") + "\n"

                with open(log_file, "a", encoding="utf-8") as f:
                    f.write(entry)
            except Exception:
                # Logging must never break the caller
                logger.debug("Failed to write log entry", exc_info=True)

    def current_log_file(self) -> Path:
        today = self._clock().strftime(DATE_FORMAT)
        return self.log_dir / f"{LOG_FILE_PREFIX}{today}{LOG_FILE_EXTENSION}"

    def _rotate(self, log_file: Path) -> Path:
        """Rename the active file with an epoch-millis suffix."""
        millis = int(self._clock().timestamp() * 1000)
        while True:
            rotated = log_file.with_name(f"{log_file.stem}_{millis}{LOG_FILE_EXTENSION}")
            if not rotated.exists():
                break
            millis += 1
        log_file.rename(rotated)
        return rotated

    # Queries

    def log_files(self) -> List[Path]:
        """All log files, newest first."""
        if not self.log_dir.is_dir():
            return []
        files = [
            f for f in self.log_dir.iterdir()
            if f.is_file()
            and f.name.startswith(LOG_FILE_PREFIX)
            and f.name.endswith(LOG_FILE_EXTENSION)
        ]
        return sorted(files, key=lambda f: f.name, reverse=True)

    def total_size(self) -> int:
        """Total size of all log files in bytes."""
        total = 0
        for f in self.log_files():
            try:
                total += f.stat().st_size
            except OSError:
                # Removed between listing and stat
                continue
        return total

    format_size = staticmethod(format_size)

    # Maintenance

    def cleanup(self, keep_days: Optional[int] = None) -> int:
        """Delete log files last modified before ``now - keep_days``.

        A file modified exactly at the cutoff is kept.

        Returns:
            Number of files deleted
        """
        keep_days = self.keep_days if keep_days is None else keep_days
        cutoff = (self._clock() - timedelta(days=keep_days)).timestamp()
        deleted = 0

        with self._lock:
            for f in self._entries():
                if not (f.is_file() and f.name.startswith(LOG_FILE_PREFIX)):
                    continue
                try:
                    if f.stat().st_mtime < cutoff:
                        f.unlink()
                        deleted += 1
                except OSError as e:
                    logger.warning(f"Could not delete expired log {f.name}: {e}")

        if deleted:
            logger.info(f"Deleted {deleted} log files older than {keep_days} days")
        return deleted

    def clear_all(self) -> int:
        """Delete every file in the log directory."""
        deleted = 0
        with self._lock:
            for f in self._entries():
                if not f.is_file():
                    continue
                try:
                    f.unlink()
                    deleted += 1
                except OSError as e:
                    logger.warning(f"Could not delete log {f.name}: {e}")
        return deleted

    def _entries(self) -> List[Path]:
        """Snapshot of the log directory, empty if it is missing or unreadable."""
        try:
            if not self.log_dir.is_dir():
                return []
            return list(self.log_dir.iterdir())
        except OSError as e:
            logger.warning(f"Cannot list {self.log_dir}: {e}")
            return []

    # Export

    def device_info(self) -> str:
        """App, OS and runtime details for the exported bundle."""
        uname = platform.uname()
        lines = [
            "=== AutoGLM Debug Info ===",
            "",
            f"App Version: {self.app_version or 'unknown'}",
            "Package: autoglm-core",
            f"Build Type: {self.build_type}",
            "",
            "=== Device Info ===",
            "",
            f"Host: {uname.node}",
            f"Machine: {uname.machine}",
            f"Processor: {uname.processor or 'unknown'}",
            "",
            f"OS: {uname.system} {uname.release}",
            f"OS Build: {uname.version}",
            f"Platform: {platform.platform()}",
            "",
            "=== Runtime Info ===",
            "",
            f"Python: {platform.python_implementation()} {platform.python_version()}",
            f"Log Directory: {self.log_dir}",
            f"Log Size: {format_size(self.total_size())}",
            "",
            f"Generated: {format_timestamp(self._clock())}",
        ]
        return "\n".join(lines) + "\n"

    def export(self, dest_dir: Optional[Path] = None) -> Optional[Path]:
        """Bundle ``device_info.txt`` and every log file into a zip.

        Source files are left in place.

        Args:
            dest_dir: Where to write the archive. Defaults to ``export_dir``.

        Returns:
            Path of ``autoglm_logs_<YYYYMMDD_HHMMSS>.zip``, or None if
            there are no logs or the archive could not be written
        """
        target_dir = Path(dest_dir) if dest_dir else self.export_dir
        zip_path = target_dir / f"autoglm_logs_{self._clock().strftime(EXPORT_TIMESTAMP_FORMAT)}.zip"

        with self._lock:
            files = self.log_files()
            if not files:
                logger.warning("No log files to export")
                return None

            try:
                target_dir.mkdir(parents=True, exist_ok=True)
                with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                    zf.writestr(DEVICE_INFO_NAME, self.device_info())
                    for log_file in files:
                        zf.write(log_file, arcname=log_file.name)
            except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
                logger.error(f"Failed to export logs: {e}", exc_info=True)
                try:
                    zip_path.unlink(missing_ok=True)
                except OSError as cleanup_error:
                    logger.warning(f"Could not remove partial archive {zip_path}: {cleanup_error}")
                return None

        logger.info(f"Exported {len(files)} log files to {zip_path}")
        return zip_path


def _stack_trace(error: Union[BaseException, str]) -> str:
    if isinstance(error, BaseException):
        return "".join(traceback.format_exception(error))
    return str(error)
