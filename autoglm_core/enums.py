"""
Canonical string enumerations for autoglm-core.

StrEnum values serialize as plain strings, so they can be written
to the settings file and compared against raw stored values directly.
"""

from enum import StrEnum


# ── Agent ──────────────────────────────────────────────────────────────

class Language(StrEnum):
    """Prompt language used by the agent."""
    CN = "cn"
    EN = "en"

    @classmethod
    def from_code(cls, code: str | None) -> "Language":
        """Map a loose language code to a member.

        "en" and "english" (any case) map to EN, everything else to CN.
        """
        if code and code.strip().lower() in ("en", "english"):
            return cls.EN
        return cls.CN


# ── Logging ────────────────────────────────────────────────────────────

class LogLevel(StrEnum):
    """Severity written into each log line (uppercase, as on disk)."""
    VERBOSE = "VERBOSE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


# ── Dev import ─────────────────────────────────────────────────────────

class ImportStatus(StrEnum):
    """Outcome of a dev profile import."""
    IMPORTED = "imported"
    SKIPPED = "skipped"
    FAILED = "failed"


# ── Secret storage ─────────────────────────────────────────────────────

class SecretBackend(StrEnum):
    """Which SecretStore implementation to open at startup."""
    KEYRING = "keyring"
    PLAIN = "plain"
