"""Configuration management for autoglm-core."""

import os
from pathlib import Path

from dotenv import load_dotenv

from .enums import SecretBackend


# Load environment variables from .env file
def _find_env_file() -> Path | None:
    """Find the .env file, searching up the directory tree."""
    current = Path(__file__).parent
    for _ in range(5):  # Search up to 5 levels
        env_path = current / ".env"
        if env_path.exists():
            return env_path
        current = current.parent
    return None


_env_file = _find_env_file()
if _env_file:
    load_dotenv(_env_file)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class Config:
    """Application configuration from environment variables."""

    # Storage root (settings.json, secure_settings.json, logs/, export/)
    DATA_DIR: Path = Path(os.getenv("AUTOGLM_DATA_DIR", "~/.autoglm")).expanduser()

    # Logging
    LOG_LEVEL: str = os.getenv("AUTOGLM_LOG_LEVEL", "INFO")
    LOG_MAX_BYTES: int = _env_int("AUTOGLM_LOG_MAX_BYTES", 5 * 1024 * 1024)
    LOG_KEEP_DAYS: int = _env_int("AUTOGLM_LOG_KEEP_DAYS", 7)
    FILE_LOGGING: bool = os.getenv("AUTOGLM_FILE_LOGGING", "true").lower() == "true"

    # Secrets
    SECRET_BACKEND: str = os.getenv("AUTOGLM_SECRET_BACKEND", SecretBackend.KEYRING)

    # Build info (written into exported device_info.txt)
    BUILD_TYPE: str = os.getenv("AUTOGLM_BUILD_TYPE", "release")

    # Optional dev profile document imported once at startup
    DEV_PROFILES_PATH: str = os.getenv("AUTOGLM_DEV_PROFILES", "")

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration, return list of issues."""
        issues = []

        if cls.SECRET_BACKEND not in {b.value for b in SecretBackend}:
            issues.append(
                f"Unknown AUTOGLM_SECRET_BACKEND '{cls.SECRET_BACKEND}'. "
                "Use 'keyring' or 'plain'."
            )
        if cls.LOG_MAX_BYTES <= 0:
            issues.append("AUTOGLM_LOG_MAX_BYTES must be positive")
        if cls.LOG_KEEP_DAYS < 0:
            issues.append("AUTOGLM_LOG_KEEP_DAYS must not be negative")
        if cls.DEV_PROFILES_PATH and not Path(cls.DEV_PROFILES_PATH).exists():
            issues.append(f"Dev profiles file not found: {cls.DEV_PROFILES_PATH}")

        return issues

    @classmethod
    def is_debug_build(cls) -> bool:
        """Check if this is a debug build."""
        return cls.BUILD_TYPE.lower() == "debug"
