"""
Shared test fixtures for the autoglm-core test suite.

Provides:
- A fixed 256-bit master key (no OS keystore needed)
- SettingsStores rooted in pytest's tmp_path
- Repositories wired to those stores
- FakeClock and a LogStore driven by it
"""

import os
from datetime import datetime, timedelta

import pytest

# Set test environment BEFORE any autoglm_core imports
os.environ.setdefault("AUTOGLM_SECRET_BACKEND", "plain")
os.environ.setdefault("AUTOGLM_LOG_LEVEL", "DEBUG")

from autoglm_core.logs.store import LogStore
from autoglm_core.settings.crypto import StaticMasterKeyProvider
from autoglm_core.settings.dev_import import DevProfileImporter
from autoglm_core.settings.profiles import ProfileRegistry
from autoglm_core.settings.repository import ConfigRepository
from autoglm_core.settings.store import SettingsStores
from autoglm_core.settings.templates import TemplateRegistry

TEST_MASTER_KEY = bytes(range(32))


# ---------------------------------------------------------------------------
# FakeClock: deterministic time source for LogStore
# ---------------------------------------------------------------------------

class FakeClock:
    """Callable returning a settable ``datetime``.

    Usage:
        clock = FakeClock(datetime(2024, 3, 15, 12, 0, 0))
        store = LogStore(log_dir, clock=clock)
        clock.advance(days=1)
    """

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# ---------------------------------------------------------------------------
# Settings fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def key_provider():
    return StaticMasterKeyProvider(TEST_MASTER_KEY)


@pytest.fixture
def stores(tmp_path, key_provider):
    """Encrypted settings stores in a fresh temp directory."""
    return SettingsStores.in_directory(tmp_path, key_provider=key_provider)


@pytest.fixture
def reopen(tmp_path, key_provider):
    """Factory for a second SettingsStores on the same files (simulated restart)."""
    def _reopen():
        return SettingsStores.in_directory(tmp_path, key_provider=key_provider)
    return _reopen


@pytest.fixture
def config_repo(stores):
    return ConfigRepository(stores)


@pytest.fixture
def profiles(stores):
    return ProfileRegistry(stores)


@pytest.fixture
def templates(stores):
    return TemplateRegistry(stores)


@pytest.fixture
def importer(stores, profiles, config_repo):
    return DevProfileImporter(stores, profiles, config_repo)


# ---------------------------------------------------------------------------
# Log fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 12, 0, 0))


@pytest.fixture
def log_store(tmp_path, clock):
    """Open LogStore with a small cap so rotation is cheap to trigger."""
    store = LogStore(
        tmp_path / "logs",
        max_file_bytes=512,
        keep_days=7,
        export_dir=tmp_path / "export",
        app_version="0.1.0-test",
        build_type="debug",
        clock=clock,
    ).open()
    yield store
    store.close()
