"""Lazily opened settings stores shared by the repositories."""

import logging
from functools import cached_property
from pathlib import Path
from typing import Optional

from ..enums import SecretBackend
from .crypto import MasterKeyProvider
from .plain_store import PlainStore
from .secret_store import SecretStore, open_secret_store

logger = logging.getLogger(__name__)


class SettingsStores:
    """Owns the plain and secret stores for one settings namespace.

    Neither store is created until first accessed; after that the same
    instance is reused for the lifetime of this object. Pass ``plain``
    or ``secret`` to inject ready-made stores.
    """

    def __init__(
        self,
        settings_path: Path,
        secure_settings_path: Path,
        key_provider: Optional[MasterKeyProvider] = None,
        secret_backend: str = SecretBackend.KEYRING,
        plain: Optional[PlainStore] = None,
        secret: Optional[SecretStore] = None,
    ):
        self.settings_path = Path(settings_path)
        self.secure_settings_path = Path(secure_settings_path)
        self._key_provider = key_provider
        self._secret_backend = secret_backend
        if plain is not None:
            self.__dict__["plain"] = plain
        if secret is not None:
            self.__dict__["secret"] = secret

    @classmethod
    def in_directory(cls, data_dir: Path, **kwargs) -> "SettingsStores":
        data_dir = Path(data_dir)
        return cls(data_dir / "settings.json", data_dir / "secure_settings.json", **kwargs)

    @cached_property
    def plain(self) -> PlainStore:
        return PlainStore(self.settings_path)

    @cached_property
    def secret(self) -> SecretStore:
        store = open_secret_store(
            self.secure_settings_path,
            key_provider=self._key_provider,
            backend=self._secret_backend,
        )
        logger.debug(f"Opened {type(store).__name__} at {self.secure_settings_path}")
        return store
