"""Secret key-value storage with encrypted and plaintext implementations.

``open_secret_store`` picks the implementation once at startup. If the
OS keystore or the cipher cannot be set up it logs a warning and hands
back the plaintext store, so callers never see a failure.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..enums import SecretBackend
from ..errors import SecretDecryptionError, SecretStoreUnavailableError
from .crypto import KeyringMasterKeyProvider, MasterKeyProvider, SecretCipher, is_encrypted
from .plain_store import PlainStore

logger = logging.getLogger(__name__)


class SecretStore(ABC):
    """One sensitive string per logical key."""

    #: True when values are encrypted at rest
    encrypted: bool = False

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored secret, or None if absent or unreadable."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class PlainSecretStore(SecretStore):
    """Unencrypted fallback sharing the same file and key namespace."""

    encrypted = False

    def __init__(self, path: Path):
        self._store = PlainStore(path)

    def get(self, key: str) -> Optional[str]:
        value = self._store.get_string(key)
        if value is not None and is_encrypted(value):
            # Sealed by an earlier encrypted session; no key to open it here
            logger.warning(f"Discarding unreadable secret '{key}': encrypted value without a master key")
            return None
        return value

    def set(self, key: str, value: str) -> None:
        self._store.set(key, value)

    def remove(self, key: str) -> None:
        self._store.remove(key)

    def clear(self) -> None:
        self._store.clear()


class EncryptedSecretStore(SecretStore):
    """AES-256-GCM sealed values in a JSON file, master key from the keystore."""

    encrypted = True

    def __init__(self, path: Path, key_provider: MasterKeyProvider):
        # Fails fast so open_secret_store can fall back
        self._cipher = SecretCipher(key_provider.get_master_key())
        self._store = PlainStore(path)

    def get(self, key: str) -> Optional[str]:
        token = self._store.get_string(key)
        if token is None:
            return None
        try:
            return self._cipher.decrypt(token, key)
        except SecretDecryptionError as e:
            logger.warning(f"Discarding unreadable secret: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        self._store.set(key, self._cipher.encrypt(value, key))

    def remove(self, key: str) -> None:
        self._store.remove(key)

    def clear(self) -> None:
        self._store.clear()


def open_secret_store(
    path: Path,
    key_provider: Optional[MasterKeyProvider] = None,
    backend: str = SecretBackend.KEYRING,
) -> SecretStore:
    """Open the secret store, degrading to plaintext when encryption is unavailable.

    Args:
        path: JSON file holding the secret namespace
        key_provider: Source of the master key. Defaults to the OS keystore.
        backend: "keyring" for encrypted storage, "plain" to skip encryption

    Returns:
        An ``EncryptedSecretStore`` or, on any setup failure, a ``PlainSecretStore``
    """
    if backend == SecretBackend.PLAIN:
        logger.info("Secret backend set to plain, secrets will not be encrypted")
        return PlainSecretStore(path)

    provider = key_provider or KeyringMasterKeyProvider()
    try:
        return EncryptedSecretStore(path, provider)
    except SecretStoreUnavailableError as e:
        logger.warning(f"Encrypted secret storage unavailable, using plain storage: {e}")
    except Exception as e:
        logger.warning(f"Failed to set up encrypted secret storage, using plain storage: {e}", exc_info=True)
    return PlainSecretStore(path)
