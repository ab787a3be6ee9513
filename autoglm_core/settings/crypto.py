"""Cryptography utilities for secure API key storage.

Secrets are sealed with AES-256-GCM. The 256-bit master key is held
in the OS keystore through ``keyring`` and never written to disk by
this package.
"""

import base64
import logging
import os
from typing import Protocol

import keyring
from keyring.errors import KeyringError
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import SecretDecryptionError, SecretStoreUnavailableError

logger = logging.getLogger(__name__)

CIPHER_PREFIX = "AESGCM:"
NONCE_SIZE = 12
KEY_SIZE_BITS = 256

KEYRING_SERVICE = "autoglm"
KEYRING_MASTER_KEY_USERNAME = "secure_settings_master_key"

# Canonical "no secret configured" value
EMPTY_API_KEY = "EMPTY"


class MasterKeyProvider(Protocol):
    """Supplies the 32-byte master key used by ``SecretCipher``."""

    def get_master_key(self) -> bytes: ...


class KeyringMasterKeyProvider:
    """Master key stored base64-encoded in the OS keystore.

    The key is generated on first use. Any keystore failure (no backend,
    locked keychain, a backend that silently drops writes) is reported
    as ``SecretStoreUnavailableError``.
    """

    def __init__(
        self,
        service: str = KEYRING_SERVICE,
        username: str = KEYRING_MASTER_KEY_USERNAME,
    ):
        self.service = service
        self.username = username

    def get_master_key(self) -> bytes:
        try:
            stored = keyring.get_password(self.service, self.username)
            if stored:
                return _decode_master_key(stored)

            encoded = base64.b64encode(AESGCM.generate_key(bit_length=KEY_SIZE_BITS)).decode("ascii")
            keyring.set_password(self.service, self.username, encoded)

            # Null/fail-open backends accept writes without storing them
            if keyring.get_password(self.service, self.username) != encoded:
                raise SecretStoreUnavailableError(
                    f"Keystore backend {type(keyring.get_keyring()).__name__} did not persist the master key"
                )
            logger.info("Generated new master key in OS keystore")
            return base64.b64decode(encoded)
        except KeyringError as e:
            raise SecretStoreUnavailableError(f"OS keystore unavailable: {e}") from e


class StaticMasterKeyProvider:
    """Master key supplied directly by the caller."""

    def __init__(self, key: bytes):
        if len(key) * 8 != KEY_SIZE_BITS:
            raise SecretStoreUnavailableError(f"Master key must be {KEY_SIZE_BITS // 8} bytes")
        self._key = key

    def get_master_key(self) -> bytes:
        return self._key


def _decode_master_key(encoded: str) -> bytes:
    try:
        key = base64.b64decode(encoded, validate=True)
    except ValueError as e:
        raise SecretStoreUnavailableError(f"Master key in keystore is not valid base64: {e}") from e
    if len(key) * 8 != KEY_SIZE_BITS:
        raise SecretStoreUnavailableError("Master key in keystore has the wrong length")
    return key


class SecretCipher:
    """AES-256-GCM sealing bound to the logical key name.

    The storage key is passed as associated data, so a ciphertext
    copied under another key fails authentication.
    """

    def __init__(self, master_key: bytes):
        try:
            self._aead = AESGCM(master_key)
        except ValueError as e:
            raise SecretStoreUnavailableError(f"Invalid master key: {e}") from e

    def encrypt(self, plaintext: str, key_name: str) -> str:
        """Encrypt a secret for storage.

        Args:
            plaintext: The plain secret
            key_name: Logical storage key, bound as associated data

        Returns:
            ``AESGCM:<base64(nonce || ciphertext)>``
        """
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), key_name.encode("utf-8"))
        return CIPHER_PREFIX + base64.b64encode(nonce + sealed).decode("ascii")

    def decrypt(self, token: str, key_name: str) -> str:
        """Decrypt a stored secret.

        Values without the cipher prefix are legacy plaintext and are
        returned unchanged.

        Raises:
            SecretDecryptionError: if the value is corrupt or was sealed
                with another master key or under another key name.
        """
        if not is_encrypted(token):
            return token

        try:
            raw = base64.b64decode(token[len(CIPHER_PREFIX):], validate=True)
        except ValueError as e:
            raise SecretDecryptionError(f"Malformed ciphertext for '{key_name}': {e}") from e
        if len(raw) <= NONCE_SIZE:
            raise SecretDecryptionError(f"Truncated ciphertext for '{key_name}'")

        nonce, sealed = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
        try:
            plain = self._aead.decrypt(nonce, sealed, key_name.encode("utf-8"))
        except InvalidTag as e:
            raise SecretDecryptionError(f"Authentication failed for '{key_name}'") from e
        return plain.decode("utf-8")


def is_encrypted(value: str) -> bool:
    return value.startswith(CIPHER_PREFIX)


def mask_api_key(key: str) -> str:
    """Create a masked version of an API key for display and logging.

    Args:
        key: The plain API key

    Returns:
        Masked version like "sk-1...cdef", "****" for short keys,
        or "" when no key is configured
    """
    if not key or key == EMPTY_API_KEY:
        return ""

    if len(key) <= 8:
        return "****"

    return f"{key[:4]}...{key[-4:]}"


def is_key_configured(key: str | None) -> bool:
    """Check if an API key holds a real value (not empty, not the sentinel)."""
    return bool(key) and key != EMPTY_API_KEY
