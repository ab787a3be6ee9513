"""
Tests for secret storage.

Covers:
- AES-GCM sealing, key-name binding, legacy plaintext passthrough
- EncryptedSecretStore persistence and unreadable values
- open_secret_store fallback when the keystore is unavailable
- KeyringMasterKeyProvider against an in-memory keyring
- mask_api_key / is_key_configured
"""

import json
from unittest.mock import patch

import pytest
from keyring.errors import KeyringError

from autoglm_core.errors import SecretDecryptionError, SecretStoreUnavailableError
from autoglm_core.settings.crypto import (
    CIPHER_PREFIX,
    KeyringMasterKeyProvider,
    SecretCipher,
    StaticMasterKeyProvider,
    is_key_configured,
    mask_api_key,
)
from autoglm_core.settings.plain_store import PlainStore
from autoglm_core.settings.secret_store import (
    EncryptedSecretStore,
    PlainSecretStore,
    open_secret_store,
)

TEST_MASTER_KEY = bytes(range(32))


class FakeKeyring:
    """Dict-backed stand-in for the ``keyring`` module."""

    def __init__(self, persist: bool = True):
        self.passwords = {}
        self.persist = persist

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        if self.persist:
            self.passwords[(service, username)] = password

    def get_keyring(self):
        return self


class BrokenKeyring(FakeKeyring):
    def get_password(self, service, username):
        raise KeyringError("no recommended backend")


# ---------------------------------------------------------------------------
# SecretCipher
# ---------------------------------------------------------------------------

class TestSecretCipher:
    @pytest.fixture
    def cipher(self):
        return SecretCipher(TEST_MASTER_KEY)

    def test_round_trip(self, cipher):
        token = cipher.encrypt("sk-secret-value", "model_api_key")
        assert token.startswith(CIPHER_PREFIX)
        assert "sk-secret-value" not in token
        assert cipher.decrypt(token, "model_api_key") == "sk-secret-value"

    def test_nonce_is_fresh_per_encryption(self, cipher):
        assert cipher.encrypt("same", "k") != cipher.encrypt("same", "k")

    def test_bound_to_key_name(self, cipher):
        token = cipher.encrypt("sk-secret-value", "profile_apikey_a")
        with pytest.raises(SecretDecryptionError):
            cipher.decrypt(token, "profile_apikey_b")

    def test_wrong_master_key_fails(self, cipher):
        token = cipher.encrypt("sk-secret-value", "k")
        other = SecretCipher(b"\x07" * 32)
        with pytest.raises(SecretDecryptionError):
            other.decrypt(token, "k")

    def test_legacy_plaintext_passes_through(self, cipher):
        assert cipher.decrypt("sk-plain-legacy", "k") == "sk-plain-legacy"

    def test_malformed_and_truncated(self, cipher):
        with pytest.raises(SecretDecryptionError):
            cipher.decrypt(CIPHER_PREFIX + "!!not-base64!!", "k")
        with pytest.raises(SecretDecryptionError):
            cipher.decrypt(CIPHER_PREFIX + "AAAA", "k")

    def test_static_provider_rejects_short_key(self):
        with pytest.raises(SecretStoreUnavailableError):
            StaticMasterKeyProvider(b"too short")


# ---------------------------------------------------------------------------
# EncryptedSecretStore
# ---------------------------------------------------------------------------

class TestEncryptedSecretStore:
    @pytest.fixture
    def path(self, tmp_path):
        return tmp_path / "secure_settings.json"

    def test_value_not_on_disk_in_plaintext(self, path, key_provider):
        store = EncryptedSecretStore(path, key_provider)
        store.set("model_api_key", "sk-abcdef123456")

        raw = path.read_text(encoding="utf-8")
        assert "sk-abcdef123456" not in raw
        assert json.loads(raw)["model_api_key"].startswith(CIPHER_PREFIX)

    def test_persists_across_instances(self, path, key_provider):
        EncryptedSecretStore(path, key_provider).set("k", "v")
        assert EncryptedSecretStore(path, key_provider).get("k") == "v"

    def test_remove_and_clear(self, path, key_provider):
        store = EncryptedSecretStore(path, key_provider)
        store.set("a", "1")
        store.set("b", "2")

        store.remove("a")
        assert store.get("a") is None
        assert store.contains("b")

        store.clear()
        assert store.get("b") is None

    def test_value_copied_to_other_key_is_unreadable(self, path, key_provider):
        EncryptedSecretStore(path, key_provider).set("profile_apikey_a", "sk-aaaa")

        raw = PlainStore(path)
        raw.set("profile_apikey_b", raw.get("profile_apikey_a"))

        store = EncryptedSecretStore(path, key_provider)
        assert store.get("profile_apikey_a") == "sk-aaaa"
        assert store.get("profile_apikey_b") is None

    def test_other_master_key_reads_none(self, path, key_provider):
        EncryptedSecretStore(path, key_provider).set("k", "v")
        other = EncryptedSecretStore(path, StaticMasterKeyProvider(b"\x02" * 32))
        assert other.get("k") is None

    def test_legacy_plaintext_value_readable(self, path, key_provider):
        PlainStore(path).set("model_api_key", "sk-old-plain")
        assert EncryptedSecretStore(path, key_provider).get("model_api_key") == "sk-old-plain"


# ---------------------------------------------------------------------------
# open_secret_store
# ---------------------------------------------------------------------------

class TestOpenSecretStore:
    def test_encrypted_when_key_available(self, tmp_path, key_provider):
        store = open_secret_store(tmp_path / "s.json", key_provider=key_provider)
        assert isinstance(store, EncryptedSecretStore)
        assert store.encrypted

    def test_plain_backend(self, tmp_path, key_provider):
        store = open_secret_store(tmp_path / "s.json", key_provider=key_provider, backend="plain")
        assert isinstance(store, PlainSecretStore)
        assert not store.encrypted

    def test_falls_back_when_provider_raises(self, tmp_path, caplog):
        class Unavailable:
            def get_master_key(self):
                raise SecretStoreUnavailableError("keychain locked")

        store = open_secret_store(tmp_path / "s.json", key_provider=Unavailable())

        assert isinstance(store, PlainSecretStore)
        assert "keychain locked" in caplog.text

        store.set("k", "v")
        assert store.get("k") == "v"

    def test_falls_back_on_unexpected_error(self, tmp_path):
        class Exploding:
            def get_master_key(self):
                raise RuntimeError("boom")

        store = open_secret_store(tmp_path / "s.json", key_provider=Exploding())
        assert isinstance(store, PlainSecretStore)

    def test_falls_back_when_keyring_broken(self, tmp_path):
        with patch("autoglm_core.settings.crypto.keyring", BrokenKeyring()):
            store = open_secret_store(tmp_path / "s.json")
        assert isinstance(store, PlainSecretStore)


# ---------------------------------------------------------------------------
# KeyringMasterKeyProvider
# ---------------------------------------------------------------------------

class TestKeyringMasterKeyProvider:
    def test_generates_once_then_reuses(self):
        fake = FakeKeyring()
        with patch("autoglm_core.settings.crypto.keyring", fake):
            first = KeyringMasterKeyProvider().get_master_key()
            second = KeyringMasterKeyProvider().get_master_key()

        assert len(first) == 32
        assert first == second
        assert len(fake.passwords) == 1

    def test_backend_that_drops_writes_is_unavailable(self):
        with patch("autoglm_core.settings.crypto.keyring", FakeKeyring(persist=False)):
            with pytest.raises(SecretStoreUnavailableError):
                KeyringMasterKeyProvider().get_master_key()

    def test_keyring_error_is_wrapped(self):
        with patch("autoglm_core.settings.crypto.keyring", BrokenKeyring()):
            with pytest.raises(SecretStoreUnavailableError):
                KeyringMasterKeyProvider().get_master_key()

    def test_corrupt_stored_key(self):
        fake = FakeKeyring()
        fake.passwords[("autoglm", "secure_settings_master_key")] = "c2hvcnQ="
        with patch("autoglm_core.settings.crypto.keyring", fake):
            with pytest.raises(SecretStoreUnavailableError):
                KeyringMasterKeyProvider().get_master_key()


# ---------------------------------------------------------------------------
# Masking helpers
# ---------------------------------------------------------------------------

class TestMasking:
    def test_mask_api_key(self):
        assert mask_api_key("sk-1234567890abcdef") == "sk-1...cdef"
        assert mask_api_key("12345678") == "****"
        assert mask_api_key("EMPTY") == ""
        assert mask_api_key("") == ""

    def test_is_key_configured(self):
        assert is_key_configured("sk-x")
        assert not is_key_configured("EMPTY")
        assert not is_key_configured("")
        assert not is_key_configured(None)


# ---------------------------------------------------------------------------
# PlainSecretStore reading an encrypted file
# ---------------------------------------------------------------------------

class TestPlainSecretStoreOverSealedValues:
    def test_sealed_value_reads_as_none(self, tmp_path, key_provider, caplog):
        path = tmp_path / "secure_settings.json"
        EncryptedSecretStore(path, key_provider).set("model_api_key", "sk-real-secret-123")

        store = PlainSecretStore(path)

        assert store.get("model_api_key") is None
        assert not store.contains("model_api_key")
        assert "Discarding unreadable secret" in caplog.text

    def test_plaintext_values_still_readable(self, tmp_path):
        path = tmp_path / "secure_settings.json"
        PlainStore(path).set("model_api_key", "sk-plain-value")
        assert PlainSecretStore(path).get("model_api_key") == "sk-plain-value"
