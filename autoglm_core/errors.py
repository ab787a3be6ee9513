"""Exception types raised and handled inside autoglm-core.

None of these escape the public operations: callers receive a
best-effort value or a typed failure result instead.
"""


class AutoGLMStoreError(Exception):
    """Base class for storage errors in this package."""


class SecretStoreUnavailableError(AutoGLMStoreError):
    """The encrypted secret store could not be set up.

    Raised while obtaining the master key or building the cipher;
    ``open_secret_store`` catches it and falls back to plain storage.
    """


class SecretDecryptionError(AutoGLMStoreError):
    """A stored secret failed authentication or could not be decoded."""
