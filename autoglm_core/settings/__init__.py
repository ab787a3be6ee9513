"""Settings package for autoglm-core."""

from .models import (
    AgentConfig,
    ModelConfig,
    SavedModelProfile,
    TaskTemplate,
    DevProfilesDocument,
)
from .plain_store import PlainStore
from .secret_store import (
    SecretStore,
    EncryptedSecretStore,
    PlainSecretStore,
    open_secret_store,
)
from .store import SettingsStores
from .repository import ConfigRepository
from .profiles import ProfileRegistry
from .templates import TemplateRegistry
from .dev_import import DevProfileImporter, ImportResult
from .defaults import DEFAULT_MODEL_CONFIG, DEFAULT_AGENT_CONFIG
from .crypto import (
    EMPTY_API_KEY,
    KeyringMasterKeyProvider,
    StaticMasterKeyProvider,
    mask_api_key,
)

__all__ = [
    "AgentConfig",
    "ModelConfig",
    "SavedModelProfile",
    "TaskTemplate",
    "DevProfilesDocument",
    "PlainStore",
    "SecretStore",
    "EncryptedSecretStore",
    "PlainSecretStore",
    "open_secret_store",
    "SettingsStores",
    "ConfigRepository",
    "ProfileRegistry",
    "TemplateRegistry",
    "DevProfileImporter",
    "ImportResult",
    "DEFAULT_MODEL_CONFIG",
    "DEFAULT_AGENT_CONFIG",
    "EMPTY_API_KEY",
    "KeyringMasterKeyProvider",
    "StaticMasterKeyProvider",
    "mask_api_key",
]
