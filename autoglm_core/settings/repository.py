"""Model and agent configuration persistence.

Non-secret fields go to the plain store, the API key to the secret
store. The two writes are independent: if one fails the other is not
rolled back. Re-saving the same config is idempotent on both stores.
"""

import logging
from typing import Optional

from ..enums import Language
from .crypto import EMPTY_API_KEY, is_key_configured, mask_api_key
from .defaults import (
    DEFAULT_AGENT_CONFIG,
    DEFAULT_MODEL_CONFIG,
    KEY_API_KEY,
    KEY_BASE_URL,
    KEY_CUSTOM_SYSTEM_PROMPT_CN,
    KEY_CUSTOM_SYSTEM_PROMPT_EN,
    KEY_FREQUENCY_PENALTY,
    KEY_LANGUAGE,
    KEY_MAX_STEPS,
    KEY_MAX_TOKENS,
    KEY_MODEL_NAME,
    KEY_SCREENSHOT_DELAY_MS,
    KEY_TEMPERATURE,
    KEY_TIMEOUT_SECONDS,
    KEY_TOP_P,
    KEY_VERBOSE,
)
from .models import AgentConfig, ModelConfig
from .store import SettingsStores

logger = logging.getLogger(__name__)


class ConfigRepository:
    """Reads and writes the active ModelConfig and AgentConfig.

    Each instance keeps its own baseline for ``has_config_changed``;
    two call sites that need drift detection should each hold their
    own repository.
    """

    def __init__(self, stores: SettingsStores):
        self._stores = stores
        self._last_model_config: Optional[ModelConfig] = None
        self._last_agent_config: Optional[AgentConfig] = None

    # Model configuration

    def get_model_config(self) -> ModelConfig:
        """Load the active model configuration, falling back to defaults per field."""
        logger.debug("Loading model configuration")
        prefs = self._stores.plain
        d = DEFAULT_MODEL_CONFIG

        api_key = self._stores.secret.get(KEY_API_KEY)

        return ModelConfig(
            base_url=prefs.get_string(KEY_BASE_URL, d.base_url),
            api_key=api_key or EMPTY_API_KEY,
            model_name=prefs.get_string(KEY_MODEL_NAME, d.model_name),
            max_tokens=prefs.get_int(KEY_MAX_TOKENS, d.max_tokens),
            temperature=prefs.get_float(KEY_TEMPERATURE, d.temperature),
            top_p=prefs.get_float(KEY_TOP_P, d.top_p),
            frequency_penalty=prefs.get_float(KEY_FREQUENCY_PENALTY, d.frequency_penalty),
            timeout_seconds=prefs.get_long(KEY_TIMEOUT_SECONDS, d.timeout_seconds),
        )

    def save_model_config(self, config: ModelConfig) -> None:
        """Save the active model configuration.

        The sentinel (or an empty key) removes the stored secret rather
        than writing "EMPTY" into the secret store.
        """
        logger.debug(
            f"Saving model configuration: base_url={config.base_url}, "
            f"model_name={config.model_name}, api_key={mask_api_key(config.api_key) or 'unset'}"
        )
        with self._stores.plain.edit() as e:
            e.set(KEY_BASE_URL, config.base_url)
            e.set(KEY_MODEL_NAME, config.model_name)
            e.set(KEY_MAX_TOKENS, config.max_tokens)
            e.set(KEY_TEMPERATURE, config.temperature)
            e.set(KEY_TOP_P, config.top_p)
            e.set(KEY_FREQUENCY_PENALTY, config.frequency_penalty)
            e.set(KEY_TIMEOUT_SECONDS, config.timeout_seconds)

        secret = self._stores.secret
        if is_key_configured(config.api_key):
            secret.set(KEY_API_KEY, config.api_key)
        else:
            secret.remove(KEY_API_KEY)

    # Agent configuration

    def get_agent_config(self) -> AgentConfig:
        """Load the agent configuration.

        Out-of-range or unknown stored values read as the default.
        """
        logger.debug("Loading agent configuration")
        prefs = self._stores.plain
        d = DEFAULT_AGENT_CONFIG

        max_steps = prefs.get_int(KEY_MAX_STEPS, d.max_steps)
        if max_steps < 0:
            logger.warning(f"Ignoring invalid stored max_steps={max_steps}")
            max_steps = d.max_steps

        delay = prefs.get_long(KEY_SCREENSHOT_DELAY_MS, d.screenshot_delay_ms)
        if delay < 0:
            logger.warning(f"Ignoring invalid stored screenshot_delay_ms={delay}")
            delay = d.screenshot_delay_ms

        stored_language = prefs.get_string(KEY_LANGUAGE, d.language)
        try:
            language = Language(stored_language)
        except ValueError:
            logger.warning(f"Ignoring unknown stored language '{stored_language}'")
            language = d.language

        return AgentConfig(
            max_steps=max_steps,
            language=language,
            verbose=prefs.get_bool(KEY_VERBOSE, d.verbose),
            screenshot_delay_ms=delay,
        )

    def save_agent_config(self, config: AgentConfig) -> None:
        logger.debug(
            f"Saving agent configuration: max_steps={config.max_steps}, language={config.language}"
        )
        with self._stores.plain.edit() as e:
            e.set(KEY_MAX_STEPS, config.max_steps)
            e.set(KEY_LANGUAGE, str(config.language))
            e.set(KEY_VERBOSE, config.verbose)
            e.set(KEY_SCREENSHOT_DELAY_MS, config.screenshot_delay_ms)

    # Drift detection

    def has_config_changed(self) -> bool:
        """Check whether either config changed since this instance last looked.

        Updates the cached snapshot on every call, so a second call
        with nothing changed in between returns False. The first call
        on a new instance returns True.
        """
        current_model = self.get_model_config()
        current_agent = self.get_agent_config()

        changed = (
            self._last_model_config != current_model
            or self._last_agent_config != current_agent
        )

        self._last_model_config = current_model
        self._last_agent_config = current_agent

        return changed

    # Maintenance

    def migrate_secret(self) -> bool:
        """Move a legacy plaintext API key into the secret store.

        Returns:
            True if a key was moved, False if there was nothing to migrate
        """
        prefs = self._stores.plain
        legacy = prefs.get_string(KEY_API_KEY)
        if legacy is None or not is_key_configured(legacy):
            return False

        self._stores.secret.set(KEY_API_KEY, legacy)
        prefs.remove(KEY_API_KEY)
        logger.info("Migrated API key to secure storage")
        return True

    def has_settings(self) -> bool:
        """Check if model or agent settings have been saved before."""
        prefs = self._stores.plain
        return prefs.contains(KEY_BASE_URL) or prefs.contains(KEY_MAX_STEPS)

    def clear_all(self) -> None:
        """Clear both namespaces: settings, profiles, templates, prompts and secrets."""
        logger.info("Clearing all settings")
        self._stores.plain.clear()
        self._stores.secret.clear()
        self._last_model_config = None
        self._last_agent_config = None

    # Custom system prompts

    @staticmethod
    def _prompt_key(language: str) -> str:
        if Language.from_code(language) is Language.EN:
            return KEY_CUSTOM_SYSTEM_PROMPT_EN
        return KEY_CUSTOM_SYSTEM_PROMPT_CN

    def get_custom_system_prompt(self, language: str) -> Optional[str]:
        """Get the custom system prompt for "cn" or "en", or None if not set."""
        return self._stores.plain.get_string(self._prompt_key(language))

    def save_custom_system_prompt(self, language: str, prompt: str) -> None:
        self._stores.plain.set(self._prompt_key(language), prompt)

    def clear_custom_system_prompt(self, language: str) -> None:
        self._stores.plain.remove(self._prompt_key(language))

    def has_custom_system_prompt(self, language: str) -> bool:
        return self.get_custom_system_prompt(language) is not None
