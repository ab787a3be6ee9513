"""Default settings and the persisted key layout."""

from .models import AgentConfig, ModelConfig


DEFAULT_MODEL_CONFIG = ModelConfig()
DEFAULT_AGENT_CONFIG = AgentConfig()


# ── Plain namespace (settings.json) ────────────────────────────────────

# ModelConfig, minus the secret
KEY_BASE_URL = "model_base_url"
KEY_MODEL_NAME = "model_name"
KEY_MAX_TOKENS = "model_max_tokens"
KEY_TEMPERATURE = "model_temperature"
KEY_TOP_P = "model_top_p"
KEY_FREQUENCY_PENALTY = "model_frequency_penalty"
KEY_TIMEOUT_SECONDS = "model_timeout_seconds"

# AgentConfig
KEY_MAX_STEPS = "agent_max_steps"
KEY_LANGUAGE = "agent_language"
KEY_VERBOSE = "agent_verbose"
KEY_SCREENSHOT_DELAY_MS = "agent_screenshot_delay_ms"

# Collections, stored as one JSON array string each
KEY_SAVED_PROFILES = "saved_model_profiles"
KEY_CURRENT_PROFILE_ID = "current_profile_id"
KEY_TASK_TEMPLATES = "task_templates"

# Custom system prompts, one per language
KEY_CUSTOM_SYSTEM_PROMPT_CN = "custom_system_prompt_cn"
KEY_CUSTOM_SYSTEM_PROMPT_EN = "custom_system_prompt_en"

KEY_DEV_PROFILES_IMPORTED = "dev_profiles_imported"


# ── Secret namespace (secure_settings.json) ────────────────────────────

# Active ModelConfig secret. Older versions wrote it to the plain namespace.
KEY_API_KEY = "model_api_key"

PROFILE_API_KEY_PREFIX = "profile_apikey_"


def profile_api_key(profile_id: str) -> str:
    """Secret-store key holding a profile's API key."""
    return f"{PROFILE_API_KEY_PREFIX}{profile_id}"
