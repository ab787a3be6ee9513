"""Pydantic models for model, agent, profile and template settings."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..enums import Language


# ModelConfig defaults (also used for fields missing from stored profiles)
DEFAULT_BASE_URL = "http://localhost:8000/v1"
DEFAULT_API_KEY = "EMPTY"
DEFAULT_MODEL_NAME = "autoglm-phone-9b"
DEFAULT_MAX_TOKENS = 3000
DEFAULT_TEMPERATURE = 0.0
DEFAULT_TOP_P = 0.85
DEFAULT_FREQUENCY_PENALTY = 0.2
DEFAULT_TIMEOUT_SECONDS = 60

# AgentConfig defaults
DEFAULT_MAX_STEPS = 100
DEFAULT_SCREENSHOT_DELAY_MS = 2000


class _CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts either spelling on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),  # model_name is a real field here
    )


class ModelConfig(_CamelModel):
    """Connection settings for the vision-language model endpoint.

    ``api_key`` is the only secret field; "EMPTY" means no key is set.
    Equality compares every field, which is what drift detection uses.
    """

    base_url: str = DEFAULT_BASE_URL
    api_key: str = DEFAULT_API_KEY
    model_name: str = DEFAULT_MODEL_NAME
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    frequency_penalty: float = DEFAULT_FREQUENCY_PENALTY
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS


class AgentConfig(_CamelModel):
    """Agent behaviour settings."""

    max_steps: int = Field(
        default=DEFAULT_MAX_STEPS,
        ge=0,
        description="Maximum steps per task, 0 = unlimited",
    )
    language: Language = Language.CN
    verbose: bool = True
    screenshot_delay_ms: int = Field(default=DEFAULT_SCREENSHOT_DELAY_MS, ge=0)


class SavedModelProfile(_CamelModel):
    """A named ModelConfig the user can switch between.

    ``id`` is the join key for the profile's API key in the secret store.
    """

    id: str
    display_name: str
    config: ModelConfig


class StoredProfileEntry(_CamelModel):
    """One element of the persisted profile array. Never carries the secret."""

    id: str
    display_name: str
    base_url: str
    model_name: str
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    frequency_penalty: float = DEFAULT_FREQUENCY_PENALTY
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_profile(cls, profile: SavedModelProfile) -> "StoredProfileEntry":
        cfg = profile.config
        return cls(
            id=profile.id,
            display_name=profile.display_name,
            base_url=cfg.base_url,
            model_name=cfg.model_name,
            max_tokens=cfg.max_tokens,
            temperature=cfg.temperature,
            top_p=cfg.top_p,
            frequency_penalty=cfg.frequency_penalty,
            timeout_seconds=cfg.timeout_seconds,
        )

    def to_profile(self, api_key: str) -> SavedModelProfile:
        return SavedModelProfile(
            id=self.id,
            display_name=self.display_name,
            config=ModelConfig(
                base_url=self.base_url,
                api_key=api_key,
                model_name=self.model_name,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                top_p=self.top_p,
                frequency_penalty=self.frequency_penalty,
                timeout_seconds=self.timeout_seconds,
            ),
        )


class TaskTemplate(_CamelModel):
    """A saved task description for quick reuse."""

    id: str
    name: str
    description: str


class DevProfileEntry(_CamelModel):
    """A profile in a bundled dev profile document."""

    name: str
    base_url: str
    model_name: str
    api_key: Optional[str] = None


class DevProfilesDocument(_CamelModel):
    """Root of a bundled dev profile document."""

    profiles: list[DevProfileEntry]
    default_profile: Optional[str] = None
