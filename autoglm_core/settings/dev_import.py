"""One-shot import of bundled dev model profiles.

Debug builds ship a ``dev_profiles.json`` document::

    {
      "profiles": [
        {"name": "Local", "baseUrl": "http://...", "modelName": "...", "apiKey": "..."}
      ],
      "defaultProfile": "Local"
    }

It is imported once; a persisted flag turns every later call, in this
process or after a restart, into a no-op.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..enums import ImportStatus
from .crypto import EMPTY_API_KEY
from .defaults import KEY_DEV_PROFILES_IMPORTED
from .models import DevProfilesDocument, ModelConfig, SavedModelProfile
from .profiles import ProfileRegistry
from .repository import ConfigRepository
from .store import SettingsStores

logger = logging.getLogger(__name__)

# Returned as ``count`` when the document could not be imported
FAILED_COUNT = -1


@dataclass
class ImportResult:
    """Outcome of a dev profile import."""

    status: ImportStatus
    count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != ImportStatus.FAILED


class DevProfileImporter:
    """Seeds the profile registry from a dev profile document."""

    def __init__(
        self,
        stores: SettingsStores,
        profiles: ProfileRegistry,
        config_repo: ConfigRepository,
    ):
        self._stores = stores
        self._profiles = profiles
        self._config_repo = config_repo

    def has_imported(self) -> bool:
        return self._stores.plain.get_bool(KEY_DEV_PROFILES_IMPORTED, False)

    def mark_imported(self) -> None:
        self._stores.plain.set(KEY_DEV_PROFILES_IMPORTED, True)

    def import_from(self, json_text: str) -> ImportResult:
        """Import profiles from a dev profile document.

        Every entry becomes a new profile with a fresh id. The profile
        named by ``defaultProfile`` (or else the first imported one)
        becomes current and its config is applied as the active
        ModelConfig.

        Not transactional: profiles saved before a failure stay saved.

        Returns:
            IMPORTED with the number of profiles, SKIPPED with 0 if the
            import already ran, or FAILED with count -1 on a parse or
            structural error.
        """
        if self.has_imported():
            logger.debug("Dev profiles already imported, skipping")
            return ImportResult(ImportStatus.SKIPPED)

        try:
            document = DevProfilesDocument.model_validate(json.loads(json_text))
        except (ValueError, TypeError) as e:  # JSONDecodeError / ValidationError
            logger.error(f"Failed to import dev profiles: {_describe(e)}")
            return ImportResult(ImportStatus.FAILED, FAILED_COUNT, _describe(e))

        imported: list[SavedModelProfile] = []
        default_profile: Optional[SavedModelProfile] = None

        try:
            for entry in document.profiles:
                profile = SavedModelProfile(
                    id=self._profiles.generate_id(),
                    display_name=entry.name,
                    config=ModelConfig(
                        base_url=entry.base_url,
                        api_key=entry.api_key or EMPTY_API_KEY,
                        model_name=entry.model_name,
                    ),
                )
                self._profiles.save(profile)
                imported.append(profile)

                if default_profile is None and entry.name == document.default_profile:
                    default_profile = profile

                logger.debug(f"Imported dev profile: {entry.name}")
        except (OSError, ValueError) as e:
            logger.error(
                f"Failed to import dev profiles after {len(imported)} saved: {e}",
                exc_info=True,
            )
            return ImportResult(ImportStatus.FAILED, FAILED_COUNT, str(e))

        active = default_profile or (imported[0] if imported else None)
        if active is not None:
            self._profiles.set_current(active.id)
            self._config_repo.save_model_config(active.config)

        self.mark_imported()
        logger.info(f"Imported {len(imported)} dev profiles")
        return ImportResult(ImportStatus.IMPORTED, len(imported))

    def import_file(self, path: Path) -> ImportResult:
        """Import from a bundled document on disk.

        A missing file is expected for release builds and reads as SKIPPED.
        """
        if self.has_imported():
            return ImportResult(ImportStatus.SKIPPED)

        path = Path(path)
        try:
            json_text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"{path.name} not found (expected for release builds)")
            return ImportResult(ImportStatus.SKIPPED)
        except OSError as e:
            logger.error(f"Failed to read dev profiles from {path}: {e}")
            return ImportResult(ImportStatus.FAILED, FAILED_COUNT, str(e))

        return self.import_from(json_text)


def _describe(error: Exception) -> str:
    if isinstance(error, ValidationError):
        return f"{error.error_count()} validation error(s): {error.errors()[0]['msg']}"
    return str(error)
