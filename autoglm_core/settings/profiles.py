"""Saved model profiles and the current-profile pointer.

The profile list is one JSON array under ``saved_model_profiles`` in
the plain store; every save rewrites the whole array. Each profile's
API key lives separately in the secret store under
``profile_apikey_<id>`` and is never embedded in the array.

The array write and the secret write are two independent operations.
A failure between them leaves the profile saved with its previous
secret; callers recover by saving again.
"""

from __future__ import annotations

import logging
from typing import Optional

from .crypto import EMPTY_API_KEY, is_key_configured
from .defaults import KEY_CURRENT_PROFILE_ID, KEY_SAVED_PROFILES, profile_api_key
from .json_array import dump_array, load_array, new_id, upsert
from .models import SavedModelProfile, StoredProfileEntry
from .store import SettingsStores

logger = logging.getLogger(__name__)


class ProfileRegistry:
    """CRUD over saved model profiles."""

    def __init__(self, stores: SettingsStores):
        self._stores = stores
        # Ids handed out by this registry, so a deleted id is never reissued
        self._issued_ids: set[str] = set()

    def list(self) -> list[SavedModelProfile]:
        """Get all saved profiles in stored order, secrets attached.

        Returns an empty list if nothing is saved or the stored array
        cannot be parsed.
        """
        raw = self._stores.plain.get_string(KEY_SAVED_PROFILES)
        entries = load_array(raw, StoredProfileEntry, "profiles")
        secret = self._stores.secret
        return [
            entry.to_profile(secret.get(profile_api_key(entry.id)) or EMPTY_API_KEY)
            for entry in entries
        ]

    def get(self, profile_id: str) -> Optional[SavedModelProfile]:
        for profile in self.list():
            if profile.id == profile_id:
                return profile
        return None

    def save(self, profile: SavedModelProfile) -> None:
        """Insert a profile, or replace the one with the same id in place."""
        logger.debug(f"Saving profile: id={profile.id}, name={profile.display_name}")
        profiles = upsert(self.list(), profile)
        self._write(profiles)

        key = profile_api_key(profile.id)
        if is_key_configured(profile.config.api_key):
            self._stores.secret.set(key, profile.config.api_key)
        else:
            self._stores.secret.remove(key)

    def delete(self, profile_id: str) -> None:
        """Delete a profile and its secret, clearing the pointer if it was current."""
        logger.debug(f"Deleting profile: id={profile_id}")
        profiles = [p for p in self.list() if p.id != profile_id]
        self._write(profiles)

        self._stores.secret.remove(profile_api_key(profile_id))

        if self._stores.plain.get_string(KEY_CURRENT_PROFILE_ID) == profile_id:
            self.set_current(None)

    def get_current(self) -> Optional[str]:
        """Get the current profile id.

        A pointer to a profile that no longer exists reads as None.
        """
        profile_id = self._stores.plain.get_string(KEY_CURRENT_PROFILE_ID)
        if profile_id is None:
            return None
        if self.get(profile_id) is None:
            logger.warning(f"Current profile '{profile_id}' no longer exists, treating as unset")
            return None
        return profile_id

    def get_current_profile(self) -> Optional[SavedModelProfile]:
        profile_id = self.get_current()
        return self.get(profile_id) if profile_id else None

    def set_current(self, profile_id: Optional[str]) -> None:
        if profile_id is None:
            self._stores.plain.remove(KEY_CURRENT_PROFILE_ID)
        else:
            self._stores.plain.set(KEY_CURRENT_PROFILE_ID, profile_id)

    def generate_id(self) -> str:
        """Generate a profile id unique for the lifetime of the store."""
        taken = self._issued_ids | {p.id for p in self.list()}
        profile_id = new_id("profile", taken)
        self._issued_ids.add(profile_id)
        return profile_id

    def _write(self, profiles: list[SavedModelProfile]) -> None:
        entries = [StoredProfileEntry.from_profile(p) for p in profiles]
        self._stores.plain.set(KEY_SAVED_PROFILES, dump_array(entries))
