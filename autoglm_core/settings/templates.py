"""Saved task templates, stored as one JSON array."""

from __future__ import annotations

import logging
from typing import Optional

from .defaults import KEY_TASK_TEMPLATES
from .json_array import dump_array, load_array, new_id, upsert
from .models import TaskTemplate
from .store import SettingsStores

logger = logging.getLogger(__name__)


class TemplateRegistry:
    def __init__(self, stores: SettingsStores):
        self._stores = stores
        self._issued_ids: set[str] = set()

    def list(self) -> list[TaskTemplate]:
        """Get all templates; empty if none are saved or the array is malformed."""
        raw = self._stores.plain.get_string(KEY_TASK_TEMPLATES)
        return load_array(raw, TaskTemplate, "task templates")

    def get(self, template_id: str) -> Optional[TaskTemplate]:
        return next((t for t in self.list() if t.id == template_id), None)

    def save(self, template: TaskTemplate) -> None:
        logger.debug(f"Saving task template: id={template.id}, name={template.name}")
        self._write(upsert(self.list(), template))

    def delete(self, template_id: str) -> None:
        logger.debug(f"Deleting task template: id={template_id}")
        self._write([t for t in self.list() if t.id != template_id])

    def generate_id(self) -> str:
        taken = self._issued_ids | {t.id for t in self.list()}
        template_id = new_id("template", taken)
        self._issued_ids.add(template_id)
        return template_id

    def _write(self, templates: list[TaskTemplate]) -> None:
        self._stores.plain.set(KEY_TASK_TEMPLATES, dump_array(templates))
