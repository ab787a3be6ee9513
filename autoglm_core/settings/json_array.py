"""Whole-collection JSON array blobs stored under a single plain-store key."""

import json
import logging
import time
import uuid
from typing import Iterable, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def load_array(raw: Optional[str], model: type[M], what: str) -> list[M]:
    """Parse a stored JSON array into models.

    Anything malformed (bad JSON, not an array, an element failing
    validation) yields an empty list; the error is logged, not raised.
    """
    if not raw:
        return []
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        return [model.model_validate(item) for item in data]
    except ValueError as e:  # JSONDecodeError and pydantic ValidationError included
        logger.error(f"Failed to parse saved {what}: {e}", exc_info=True)
        return []


def dump_array(items: Iterable[BaseModel]) -> str:
    return json.dumps(
        [item.model_dump(by_alias=True, mode="json") for item in items],
        ensure_ascii=False,
    )


def upsert(items: list[M], item: M) -> list[M]:
    """Replace the element with the same id in place, or append."""
    for i, existing in enumerate(items):
        if existing.id == item.id:
            items[i] = item
            return items
    items.append(item)
    return items


def new_id(prefix: str, taken: set[str]) -> str:
    """Millisecond timestamp plus a random suffix, re-drawn on clash."""
    while True:
        candidate = f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"
        if candidate not in taken:
            return candidate
