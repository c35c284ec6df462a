"""File-backed image content document.

The document is opaque JSON apart from the top-level ``updatedAt`` stamp that
every save of an object document writes. A missing file is seeded from the
bundled ``images.json`` on first load.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .errors import ContentDeserializationError, ContentIoError, ContentSerializationError
from .paths import ContentPathConfig, resolve_content_path

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_FILE = Path(__file__).with_name("images.json")
DEFAULT_IMAGE_CONTENT = DEFAULT_CONTENT_FILE.read_text(encoding="utf-8")

UPDATED_AT_KEY = "updatedAt"


def now_rfc3339() -> str:
    return datetime.now(timezone.utc).isoformat()


def _ensure_parent_exists(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ContentIoError(f"Cannot create directory {path.parent}: {e}") from e


def _parse(payload: str, source: Path) -> Any:
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise ContentDeserializationError(f"Invalid JSON in {source}: {e}") from e


def _keeps_current(value: Any) -> bool:
    return value is None or value == []


def _merge_patch(current: dict, patch: dict) -> dict:
    merged = dict(current)
    for key, value in patch.items():
        existing = current.get(key)
        if key in current and _keeps_current(value):
            continue
        if isinstance(existing, dict) and isinstance(value, dict):
            section = dict(existing)
            for sub_key, sub_value in value.items():
                if sub_key in existing and _keeps_current(sub_value):
                    continue
                section[sub_key] = sub_value
            value = section
        merged[key] = value
    return merged


class ContentStore:
    """Loads and saves the image content document.

    The path is resolved on every operation, so a store built without an
    explicit config follows changes to the environment override.
    """

    def __init__(
        self,
        config: Optional[ContentPathConfig] = None,
        default_content: str = DEFAULT_IMAGE_CONTENT,
    ):
        self._config = config
        self._default_content = default_content

    @property
    def path(self) -> Path:
        return resolve_content_path(self._config)

    def load(self) -> Any:
        """Read the document, seeding it from the default on first use.

        Raises:
            ContentIoError: Read failed for a reason other than not-found,
                or the default could not be written.
            ContentDeserializationError: Existing file is not valid JSON.
        """
        path = self.path
        try:
            payload = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            _ensure_parent_exists(path)
            try:
                path.write_text(self._default_content, encoding="utf-8")
            except OSError as e:
                raise ContentIoError(f"Cannot write default content to {path}: {e}") from e
            logger.info(f"Initialized image content at {path}")
            payload = self._default_content
        except UnicodeDecodeError as e:
            raise ContentDeserializationError(f"Content file {path} is not UTF-8: {e}") from e
        except OSError as e:
            raise ContentIoError(f"Cannot read {path}: {e}") from e

        return _parse(payload, path)

    def save(self, content: Any) -> Any:
        """Stamp ``updatedAt`` on object documents and overwrite the file.

        Non-object documents are written as-is. Returns what was written.

        Raises:
            ContentIoError: Directory creation or write failed.
            ContentSerializationError: Document is not JSON-serializable.
        """
        if isinstance(content, dict):
            content = dict(content)
            content[UPDATED_AT_KEY] = now_rfc3339()

        path = self.path
        _ensure_parent_exists(path)

        try:
            serialized = json.dumps(content, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise ContentSerializationError(str(e)) from e

        temp = path.with_name(path.name + ".tmp")
        try:
            temp.write_text(serialized, encoding="utf-8")
            os.replace(temp, path)
        except OSError as e:
            try:
                temp.unlink()
            except OSError:
                pass
            raise ContentIoError(f"Cannot write {path}: {e}") from e

        logger.debug(f"Saved image content to {path}")
        return content

    def patch(self, patch: dict) -> Any:
        """Merge ``patch`` into the stored document and save.

        Object sections present on both sides merge one level deep, so
        ``{"hero": {"secondary": ...}}`` keeps ``hero.primary``. A null or
        empty-list value for a key the document already has keeps the
        current value.
        """
        if not isinstance(patch, dict):
            raise ValueError("Patch must be a JSON object")

        current = self.load()
        if not isinstance(current, dict):
            return self.save(dict(patch))
        return self.save(_merge_patch(current, patch))


# Global instance
_store: Optional[ContentStore] = None


def get_content_store() -> ContentStore:
    """Get or create the shared store (environment-driven path)."""
    global _store
    if _store is None:
        _store = ContentStore()
    return _store


def load_image_content() -> Any:
    return get_content_store().load()


def save_image_content(content: Any) -> Any:
    return get_content_store().save(content)
