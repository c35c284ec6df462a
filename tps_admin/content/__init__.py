"""Image content persistence - path resolution, load/save, error taxonomy."""

from .errors import (
    ContentDeserializationError,
    ContentError,
    ContentIoError,
    ContentSerializationError,
    ErrorKind,
)
from .paths import CONTENT_PATH_ENV, PROJECT_ROOT, ContentPathConfig, resolve_content_path
from .store import (
    DEFAULT_IMAGE_CONTENT,
    UPDATED_AT_KEY,
    ContentStore,
    get_content_store,
    load_image_content,
    save_image_content,
)

__all__ = [
    # Paths
    "CONTENT_PATH_ENV",
    "PROJECT_ROOT",
    "ContentPathConfig",
    "resolve_content_path",
    # Store
    "DEFAULT_IMAGE_CONTENT",
    "UPDATED_AT_KEY",
    "ContentStore",
    "get_content_store",
    "load_image_content",
    "save_image_content",
    # Errors
    "ErrorKind",
    "ContentError",
    "ContentIoError",
    "ContentDeserializationError",
    "ContentSerializationError",
]
