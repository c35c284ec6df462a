"""Resolves where the image content document lives on disk."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

# Directory containing the tps_admin package
PROJECT_ROOT = Path(__file__).resolve().parents[2]

CONTENT_PATH_ENV = "TPS_IMAGE_CONTENT_PATH"
DEFAULT_RELATIVE_PATH = Path("shared") / "content" / "images.json"


@dataclass(frozen=True)
class ContentPathConfig:
    """Inputs for path resolution."""
    project_root: Path = PROJECT_ROOT
    override_path: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        project_root: Path = PROJECT_ROOT,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ContentPathConfig":
        env = os.environ if environ is None else environ
        return cls(project_root=Path(project_root), override_path=env.get(CONTENT_PATH_ENV))


def resolve_content_path(config: Optional[ContentPathConfig] = None) -> Path:
    """Return the absolute content file location.

    Without an explicit config the environment is read on every call.
    """
    if config is None:
        config = ContentPathConfig.from_env()

    if config.override_path:
        candidate = Path(config.override_path)
        if candidate.is_absolute():
            return candidate
        return config.project_root / candidate

    return config.project_root / DEFAULT_RELATIVE_PATH
