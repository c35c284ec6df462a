"""Daemon configuration, read from config.json at the project root."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from .content.paths import PROJECT_ROOT

logger = logging.getLogger(__name__)

CONFIG_PATH = PROJECT_ROOT / "config.json"


def _known(cls, d: dict) -> dict:
    """Keep only keys that are fields of dataclass ``cls``."""
    if not isinstance(d, dict):
        return {}
    names = set(cls.__dataclass_fields__)
    return {k: v for k, v in d.items() if k in names}


@dataclass
class IpcConfig:
    """Unix socket command server."""
    socket_path: str = "/tmp/tps-admin.sock"
    pid_file: str = "/tmp/tps-admin.pid"
    client_timeout: float = 30.0


@dataclass
class McpConfig:
    """Embedded MCP server."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 7787


@dataclass
class ShellConfig:
    calendar_url: str = "https://calendar.google.com"


@dataclass
class AppConfig:
    """Main configuration combining all sections."""
    ipc: IpcConfig = field(default_factory=IpcConfig)
    mcp: McpConfig = field(default_factory=McpConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)

    def to_dict(self) -> dict:
        return {
            "ipc": asdict(self.ipc),
            "mcp": asdict(self.mcp),
            "shell": asdict(self.shell),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AppConfig":
        return cls(
            ipc=IpcConfig(**_known(IpcConfig, d.get("ipc", {}))),
            mcp=McpConfig(**_known(McpConfig, d.get("mcp", {}))),
            shell=ShellConfig(**_known(ShellConfig, d.get("shell", {}))),
        )

    @classmethod
    def load(cls, path: Path = CONFIG_PATH) -> "AppConfig":
        """Load config, falling back to defaults when missing or unreadable."""
        try:
            if path.exists():
                raw = json.loads(path.read_text())
                if isinstance(raw, dict):
                    return cls.from_dict(raw)
                logger.warning(f"Ignoring {path}: top level is not an object")
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable config {path}: {e}")
        return cls()


# Global instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get current config."""
    global _config
    if _config is None:
        _config = AppConfig.load()
    return _config
