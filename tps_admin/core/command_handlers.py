"""IPC command handlers for the admin UI.

Each handler is a thin wrapper over the content store or the shell opener.
Failures propagate as exceptions; the transport turns them into strings.
"""

from __future__ import annotations

from typing import Any, Optional

from ..content.store import ContentStore
from .ipc import DaemonServer
from .shell import UrlOpener, open_url

CALENDAR_URL = "https://calendar.google.com"


class CommandHandlers:
    """Registers and implements the commands exposed to the UI."""

    def __init__(
        self,
        store: ContentStore,
        command_server: Optional[DaemonServer] = None,
        opener: Optional[UrlOpener] = None,
        calendar_url: str = CALENDAR_URL,
    ):
        self.store = store
        self.command_server = command_server
        self._open = opener or open_url
        self.calendar_url = calendar_url

    def register_all(self) -> None:
        """Register all command handlers with the IPC server."""
        reg = self.command_server.register

        reg("greet_owner", self.greet_owner)
        reg("open_calendar", self.open_calendar)

        # Content
        reg("load_image_content", self.load_image_content)
        reg("save_image_content", self.save_image_content)
        reg("patch_image_content", self.patch_image_content)

        # Utility
        reg("ping", lambda: "pong")

    def greet_owner(self, name: str) -> str:
        return f"Welcome back, {name}! Let's build unforgettable events."

    def open_calendar(self) -> None:
        """Open the shared events calendar in the browser."""
        self._open(self.calendar_url)

    def load_image_content(self) -> Any:
        return self.store.load()

    def save_image_content(self, content: Any) -> Any:
        return self.store.save(content)

    def patch_image_content(self, patch: dict) -> Any:
        return self.store.patch(patch)
