"""Core plumbing - IPC transport, command handlers, shell integration."""

from .ipc import COMMAND_SOCKET_PATH, DaemonClient, DaemonServer
from .shell import open_url
from .command_handlers import CALENDAR_URL, CommandHandlers

__all__ = [
    # IPC
    "COMMAND_SOCKET_PATH",
    "DaemonServer",
    "DaemonClient",
    # Commands
    "CALENDAR_URL",
    "CommandHandlers",
    # Shell
    "open_url",
]
