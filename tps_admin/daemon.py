#!/usr/bin/env python3
"""Background daemon for the tps-admin desktop app.

AdminDaemon wires together:
- ContentStore: image content document on disk
- CommandHandlers: commands exposed to the UI
- DaemonServer: Unix socket transport for those commands
- MCP server: the same commands over streamable HTTP (optional)
"""

from __future__ import annotations

import asyncio
import atexit
import fcntl
import json
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Optional

from .config import AppConfig, get_config
from .content.errors import ContentError
from .content.store import ContentStore
from .core.command_handlers import CommandHandlers
from .core.ipc import DaemonServer
from .core.shell import UrlOpener

logger = logging.getLogger(__name__)


class PidLock:
    """Single-instance guard: an flock-held PID file, released on exit or SIGTERM/SIGINT."""

    def __init__(self, pid_file: Path):
        self.pid_file = Path(pid_file)
        self._fd: Optional[int] = None
        self._saved_handlers: dict = {}

    def _clear_stale(self) -> None:
        """Drop a PID file whose process is gone or whose contents are garbage."""
        try:
            os.kill(int(self.pid_file.read_text().strip()), 0)
        except FileNotFoundError:
            return
        except (OSError, ValueError):
            self.pid_file.unlink(missing_ok=True)

    def acquire(self) -> bool:
        """Take the lock. Returns False if another daemon holds it."""
        self._clear_stale()

        try:
            fd = os.open(self.pid_file, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            logger.error(f"Cannot create PID file {self.pid_file}: {e}")
            return False

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            os.close(fd)
            logger.error(f"Another tps-admin daemon holds {self.pid_file}")
            return False

        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        self._fd = fd

        for sig in (signal.SIGTERM, signal.SIGINT):
            self._saved_handlers[sig] = signal.signal(sig, self._on_signal)
        atexit.register(self.release)
        return True

    def release(self) -> None:
        """Unlock, remove the PID file and restore signal handlers. Safe to repeat."""
        if self._fd is None:
            return

        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
            os.close(self._fd)
        except OSError:
            pass
        self._fd = None
        self.pid_file.unlink(missing_ok=True)

        for sig, handler in self._saved_handlers.items():
            signal.signal(sig, handler)
        self._saved_handlers.clear()

    def _on_signal(self, signum, frame) -> None:
        self.release()
        signal.signal(signum, signal.SIG_DFL)
        os.kill(os.getpid(), signum)


class AdminDaemon:
    """Serves the UI command surface until stopped."""

    def __init__(
        self,
        config: AppConfig = None,
        store: ContentStore = None,
        opener: UrlOpener = None,
    ):
        self.config = config or get_config()
        self.store = store or ContentStore()
        self.command_server = DaemonServer(self.config.ipc.socket_path)
        self.handlers = CommandHandlers(
            self.store,
            self.command_server,
            opener=opener,
            calendar_url=self.config.shell.calendar_url,
        )
        self.handlers.register_all()
        self.running = False
        self._mcp_task: Optional[asyncio.Task] = None

    def start(self) -> None:
        """Start the command server."""
        if self.running:
            return
        self.running = True
        self.command_server.start()
        logger.debug(f"Config: {self.config.to_dict()}")
        logger.info(f"Image content at {self.store.path}")

    def stop(self) -> None:
        """Stop the daemon."""
        if not self.running:
            return
        self.running = False
        self.command_server.stop()
        if self._mcp_task:
            self._mcp_task.cancel()
            self._mcp_task = None

    async def run(self) -> None:
        """Run the daemon until interrupted."""
        self.start()

        if self.config.mcp.enabled:
            from .server import run_embedded

            self._mcp_task = asyncio.create_task(
                run_embedded(self.handlers, host=self.config.mcp.host, port=self.config.mcp.port)
            )
            logger.info(f"MCP listening on {self.config.mcp.host}:{self.config.mcp.port}")

        try:
            # All work happens on IPC threads and the MCP task
            while self.running:
                await asyncio.sleep(3600)
        finally:
            self.stop()


def main():
    """Entry point for daemon mode."""
    logging.basicConfig(level=logging.INFO, stream=sys.stderr, format="%(name)s %(levelname)s: %(message)s")

    config = get_config()

    if len(sys.argv) > 1 and sys.argv[1] == "--dump":
        # One-shot: print the current document (seeding it if missing)
        try:
            document = ContentStore().load()
        except ContentError as e:
            logger.error(f"Cannot load image content: {e}")
            sys.exit(1)
        print(json.dumps(document, indent=2, ensure_ascii=False))
        return

    lock = PidLock(Path(config.ipc.pid_file))
    if not lock.acquire():
        sys.exit(1)

    try:
        asyncio.run(AdminDaemon(config).run())
    except KeyboardInterrupt:
        pass
    finally:
        lock.release()


if __name__ == "__main__":
    main()
