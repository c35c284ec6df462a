"""IPC protocol between the admin UI and the backend daemon.

Newline-delimited JSON over a Unix socket.
Request:      {"method": "name", "params": {...}}  → {"result": ...} or {"error": "..."}
Notification: {"method": "name", "params": {...}, "notify": true}  → no response

Handler exceptions never cross the socket as anything but an error string.
"""

from __future__ import annotations

import json
import logging
import os
import socket
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

COMMAND_SOCKET_PATH = "/tmp/tps-admin.sock"


class DaemonServer:
    """Command server that runs inside the daemon."""

    def __init__(self, socket_path: str = COMMAND_SOCKET_PATH):
        self.socket_path = socket_path
        self.server_socket: socket.socket | None = None
        self._running = False
        self._accept_thread: threading.Thread | None = None
        self._handlers: dict[str, Callable[..., Any]] = {}

    @property
    def is_running(self) -> bool:
        return self._running

    def register(self, method: str, handler: Callable[..., Any]) -> None:
        """Register a method handler."""
        self._handlers[method] = handler

    def start(self) -> None:
        """Bind the socket and start accepting clients."""
        if self._running:
            return

        # Stale socket from a crashed daemon
        if os.path.exists(self.socket_path):
            os.unlink(self.socket_path)

        self.server_socket = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self.server_socket.bind(self.socket_path)
        self.server_socket.listen(5)
        self.server_socket.settimeout(1.0)

        self._running = True
        self._accept_thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._accept_thread.start()
        logger.info(f"Command server listening on {self.socket_path}")

    def stop(self) -> None:
        """Stop accepting clients and remove the socket file."""
        self._running = False

        if self.server_socket:
            try:
                self.server_socket.close()
            except OSError:
                pass
            self.server_socket = None

        if self._accept_thread:
            self._accept_thread.join(timeout=2.0)
            self._accept_thread = None

        if os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError:
                pass

    def _accept_loop(self) -> None:
        while self._running and self.server_socket:
            try:
                client, _ = self.server_socket.accept()
                threading.Thread(target=self._handle_client, args=(client,), daemon=True).start()
            except socket.timeout:
                continue
            except OSError:
                break

    def _handle_client(self, client: socket.socket) -> None:
        try:
            client.settimeout(30.0)
            buffer = b""

            while True:
                chunk = client.recv(4096)
                if not chunk:
                    break
                buffer += chunk

                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    if line:
                        response = self.process_request(line)
                        if response is not None:
                            client.sendall(response.encode("utf-8") + b"\n")

        except (socket.timeout, ConnectionResetError, BrokenPipeError):
            pass
        finally:
            client.close()

    def process_request(self, request_str: str | bytes) -> Optional[str]:
        """Dispatch one JSON request. Returns the response line, or None for notifications."""
        if isinstance(request_str, bytes):
            try:
                request_str = request_str.decode("utf-8")
            except UnicodeDecodeError as e:
                return json.dumps({"error": f"Invalid encoding: {e}"})

        try:
            request = json.loads(request_str)
        except json.JSONDecodeError as e:
            return json.dumps({"error": f"Invalid JSON: {e}"})

        if not isinstance(request, dict):
            return json.dumps({"error": "Request must be a JSON object"})

        method = request.get("method")
        params = request.get("params") or {}
        is_notify = bool(request.get("notify", False))

        if not method:
            return None if is_notify else json.dumps({"error": "Missing method"})

        handler = self._handlers.get(method)
        if not handler:
            return None if is_notify else json.dumps({"error": f"Unknown method: {method}"})

        if not isinstance(params, dict):
            return None if is_notify else json.dumps({"error": "Invalid params: expected an object"})

        try:
            result = handler(**params)
        except TypeError as e:
            logger.warning(f"Bad params for '{method}': {e}")
            return None if is_notify else json.dumps({"error": f"Invalid params: {e}"})
        except Exception as e:
            logger.warning(f"Command '{method}' failed: {e}")
            return None if is_notify else json.dumps({"error": str(e)})

        if is_notify:
            return None
        return json.dumps({"result": result})


class DaemonClient:
    """Client used by the UI shell and scripts to call the daemon."""

    def __init__(self, socket_path: str = COMMAND_SOCKET_PATH, timeout: float = 30.0):
        self.socket_path = socket_path
        self.timeout = timeout

    def _connect(self, timeout: float) -> socket.socket:
        if not os.path.exists(self.socket_path):
            raise ConnectionError("Daemon not running (socket not found)")
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(timeout)
        try:
            sock.connect(self.socket_path)
        except OSError as e:
            sock.close()
            raise ConnectionError(f"Daemon not running ({e})") from e
        return sock

    def is_daemon_running(self) -> bool:
        try:
            self._connect(1.0).close()
        except ConnectionError:
            return False
        return True

    def call(self, method: str, **params) -> Any:
        """
        Call a daemon method and return the result.

        Raises:
            ConnectionError: If the daemon is unreachable or hangs up
            RuntimeError: If the daemon returns an error string
        """
        with self._connect(self.timeout) as sock:
            request = json.dumps({"method": method, "params": params})
            try:
                sock.sendall(request.encode("utf-8") + b"\n")
                with sock.makefile("rb") as reader:
                    line = reader.readline()
            except socket.timeout:
                raise ConnectionError("Daemon request timed out")

        if not line.endswith(b"\n"):
            raise ConnectionError("Connection closed by daemon")

        response = json.loads(line)
        if "error" in response:
            raise RuntimeError(response["error"])
        return response.get("result")
