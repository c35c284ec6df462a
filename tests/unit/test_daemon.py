"""Tests for the admin daemon wiring and PID lock."""

import json
import os
import sys
from unittest.mock import MagicMock

import pytest

from tps_admin import daemon as daemon_module
from tps_admin.config import AppConfig, IpcConfig, McpConfig
from tps_admin.content.paths import CONTENT_PATH_ENV
from tps_admin.core.ipc import DaemonClient
from tps_admin.daemon import AdminDaemon, PidLock


@pytest.fixture
def config(socket_path, tmp_path):
    return AppConfig(
        ipc=IpcConfig(socket_path=socket_path, pid_file=str(tmp_path / "daemon.pid")),
        mcp=McpConfig(enabled=False),
    )


@pytest.fixture
def opener():
    return MagicMock()


@pytest.fixture
def daemon(config, store, opener):
    d = AdminDaemon(config, store=store, opener=opener)
    d.start()
    yield d
    d.stop()


@pytest.fixture
def client(socket_path):
    return DaemonClient(socket_path=socket_path, timeout=5.0)


class TestAdminDaemon:
    """End-to-end command calls over the Unix socket."""

    def test_ping(self, daemon, client):
        assert client.call("ping") == "pong"

    def test_greet_owner(self, daemon, client):
        assert client.call("greet_owner", name="Dana") == "Welcome back, Dana! Let's build unforgettable events."

    def test_open_calendar(self, daemon, client, opener):
        assert client.call("open_calendar") is None
        opener.assert_called_once_with("https://calendar.google.com")

    def test_load_seeds_default(self, daemon, client, default_document, store):
        assert client.call("load_image_content") == default_document
        assert store.path.is_file()

    def test_save_and_load(self, daemon, client, sample_document):
        saved = client.call("save_image_content", content=sample_document)
        assert "updatedAt" in saved
        assert client.call("load_image_content") == saved

    def test_save_non_object(self, daemon, client):
        assert client.call("save_image_content", content="just text") == "just text"
        assert client.call("load_image_content") == "just text"

    def test_content_error_surfaces_as_string(self, daemon, client, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{broken")

        with pytest.raises(RuntimeError, match="^DeserializationError:"):
            client.call("load_image_content")

    def test_stop_removes_socket(self, config, store, opener, socket_path):
        d = AdminDaemon(config, store=store, opener=opener)
        d.start()
        d.stop()
        assert not os.path.exists(socket_path)
        assert not d.running


class TestPidLock:

    def test_acquire_writes_pid(self, tmp_path):
        lock = PidLock(tmp_path / "d.pid")
        try:
            assert lock.acquire()
            assert (tmp_path / "d.pid").read_text().strip() == str(os.getpid())
        finally:
            lock.release()
        assert not (tmp_path / "d.pid").exists()

    def test_second_acquire_fails(self, tmp_path):
        first = PidLock(tmp_path / "d.pid")
        second = PidLock(tmp_path / "d.pid")
        try:
            assert first.acquire()
            assert not second.acquire()
        finally:
            second.release()
            first.release()

    def test_release_twice_is_safe(self, tmp_path):
        lock = PidLock(tmp_path / "d.pid")
        assert lock.acquire()
        lock.release()
        lock.release()
        assert not (tmp_path / "d.pid").exists()

    def test_stale_pid_file_is_replaced(self, tmp_path):
        pid_file = tmp_path / "d.pid"
        pid_file.write_text("not-a-pid\n")

        lock = PidLock(pid_file)
        try:
            assert lock.acquire()
        finally:
            lock.release()


class TestDumpMode:
    """``tps-admin-daemon --dump`` prints the document and exits."""

    @pytest.fixture(autouse=True)
    def dump_args(self, monkeypatch, config):
        monkeypatch.setattr(sys, "argv", ["tps-admin-daemon", "--dump"])
        monkeypatch.setattr(daemon_module, "get_config", lambda: config)

    def test_prints_document(self, monkeypatch, tmp_path, capsys, default_document):
        path = tmp_path / "dump" / "images.json"
        monkeypatch.setenv(CONTENT_PATH_ENV, str(path))

        daemon_module.main()

        assert json.loads(capsys.readouterr().out) == default_document
        assert path.is_file()

    def test_unreadable_content_exits_with_error(self, monkeypatch, tmp_path, capsys, caplog):
        path = tmp_path / "images.json"
        path.write_text("{broken")
        monkeypatch.setenv(CONTENT_PATH_ENV, str(path))

        with pytest.raises(SystemExit) as exc_info:
            daemon_module.main()

        assert exc_info.value.code == 1
        assert "Cannot load image content: DeserializationError:" in caplog.text
        assert capsys.readouterr().out == ""
        assert path.read_text() == "{broken"
