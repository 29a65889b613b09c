"""Pytest configuration and shared fixtures for mpvpaper-stop tests

This module provides in-process fake mpv and Hyprland IPC peers listening on
real Unix sockets, plus common fixtures used across unit and integration
tests.
"""

import json
import logging
import shutil
import socket
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import pytest


class FakeMpvServer:
    """Minimal mpv JSON IPC peer

    Keeps a `pause` property, answers `screenshot` and `screenshot-dir`
    commands with configurable replies, and records every command received.
    """

    def __init__(self, path: str) -> None:
        self.path: str = path
        self.paused: bool = False
        self.commands: list[list[Any]] = []
        self.screenshot_reply: dict[str, Any] = {"data": None, "error": "success"}
        self.screenshot_dir_error: str = "success"
        self.events_before_reply: list[dict[str, Any]] = []
        self.drop_next: bool = False
        self.connections: int = 0
        self._server: Optional[socket.socket] = None
        self._running: bool = False
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        self._server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._server.bind(self.path)
        self._server.listen(4)
        self._server.settimeout(0.05)
        self._running = True
        accept_thread = threading.Thread(target=self._accept_loop, daemon=True)
        accept_thread.start()
        self._threads.append(accept_thread)

    def stop(self) -> None:
        self._running = False
        for thread in self._threads:
            thread.join(timeout=1.0)
        if self._server is not None:
            self._server.close()

    def _accept_loop(self) -> None:
        assert self._server is not None
        while self._running:
            try:
                conn, _ = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            self.connections += 1
            thread = threading.Thread(target=self._serve, args=(conn,), daemon=True)
            thread.start()
            self._threads.append(thread)

    def _serve(self, conn: socket.socket) -> None:
        conn.settimeout(0.05)
        buffer = b""
        with conn:
            while self._running:
                try:
                    chunk = conn.recv(4096)
                except socket.timeout:
                    continue
                except OSError:
                    return
                if not chunk:
                    return
                buffer += chunk
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    if not line.strip():
                        continue
                    if self.drop_next:
                        self.drop_next = False
                        return
                    reply = self._handle(json.loads(line)["command"])
                    out = b"".join(
                        json.dumps(event).encode() + b"\n" for event in self.events_before_reply
                    )
                    out += json.dumps(reply).encode() + b"\n"
                    conn.sendall(out)

    def _handle(self, command: list[Any]) -> dict[str, Any]:
        self.commands.append(command)
        if command == ["get_property", "pause"]:
            return {"data": self.paused, "request_id": 0, "error": "success"}
        if command[:2] == ["set_property", "pause"]:
            self.paused = bool(command[2])
            return {"request_id": 0, "error": "success"}
        if command[:2] == ["set_property", "screenshot-dir"]:
            return {"request_id": 0, "error": self.screenshot_dir_error}
        if command == ["screenshot"]:
            return dict(self.screenshot_reply)
        return {"request_id": 0, "error": "invalid parameter"}


class FakeHyprlandServer:
    """Hyprland request socket peer: one reply per connection, then close"""

    def __init__(self, path: str) -> None:
        self.path: str = path
        self.reply: Callable[[], bytes] = lambda: b'{"id": 1, "name": "1", "windows": 0}'
        self.requests: list[bytes] = []
        self._server: Optional[socket.socket] = None
        self._running: bool = False
        self._thread: Optional[threading.Thread] = None

    def windows_set(self, count: int) -> None:
        payload = json.dumps({"id": 1, "name": "1", "monitor": "DP-1", "windows": count}, indent=4)
        self.reply = lambda: payload.encode()

    def start(self) -> None:
        self._server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._server.bind(self.path)
        self._server.listen(4)
        self._server.settimeout(0.05)
        self._running = True
        self._thread = threading.Thread(target=self._accept_loop, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=1.0)
        if self._server is not None:
            self._server.close()

    def _accept_loop(self) -> None:
        assert self._server is not None
        while self._running:
            try:
                conn, _ = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with conn:
                conn.settimeout(1.0)
                try:
                    request = conn.recv(4096)
                    if not request:
                        continue
                    self.requests.append(request)
                    conn.sendall(self.reply())
                except OSError:
                    continue


@pytest.fixture
def socket_dir() -> Generator[Path, None, None]:
    """Short temporary directory for Unix sockets (sun_path is ~108 bytes)"""
    path = Path(tempfile.mkdtemp(prefix="mps-", dir="/tmp"))
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def mpv_server(socket_dir: Path) -> Generator[FakeMpvServer, None, None]:
    """Running fake mpv IPC peer"""
    server = FakeMpvServer(str(socket_dir / "mpv.sock"))
    server.start()
    yield server
    server.stop()


@pytest.fixture
def hyprland_server(socket_dir: Path) -> Generator[FakeHyprlandServer, None, None]:
    """Running fake Hyprland request socket peer"""
    server = FakeHyprlandServer(str(socket_dir / "hypr.sock"))
    server.start()
    yield server
    server.stop()


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Setup logging for tests"""
    caplog.set_level(logging.DEBUG)


@pytest.fixture
def hyprland_server_factory(socket_dir: Path) -> Generator[Callable[[], FakeHyprlandServer], None, None]:
    """Start fresh fake Hyprland peers on one socket path, as after a restart"""
    servers: list[FakeHyprlandServer] = []
    path = socket_dir / "hypr-restart.sock"

    def factory() -> FakeHyprlandServer:
        for server in servers:
            server.stop()
        path.unlink(missing_ok=True)
        server = FakeHyprlandServer(str(path))
        server.start()
        servers.append(server)
        return server

    yield factory
    for server in servers:
        server.stop()


@pytest.fixture
def hyprland_session(socket_dir: Path, monkeypatch) -> Generator[FakeHyprlandServer, None, None]:
    """Fake Hyprland peer at the path the session environment points to"""
    signature = "itest"
    socket_file = socket_dir / "hypr" / signature / ".socket.sock"
    socket_file.parent.mkdir(parents=True)
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(socket_dir))
    monkeypatch.setenv("HYPRLAND_INSTANCE_SIGNATURE", signature)
    server = FakeHyprlandServer(str(socket_file))
    server.start()
    yield server
    server.stop()
