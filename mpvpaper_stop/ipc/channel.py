"""
Unix domain socket transport for the Hyprland and mpv IPC channels.

This module owns connection lifecycle and one-request/one-response I/O. It
knows nothing about the JSON carried on the wire; protocol decoding lives in
`mpvpaper_stop.protocol.message`.
"""

from __future__ import annotations

import logging
import socket
from enum import Enum

from mpvpaper_stop.common.errors import ChannelUnavailable
from mpvpaper_stop.common.settings import settings

logger = logging.getLogger(__name__)

# Maximum buffer size to prevent memory exhaustion (1MB).
MAX_BUFFER_SIZE = 1024 * 1024


class ResponseFraming(Enum):
    """How the end of one response is recognized"""
    LINE = "line"  # Response complete once the buffer ends with a newline
    EOF = "eof"    # Peer closes the connection after replying


class UnixSocketChannel:
    """
    Blocking request/response channel over a Unix stream socket.

    The loop that owns a channel is single-threaded, so at most one request is
    in flight: every `request()` writes its payload and then reads the reply
    before returning.

    Two connection policies are supported:

    * `reconnect_each_request=True` opens a fresh connection for every request.
      Hyprland closes its request socket after each reply, and a restarted
      compositor never leaves a dead descriptor behind.
    * `reconnect_each_request=False` keeps one connection for the daemon's
      lifetime. After a failed write or read the connection is dropped and the
      next request reconnects once before sending.
    """

    def __init__(
        self,
        path: str,
        name: str,
        framing: ResponseFraming = ResponseFraming.LINE,
        reconnect_each_request: bool = False,
        buffer_size: int = settings.DEFAULT_BUFFER_SIZE,
        timeout_seconds: float | None = None,
    ) -> None:
        """
        Initialize channel configuration without connecting.

        Args:
            path:
                Filesystem path of the Unix socket.
            name:
                Short channel name used in log messages.
            framing:
                Response framing policy.
            reconnect_each_request:
                Whether every request uses a fresh connection.
            buffer_size:
                Bytes requested per `recv()` call.
            timeout_seconds:
                Optional socket timeout; `None` blocks indefinitely.
        """
        self.path: str = path
        self.name: str = name
        self.framing: ResponseFraming = framing
        self.reconnect_each_request: bool = reconnect_each_request
        self.buffer_size: int = buffer_size
        self.timeout_seconds: float | None = timeout_seconds

        self.socket: socket.socket | None = None
        self.is_connected: bool = False

    def connection_establish(self) -> None:
        """
        Open the socket and connect to the peer.

        Raises:
            ChannelUnavailable:
                Raised when the socket cannot be created or connected.
        """
        self.socket_cleanup()
        try:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        except OSError as exc:
            raise ChannelUnavailable(f"{self.name}: socket error: {exc}") from exc
        try:
            sock.settimeout(self.timeout_seconds)
            sock.connect(self.path)
        except OSError as exc:
            sock.close()
            raise ChannelUnavailable(
                f"{self.name}: connection to socket {self.path} failed: {exc}"
            ) from exc
        self.socket = sock
        self.is_connected = True
        logger.debug("%s: connected to %s", self.name, self.path)

    def socket_cleanup(self) -> None:
        """
        Close and reset socket handle.

        Close errors are logged at debug level because the caller is already
        discarding the connection.
        """
        if self.socket is None:
            return
        try:
            self.socket.close()
        except OSError as exc:
            logger.debug("%s: error closing socket: %s", self.name, exc)
        self.socket = None
        self.is_connected = False

    def connection_close(self) -> None:
        """
        Close the connection. Idempotent.
        """
        was_connected = self.is_connected
        self.socket_cleanup()
        if was_connected:
            logger.debug("%s: connection closed", self.name)

    def connectionForRequest_prepare(self) -> socket.socket:
        """
        Apply the connection policy before a request is written.

        Returns:
            Connected socket.

        Raises:
            ChannelUnavailable:
                Raised when (re)connecting fails.
        """
        if self.reconnect_each_request:
            self.connection_establish()
        elif not self.is_connected or self.socket is None:
            logger.info("%s: reconnecting to %s", self.name, self.path)
            self.connection_establish()
        assert self.socket is not None
        return self.socket

    def request(self, payload: bytes) -> bytes:
        """
        Write one request and read its response.

        Args:
            payload:
                Raw request bytes, already framed for the peer.

        Returns:
            Raw response bytes.

        Raises:
            ChannelUnavailable:
                Raised on connect/write failure or an empty read. The
                connection is closed and will be reopened on next use.
        """
        sock = self.connectionForRequest_prepare()
        try:
            sock.sendall(payload)
        except OSError as exc:
            self.socket_cleanup()
            raise ChannelUnavailable(f"{self.name}: write to socket failed: {exc}") from exc
        return self.response_read()

    def response_read(self) -> bytes:
        """
        Read one framed response from the connected peer.

        Returns:
            Raw response bytes (never empty).

        Raises:
            ChannelUnavailable:
                Raised on read error, timeout, oversize response, or when the
                peer closes without sending anything.
        """
        if not self.is_connected or self.socket is None:
            raise ChannelUnavailable(f"{self.name}: not connected")

        buffer = bytearray()
        while True:
            try:
                chunk: bytes = self.socket.recv(self.buffer_size)
            except OSError as exc:
                self.socket_cleanup()
                raise ChannelUnavailable(f"{self.name}: read from socket failed: {exc}") from exc

            if not chunk:
                self.socket_cleanup()
                break
            buffer.extend(chunk)
            if len(buffer) > MAX_BUFFER_SIZE:
                self.socket_cleanup()
                raise ChannelUnavailable(
                    f"{self.name}: response exceeds {MAX_BUFFER_SIZE} bytes"
                )
            if self.framing is ResponseFraming.LINE and buffer.endswith(b"\n"):
                break

        if not buffer:
            raise ChannelUnavailable(f"{self.name}: empty response")
        if self.reconnect_each_request:
            self.socket_cleanup()
        return bytes(buffer)
