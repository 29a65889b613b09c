"""
mpv (mpvpaper) control over its JSON IPC socket.

PlayerControl owns the one persistent player connection. Pause queries and
pause/resume commands never raise: a failed query reads as "not paused" and a
failed command is logged, leaving the next tick to retry. Screenshot and
screenshot-directory commands raise, because the color pipeline cannot run
without them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Type

from mpvpaper_stop.common.errors import (
    ChannelUnavailable,
    ColorSchemeError,
    PlayerConfigurationError,
    ResponseDecodeError,
)
from mpvpaper_stop.common.settings import settings
from mpvpaper_stop.ipc.channel import ResponseFraming, UnixSocketChannel
from mpvpaper_stop.protocol.message import (
    MpvCommand,
    MpvCommandBuilder,
    MpvReply,
    PausePropertyReply,
    ReplyT,
    ScreenshotReply,
    mpvReplyObject_extract,
    mpvReplyObject_validate,
)

logger = logging.getLogger(__name__)

__all__ = ["PlayerControl"]


class PlayerControl:
    """High-level mpv operations on top of a UnixSocketChannel."""

    def __init__(self, channel: UnixSocketChannel) -> None:
        self.channel: UnixSocketChannel = channel

    @classmethod
    def fromPath_create(
        cls,
        socket_path: str,
        buffer_size: int = settings.DEFAULT_BUFFER_SIZE,
        timeout_seconds: float | None = None,
    ) -> "PlayerControl":
        """Build a controller over a persistent, line-framed mpv channel."""
        channel = UnixSocketChannel(
            path=socket_path,
            name="mpv",
            framing=ResponseFraming.LINE,
            reconnect_each_request=False,
            buffer_size=buffer_size,
            timeout_seconds=timeout_seconds,
        )
        return cls(channel)

    def connection_establish(self) -> None:
        """
        Open the player connection.

        Raises:
            ChannelUnavailable: Raised when the socket cannot be connected.
        """
        self.channel.connection_establish()

    def connection_close(self) -> None:
        self.channel.connection_close()

    def reply_request(self, command: MpvCommand, model: Type[ReplyT]) -> ReplyT:
        """
        Send one command and decode its reply.

        Event lines that arrive ahead of the reply are skipped, reading again
        up to `settings.MPV_EVENT_READ_LIMIT` times.

        Raises:
            ChannelUnavailable: Raised on transport failure.
            ResponseDecodeError: Raised when no valid reply arrives.
        """
        logger.debug("mpv <- %s", command.json_serialize())
        raw: bytes = self.channel.request(command.line_serialize())
        for _ in range(settings.MPV_EVENT_READ_LIMIT):
            logger.debug("mpv -> %r", raw)
            obj = mpvReplyObject_extract(raw)
            if obj is not None:
                return mpvReplyObject_validate(obj, model)
            raw = self.channel.response_read()
        raise ResponseDecodeError(
            f"No reply to {command.json_serialize()} after "
            f"{settings.MPV_EVENT_READ_LIMIT} event reads"
        )

    def paused_query(self) -> bool:
        """
        Read the `pause` property.

        Returns:
            True only when mpv reports a boolean true; any failure reads False.
        """
        try:
            reply = self.reply_request(MpvCommandBuilder.pauseQuery_create(), PausePropertyReply)
        except (ChannelUnavailable, ResponseDecodeError) as exc:
            logger.error("Failed to query pause status: %s", exc)
            return False
        return reply.data

    def paused_set(self, paused: bool) -> None:
        """
        Set the `pause` property; the reply is read and discarded.

        Failures are logged only. A transport failure drops the connection,
        which is reopened on the next request.
        """
        logger.info("Pausing" if paused else "Resuming")
        try:
            self.reply_request(MpvCommandBuilder.pauseSet_create(paused), MpvReply)
        except (ChannelUnavailable, ResponseDecodeError) as exc:
            logger.error("Failed to %s player: %s", "pause" if paused else "resume", exc)

    def screenshot_take(self) -> Optional[Path]:
        """
        Ask mpv to write a screenshot of the current frame.

        Returns:
            Path of the new screenshot, or None when mpv reports no new file
            (a screenshot already exists).

        Raises:
            ColorSchemeError: Raised on transport failure or an mpv error.
        """
        logger.debug("Attempting to perform screenshot...")
        try:
            reply = self.reply_request(MpvCommandBuilder.screenshot_create(), ScreenshotReply)
        except (ChannelUnavailable, ResponseDecodeError) as exc:
            raise ColorSchemeError(f"Failed to perform a screenshot: {exc}") from exc

        if reply.error is not None and not reply.succeeded:
            raise ColorSchemeError(f"Failed to perform a screenshot: {reply.error}")
        if reply.filename is None:
            logger.info("Screenshot already exists, skipping")
            return None
        return Path(reply.filename)

    def screenshotDirectory_set(self, path: str) -> None:
        """
        Point mpv's `screenshot-dir` at the daemon's temp directory.

        Raises:
            PlayerConfigurationError: Raised unless mpv replies with
                `"error": "success"`.
        """
        try:
            reply = self.reply_request(
                MpvCommandBuilder.screenshotDirectorySet_create(path), MpvReply
            )
        except (ChannelUnavailable, ResponseDecodeError) as exc:
            raise PlayerConfigurationError(f"Failed to set screenshot dir: {exc}") from exc
        if not reply.succeeded:
            raise PlayerConfigurationError(
                f"Failed to set screenshot dir to {path}: {reply.error!r}"
            )
        logger.info("Screenshot directory successfully set to %s", path)
