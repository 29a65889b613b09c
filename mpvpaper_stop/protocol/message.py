"""Wire messages for the Hyprland and mpv IPC protocols

Requests are built by MpvCommandBuilder. Replies are decoded into pydantic
models whose validators apply per-field fallbacks, so a reply with a missing
or mistyped optional field decodes to its default instead of failing.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from mpvpaper_stop.common.errors import ResponseDecodeError
from mpvpaper_stop.common.settings import settings

ReplyT = TypeVar("ReplyT", bound=BaseModel)


# =============================================================================
# Hyprland
# =============================================================================


class ActiveWorkspaceResponse(BaseModel):
    """Reply to `j/activeworkspace` / `hyprctl activeworkspace -j`"""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: Optional[str] = None
    windows: int = 0

    @field_validator("windows", mode="before")
    @classmethod
    def windows_coerce(cls, value: Any) -> int:
        """Missing or non-numeric window counts read as zero"""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return int(value)

    @field_validator("id", mode="before")
    @classmethod
    def id_coerce(cls, value: Any) -> Optional[int]:
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    @field_validator("name", mode="before")
    @classmethod
    def name_coerce(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


# =============================================================================
# mpv
# =============================================================================


class MpvReply(BaseModel):
    """Generic mpv IPC reply: `{"data": ..., "error": "success"}`"""

    model_config = ConfigDict(extra="ignore")

    error: Optional[str] = None
    data: Any = None
    request_id: Optional[int] = None

    @field_validator("error", mode="before")
    @classmethod
    def error_coerce(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @property
    def succeeded(self) -> bool:
        """True when mpv reported `"error": "success"`"""
        return self.error == settings.MPV_SUCCESS


class PausePropertyReply(MpvReply):
    """Reply to `get_property pause`; non-boolean data means not paused"""

    data: bool = False

    @field_validator("data", mode="before")
    @classmethod
    def data_coerce(cls, value: Any) -> bool:
        return value if isinstance(value, bool) else False


class ScreenshotData(BaseModel):
    """`data` object of a screenshot reply"""

    model_config = ConfigDict(extra="ignore")

    filename: Optional[str] = None

    @field_validator("filename", mode="before")
    @classmethod
    def filename_coerce(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) and value else None


class ScreenshotReply(MpvReply):
    """Reply to `screenshot`; no filename means the file already existed"""

    data: Optional[ScreenshotData] = None

    @field_validator("data", mode="before")
    @classmethod
    def data_coerce(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @property
    def filename(self) -> Optional[str]:
        """Path of the newly written screenshot, if any"""
        return self.data.filename if self.data is not None else None


@dataclass(frozen=True)
class MpvCommand:
    """One mpv JSON IPC command"""

    command: tuple[Any, ...]

    def json_serialize(self) -> str:
        """Serialize to the JSON object mpv expects"""
        return json.dumps({"command": list(self.command)})

    def line_serialize(self) -> bytes:
        """Serialize to a newline-terminated wire line"""
        return (self.json_serialize() + "\n").encode("utf-8")


class MpvCommandBuilder:
    """Builds the mpv commands the daemon sends"""

    @staticmethod
    def pauseQuery_create() -> MpvCommand:
        """`{"command": ["get_property", "pause"]}`"""
        return MpvCommand(command=("get_property", "pause"))

    @staticmethod
    def pauseSet_create(paused: bool) -> MpvCommand:
        """`{"command": ["set_property", "pause", <paused>]}`"""
        return MpvCommand(command=("set_property", "pause", bool(paused)))

    @staticmethod
    def screenshot_create() -> MpvCommand:
        """`{"command": ["screenshot"]}`"""
        return MpvCommand(command=("screenshot",))

    @staticmethod
    def screenshotDirectorySet_create(path: str) -> MpvCommand:
        """`{"command": ["set_property", "screenshot-dir", <path>]}`"""
        return MpvCommand(command=("set_property", "screenshot-dir", str(path)))


# =============================================================================
# Decoding
# =============================================================================


def _text_decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ResponseDecodeError(f"Response is not UTF-8: {e}") from e


def hyprlandResponse_decode(raw: bytes) -> ActiveWorkspaceResponse:
    """
    Decode a Hyprland active workspace reply

    The reply is one JSON object, possibly pretty-printed over many lines.

    Raises:
        ResponseDecodeError: If the payload is not a JSON object
    """
    try:
        return ActiveWorkspaceResponse.model_validate_json(_text_decode(raw))
    except ValidationError as e:
        raise ResponseDecodeError(f"Invalid Hyprland response: {e.errors()[0]['msg']}") from e


def mpvReplyObject_extract(raw: bytes) -> Optional[dict[str, Any]]:
    """
    Find the command reply among mpv output lines

    mpv interleaves asynchronous `{"event": ...}` lines with replies on the
    same socket; the first object without an `event` key is the reply.

    Returns:
        The reply object, or None when every line was an event

    Raises:
        ResponseDecodeError: If a line is not valid JSON
    """
    for line in _text_decode(raw).splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as e:
            raise ResponseDecodeError(f"Invalid mpv response line {line!r}: {e}") from e
        if isinstance(obj, dict) and "event" not in obj:
            return obj
    return None


def mpvReplyObject_validate(obj: dict[str, Any], model: Type[ReplyT]) -> ReplyT:
    """Validate an extracted reply object against a reply model"""
    try:
        return model.model_validate(obj)
    except ValidationError as e:
        raise ResponseDecodeError(f"Invalid mpv reply: {e.errors()[0]['msg']}") from e


def mpvReply_decode(raw: bytes, model: Type[ReplyT]) -> ReplyT:
    """
    Decode an mpv reply into the given reply model

    Args:
        raw: Bytes read from the mpv socket
        model: MpvReply subclass describing the expected reply

    Raises:
        ResponseDecodeError: If the payload holds no reply object
    """
    obj = mpvReplyObject_extract(raw)
    if obj is None:
        raise ResponseDecodeError(f"No reply object in mpv response {raw!r}")
    return mpvReplyObject_validate(obj, model)
