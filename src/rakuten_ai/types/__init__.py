"""SDK type definitions."""

from .content import FileInput, ImageInput, InputContent, OpaquePayload, TextInput, UploadedFile
from .events import (
    ChatEvent,
    DisconnectedEvent,
    DoneEvent,
    ErrorEvent,
    ImageEvent,
    ImageThumbnailEvent,
    NotificationEvent,
    ReasoningDeltaEvent,
    ReasoningStartEvent,
    TextDeltaEvent,
    ToolCallEvent,
)
from .wire import ChatMode

__all__ = [
    "ChatEvent",
    "ChatMode",
    "DisconnectedEvent",
    "DoneEvent",
    "ErrorEvent",
    "FileInput",
    "ImageEvent",
    "ImageInput",
    "ImageThumbnailEvent",
    "InputContent",
    "NotificationEvent",
    "OpaquePayload",
    "ReasoningDeltaEvent",
    "ReasoningStartEvent",
    "TextDeltaEvent",
    "TextInput",
    "ToolCallEvent",
    "UploadedFile",
]
