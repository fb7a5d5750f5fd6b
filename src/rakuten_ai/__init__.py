"""A streaming client for the Rakuten AI chat backend."""

from .api import RestClient
from .identifier import generate_device_id
from .session import Session
from .signing import Signer
from .stream.connection import ConnectionState
from .types.content import UploadedFile
from .types.events import (
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
from .user import User

__all__ = [
    "ChatEvent",
    "ConnectionState",
    "DisconnectedEvent",
    "DoneEvent",
    "ErrorEvent",
    "ImageEvent",
    "ImageThumbnailEvent",
    "NotificationEvent",
    "ReasoningDeltaEvent",
    "ReasoningStartEvent",
    "RestClient",
    "Session",
    "Signer",
    "TextDeltaEvent",
    "ToolCallEvent",
    "UploadedFile",
    "User",
    "generate_device_id",
]
