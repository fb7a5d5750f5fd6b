"""Websocket streaming: connection supervision, frame routing and event translation."""

from .connection import ConnectionState, ConnectionSupervisor
from .demux import Demultiplexer, PendingRequest
from .encoder import RequestEncoder
from .frames import AckFrame, ConversationChunkFrame, InboundFrame, NotificationFrame, ProtocolErrorFrame, parse_frame
from .translator import EventTranslator

__all__ = [
    "AckFrame",
    "ConnectionState",
    "ConnectionSupervisor",
    "ConversationChunkFrame",
    "Demultiplexer",
    "EventTranslator",
    "InboundFrame",
    "NotificationFrame",
    "PendingRequest",
    "ProtocolErrorFrame",
    "RequestEncoder",
    "parse_frame",
]
