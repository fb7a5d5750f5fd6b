"""Inbound frame parsing.

Raw websocket messages are validated against the wire schema with pydantic and converted into one of four frame
types. The frame types are what the rest of the stream package works with; nothing downstream reads raw JSON.
"""

from dataclasses import dataclass, field
from typing import Any, TypeAlias, cast

from pydantic import TypeAdapter, ValidationError

from ..types.content import OpaquePayload
from ..types.exceptions import FrameParseError
from ..types.wire import ConversationData, ErrorBody, InboundEnvelope

_JSON_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any)
_ENVELOPE_ADAPTER = TypeAdapter(InboundEnvelope)
_CONVERSATION_ADAPTER = TypeAdapter(ConversationData)
_ERROR_ADAPTER = TypeAdapter(ErrorBody)


@dataclass(frozen=True)
class AckFrame:
    """Acknowledgment of a request.

    Attributes:
        correlation_id: Request the ack refers to, if the ack carries one.
        action: MESSAGE_RECEIVED_ACK or USER_INPUT_ACK.
        data: Raw ack data.
    """

    correlation_id: str | None
    action: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ConversationChunkFrame:
    """One chunk of an answer.

    Attributes:
        correlation_id: Request this chunk answers.
        action: AI_ANSWER for the primary answer channel, EVENT for the augmented event channel.
        status: APPEND, TOOL_CALL or DONE.
        contents: Ordered content items.
        thread_id: Thread identifier.
        trace_id: Backend trace identifier.
    """

    correlation_id: str
    action: str
    status: str
    contents: list[dict[str, Any]] = field(default_factory=list)
    thread_id: str | None = None
    trace_id: str | None = None

    @property
    def is_terminal(self) -> bool:
        """True for DONE chunks."""
        return self.status == "DONE"


@dataclass(frozen=True)
class NotificationFrame:
    """Broadcast notification with no owning request.

    Attributes:
        action: Notification kind.
        data: Raw notification data.
    """

    action: str
    data: OpaquePayload


@dataclass(frozen=True)
class ProtocolErrorFrame:
    """Error reported by the backend for one request.

    Attributes:
        correlation_id: Request the error belongs to.
        code: Error code.
        message: Error message.
        trace_id: Backend trace identifier.
        trace_url: Link to the backend trace.
        thread_id: Thread identifier.
    """

    correlation_id: str | None
    code: str
    message: str
    trace_id: str | None = None
    trace_url: str | None = None
    thread_id: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Errors always end their request."""
        return True


InboundFrame: TypeAlias = AckFrame | ConversationChunkFrame | NotificationFrame | ProtocolErrorFrame


def parse_frame(raw: str | bytes) -> InboundFrame:
    """Parse one websocket message into a frame.

    Args:
        raw: JSON text of the message. Messages wrapped as {"webSocket": {...}} are unwrapped.

    Returns:
        The parsed frame.

    Raises:
        FrameParseError: If the message is not valid JSON, does not match the wire schema, or lacks the fields
            required to route it.
    """
    try:
        decoded = _JSON_ADAPTER.validate_json(raw)
        if isinstance(decoded, dict) and isinstance(decoded.get("webSocket"), dict):
            decoded = decoded["webSocket"]

        envelope = _ENVELOPE_ADAPTER.validate_python(decoded)
    except ValidationError as error:
        raise FrameParseError(f"invalid frame: {error.error_count()} validation error(s)", raw) from error

    metadata = envelope.get("metadata", {})
    payload = envelope.get("payload", {})
    action = payload.get("action", "")
    data = payload.get("data", {})

    frame_type = envelope["type"]

    if frame_type == "ACK":
        return AckFrame(correlation_id=data.get("reqMessageId"), action=action, data=data)

    if frame_type == "NOTIFICATION":
        return NotificationFrame(action=action, data=OpaquePayload(data))

    if frame_type == "ERROR":
        return _parse_error(envelope, data, raw)

    try:
        conversation = _CONVERSATION_ADAPTER.validate_python(data)
    except ValidationError as error:
        raise FrameParseError("invalid conversation data", raw) from error

    correlation_id = conversation.get("reqMessageId") or metadata.get("messageId")
    if not correlation_id:
        raise FrameParseError("conversation frame without request id", raw)

    return ConversationChunkFrame(
        correlation_id=correlation_id,
        action=action,
        status=conversation.get("chatResponseStatus", ""),
        contents=conversation.get("contents", []),
        thread_id=conversation.get("threadId"),
        trace_id=conversation.get("trace", {}).get("id") or metadata.get("traceId"),
    )


def _parse_error(envelope: InboundEnvelope, data: dict[str, Any], raw: str | bytes) -> ProtocolErrorFrame:
    """Parse an ERROR frame.

    The error body may be top-level, nested under payload.data.error, or be payload.data itself.
    """
    body: Any = envelope.get("error") or data.get("error") or data

    try:
        error = _ERROR_ADAPTER.validate_python(body)
    except ValidationError as validation_error:
        raise FrameParseError("invalid error body", raw) from validation_error

    metadata = envelope.get("metadata", {})
    trace = error.get("trace", {})

    return ProtocolErrorFrame(
        correlation_id=cast(str | None, data.get("reqMessageId") or metadata.get("messageId")),
        code=str(error.get("code", "")),
        message=error.get("message", ""),
        trace_id=trace.get("id") or metadata.get("traceId"),
        trace_url=trace.get("url"),
        thread_id=error.get("threadId"),
    )
