"""Events yielded to callers of `Session.send_message` and `Session.notifications`.

Each logical request produces an ordered sequence of these events ending with exactly one terminal event:

- DoneEvent: the backend finished answering
- ErrorEvent: the backend reported an error for this request
- DisconnectedEvent: the session closed or the connection was lost before the request finished
"""

from typing import TypeAlias, cast

from ._events import TypedEvent
from .content import OpaquePayload


class TextDeltaEvent(TypedEvent):
    """Incremental answer text.

    Parameters:
        text: Text fragment as sent by the backend.
    """

    def __init__(self, text: str) -> None:
        """Initialize with text fragment."""
        super().__init__({"type": "text_delta", "text": text})

    @property
    def text(self) -> str:
        """Text fragment."""
        return cast(str, self["text"])


class ReasoningStartEvent(TypedEvent):
    """The backend started thinking before answering."""

    def __init__(self) -> None:
        """Initialize reasoning start event."""
        super().__init__({"type": "reasoning_start"})


class ReasoningDeltaEvent(TypedEvent):
    """Incremental reasoning summary text.

    Parameters:
        text: Reasoning fragment as sent by the backend.
    """

    def __init__(self, text: str) -> None:
        """Initialize with reasoning fragment."""
        super().__init__({"type": "reasoning_delta", "text": text})

    @property
    def text(self) -> str:
        """Reasoning fragment."""
        return cast(str, self["text"])


class ToolCallEvent(TypedEvent):
    """Tool invocation payload.

    The contents are passed through exactly as received; their schema is owned by the backend.

    Parameters:
        contents: Raw content items of the tool call chunk.
    """

    def __init__(self, contents: OpaquePayload) -> None:
        """Initialize with raw tool call contents."""
        super().__init__({"type": "tool_call", "contents": contents})

    @property
    def contents(self) -> OpaquePayload:
        """Raw tool call contents."""
        return cast(OpaquePayload, self["contents"])

    def as_dict(self) -> dict:
        """Convert this event to a raw dictionary with the contents unwrapped."""
        return {**self, "contents": self.contents.value}


class ImageThumbnailEvent(TypedEvent):
    """Preview of an image that is still being generated.

    Parameters:
        url: Preview URL.
    """

    def __init__(self, url: str) -> None:
        """Initialize with preview URL."""
        super().__init__({"type": "image_thumbnail", "url": url})

    @property
    def url(self) -> str:
        """Preview URL."""
        return cast(str, self["url"])


class ImageEvent(TypedEvent):
    """Final generated image.

    Parameters:
        url: URL of the finished image.
    """

    def __init__(self, url: str) -> None:
        """Initialize with final image URL."""
        super().__init__({"type": "image", "url": url})

    @property
    def url(self) -> str:
        """Final image URL."""
        return cast(str, self["url"])


class DoneEvent(TypedEvent):
    """The backend finished answering the request."""

    def __init__(self) -> None:
        """Initialize done event."""
        super().__init__({"type": "done"})

    @property
    def is_terminal(self) -> bool:
        """Done always ends the request."""
        return True


class ErrorEvent(TypedEvent):
    """The backend reported an error scoped to this request.

    Parameters:
        code: Backend error code.
        message: Human readable error message.
        trace_id: Backend trace identifier.
        trace_url: Link to the backend trace.
        thread_id: Thread the failed request belonged to.
    """

    def __init__(
        self,
        code: str,
        message: str,
        trace_id: str | None = None,
        trace_url: str | None = None,
        thread_id: str | None = None,
    ) -> None:
        """Initialize error event."""
        super().__init__(
            {
                "type": "error",
                "code": code,
                "message": message,
                "trace_id": trace_id,
                "trace_url": trace_url,
                "thread_id": thread_id,
            }
        )

    @property
    def code(self) -> str:
        """Backend error code."""
        return cast(str, self["code"])

    @property
    def message(self) -> str:
        """Error message."""
        return cast(str, self["message"])

    @property
    def is_terminal(self) -> bool:
        """Errors always end the request."""
        return True


class DisconnectedEvent(TypedEvent):
    """The request ended because its channel closed without a terminal frame.

    Parameters:
        reason: Why the channel closed (session closed, reconnect failed, ...).
    """

    def __init__(self, reason: str) -> None:
        """Initialize with close reason."""
        super().__init__({"type": "disconnected", "reason": reason})

    @property
    def reason(self) -> str:
        """Close reason."""
        return cast(str, self["reason"])

    @property
    def is_terminal(self) -> bool:
        """Disconnects always end the request."""
        return True


class NotificationEvent(TypedEvent):
    """Broadcast notification that is not tied to any request.

    Parameters:
        action: Notification kind (e.g., THREAD_DATA).
        data: Raw notification data.
    """

    def __init__(self, action: str, data: OpaquePayload) -> None:
        """Initialize notification event."""
        super().__init__({"type": "notification", "action": action, "data": data})

    @property
    def action(self) -> str:
        """Notification kind."""
        return cast(str, self["action"])

    @property
    def data(self) -> OpaquePayload:
        """Raw notification data."""
        return cast(OpaquePayload, self["data"])

    def as_dict(self) -> dict:
        """Convert this event to a raw dictionary with the data unwrapped."""
        return {**self, "data": self.data.value}


ChatEvent: TypeAlias = (
    TextDeltaEvent
    | ReasoningStartEvent
    | ReasoningDeltaEvent
    | ToolCallEvent
    | ImageThumbnailEvent
    | ImageEvent
    | DoneEvent
    | ErrorEvent
    | DisconnectedEvent
)
