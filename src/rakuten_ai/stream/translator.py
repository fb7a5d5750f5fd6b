"""Translation of one request's frames into caller events.

Content items of APPEND chunks are dispatched by content type:

- TEXT on the AI_ANSWER channel: answer text
- TEXT on the EVENT channel: status messages; only the thinking sentinel surfaces, as a reasoning start
- SUMMARY_TEXT: reasoning text
- OUTPUT_IMAGE: thumbnail, then final image once available

TOOL_CALL chunks pass their contents through wrapped in an OpaquePayload. Content items of a known type whose
fields have the wrong shape are skipped like unknown ones. DONE chunks and protocol errors end the request.
"""

import logging
from typing import Any, AsyncGenerator

from pydantic import TypeAdapter, ValidationError

from ..types.content import OpaquePayload
from ..types.events import (
    ChatEvent,
    DisconnectedEvent,
    DoneEvent,
    ErrorEvent,
    ImageEvent,
    ImageThumbnailEvent,
    ReasoningDeltaEvent,
    ReasoningStartEvent,
    TextDeltaEvent,
    ToolCallEvent,
)
from ..types.exceptions import UnrecognizedContent
from ..types.wire import OutputImageContent, TextContent
from .demux import ChannelClosed, PendingRequest
from .frames import AckFrame, ConversationChunkFrame, ProtocolErrorFrame

logger = logging.getLogger(__name__)

THINKING_SENTINEL = "思考中..."
"""Event channel text the backend sends when it starts thinking."""

SEARCHING_SENTINEL = "検索中..."
"""Event channel text the backend sends when it starts searching."""

_TEXT_CONTENT_ADAPTER = TypeAdapter(TextContent)
_OUTPUT_IMAGE_CONTENT_ADAPTER = TypeAdapter(OutputImageContent)


class EventTranslator:
    """Convert the frames of one request into caller events."""

    def __init__(
        self,
        thinking_sentinel: str = THINKING_SENTINEL,
        searching_sentinel: str = SEARCHING_SENTINEL,
    ) -> None:
        """Initialize translator.

        Args:
            thinking_sentinel: Event channel text that marks the start of reasoning.
            searching_sentinel: Event channel text that marks the start of a search.
        """
        self.thinking_sentinel = thinking_sentinel
        self.searching_sentinel = searching_sentinel

    async def translate(self, request: PendingRequest) -> AsyncGenerator[ChatEvent, None]:
        """Yield events for a request until it reaches a terminal event.

        Args:
            request: Pending request to consume frames from.

        Yields:
            Events in frame arrival order, ending with exactly one DoneEvent, ErrorEvent or DisconnectedEvent.
        """
        while True:
            frame = await request.get()

            if isinstance(frame, ChannelClosed):
                logger.debug(
                    "correlation_id=<%s>, reason=<%s> | request disconnected", request.correlation_id, frame.reason
                )
                yield DisconnectedEvent(frame.reason)
                return

            if isinstance(frame, ProtocolErrorFrame):
                logger.warning(
                    "correlation_id=<%s>, code=<%s>, message=<%s> | backend reported error",
                    request.correlation_id,
                    frame.code,
                    frame.message,
                )
                yield ErrorEvent(frame.code, frame.message, frame.trace_id, frame.trace_url, frame.thread_id)
                return

            if isinstance(frame, AckFrame):
                logger.debug(
                    "correlation_id=<%s>, action=<%s> | request acknowledged", request.correlation_id, frame.action
                )
                continue

            if not isinstance(frame, ConversationChunkFrame):
                logger.warning("frame=<%s> | unexpected frame for request", frame)
                continue

            for event in self.convert_chunk(frame):
                yield event

            if frame.is_terminal:
                return

    def convert_chunk(self, chunk: ConversationChunkFrame) -> list[ChatEvent]:
        """Convert one conversation chunk to events.

        Args:
            chunk: Chunk to convert.

        Returns:
            Events in content order.
        """
        if chunk.status == "DONE":
            return [DoneEvent()]

        if chunk.status == "TOOL_CALL":
            return [ToolCallEvent(OpaquePayload(chunk.contents))]

        if chunk.status != "APPEND":
            logger.warning("status=<%s>, action=<%s> | unsupported chat response status", chunk.status, chunk.action)
            return []

        events: list[ChatEvent] = []
        for content in chunk.contents:
            try:
                events.extend(self._convert_content(chunk.action, content))
            except UnrecognizedContent as error:
                logger.warning("content=<%s> | %s", content, error)

        return events

    def _convert_content(self, action: str, content: dict[str, Any]) -> list[ChatEvent]:
        content_type = content.get("contentType")

        if content_type in ("TEXT", "SUMMARY_TEXT"):
            text = (self._validate_content(_TEXT_CONTENT_ADAPTER, content).get("textData") or {}).get("text")
            if content_type == "SUMMARY_TEXT":
                return [ReasoningDeltaEvent(text or "")]

            if action == "EVENT":
                return self._convert_status_text(text)

            return [TextDeltaEvent(text or "")]

        if content_type == "OUTPUT_IMAGE":
            output_image = self._validate_content(_OUTPUT_IMAGE_CONTENT_ADAPTER, content)

            # Multiple concurrent images are indistinguishable on the wire, so only the first is tracked.
            image_gens = (output_image.get("outputImageData") or {}).get("imageGens") or []
            if not image_gens:
                raise UnrecognizedContent("output image without image generations")

            image = image_gens[0]
            events: list[ChatEvent] = [ImageThumbnailEvent(image.get("thumbnail", ""))]
            preview = image.get("preview")
            if preview:
                events.append(ImageEvent(preview))
            return events

        raise UnrecognizedContent(f"unsupported content type {content_type}")

    @staticmethod
    def _validate_content(adapter: TypeAdapter[Any], content: dict[str, Any]) -> Any:
        try:
            return adapter.validate_python(content)
        except ValidationError as error:
            raise UnrecognizedContent(
                f"malformed {content.get('contentType')} content: {error.error_count()} validation error(s)"
            ) from error

    def _convert_status_text(self, text: str | None) -> list[ChatEvent]:
        if text == self.thinking_sentinel:
            return [ReasoningStartEvent()]

        if text == self.searching_sentinel:
            logger.debug("backend searching")
        else:
            logger.debug("text=<%s> | ignoring event channel text", text)

        return []
