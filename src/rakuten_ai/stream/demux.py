"""Routing of inbound frames to the requests that own them.

Every request in flight registers a `PendingRequest` under its correlation id. The session's distribution task hands
each inbound frame to `Demultiplexer.dispatch`, which enqueues it on the owning request's channel, fans it out to
notification subscribers, or drops it.

All methods are synchronous and run on the session's event loop. There is no suspension point between looking up
a registry entry and removing it, so terminal delivery and caller cancellation cannot both remove the same entry.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from .frames import AckFrame, ConversationChunkFrame, InboundFrame, NotificationFrame, ProtocolErrorFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelClosed:
    """Marker enqueued when a channel closes without a terminal frame.

    Attributes:
        reason: Why the channel closed.
    """

    reason: str


class PendingRequest:
    """One outstanding request and its private inbound channel."""

    def __init__(self, correlation_id: str) -> None:
        """Initialize an open channel.

        Args:
            correlation_id: Identifier echoed by the backend on every frame of this exchange.
        """
        self.correlation_id = correlation_id
        self._queue: asyncio.Queue[InboundFrame | ChannelClosed] = asyncio.Queue()
        self._live = True

    @property
    def live(self) -> bool:
        """False once the channel has been closed or abandoned."""
        return self._live

    def deliver(self, frame: InboundFrame) -> None:
        """Enqueue a frame. Frames delivered after close are discarded."""
        if not self._live:
            return

        self._queue.put_nowait(frame)

    def close(self, reason: str) -> None:
        """Close the channel; the consumer sees the reason after draining queued frames."""
        if not self._live:
            return

        self._live = False
        self._queue.put_nowait(ChannelClosed(reason))

    def abandon(self) -> None:
        """Mark the channel as no longer consumed."""
        self._live = False

    async def get(self) -> InboundFrame | ChannelClosed:
        """Wait for the next frame or the close marker."""
        return await self._queue.get()


class Demultiplexer:
    """Assign inbound frames to pending requests or the notification broadcast."""

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._pending: dict[str, PendingRequest] = {}
        self._subscribers: set[asyncio.Queue[NotificationFrame | ChannelClosed]] = set()
        self._closed = False

    def __len__(self) -> int:
        """Number of registered requests."""
        return len(self._pending)

    def __contains__(self, correlation_id: Any) -> bool:
        """True if a request is registered under the id."""
        return correlation_id in self._pending

    def register(self, correlation_id: str) -> PendingRequest:
        """Register a new request.

        Args:
            correlation_id: Id of the outbound request.

        Returns:
            The pending request to consume frames from.

        Raises:
            ValueError: If the id is already registered.
            RuntimeError: If the demultiplexer was closed.
        """
        if self._closed:
            raise RuntimeError("demultiplexer closed | cannot register new requests")

        if correlation_id in self._pending:
            raise ValueError(f"correlation_id=<{correlation_id}> | request already registered")

        request = PendingRequest(correlation_id)
        self._pending[correlation_id] = request
        logger.debug("correlation_id=<%s>, pending=<%d> | request registered", correlation_id, len(self._pending))
        return request

    def unregister(self, correlation_id: str) -> bool:
        """Remove a request whose consumer stopped listening.

        Args:
            correlation_id: Id of the request.

        Returns:
            True if an entry was removed, False if it was already gone.
        """
        request = self._pending.pop(correlation_id, None)
        if request is None:
            return False

        request.abandon()
        logger.debug("correlation_id=<%s> | request unregistered", correlation_id)
        return True

    def dispatch(self, frame: InboundFrame) -> None:
        """Route one frame.

        Args:
            frame: Frame read from the connection.
        """
        if isinstance(frame, NotificationFrame):
            self._broadcast(frame)
            return

        if isinstance(frame, AckFrame):
            if frame.correlation_id is None or frame.correlation_id not in self._pending:
                logger.debug("action=<%s> | discarding unmatched ack", frame.action)
                return

        correlation_id = frame.correlation_id
        request = self._pending.get(correlation_id) if correlation_id is not None else None
        if request is None:
            logger.debug("correlation_id=<%s>, frame=<%s> | dropping frame for unknown request", correlation_id, frame)
            return

        request.deliver(frame)

        if isinstance(frame, (ConversationChunkFrame, ProtocolErrorFrame)) and frame.is_terminal:
            del self._pending[request.correlation_id]
            request.abandon()
            logger.debug("correlation_id=<%s> | request completed", correlation_id)

    def subscribe(self) -> asyncio.Queue[NotificationFrame | ChannelClosed]:
        """Subscribe to broadcast notifications.

        Returns:
            Queue receiving every notification frame, then a close marker when the session closes.
        """
        queue: asyncio.Queue[NotificationFrame | ChannelClosed] = asyncio.Queue()
        if self._closed:
            queue.put_nowait(ChannelClosed("session closed"))
        else:
            self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[NotificationFrame | ChannelClosed]) -> None:
        """Stop delivering notifications to a subscriber queue."""
        self._subscribers.discard(queue)

    def close_all(self, reason: str) -> None:
        """Close every live request and subscriber.

        Safe to call more than once.

        Args:
            reason: Close reason delivered to each consumer.
        """
        self._closed = True

        pending = list(self._pending.values())
        self._pending.clear()
        for request in pending:
            request.close(reason)

        subscribers = list(self._subscribers)
        self._subscribers.clear()
        for queue in subscribers:
            queue.put_nowait(ChannelClosed(reason))

        if pending:
            logger.debug("reason=<%s>, count=<%d> | closed pending requests", reason, len(pending))

    def _broadcast(self, frame: NotificationFrame) -> None:
        if not self._subscribers:
            logger.debug("action=<%s> | notification without subscribers", frame.action)
            return

        for queue in self._subscribers:
            queue.put_nowait(frame)
