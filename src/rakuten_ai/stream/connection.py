"""Websocket connection supervision.

The supervisor owns the one physical websocket of a session and presents a single continuous sequence of inbound
frames, regardless of how often the socket is replaced underneath.

State machine:

    CONNECTING -> OPEN -> RECONNECTING -> OPEN
                       -> CLOSED

An unexpected disconnect triggers exactly one reconnect attempt with a freshly signed URL (when auto reconnect is
enabled). Frames the backend sent while the old socket was going down are lost; the backend offers no replay.
"""

import logging
from enum import Enum
from typing import AsyncGenerator, Callable

import websockets
from websockets import ClientConnection
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..types.exceptions import ConnectFailure, FrameParseError, NotConnected, ReconnectFailure, TransportError
from .frames import InboundFrame, parse_frame

logger = logging.getLogger(__name__)

DEFAULT_OPEN_TIMEOUT = 10.0


class ConnectionState(Enum):
    """Lifecycle state of a supervised connection."""

    CONNECTING = "connecting"
    OPEN = "open"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


class ConnectionSupervisor:
    """Own one websocket at a time and hide reconnection from consumers."""

    def __init__(
        self,
        url_factory: Callable[[], str],
        *,
        auto_reconnect: bool = True,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    ) -> None:
        """Initialize supervisor.

        Args:
            url_factory: Returns a freshly signed websocket URL. Called for every connection attempt.
            auto_reconnect: Attempt one reconnect after an unexpected disconnect.
            open_timeout: Seconds to wait for the websocket handshake.
        """
        self._url_factory = url_factory
        self._auto_reconnect = auto_reconnect
        self._open_timeout = open_timeout

        self._websocket: ClientConnection | None = None
        self._state = ConnectionState.CONNECTING
        self._opened = False
        self._generation = 0

    @property
    def state(self) -> ConnectionState:
        """Current lifecycle state."""
        return self._state

    @property
    def generation(self) -> int:
        """Number of physical connections attached so far."""
        return self._generation

    async def open(self) -> None:
        """Open the first connection.

        Raises:
            ConnectFailure: If the handshake fails.
            RuntimeError: If the supervisor was already opened.
        """
        if self._opened:
            raise RuntimeError("connection already opened | create a new supervisor to connect again")

        self._opened = True
        self._state = ConnectionState.CONNECTING

        try:
            self._websocket = await self._connect()
        except ConnectFailure:
            self._state = ConnectionState.CLOSED
            raise

        self._state = ConnectionState.OPEN
        logger.info("generation=<%d> | connection open", self._generation)

    async def frames(self) -> AsyncGenerator[InboundFrame, None]:
        """Continuously yield inbound frames.

        Malformed frames are logged and skipped.

        Yields:
            Frames in transport order.

        Raises:
            TransportError: If the connection drops and auto reconnect is disabled.
            ReconnectFailure: If the connection drops and the reconnect attempt fails.
        """
        if self._websocket is None:
            raise RuntimeError("connection not opened | call open before reading frames")

        while True:
            websocket = self._websocket
            cause: Exception | None = None

            try:
                async for message in websocket:
                    try:
                        frame = parse_frame(message)
                    except FrameParseError as error:
                        logger.warning("error=<%s> | skipping malformed frame", error)
                        continue

                    yield frame

            except (ConnectionClosed, OSError) as error:
                cause = error

            if self._state is ConnectionState.CLOSED:
                logger.debug("inbound frame sequence closed")
                return

            if not await self._reconnect(cause):
                return

    async def send(self, message: str) -> None:
        """Send a message on the attached connection.

        Args:
            message: Serialized frame.

        Raises:
            NotConnected: If the connection is not open.
        """
        if self._state is not ConnectionState.OPEN or self._websocket is None:
            raise NotConnected(f"state=<{self._state.value}> | connection is not open")

        try:
            await self._websocket.send(message)
        except ConnectionClosed as error:
            raise NotConnected("connection closed while sending") from error

    async def close(self) -> None:
        """Close the connection. The inbound sequence ends without an error."""
        if self._state is not ConnectionState.CLOSED:
            logger.debug("generation=<%d> | connection closing", self._generation)

        self._state = ConnectionState.CLOSED
        await self._teardown()

    async def _connect(self) -> ClientConnection:
        try:
            websocket = await websockets.connect(self._url_factory(), open_timeout=self._open_timeout)
        except (WebSocketException, OSError, TimeoutError) as error:
            raise ConnectFailure(f"websocket handshake failed: {error}") from error

        self._generation += 1
        return websocket

    async def _reconnect(self, cause: Exception | None) -> bool:
        """Replace a dropped connection.

        Returns:
            True if a new connection is attached, False if the caller closed the supervisor meanwhile.
        """
        logger.warning("generation=<%d>, error=<%s> | connection lost", self._generation, cause or "closed by peer")

        if not self._auto_reconnect:
            self._state = ConnectionState.CLOSED
            await self._teardown()
            raise TransportError(f"connection lost: {cause or 'closed by peer'}") from cause

        self._state = ConnectionState.RECONNECTING
        await self._teardown()

        try:
            websocket = await self._connect()
        except ConnectFailure as error:
            self._state = ConnectionState.CLOSED
            logger.error("error=<%s> | reconnect failed", error)
            raise ReconnectFailure(f"reconnect failed: {error}") from error

        if self._state is ConnectionState.CLOSED:
            await websocket.close()
            return False

        self._websocket = websocket
        self._state = ConnectionState.OPEN
        logger.info("generation=<%d> | connection reestablished", self._generation)
        return True

    async def _teardown(self) -> None:
        websocket, self._websocket = self._websocket, None
        if websocket is None:
            return

        try:
            await websocket.close()
        except (ConnectionClosed, OSError) as error:
            logger.debug("error=<%s> | connection already gone during close", error)
