"""Streaming chat session over one websocket.

A session is one conversation thread. Any number of messages can be in flight at once; each `send_message` call is
an independent async generator that receives only the events of its own request.

Example:
    ```python
    async with await Session.connect(thread_id, device_id, access_token) as session:
        async for event in session.send_message("hello"):
            if isinstance(event, TextDeltaEvent):
                print(event.text, end="")
    ```
"""

import logging
import uuid
from typing import AsyncGenerator
from urllib.parse import quote

from typing_extensions import TypedDict, Unpack

from ._async import _TaskPool, start, stop_all
from ._validation import validate_config_keys
from .signing import Signer
from .stream.connection import DEFAULT_OPEN_TIMEOUT, ConnectionState, ConnectionSupervisor
from .stream.demux import ChannelClosed, Demultiplexer
from .stream.encoder import RequestEncoder
from .stream.translator import SEARCHING_SENTINEL, THINKING_SENTINEL, EventTranslator
from .types.content import InputContent
from .types.events import ChatEvent, NotificationEvent
from .types.exceptions import NotConnected
from .types.wire import ChatMode

logger = logging.getLogger(__name__)

WS_BASE_URL = "wss://companion.ai.rakuten.co.jp"
WS_PATH = "/ws/v1/chat"


class Session:
    """One conversation thread streamed over a single websocket."""

    class SessionConfig(TypedDict, total=False):
        """Configuration options for a session.

        Attributes:
            auto_reconnect: Reconnect once after an unexpected disconnect (default True).
            open_timeout: Seconds to wait for the websocket handshake.
            ws_base_url: Websocket origin.
            language: Conversation language sent with every message.
            platform: Client platform sent with every message.
            timezone: IANA timezone sent with every message.
            country_code: Country sent with every message.
            city: City sent with every message.
            explicit_search: Web search preference sent with every message.
            thinking_sentinel: Event channel text that marks the start of reasoning.
            searching_sentinel: Event channel text that marks the start of a search.
        """

        auto_reconnect: bool
        open_timeout: float
        ws_base_url: str
        language: str
        platform: str
        timezone: str
        country_code: str
        city: str
        explicit_search: str
        thinking_sentinel: str
        searching_sentinel: str

    def __init__(
        self,
        thread_id: str,
        device_id: str,
        access_token: str,
        signer: Signer | None = None,
        **config: Unpack[SessionConfig],
    ) -> None:
        """Initialize session. Call `start` (or use `Session.connect`) before sending.

        Args:
            thread_id: Thread to converse in.
            device_id: Device identifier of the user.
            access_token: Bearer token of the user.
            signer: Request signer. Defaults to a signer using the environment secret.
            **config: Session configuration.
        """
        validate_config_keys(config, self.SessionConfig)

        self.thread_id = thread_id
        self.device_id = device_id
        self.config = config

        self._access_token = access_token
        self._signer = signer or Signer()

        self._supervisor = ConnectionSupervisor(
            self._signed_url,
            auto_reconnect=config.get("auto_reconnect", True),
            open_timeout=config.get("open_timeout", DEFAULT_OPEN_TIMEOUT),
        )
        self._demux = Demultiplexer()
        self._translator = EventTranslator(
            thinking_sentinel=config.get("thinking_sentinel", THINKING_SENTINEL),
            searching_sentinel=config.get("searching_sentinel", SEARCHING_SENTINEL),
        )
        self._encoder = RequestEncoder(
            device_id,
            thread_id,
            language=config.get("language", "ja"),
            platform=config.get("platform", self._signer.platform),
            timezone=config.get("timezone", "Asia/Tokyo"),
            country_code=config.get("country_code", "JP"),
            city=config.get("city", "Nerima"),
            explicit_search=config.get("explicit_search", "AUTO"),
        )
        self._task_pool = _TaskPool()
        self._started = False
        self._closed = False

        logger.debug("thread_id=<%s>, config=<%s> | session initialized", thread_id, config)

    @classmethod
    async def connect(
        cls,
        thread_id: str,
        device_id: str,
        access_token: str,
        signer: Signer | None = None,
        **config: Unpack[SessionConfig],
    ) -> "Session":
        """Create and start a session.

        Raises:
            ConnectFailure: If the websocket handshake fails.
        """
        session = cls(thread_id, device_id, access_token, signer, **config)
        await session.start()
        return session

    @property
    def state(self) -> ConnectionState:
        """State of the underlying connection."""
        return self._supervisor.state

    @property
    def generation(self) -> int:
        """Number of physical connections attached so far."""
        return self._supervisor.generation

    @property
    def pending_count(self) -> int:
        """Number of requests still waiting for frames."""
        return len(self._demux)

    @start
    async def _start(self) -> None:
        logger.info("thread_id=<%s> | session starting", self.thread_id)
        await self._supervisor.open()
        self._task_pool.create(self._run_distribution())

    async def start(self) -> None:
        """Open the websocket and start distributing inbound frames.

        A session starts at most once.

        Raises:
            ConnectFailure: If the websocket handshake fails.
            RuntimeError: If the session was already started or closed.
        """
        if self._closed:
            raise RuntimeError("session closed | create a new session to connect again")

        if self._started:
            raise RuntimeError("session already started | start may only be called once")

        self._started = True
        await self._start()

    async def close(self) -> None:
        """Close the session.

        Every request still in flight receives a DisconnectedEvent. Safe to call more than once.
        """
        if self._closed:
            return

        self._closed = True
        logger.info("thread_id=<%s>, pending=<%d> | session closing", self.thread_id, len(self._demux))

        async def stop_tasks() -> None:
            await self._task_pool.cancel()

        async def stop_connection() -> None:
            await self._supervisor.close()

        async def stop_requests() -> None:
            self._demux.close_all("session closed")

        await stop_all(stop_tasks, stop_connection, stop_requests)

    async def send_message(
        self,
        contents: str | list[InputContent],
        mode: ChatMode = "USER_INPUT",
    ) -> AsyncGenerator[ChatEvent, None]:
        """Send a message and stream the events of its answer.

        Leaving the loop early releases the request; later frames for it are dropped.

        Args:
            contents: Text, or list of text/file/image inputs.
            mode: USER_INPUT, DEEP_THINK or AI_READ.

        Yields:
            Events of this request, ending with exactly one DoneEvent, ErrorEvent or DisconnectedEvent.

        Raises:
            NotConnected: If the session is closed or the connection is not open.
            ValueError: If the mode or a content type is not supported.
        """
        if self._closed or self._supervisor.state is ConnectionState.CLOSED:
            raise NotConnected("session closed | cannot send messages")

        correlation_id = str(uuid.uuid4())
        message = self._encoder.encode(correlation_id, mode, contents)
        request = self._demux.register(correlation_id)

        try:
            await self._supervisor.send(message)
            logger.debug("correlation_id=<%s>, mode=<%s> | message sent", correlation_id, mode)

            async for event in self._translator.translate(request):
                yield event
        finally:
            self._demux.unregister(correlation_id)

    async def notifications(self) -> AsyncGenerator[NotificationEvent, None]:
        """Stream broadcast notifications until the session closes.

        Yields:
            Notifications received after subscribing.
        """
        queue = self._demux.subscribe()
        try:
            while True:
                frame = await queue.get()
                if isinstance(frame, ChannelClosed):
                    return

                yield NotificationEvent(frame.action, frame.data)
        finally:
            self._demux.unsubscribe(queue)

    async def __aenter__(self) -> "Session":
        """Enter async context."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Close on exiting async context."""
        await self.close()

    def _signed_url(self) -> str:
        path = f"{WS_PATH}?deviceId={quote(self.device_id, safe='')}"
        return self._signer.websocket_url(self.config.get("ws_base_url", WS_BASE_URL), path, self._access_token)

    async def _run_distribution(self) -> None:
        """Task draining the inbound frame sequence into the demultiplexer."""
        logger.debug("frame distribution starting")
        reason = "connection closed"

        try:
            async for frame in self._supervisor.frames():
                self._demux.dispatch(frame)

        except Exception as error:
            logger.error("thread_id=<%s>, error=<%s> | session connection failed", self.thread_id, error)
            reason = str(error)

        self._demux.close_all(reason)
        logger.debug("reason=<%s> | frame distribution stopped", reason)
