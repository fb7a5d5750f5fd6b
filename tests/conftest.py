import asyncio
import json
import logging
import unittest.mock

import pytest
from websockets.exceptions import ConnectionClosedError

from rakuten_ai.signing import Signer


@pytest.fixture(autouse=True)
def debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="rakuten_ai")


@pytest.fixture
def alist():
    async def alist(items):
        return [item async for item in items]

    return alist


class FakeWebSocket:
    """In-memory stand-in for a websockets ClientConnection."""

    _CLOSE = object()
    _DROP = object()

    def __init__(self):
        self.sent = []
        self.closed = False
        self._inbox = asyncio.Queue()

    def feed(self, message):
        self._inbox.put_nowait(message if isinstance(message, str) else json.dumps(message))

    def drop(self):
        self._inbox.put_nowait(self._DROP)

    async def send(self, message):
        if self.closed:
            raise ConnectionClosedError(None, None)
        self.sent.append(message)

    async def close(self):
        self.closed = True
        self._inbox.put_nowait(self._CLOSE)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        while True:
            item = await self._inbox.get()
            if item is self._CLOSE:
                return
            if item is self._DROP:
                self.closed = True
                raise ConnectionClosedError(None, None)
            yield item


@pytest.fixture
def websocket_factory():
    return FakeWebSocket


@pytest.fixture
def mock_connect():
    with unittest.mock.patch(
        "rakuten_ai.stream.connection.websockets.connect", new_callable=unittest.mock.AsyncMock
    ) as connect:
        yield connect


@pytest.fixture
def signer():
    return Signer(secret="test-secret")


@pytest.fixture
def wait_for_sent():
    async def wait_for_sent(websocket, count=1):
        for _ in range(1000):
            if len(websocket.sent) >= count:
                return [json.loads(message)["message"]["metadata"]["messageId"] for message in websocket.sent]
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} sent messages, got {len(websocket.sent)}")

    return wait_for_sent


@pytest.fixture
def wait_for_state():
    async def wait_for_state(target, state):
        for _ in range(1000):
            if target.state is state:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected state {state}, got {target.state}")

    return wait_for_state


@pytest.fixture
def stalled_connect(mock_connect):
    """Serve the given sockets in order, holding back every socket after the first until released."""

    def stalled_connect(*sockets):
        release = asyncio.Event()
        remaining = iter(sockets)

        async def connect(*args, **kwargs):
            websocket = next(remaining)
            if websocket is not sockets[0]:
                await release.wait()
            return websocket

        mock_connect.side_effect = connect
        return release

    return stalled_connect


@pytest.fixture
def chunk():
    def chunk(req_message_id, status="APPEND", contents=None, action="AI_ANSWER"):
        data = {
            "chatResponseType": action,
            "chatResponseStatus": status,
            "threadId": "thread-1",
            "messageId": f"answer-{req_message_id}",
            "reqMessageId": req_message_id,
            "trace": {"id": "trace-1"},
        }
        if contents is not None:
            data["contents"] = contents
        return {
            "type": "CONVERSATION",
            "metadata": {"messageId": f"answer-{req_message_id}", "traceId": "trace-1", "timestamp": 1},
            "payload": {"action": action, "data": data},
        }

    return chunk


@pytest.fixture
def text():
    def text(value, content_type="TEXT"):
        return {"contentType": content_type, "textData": {"text": value}}

    return text
