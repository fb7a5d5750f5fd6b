import json

import pytest

from rakuten_ai.stream.frames import (
    AckFrame,
    ConversationChunkFrame,
    NotificationFrame,
    ProtocolErrorFrame,
    parse_frame,
)
from rakuten_ai.types.content import OpaquePayload
from rakuten_ai.types.exceptions import FrameParseError


def test_parse_frame_conversation(chunk, text):
    raw = json.dumps(chunk("req-1", contents=[text("hi")]))

    tru_frame = parse_frame(raw)
    exp_frame = ConversationChunkFrame(
        correlation_id="req-1",
        action="AI_ANSWER",
        status="APPEND",
        contents=[{"contentType": "TEXT", "textData": {"text": "hi"}}],
        thread_id="thread-1",
        trace_id="trace-1",
    )
    assert tru_frame == exp_frame
    assert not tru_frame.is_terminal


def test_parse_frame_conversation_done(chunk):
    tru_frame = parse_frame(json.dumps(chunk("req-1", status="DONE")))

    assert isinstance(tru_frame, ConversationChunkFrame)
    assert tru_frame.contents == []
    assert tru_frame.is_terminal


def test_parse_frame_conversation_falls_back_to_metadata_message_id():
    raw = json.dumps(
        {
            "type": "CONVERSATION",
            "metadata": {"messageId": "req-2"},
            "payload": {"action": "EVENT", "data": {"chatResponseStatus": "APPEND", "contents": []}},
        }
    )

    tru_frame = parse_frame(raw)

    assert isinstance(tru_frame, ConversationChunkFrame)
    assert tru_frame.correlation_id == "req-2"
    assert tru_frame.action == "EVENT"


def test_parse_frame_unwraps_websocket_key(chunk):
    raw = json.dumps({"webSocket": chunk("req-1", status="DONE")})

    tru_frame = parse_frame(raw)

    assert isinstance(tru_frame, ConversationChunkFrame)
    assert tru_frame.correlation_id == "req-1"


def test_parse_frame_bytes(chunk):
    raw = json.dumps(chunk("req-1", status="DONE")).encode()

    assert parse_frame(raw).correlation_id == "req-1"


def test_parse_frame_message_received_ack():
    raw = json.dumps(
        {
            "type": "ACK",
            "metadata": {"traceId": "trace-1", "timestamp": 1},
            "payload": {"action": "MESSAGE_RECEIVED_ACK", "data": {"reqMessageId": "req-1", "threadId": "thread-1"}},
        }
    )

    tru_frame = parse_frame(raw)
    exp_frame = AckFrame(
        correlation_id="req-1",
        action="MESSAGE_RECEIVED_ACK",
        data={"reqMessageId": "req-1", "threadId": "thread-1"},
    )
    assert tru_frame == exp_frame


def test_parse_frame_user_input_ack_without_correlation():
    raw = json.dumps(
        {
            "type": "ACK",
            "metadata": {"traceId": "trace-1", "timestamp": 1},
            "payload": {"action": "USER_INPUT_ACK", "data": {"messageIds": ["req-1"], "sequence": 3}},
        }
    )

    tru_frame = parse_frame(raw)

    assert isinstance(tru_frame, AckFrame)
    assert tru_frame.correlation_id is None


def test_parse_frame_notification():
    data = {"id": "thread-1", "title": "Chat with Rakuten AI", "threadMode": "USER_INPUT"}
    raw = json.dumps({"type": "NOTIFICATION", "payload": {"action": "THREAD_DATA", "data": data}})

    tru_frame = parse_frame(raw)
    exp_frame = NotificationFrame(action="THREAD_DATA", data=OpaquePayload(data))
    assert tru_frame == exp_frame


@pytest.mark.parametrize(
    "envelope",
    [
        {
            "type": "ERROR",
            "metadata": {"messageId": "req-1", "traceId": "trace-1"},
            "error": {
                "code": "500",
                "message": "boom",
                "trace": {"id": "trace-9", "url": "https://trace"},
                "threadId": "thread-1",
            },
        },
        {
            "type": "ERROR",
            "metadata": {"messageId": "req-1", "traceId": "trace-1"},
            "payload": {
                "data": {
                    "error": {
                        "code": 500,
                        "message": "boom",
                        "trace": {"id": "trace-9", "url": "https://trace"},
                        "threadId": "thread-1",
                    }
                }
            },
        },
        {
            "type": "ERROR",
            "metadata": {"traceId": "trace-1"},
            "payload": {
                "data": {
                    "reqMessageId": "req-1",
                    "code": "500",
                    "message": "boom",
                    "trace": {"id": "trace-9", "url": "https://trace"},
                    "threadId": "thread-1",
                }
            },
        },
    ],
)
def test_parse_frame_error(envelope):
    tru_frame = parse_frame(json.dumps(envelope))
    exp_frame = ProtocolErrorFrame(
        correlation_id="req-1",
        code="500",
        message="boom",
        trace_id="trace-9",
        trace_url="https://trace",
        thread_id="thread-1",
    )
    assert tru_frame == exp_frame
    assert tru_frame.is_terminal


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps(["a", "list"]),
        json.dumps({"type": "UNKNOWN"}),
        json.dumps({"metadata": {}}),
        json.dumps({"type": "CONVERSATION", "payload": {"action": "AI_ANSWER", "data": {"contents": "oops"}}}),
        json.dumps({"type": "CONVERSATION", "payload": {"action": "AI_ANSWER", "data": {"contents": []}}}),
    ],
)
def test_parse_frame_malformed(raw):
    with pytest.raises(FrameParseError) as exc_info:
        parse_frame(raw)

    assert exc_info.value.raw == raw
