import json
import unittest.mock

import pytest

from rakuten_ai.stream.encoder import RequestEncoder
from rakuten_ai.types.content import UploadedFile


@pytest.fixture
def encoder():
    return RequestEncoder("device-1", "thread-1")


@pytest.fixture
def uploaded():
    return UploadedFile(file_id="file-1", file_url="https://files/doc.pdf", file_name="doc.pdf")


@unittest.mock.patch("rakuten_ai.stream.encoder.time.time", return_value=1700000000.5)
def test_encode_text(_, encoder):
    tru_message = json.loads(encoder.encode("req-1", "USER_INPUT", "hello"))
    exp_message = {
        "message": {
            "type": "CONVERSATION",
            "payload": {
                "action": "USER_INPUT",
                "data": {
                    "chatRequestType": "USER_INPUT",
                    "role": "user",
                    "userId": "device-1",
                    "threadId": "thread-1",
                    "messageId": "req-1",
                    "language": "ja",
                    "platform": "WEB",
                    "timestamp": 1700000000500,
                    "contents": [{"contentType": "TEXT", "textData": {"text": "hello"}}],
                    "retry": False,
                    "debug": False,
                    "timezoneString": "Asia/Tokyo",
                    "countryCode": "JP",
                    "city": "Nerima",
                    "explicitSearch": "AUTO",
                },
            },
            "metadata": {"messageId": "req-1", "timestamp": 1700000000500},
        }
    }
    assert tru_message == exp_message


def test_encode_mixed_contents(encoder, uploaded):
    contents = [
        {"type": "text", "text": "summarize"},
        {"type": "file", "file": uploaded},
        {"type": "image", "image": uploaded},
    ]

    tru_contents = json.loads(encoder.encode("req-1", "AI_READ", contents))["message"]["payload"]["data"]["contents"]
    exp_contents = [
        {"contentType": "TEXT", "textData": {"text": "summarize"}},
        {
            "contentType": "INPUT_FILE",
            "inputFileData": {"src": "https://files/doc.pdf", "resourceId": "file-1", "name": "doc.pdf"},
        },
        {"contentType": "INPUT_IMAGE", "inputImageData": {"src": "https://files/doc.pdf", "resourceId": "file-1"}},
    ]
    assert tru_contents == exp_contents


def test_encode_overrides():
    encoder = RequestEncoder("device-1", "thread-1", language="en", timezone="UTC", country_code="US", city="Boston")

    data = encoder.build("req-1", "DEEP_THINK", "hi")["message"]["payload"]["data"]

    assert data["chatRequestType"] == "DEEP_THINK"
    assert (data["language"], data["timezoneString"], data["countryCode"], data["city"]) == (
        "en",
        "UTC",
        "US",
        "Boston",
    )


def test_encode_unsupported_mode(encoder):
    with pytest.raises(ValueError, match=r"unsupported chat mode"):
        encoder.encode("req-1", "SHOUT", "hi")


def test_encode_unsupported_content(encoder):
    with pytest.raises(ValueError, match=r"unsupported content type"):
        encoder.encode("req-1", "USER_INPUT", [{"type": "audio", "audio": b""}])
