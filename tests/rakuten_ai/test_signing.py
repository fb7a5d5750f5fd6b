import base64
import hashlib
import hmac
import unittest.mock
from urllib.parse import parse_qs, urlsplit

import pytest

from rakuten_ai.signing import SECRET_ENV_VAR, Signer, canonical_string, sign


def expected_signature(message, secret="test-secret"):
    digest = hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode().rstrip("=")


def test_canonical_string():
    tru_string = canonical_string("get", "/api/v1/thread", {"b": "2", "a": "1"}, "1700000000", "nonce-1")
    exp_string = "GET/api/v1/threada=1b=21700000000nonce-1"
    assert tru_string == exp_string


def test_sign():
    tru_signature = sign("message", "test-secret")

    assert tru_signature == expected_signature("message")
    assert "=" not in tru_signature
    assert "+" not in tru_signature and "/" not in tru_signature


def test_signer_secret_from_env(monkeypatch):
    monkeypatch.setenv(SECRET_ENV_VAR, "env-secret")

    signer = Signer()

    assert signer._secret == "env-secret"
    assert signer.platform == "WEB"


def test_signer_secret_missing(monkeypatch):
    monkeypatch.delenv(SECRET_ENV_VAR, raising=False)

    with pytest.raises(ValueError, match=SECRET_ENV_VAR):
        Signer()


@unittest.mock.patch("rakuten_ai.signing.uuid.uuid4", return_value="nonce-1")
@unittest.mock.patch("rakuten_ai.signing.time.time", return_value=1700000000.9)
def test_headers(_, __, signer):
    tru_headers = signer.headers("POST", "/api/v1/thread", {"lang": "ja"})
    exp_headers = {
        "X-Timestamp": "1700000000",
        "X-Nonce": "nonce-1",
        "X-Signature": expected_signature("POST/api/v1/threadlang=ja1700000000nonce-1"),
    }
    assert tru_headers == exp_headers


@unittest.mock.patch("rakuten_ai.signing.uuid.uuid4", return_value="nonce-1")
@unittest.mock.patch("rakuten_ai.signing.time.time", return_value=1700000000)
def test_websocket_url(_, __, signer):
    url = signer.websocket_url("wss://companion.test/", "/ws/v1/chat?deviceId=device-1", "token-1")

    parts = urlsplit(url)
    query = {key: values[0] for key, values in parse_qs(parts.query).items()}

    assert (parts.scheme, parts.netloc, parts.path) == ("wss", "companion.test", "/ws/v1/chat")
    assert query == {
        "deviceId": "device-1",
        "accessToken": "token-1",
        "platform": "WEB",
        "x-timestamp": "1700000000",
        "x-nonce": "nonce-1",
        "x-signature": expected_signature(
            "GET/ws/v1/chataccessToken=token-1deviceId=device-1platform=WEB1700000000nonce-1"
        ),
    }


def test_websocket_url_fresh_per_call(signer):
    url_1 = signer.websocket_url("wss://companion.test", "/ws/v1/chat", "token-1")
    url_2 = signer.websocket_url("wss://companion.test", "/ws/v1/chat", "token-1")

    assert parse_qs(urlsplit(url_1).query)["x-nonce"] != parse_qs(urlsplit(url_2).query)["x-nonce"]
