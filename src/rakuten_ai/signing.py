"""Request signing for the REST API and the chat websocket.

Every request carries a timestamp, a nonce and an HMAC-SHA256 signature over:

    METHOD + PATH + sorted "key=value" parameters (no separators) + TIMESTAMP + NONCE

The signature is base64url encoded without padding.
"""

import base64
import hashlib
import hmac
import logging
import os
import time
import uuid
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

SECRET_ENV_VAR = "RAKUTEN_AI_SIGNING_SECRET"


def canonical_string(method: str, path: str, params: dict[str, str], timestamp: str, nonce: str) -> str:
    """Build the string that gets signed.

    Args:
        method: HTTP method.
        path: URL path without query.
        params: Query parameters to sign.
        timestamp: Unix timestamp in seconds.
        nonce: Single use random value.

    Returns:
        Canonical string.
    """
    sorted_params = "".join(f"{key}={params[key]}" for key in sorted(params))
    return f"{method.upper()}{path}{sorted_params}{timestamp}{nonce}"


def sign(message: str, secret: str) -> str:
    """HMAC-SHA256 sign a message and encode it as base64url without padding."""
    digest = hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode().rstrip("=")


class Signer:
    """Produce signed headers and signed websocket URLs."""

    def __init__(self, secret: str | None = None, platform: str = "WEB") -> None:
        """Initialize signer.

        Args:
            secret: Shared signing secret. Defaults to the RAKUTEN_AI_SIGNING_SECRET environment variable.
            platform: Platform reported in signed websocket URLs.

        Raises:
            ValueError: If no secret is available.
        """
        secret = secret or os.getenv(SECRET_ENV_VAR)
        if not secret:
            raise ValueError(
                f"Signing secret is required. Set {SECRET_ENV_VAR} environment variable or pass secret parameter."
            )

        self._secret = secret
        self.platform = platform

    def headers(self, method: str, path: str, params: dict[str, str] | None = None) -> dict[str, str]:
        """Signed headers for a REST request.

        Args:
            method: HTTP method.
            path: Endpoint path.
            params: Query parameters of the request.

        Returns:
            X-Timestamp, X-Nonce and X-Signature headers.
        """
        timestamp = str(int(time.time()))
        nonce = str(uuid.uuid4())
        signature = sign(canonical_string(method, path, params or {}, timestamp, nonce), self._secret)

        return {"X-Timestamp": timestamp, "X-Nonce": nonce, "X-Signature": signature}

    def websocket_url(self, base_url: str, path: str, access_token: str) -> str:
        """Signed websocket URL.

        The access token and platform are added as query parameters, every parameter that does not start with
        `x-` is signed, and the signature parameters are appended.

        Args:
            base_url: Websocket origin (e.g., wss://companion.ai.rakuten.co.jp).
            path: Path with optional query string.
            access_token: Bearer token of the user.

        Returns:
            URL ready to connect to.
        """
        scheme, netloc, url_path, query, _ = urlsplit(f"{base_url.rstrip('/')}{path}")

        query_params = dict(parse_qsl(query, keep_blank_values=True))
        query_params["accessToken"] = access_token
        query_params["platform"] = self.platform

        signed_params = {key: value for key, value in query_params.items() if not key.lower().startswith("x-")}

        timestamp = str(int(time.time()))
        nonce = str(uuid.uuid4())
        signature = sign(canonical_string("GET", url_path, signed_params, timestamp, nonce), self._secret)

        query_params.update({"x-timestamp": timestamp, "x-nonce": nonce, "x-signature": signature})
        logger.debug("path=<%s> | signed websocket url", url_path)

        return urlunsplit((scheme, netloc, url_path, urlencode(query_params), ""))
