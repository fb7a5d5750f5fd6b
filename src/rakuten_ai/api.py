"""REST API client for authentication, threads and file uploads.

These are plain request/response calls. Every response is wrapped in an envelope whose `code` is "0" on success;
any other code is surfaced as a BusinessError, and non-2xx responses as an HttpError.
"""

import json
import logging
from typing import Any, cast

import httpx
from pydantic import TypeAdapter, ValidationError

from .signing import Signer
from .types.exceptions import BusinessError, HttpError
from .types.wire import ApiResponse, AuthTokens, ThreadData, UploadData

logger = logging.getLogger(__name__)

BASE_URL = "https://ai.rakuten.co.jp"
DEFAULT_AGENT_ID = "6812e64f9dfaf301f7000001"

AUTH_PATH = "/api/v2/auth/anonymous"
THREAD_PATH = "/api/v1/thread"
UPLOAD_PATH = "/api/v1/files/upload"

_RESPONSE_ADAPTER = TypeAdapter(ApiResponse)


class RestClient:
    """Signed client for the REST endpoints."""

    def __init__(
        self,
        signer: Signer | None = None,
        *,
        base_url: str = BASE_URL,
        platform: str = "WEB",
        country_code: str = "JP",
        http_client_args: dict[str, Any] | None = None,
    ) -> None:
        """Initialize client.

        Args:
            signer: Request signer. Defaults to a signer using the environment secret.
            base_url: API origin.
            platform: Value of the X-Platform header.
            country_code: Value of the X-Country-Code header.
            http_client_args: Additional arguments for httpx.AsyncClient (e.g., timeout, transport).
        """
        self.signer = signer or Signer(platform=platform)
        self.base_url = base_url.rstrip("/")
        self.platform = platform
        self.country_code = country_code
        self._http_client_args = http_client_args or {}

    def _get_httpx_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, **self._http_client_args)

    def _headers(self, method: str, path: str, device_id: str, access_token: str | None = None) -> dict[str, str]:
        headers = {
            "X-Platform": self.platform,
            "X-Country-Code": self.country_code,
            "Device-ID": device_id,
            **self.signer.headers(method, path),
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def fetch_anonymous_token(self, device_id: str) -> AuthTokens:
        """Exchange a device id for anonymous user tokens.

        Args:
            device_id: Device identifier.

        Returns:
            Access, refresh and id tokens.

        Raises:
            HttpError: If the response status is not 2xx.
            BusinessError: If the envelope code is not "0".
        """
        headers = {"Content-Type": "application/json", **self._headers("GET", AUTH_PATH, device_id)}

        async with self._get_httpx_client() as client:
            response = await client.get(AUTH_PATH, headers=headers)

        logger.debug("device_id=<%s> | anonymous token fetched", device_id)
        return cast(AuthTokens, self._unwrap(response, "Authentication Failed"))

    async def create_thread(
        self,
        device_id: str,
        access_token: str,
        *,
        scenario_agent_id: str = DEFAULT_AGENT_ID,
        title: str | None = None,
        source_language: str | None = None,
        target_language: str | None = None,
    ) -> ThreadData:
        """Create a chat thread.

        Args:
            device_id: Device identifier.
            access_token: Bearer token of the user.
            scenario_agent_id: Agent that answers in the thread.
            title: Thread title.
            source_language: Source language for translation agents.
            target_language: Target language for translation agents.

        Returns:
            The created thread.

        Raises:
            HttpError: If the response status is not 2xx.
            BusinessError: If the envelope code is not "0".
        """
        body: dict[str, Any] = {"scenarioAgentId": scenario_agent_id}
        if title is not None:
            body["title"] = title
        if source_language is not None:
            body["sourceLanguage"] = source_language
        if target_language is not None:
            body["targetLanguage"] = target_language

        headers = {"Content-Type": "application/json", **self._headers("POST", THREAD_PATH, device_id, access_token)}

        async with self._get_httpx_client() as client:
            response = await client.post(THREAD_PATH, headers=headers, json=body)

        thread = cast(ThreadData, self._unwrap(response, "Failed to create thread"))
        logger.debug("thread_id=<%s> | thread created", thread.get("id"))
        return thread

    async def upload_file(
        self,
        device_id: str,
        access_token: str,
        *,
        content: bytes,
        filename: str,
        thread_id: str,
        is_image: bool,
        content_type: str = "application/octet-stream",
        agent_id: str = DEFAULT_AGENT_ID,
    ) -> UploadData:
        """Upload a file for use in a conversation.

        Args:
            device_id: Device identifier.
            access_token: Bearer token of the user.
            content: File bytes.
            filename: File name reported to the backend.
            thread_id: Thread the file belongs to.
            is_image: Upload as vision data instead of a document.
            content_type: MIME type of the file.
            agent_id: Agent the upload is for.

        Returns:
            The stored file record.

        Raises:
            HttpError: If the response status is not 2xx.
            BusinessError: If the envelope code is not "0".
        """
        request = {"type": "VISION_DATA" if is_image else "USER_DATA", "agentId": agent_id, "threadId": thread_id}
        files = {
            "file": (filename, content, content_type),
            "request": ("blob", json.dumps(request).encode(), "application/json"),
        }

        async with self._get_httpx_client() as client:
            response = await client.post(
                UPLOAD_PATH, headers=self._headers("POST", UPLOAD_PATH, device_id, access_token), files=files
            )

        upload = cast(UploadData, self._unwrap(response, "Failed to upload file"))
        logger.debug("file_id=<%s>, bytes=<%d> | file uploaded", upload.get("fileId"), len(content))
        return upload

    @staticmethod
    def _unwrap(response: httpx.Response, default_message: str) -> Any:
        if not response.is_success:
            raise HttpError(response.status_code, response.text)

        try:
            result = _RESPONSE_ADAPTER.validate_json(response.content)
        except ValidationError as error:
            raise HttpError(response.status_code, response.text) from error

        code = str(result["code"])
        if code != "0":
            logger.warning("code=<%s>, message=<%s> | api business error", code, result.get("message"))
            raise BusinessError(code, result.get("message") or default_message)

        return result.get("data")
