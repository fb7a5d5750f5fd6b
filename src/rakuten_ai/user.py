"""Anonymous user, the entry point for creating chat sessions."""

import logging
import mimetypes
import os
import uuid
from pathlib import Path

from typing_extensions import Unpack

from .api import DEFAULT_AGENT_ID, RestClient
from .identifier import generate_device_id
from .session import Session
from .signing import Signer
from .types.content import UploadedFile

logger = logging.getLogger(__name__)

DEFAULT_THREAD_TITLE = "新しいスレッド"


class User:
    """Anonymous user identified by a device id and access token.

    Example:
        ```python
        user = await User.create()
        session = await user.create_thread()
        async for event in session.send_message("hello"):
            ...
        await session.close()
        ```
    """

    def __init__(self, device_id: str, access_token: str, api: RestClient | None = None) -> None:
        """Initialize user.

        Args:
            device_id: Device identifier.
            access_token: Bearer token.
            api: REST client. Defaults to a client using the environment signing secret.
        """
        self.device_id = device_id
        self.access_token = access_token
        self.api = api or RestClient()

    @classmethod
    async def create(cls, api: RestClient | None = None) -> "User":
        """Create a new anonymous user with a fresh device id.

        Args:
            api: REST client to use.

        Raises:
            HttpError: If the token request fails.
            BusinessError: If the backend rejects the token request.
        """
        api = api or RestClient()
        device_id = generate_device_id()
        tokens = await api.fetch_anonymous_token(device_id)

        logger.info("device_id=<%s>, user_type=<%s> | anonymous user created", device_id, tokens.get("userType"))
        return cls(device_id, tokens["accessToken"], api)

    async def create_thread(
        self,
        scenario_agent_id: str = DEFAULT_AGENT_ID,
        title: str = DEFAULT_THREAD_TITLE,
        **config: Unpack[Session.SessionConfig],
    ) -> Session:
        """Create a thread and connect a session to it.

        Args:
            scenario_agent_id: Agent that answers in the thread.
            title: Thread title.
            **config: Session configuration.

        Returns:
            A started session.
        """
        thread = await self.api.create_thread(
            self.device_id, self.access_token, scenario_agent_id=scenario_agent_id, title=title
        )
        return await self.connect_thread(thread["id"], **config)

    async def connect_thread(self, thread_id: str, **config: Unpack[Session.SessionConfig]) -> Session:
        """Connect a session to an existing thread.

        Args:
            thread_id: Thread identifier.
            **config: Session configuration.

        Returns:
            A started session.

        Raises:
            ConnectFailure: If the websocket handshake fails.
        """
        return await Session.connect(thread_id, self.device_id, self.access_token, self.signer, **config)

    @property
    def signer(self) -> Signer:
        """Signer shared with the REST client."""
        return self.api.signer

    async def upload_file(
        self,
        file: bytes | str | os.PathLike,
        *,
        filename: str | None = None,
        thread_id: str | None = None,
        is_image: bool | None = None,
    ) -> UploadedFile:
        """Upload a file to reference in messages.

        Args:
            file: File bytes or path.
            filename: File name; required when passing bytes.
            thread_id: Thread the file belongs to. Defaults to a new random id.
            is_image: Upload as an image. Defaults to guessing from the file name.

        Returns:
            Reference to pass as a file or image input.

        Raises:
            ValueError: If bytes are passed without a filename.
        """
        if isinstance(file, bytes):
            if not filename:
                raise ValueError("filename is required when uploading bytes")
            content = file
        else:
            path = Path(file)
            content = path.read_bytes()
            filename = filename or path.name

        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        if is_image is None:
            is_image = content_type.startswith("image/")

        upload = await self.api.upload_file(
            self.device_id,
            self.access_token,
            content=content,
            filename=filename,
            thread_id=thread_id or str(uuid.uuid4()),
            is_image=is_image,
            content_type=content_type,
        )
        return UploadedFile(file_id=upload["fileId"], file_url=upload["fileUrl"], file_name=upload["originalFilename"])
