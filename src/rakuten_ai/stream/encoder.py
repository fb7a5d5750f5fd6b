"""Outbound conversation envelope construction."""

import json
import time
from typing import get_args

from ..types.content import InputContent
from ..types.wire import ChatMode, OutboundContent, OutboundEnvelope


class RequestEncoder:
    """Build outbound conversation frames for one thread."""

    def __init__(
        self,
        device_id: str,
        thread_id: str,
        *,
        language: str = "ja",
        platform: str = "WEB",
        timezone: str = "Asia/Tokyo",
        country_code: str = "JP",
        city: str = "Nerima",
        explicit_search: str = "AUTO",
    ) -> None:
        """Initialize encoder.

        Args:
            device_id: Device identifier, sent as the user id.
            thread_id: Thread the messages belong to.
            language: Language of the conversation.
            platform: Client platform.
            timezone: IANA timezone of the user.
            country_code: Country of the user.
            city: City of the user.
            explicit_search: Web search preference (AUTO lets the backend decide).
        """
        self.device_id = device_id
        self.thread_id = thread_id
        self.language = language
        self.platform = platform
        self.timezone = timezone
        self.country_code = country_code
        self.city = city
        self.explicit_search = explicit_search

    def build(self, correlation_id: str, mode: ChatMode, contents: str | list[InputContent]) -> OutboundEnvelope:
        """Build an outbound envelope.

        Args:
            correlation_id: Message id of the request; the backend echoes it on every response frame.
            mode: USER_INPUT, DEEP_THINK or AI_READ.
            contents: Text, or list of text/file/image inputs.

        Returns:
            Outbound envelope.

        Raises:
            ValueError: If the mode or a content type is not supported.
        """
        if mode not in get_args(ChatMode):
            raise ValueError(f"mode=<{mode}> | unsupported chat mode")

        if isinstance(contents, str):
            contents = [{"type": "text", "text": contents}]

        timestamp = int(time.time() * 1000)

        return {
            "message": {
                "type": "CONVERSATION",
                "payload": {
                    "action": mode,
                    "data": {
                        "chatRequestType": mode,
                        "role": "user",
                        "userId": self.device_id,
                        "threadId": self.thread_id,
                        "messageId": correlation_id,
                        "language": self.language,
                        "platform": self.platform,
                        "timestamp": timestamp,
                        "contents": [self._convert_content(content) for content in contents],
                        "retry": False,
                        "debug": False,
                        "timezoneString": self.timezone,
                        "countryCode": self.country_code,
                        "city": self.city,
                        "explicitSearch": self.explicit_search,
                    },
                },
                "metadata": {"messageId": correlation_id, "timestamp": timestamp},
            }
        }

    def encode(self, correlation_id: str, mode: ChatMode, contents: str | list[InputContent]) -> str:
        """Build an outbound envelope and serialize it to JSON text."""
        return json.dumps(self.build(correlation_id, mode, contents), ensure_ascii=False)

    @staticmethod
    def _convert_content(content: InputContent) -> OutboundContent:
        content_type = content.get("type")

        if content_type == "text":
            return {"contentType": "TEXT", "textData": {"text": content["text"]}}  # type: ignore[typeddict-item]

        if content_type == "file":
            file = content["file"]  # type: ignore[typeddict-item]
            return {
                "contentType": "INPUT_FILE",
                "inputFileData": {"src": file.file_url, "resourceId": file.file_id, "name": file.file_name},
            }

        if content_type == "image":
            image = content["image"]  # type: ignore[typeddict-item]
            return {
                "contentType": "INPUT_IMAGE",
                "inputImageData": {"src": image.file_url, "resourceId": image.file_id},
            }

        raise ValueError(f"content_type=<{content_type}> | unsupported content type")
