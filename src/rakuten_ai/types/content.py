"""Content types callers pass to `Session.send_message`."""

from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from typing_extensions import TypedDict


@dataclass(frozen=True)
class UploadedFile:
    """A file uploaded through `User.upload_file`.

    Attributes:
        file_id: Backend resource identifier.
        file_url: URL the backend serves the file from.
        file_name: Original file name.
    """

    file_id: str
    file_url: str
    file_name: str


class TextInput(TypedDict):
    """Plain text input."""

    type: Literal["text"]
    text: str


class FileInput(TypedDict):
    """Uploaded document input."""

    type: Literal["file"]
    file: UploadedFile


class ImageInput(TypedDict):
    """Uploaded image input."""

    type: Literal["image"]
    image: UploadedFile


InputContent: TypeAlias = TextInput | FileInput | ImageInput


@dataclass(frozen=True)
class OpaquePayload:
    """Structured value passed through without validation.

    Attributes:
        value: The raw decoded JSON value.
    """

    value: Any
