"""Wire-level type definitions for the chat websocket and the REST API.

These types mirror the JSON the backend sends and expects. Inbound shapes are validated with pydantic before being
turned into frames, so fields the SDK does not read are still allowed through.
"""

from typing import Any, Literal

from typing_extensions import NotRequired, TypedDict

ChatMode = Literal["USER_INPUT", "DEEP_THINK", "AI_READ"]
"""Outbound request modes."""

InboundType = Literal["ACK", "CONVERSATION", "NOTIFICATION", "ERROR"]


class InboundMetadata(TypedDict, total=False):
    """Metadata attached to inbound frames.

    Attributes:
        messageId: Message identifier (the request id for error frames).
        traceId: Backend trace identifier.
        timestamp: Milliseconds since epoch.
    """

    messageId: str
    traceId: str
    timestamp: int


class InboundPayload(TypedDict):
    """Action and data of an inbound frame.

    Attributes:
        action: AI_ANSWER or EVENT for conversations, MESSAGE_RECEIVED_ACK or USER_INPUT_ACK for acks,
            THREAD_DATA for notifications.
        data: Action specific data.
    """

    action: NotRequired[str]
    data: NotRequired[dict[str, Any]]


class ErrorTrace(TypedDict, total=False):
    """Trace reference attached to errors."""

    id: str
    url: str


class ErrorBody(TypedDict, total=False):
    """Error reported by the backend for a single request.

    Attributes:
        code: Numeric-like error code.
        message: Error message.
        trace: Trace reference.
        threadId: Thread of the failed request.
    """

    code: str | int
    message: str
    trace: ErrorTrace
    threadId: str


class InboundEnvelope(TypedDict):
    """One inbound websocket frame."""

    type: InboundType
    metadata: NotRequired[InboundMetadata]
    payload: NotRequired[InboundPayload]
    error: NotRequired[ErrorBody]


class ConversationData(TypedDict, total=False):
    """Data of a CONVERSATION frame.

    Attributes:
        chatResponseType: AI_ANSWER or EVENT.
        chatResponseStatus: APPEND, TOOL_CALL or DONE.
        threadId: Thread identifier.
        messageId: Identifier of the answer message.
        reqMessageId: Identifier of the request message this chunk answers.
        contents: Ordered content items (absent on DONE).
        trace: Trace reference.
    """

    chatResponseType: str
    chatResponseStatus: str
    threadId: str
    messageId: str
    reqMessageId: str
    contents: list[dict[str, Any]]
    trace: ErrorTrace


class InboundTextData(TypedDict, total=False):
    """Text payload of an inbound TEXT or SUMMARY_TEXT content item."""

    text: str | None


class TextContent(TypedDict):
    """Inbound TEXT or SUMMARY_TEXT content item."""

    contentType: str
    textData: NotRequired[InboundTextData | None]


class ImageGen(TypedDict, total=False):
    """Progress of one generated image.

    Attributes:
        thumbnail: Low resolution preview URL, available first.
        preview: Final image URL, absent while generation is in progress.
        index: Position of the image in the batch.
        total: Number of images in the batch.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    thumbnail: str
    preview: str | None
    index: int
    total: int
    width: int
    height: int


class OutputImageData(TypedDict, total=False):
    """Image generation payload of an OUTPUT_IMAGE content item."""

    imageGens: list[ImageGen] | None


class OutputImageContent(TypedDict):
    """Inbound OUTPUT_IMAGE content item."""

    contentType: str
    outputImageData: NotRequired[OutputImageData | None]


class TextData(TypedDict):
    """Text payload of a TEXT or SUMMARY_TEXT content item."""

    text: str


class InputFileData(TypedDict):
    """Reference to an uploaded file."""

    src: str
    resourceId: str
    name: str


class InputImageData(TypedDict):
    """Reference to an uploaded image."""

    src: str
    resourceId: str


class OutboundContent(TypedDict):
    """Content item of an outbound conversation request.

    Exactly one of the data fields is set, matching contentType.
    """

    contentType: Literal["TEXT", "INPUT_FILE", "INPUT_IMAGE"]
    textData: NotRequired[TextData]
    inputFileData: NotRequired[InputFileData]
    inputImageData: NotRequired[InputImageData]


class OutboundData(TypedDict):
    """Data of an outbound conversation request."""

    chatRequestType: ChatMode
    role: Literal["user"]
    userId: str
    threadId: str
    messageId: str
    language: str
    platform: str
    timestamp: int
    contents: list[OutboundContent]
    retry: bool
    debug: bool
    timezoneString: str
    countryCode: str
    city: str
    explicitSearch: str


class OutboundPayload(TypedDict):
    """Action and data of an outbound request."""

    action: ChatMode
    data: OutboundData


class OutboundMetadata(TypedDict):
    """Metadata of an outbound request."""

    messageId: str
    timestamp: int


class OutboundMessage(TypedDict):
    """Outbound conversation message."""

    type: Literal["CONVERSATION"]
    payload: OutboundPayload
    metadata: OutboundMetadata


class OutboundEnvelope(TypedDict):
    """Top-level outbound websocket frame."""

    message: OutboundMessage


class ApiResponseMeta(TypedDict, total=False):
    """Optional metadata of REST responses."""

    messageId: str
    timestamp: int


class ApiResponse(TypedDict):
    """Envelope of every REST response.

    Attributes:
        code: "0" on success, a business error code otherwise.
        message: Error description when code is not "0".
        data: Endpoint specific payload.
        meta: Optional metadata.
    """

    code: str | int
    message: NotRequired[str | None]
    data: NotRequired[Any]
    meta: NotRequired[ApiResponseMeta | None]


class AuthTokens(TypedDict, total=False):
    """Tokens returned by the anonymous auth endpoint."""

    accessToken: str
    refreshToken: str
    idToken: str
    userType: str


class ThreadData(TypedDict, total=False):
    """Thread returned by the thread creation endpoint."""

    id: str
    userId: str
    scenarioAgentId: str
    title: str
    createdAt: int
    updatedAt: int


class UploadData(TypedDict, total=False):
    """File record returned by the upload endpoint."""

    originalFilename: str
    objectKey: str
    fileId: str
    openaiFileId: str
    azureFileId: str
    bytes: int
    fileUrl: str
    id: str
