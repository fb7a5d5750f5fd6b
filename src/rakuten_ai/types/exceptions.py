"""Exception-related type definitions for the SDK."""


class RakutenAIException(Exception):
    """Base class for all SDK exceptions."""

    pass


class ConnectFailure(RakutenAIException):
    """Raised when the initial websocket handshake fails."""

    pass


class TransportError(RakutenAIException):
    """Raised when an open connection drops without the caller asking for it.

    With auto reconnect enabled this is handled internally by a single reconnect attempt. Otherwise it ends the
    inbound frame sequence.
    """

    pass


class ReconnectFailure(RakutenAIException):
    """Raised when the single reconnect attempt after a transport error fails.

    This is fatal to the session: every in-flight request is terminated.
    """

    pass


class FrameParseError(RakutenAIException):
    """Raised when an inbound payload cannot be parsed into a frame."""

    def __init__(self, message: str, raw: str | bytes | None = None) -> None:
        """Initialize exception.

        Args:
            message: Description of what was malformed.
            raw: The payload that failed to parse.
        """
        self.raw = raw
        super().__init__(message)


class UnrecognizedContent(RakutenAIException):
    """Diagnostic for content items the translator does not understand.

    Never raised to callers; the content is logged and skipped.
    """

    pass


class NotConnected(RakutenAIException):
    """Raised when sending while the connection is not open."""

    pass


class HttpError(RakutenAIException):
    """Raised when a REST call returns a non-2xx status or a body that is not a response envelope."""

    def __init__(self, status_code: int, body: str) -> None:
        """Initialize exception.

        Args:
            status_code: HTTP status of the response.
            body: Raw response body.
        """
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP Error {status_code}: {body}")


class BusinessError(RakutenAIException):
    """Raised when a REST call succeeds at the HTTP level but reports a non-zero business code."""

    def __init__(self, code: str, message: str) -> None:
        """Initialize exception.

        Args:
            code: Business code from the response envelope.
            message: Message from the response envelope.
        """
        self.code = code
        self.message = message
        super().__init__(message)
