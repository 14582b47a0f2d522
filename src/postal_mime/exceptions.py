"""Custom exceptions for postal-mime.

This module defines the exception hierarchy used throughout the
postal-mime package. I/O failures from caller-supplied sources and
sinks are not wrapped: they propagate as the original ``OSError``.
"""


class PostalMimeError(Exception):
    """Base exception for all postal-mime errors.

    All custom exceptions in the postal_mime package inherit from
    this class, allowing for broad exception catching when needed.

    Attributes:
        message: A human-readable description of the error.
    """

    def __init__(self, message: str = "An error occurred in postal-mime") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: A description of the error that occurred.
        """
        self.message = message
        super().__init__(self.message)


class MessageTooLargeError(PostalMimeError):
    """Raised when a message is cut off by the decoder's size cap.

    Attributes:
        max_size: The byte cap that was reached.
    """

    def __init__(
        self,
        message: str = "Message exceeds the maximum size",
        max_size: int | None = None,
    ) -> None:
        """Initialize the exception with an optional message and cap.

        Args:
            message: A description of the size error.
            max_size: The byte cap that was reached.
        """
        self.max_size = max_size
        super().__init__(message)


class ParseError(PostalMimeError):
    """Raised when a message or one of its parts is structurally malformed."""

    def __init__(self, message: str = "Malformed message") -> None:
        super().__init__(message)


class HeaderParseError(ParseError):
    """Raised when a header block is malformed or unterminated."""

    def __init__(self, message: str = "Malformed header block") -> None:
        super().__init__(message)


class MultipartParseError(ParseError):
    """Raised when a multipart body is missing its delimiters."""

    def __init__(self, message: str = "Malformed multipart body") -> None:
        super().__init__(message)


class MissingBoundaryError(ParseError):
    """Raised when a multipart entity declares no boundary parameter."""

    def __init__(self, message: str = "No boundary found for multipart entity") -> None:
        super().__init__(message)


class ContentTypeError(ParseError):
    """Raised when a Content-Type header value cannot be parsed."""

    def __init__(self, message: str = "Unparsable Content-Type") -> None:
        super().__init__(message)


class TransferDecodeError(ParseError):
    """Raised when a body cannot be reversed from its transfer encoding."""

    def __init__(self, message: str = "Invalid transfer-encoded body") -> None:
        super().__init__(message)


class MissingFieldError(PostalMimeError):
    """Raised when a header required for serialization is missing.

    Attributes:
        field: The canonical name of the missing header field.
    """

    def __init__(self, message: str = "Required field missing", field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class WriterClosedError(PostalMimeError):
    """Raised when a closed writer is written to or closed again."""

    def __init__(self, message: str = "Writer is closed") -> None:
        super().__init__(message)


class SniffError(PostalMimeError):
    """Raised when an attachment source fails during content-type detection.

    The originating ``OSError`` is chained as ``__cause__``.
    """

    def __init__(self, message: str = "Content-type detection failed") -> None:
        super().__init__(message)
