"""postal-mime: build and parse RFC 5322 / MIME email messages."""

from postal_mime.codec import decode, decode_with_size, encode, write_to
from postal_mime.config import DEFAULT_MAX_SIZE
from postal_mime.exceptions import (
    ContentTypeError,
    MessageTooLargeError,
    MissingBoundaryError,
    MissingFieldError,
    ParseError,
    PostalMimeError,
    SniffError,
    WriterClosedError,
)
from postal_mime.models import Attachment, HeaderSet, Message

__all__ = [
    "DEFAULT_MAX_SIZE",
    "Attachment",
    "ContentTypeError",
    "HeaderSet",
    "Message",
    "MessageTooLargeError",
    "MissingBoundaryError",
    "MissingFieldError",
    "ParseError",
    "PostalMimeError",
    "SniffError",
    "WriterClosedError",
    "decode",
    "decode_with_size",
    "encode",
    "write_to",
]
