"""Decoding of raw RFC 5322 messages into Message objects.

The body is walked recursively: every ``multipart/*`` entity is split on
its boundary and each part decoded the same way, so nested envelopes
(mixed -> signed -> pgp-signature, for instance) flatten into one list of
leaf parts in document order.
"""

import io
from dataclasses import dataclass
from typing import BinaryIO

import structlog

from postal_mime.codec.header_block import decode_value, read_header_block
from postal_mime.codec.media_type import parse_media_type
from postal_mime.codec.multipart import iter_body_parts
from postal_mime.codec.reader import BoundedTrimReader
from postal_mime.codec.transfer import get_transfer_encoding
from postal_mime.config.settings import DEFAULT_MAX_SIZE
from postal_mime.core.logging import sanitize_for_log
from postal_mime.exceptions import (
    MessageTooLargeError,
    MissingBoundaryError,
    MultipartParseError,
    ParseError,
)
from postal_mime.models.headers import (
    BCC,
    CC,
    CONTENT_TRANSFER_ENCODING,
    CONTENT_TYPE,
    DEFAULT_CONTENT_TYPE,
    FROM,
    SUBJECT,
    TO,
    HeaderSet,
)
from postal_mime.models.message import Message

logger = structlog.get_logger(__name__)

# Deeper nesting than this is treated as malformed
MAX_NESTING_DEPTH = 64

TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"


@dataclass
class Part:
    """A leaf MIME part with its raw, still transfer-encoded body."""

    content_type: str
    body: bytes
    transfer_encoding: str = "7bit"

    def payload(self) -> bytes:
        """Return the body with its transfer encoding reversed."""
        return get_transfer_encoding(self.transfer_encoding).decode(self.body)


def parse_parts(headers: HeaderSet, body: bytes, depth: int = 0) -> list[Part]:
    """Decode one MIME entity into its flattened list of leaf parts.

    Args:
        headers: The entity's header fields.
        body: The entity's body.
        depth: Current multipart nesting level.

    Raises:
        ContentTypeError: If the Content-Type value cannot be parsed.
        MissingBoundaryError: If a multipart entity has no boundary.
        ParseError: If a nested part is malformed.
    """
    media_type, params = parse_media_type(headers.first(CONTENT_TYPE, DEFAULT_CONTENT_TYPE))
    if not media_type.startswith("multipart/"):
        return [Part(media_type, body, headers.first(CONTENT_TRANSFER_ENCODING, "7bit"))]

    boundary = params.get("boundary")
    if not boundary:
        raise MissingBoundaryError(f"No boundary found for {media_type} entity")
    if depth >= MAX_NESTING_DEPTH:
        raise MultipartParseError(f"Multipart nesting deeper than {MAX_NESTING_DEPTH} levels")

    leaves: list[Part] = []
    for raw in iter_body_parts(body, boundary):
        part = io.BytesIO(raw)
        part_headers = read_header_block(part, eof_ends_block=True)
        leaves.extend(parse_parts(part_headers, part.read(), depth + 1))

    logger.debug(
        "multipart_split",
        media_type=media_type,
        boundary=sanitize_for_log(boundary),
        leaves=len(leaves),
        depth=depth,
    )
    return leaves


def _first_payload(parts: list[Part], content_type: str) -> bytes:
    for part in parts:
        if part.content_type == content_type:
            return part.payload()
    return b""


def decode_with_size(stream: BinaryIO, max_size: int) -> Message:
    """Read an RFC 5322 message of at most ``max_size`` bytes.

    Leading whitespace before the first header is ignored. The first
    text/plain and text/html leaves become ``text`` and ``html``; any
    other leaf, attachments included, is dropped.

    Args:
        stream: Binary source of the raw message.
        max_size: Largest number of bytes read from ``stream``.

    Returns:
        The decoded message. From/To/Cc/Bcc/Subject are moved out of
        ``headers`` into their fields; all other headers stay.

    Raises:
        MessageTooLargeError: If the message is longer than ``max_size``.
        ParseError: If the message is malformed.
    """
    reader = BoundedTrimReader(stream, max_size)
    buffered = io.BufferedReader(reader)
    try:
        headers = read_header_block(buffered)
        body = buffered.read()
        if reader.limit_reached:
            raise MessageTooLargeError(
                f"Message exceeds the maximum size of {max_size} bytes", max_size=max_size
            )
        parts = parse_parts(headers, body)
    except ParseError as e:
        if reader.limit_reached:
            raise MessageTooLargeError(
                f"Message exceeds the maximum size of {max_size} bytes", max_size=max_size
            ) from e
        logger.debug("message_decode_failed", error=str(e))
        raise

    message = Message(
        sender=decode_value(headers.first(FROM)),
        to=[decode_value(value) for value in headers.get(TO, [])],
        cc=[decode_value(value) for value in headers.get(CC, [])],
        bcc=[decode_value(value) for value in headers.get(BCC, [])],
        subject=decode_value(headers.first(SUBJECT)),
        text=_first_payload(parts, TEXT_PLAIN),
        html=_first_payload(parts, TEXT_HTML),
        headers=headers,
    )
    for name in (SUBJECT, TO, CC, BCC, FROM):
        headers.pop(name, None)

    logger.debug(
        "message_decoded",
        subject=sanitize_for_log(message.subject),
        leaves=len(parts),
        has_text=bool(message.text),
        has_html=bool(message.html),
    )
    return message


def decode(stream: BinaryIO) -> Message:
    """Read an RFC 5322 message of at most ``DEFAULT_MAX_SIZE`` (1 MiB) bytes."""
    return decode_with_size(stream, DEFAULT_MAX_SIZE)
