"""Multipart body splitting and writing (RFC 2046 section 5.1)."""

import secrets
from collections.abc import Iterator

import structlog

from postal_mime.codec.header_block import write_header_block
from postal_mime.codec.sink import Sink
from postal_mime.exceptions import MultipartParseError
from postal_mime.models.headers import HeaderSet

logger = structlog.get_logger(__name__)

_LWSP = b" \t"


def random_boundary() -> str:
    """Return a fresh boundary of 60 hex characters."""
    return secrets.token_hex(30)


def _delimiter_kind(line: bytes, dash_boundary: bytes) -> str | None:
    """Classify a line as a part delimiter, the close delimiter, or neither."""
    line = line.rstrip(b"\r\n")
    if not line.startswith(dash_boundary):
        return None
    rest = line[len(dash_boundary):]
    if rest.startswith(b"--") and not rest[2:].strip(_LWSP):
        return "close"
    if not rest.strip(_LWSP):
        return "part"
    return None


def _strip_line_break(segment: bytes) -> bytes:
    # The line break before a delimiter belongs to the delimiter
    if segment.endswith(b"\r\n"):
        return segment[:-2]
    if segment.endswith(b"\n"):
        return segment[:-1]
    return segment


def iter_body_parts(body: bytes, boundary: str) -> Iterator[bytes]:
    """Yield the raw bytes (headers and body) of each part of a multipart body.

    The preamble before the first delimiter and the epilogue after the
    close delimiter are ignored.

    Raises:
        MultipartParseError: If the body ends before the close delimiter.
    """
    dash_boundary = b"--" + boundary.encode("utf-8")
    part_start: int | None = None
    pos = 0
    length = len(body)

    while pos < length:
        newline = body.find(b"\n", pos)
        line_end = length if newline == -1 else newline + 1
        kind = _delimiter_kind(body[pos:line_end], dash_boundary)
        if kind is not None:
            if part_start is not None:
                yield _strip_line_break(body[part_start:pos])
            if kind == "close":
                return
            part_start = line_end
        pos = line_end

    raise MultipartParseError(f"Multipart body ended before closing boundary {boundary!r}")


class MultipartWriter:
    """Write the parts of one multipart envelope to a sink.

    Layout matches the common writer convention: ``--b`` before the first
    part, ``\\r\\n--b`` before each later one, ``\\r\\n--b--`` to close.
    """

    def __init__(self, sink: Sink, boundary: str | None = None) -> None:
        self._sink = sink
        self.boundary = boundary or random_boundary()
        self._parts = 0

    def create_part(self, headers: HeaderSet) -> None:
        """Start a new part by writing its delimiter and header block."""
        delimiter = f"--{self.boundary}\r\n".encode()
        if self._parts:
            delimiter = b"\r\n" + delimiter
        self._sink.write(delimiter)
        write_header_block(self._sink, headers)
        self._parts += 1

    def close(self) -> None:
        """Write the close delimiter."""
        closing = f"--{self.boundary}--\r\n".encode()
        if self._parts:
            closing = b"\r\n" + closing
        self._sink.write(closing)
        logger.debug("multipart_closed", boundary=self.boundary, parts=self._parts)
