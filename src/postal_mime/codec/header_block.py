"""Reading and writing RFC 5322 header blocks."""

import re
from email import errors as email_errors
from email.charset import QP, Charset
from email.header import Header, decode_header, make_header
from typing import BinaryIO

from postal_mime.codec.sink import Sink
from postal_mime.core.logging import sanitize_for_log
from postal_mime.exceptions import HeaderParseError
from postal_mime.models.headers import CONTENT_DISPOSITION, CONTENT_TYPE, HeaderSet, canonical_key

CRLF = b"\r\n"

# RFC 5322 ftext: printable US-ASCII except colon
_FIELD_NAME_RE = re.compile(rb"^[\x21-\x39\x3b-\x7e]+$")
_NEEDS_ENCODING_RE = re.compile(r"[^\t\x20-\x7e]")

# Written verbatim; their values carry MIME parameters, not free text
_RAW_FIELDS = frozenset({CONTENT_TYPE, CONTENT_DISPOSITION})

_UTF8_Q = Charset("utf-8")
_UTF8_Q.header_encoding = QP


def read_header_block(stream: BinaryIO, *, eof_ends_block: bool = False) -> HeaderSet:
    """Read header fields up to and including the terminating blank line.

    Continuation lines are unfolded into the previous value, joined by a
    single space. Lines may end in CRLF or a bare LF.

    Args:
        stream: Binary stream supporting ``readline``.
        eof_ends_block: Accept end of input right after a line break as
            the end of the block. Used for MIME part headers, where the
            part may carry no body at all.

    Returns:
        The parsed header set.

    Raises:
        HeaderParseError: On a malformed line or premature end of input.
    """
    headers = HeaderSet()
    name: str | None = None
    value: list[bytes] = []
    line_complete = True

    while True:
        line = stream.readline()
        if not line:
            if eof_ends_block and line_complete:
                break
            raise HeaderParseError("Unexpected end of input in header block")

        line_complete = line.endswith(b"\n")
        content = line.rstrip(b"\r\n")
        if not content:
            break

        if content[:1] in (b" ", b"\t"):
            if name is None:
                raise HeaderParseError("Header block starts with a continuation line")
            value.append(content.strip(b" \t"))
            continue

        if name is not None:
            headers.add(name, _join_value(value))

        field, colon, rest = content.partition(b":")
        field = field.rstrip(b" \t")
        if not colon or not _FIELD_NAME_RE.match(field):
            shown = sanitize_for_log(content.decode("utf-8", errors="replace"), 60)
            raise HeaderParseError(f"Malformed header line: {shown!r}")
        name = canonical_key(field.decode("ascii"))
        value = [rest.strip(b" \t")]

    if name is not None:
        headers.add(name, _join_value(value))
    return headers


def _join_value(parts: list[bytes]) -> str:
    return b" ".join(part for part in parts if part).decode("utf-8", errors="replace")


def encode_value(value: str) -> str:
    """Encode a header value as RFC 2047 Q-encoded words if it needs it."""
    if not _NEEDS_ENCODING_RE.search(value):
        return value
    return Header(value, _UTF8_Q).encode(linesep="\r\n")


def decode_value(value: str) -> str:
    """Decode any RFC 2047 encoded words in a header value.

    Values that are not valid encoded words are returned unchanged.
    """
    if "=?" not in value:
        return value
    try:
        return str(make_header(decode_header(value)))
    except (email_errors.HeaderParseError, LookupError, ValueError):
        return value


def write_header_block(sink: Sink, headers: HeaderSet) -> None:
    """Write one ``Field: value`` line per value, then the blank line."""
    for name, value in headers.lines():
        if name not in _RAW_FIELDS:
            value = encode_value(value)
        sink.write(f"{name}: {value}".encode() + CRLF)
    sink.write(CRLF)
