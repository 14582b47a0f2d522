"""Content-type detection for attachments.

Attachments without an explicit content type are looked up by file
extension first, then by the magic bytes at the start of the data,
following the signature rules browsers use for MIME sniffing.
"""

import mimetypes
import re
from typing import BinaryIO

import structlog

from postal_mime.exceptions import SniffError

logger = structlog.get_logger(__name__)

SNIFF_LENGTH = 512
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# (pattern, content type); patterns are matched against the start of the data
_SIGNATURES: list[tuple[re.Pattern[bytes], str]] = [
    (re.compile(rb"%PDF-"), "application/pdf"),
    (re.compile(rb"%!PS-Adobe-"), "application/postscript"),
    (re.compile(rb"\xfe\xff"), "text/plain; charset=utf-16be"),
    (re.compile(rb"\xff\xfe"), "text/plain; charset=utf-16le"),
    (re.compile(rb"\xef\xbb\xbf"), "text/plain; charset=utf-8"),
    (re.compile(rb"\x00\x00\x01\x00"), "image/x-icon"),
    (re.compile(rb"\x00\x00\x02\x00"), "image/x-icon"),
    (re.compile(rb"BM"), "image/bmp"),
    (re.compile(rb"GIF8[79]a"), "image/gif"),
    (re.compile(rb"RIFF.{4}WEBPVP", re.DOTALL), "image/webp"),
    (re.compile(rb"\x89PNG\r\n\x1a\n"), "image/png"),
    (re.compile(rb"\xff\xd8\xff"), "image/jpeg"),
    (re.compile(rb"FORM.{4}AIFF", re.DOTALL), "audio/aiff"),
    (re.compile(rb"ID3"), "audio/mpeg"),
    (re.compile(rb"OggS\x00"), "application/ogg"),
    (re.compile(rb"MThd\x00\x00\x00\x06"), "audio/midi"),
    (re.compile(rb"RIFF.{4}AVI ", re.DOTALL), "video/avi"),
    (re.compile(rb"RIFF.{4}WAVE", re.DOTALL), "audio/wave"),
    (re.compile(rb".{4}ftyp", re.DOTALL), "video/mp4"),
    (re.compile(rb"\x1a\x45\xdf\xa3"), "video/webm"),
    (re.compile(rb"\x1f\x8b\x08"), "application/x-gzip"),
    (re.compile(rb"PK\x03\x04"), "application/zip"),
    (re.compile(rb"Rar!\x1a\x07\x00"), "application/x-rar-compressed"),
    (re.compile(rb"Rar!\x1a\x07\x01\x00"), "application/x-rar-compressed"),
    (re.compile(rb"\x00asm"), "application/wasm"),
]

_HTML_TAGS = (
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1",
    b"<DIV", b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B",
    b"<BODY", b"<BR", b"<P", b"<!--",
)

_BINARY_BYTES = re.compile(rb"[\x00-\x08\x0b\x0e-\x1a\x1c-\x1f]")


def _looks_like_html(data: bytes) -> bool:
    head = data.lstrip(b"\t\n\x0c\r ").upper()
    for tag in _HTML_TAGS:
        # A tag must be followed by a space or '>' to count
        if head.startswith(tag) and head[len(tag):len(tag) + 1] in (b" ", b">"):
            return True
    return False


def sniff_bytes(data: bytes) -> str:
    """Guess a content type from the leading bytes of some data.

    Args:
        data: Up to the first 512 bytes of the content.

    Returns:
        A content type; text with no binary bytes is reported as UTF-8
        plain text, anything unrecognised as ``application/octet-stream``.
    """
    data = data[:SNIFF_LENGTH]
    if _looks_like_html(data):
        return "text/html; charset=utf-8"
    if data.lstrip(b"\t\n\x0c\r ").startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    for pattern, content_type in _SIGNATURES:
        if pattern.match(data):
            return content_type
    if not _BINARY_BYTES.search(data):
        return "text/plain; charset=utf-8"
    return DEFAULT_CONTENT_TYPE


def detect_content_type(filename: str, source: BinaryIO) -> str:
    """Work out the content type of an attachment.

    Tries the filename extension, then sniffs the first 512 bytes when
    the source is seekable (rewinding it afterwards), and otherwise
    falls back to ``application/octet-stream``.

    Raises:
        SniffError: If reading or rewinding the source fails.
    """
    guessed, _ = mimetypes.guess_type(filename, strict=False)
    if guessed:
        return guessed

    seekable = getattr(source, "seekable", None)
    if seekable is None or not seekable():
        return DEFAULT_CONTENT_TYPE

    try:
        head = source.read(SNIFF_LENGTH) or b""
        source.seek(0)
    except OSError as e:
        logger.warning("content_type_sniff_failed", filename=filename, error=str(e))
        raise SniffError(f"Could not sniff content type of {filename!r}: {e}") from e
    return sniff_bytes(head)
