"""Message data models for postal-mime.

This module provides the data classes describing an RFC 5322 message
and its attachments, shared by the encoder and the decoder.
"""

import os
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from email.utils import encode_rfc2231
from typing import BinaryIO

import structlog

from postal_mime.core.logging import sanitize_for_log
from postal_mime.core.sniff import detect_content_type
from postal_mime.models.headers import (
    CONTENT_DISPOSITION,
    CONTENT_ID,
    CONTENT_TRANSFER_ENCODING,
    CONTENT_TYPE,
    HeaderSet,
)

logger = structlog.get_logger(__name__)

Sniffer = Callable[[str, BinaryIO], str]

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


def _disposition(filename: str) -> str:
    """Build an attachment Content-Disposition value for a filename.

    ASCII names go into a quoted-string; anything else is written as an
    RFC 2231 ``filename*`` parameter.
    """
    if filename.isascii():
        quoted = filename.replace("\\", "\\\\").replace('"', '\\"')
        return f'attachment;\r\n filename="{quoted}"'
    return f"attachment;\r\n filename*={encode_rfc2231(filename, 'utf-8')}"


@dataclass
class Attachment:
    """A file attached to a message.

    Attributes:
        filename: Name used for the filename parameter and the Content-Id,
            with control characters removed.
        source: Readable binary file object providing the content.
        headers: Part headers written for the attachment.
    """

    filename: str
    source: BinaryIO
    headers: HeaderSet = field(default_factory=HeaderSet)
    _closed: bool = field(default=False, init=False, repr=False, compare=False)

    @classmethod
    def build(cls, source: BinaryIO, filename: str, content_type: str) -> "Attachment":
        """Create an attachment with the standard base64 part headers."""
        # Control characters would end the header line early
        filename = _CONTROL_CHARS_RE.sub("", filename)
        headers = HeaderSet()
        headers[CONTENT_TYPE] = content_type
        headers[CONTENT_DISPOSITION] = _disposition(filename)
        headers[CONTENT_ID] = f"<{filename}>"
        headers[CONTENT_TRANSFER_ENCODING] = "base64"
        return cls(filename=filename, source=source, headers=headers)

    @property
    def content_type(self) -> str:
        return self.headers.first(CONTENT_TYPE)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the source. Later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        self.source.close()


@dataclass
class Message:
    """An RFC 5322 email message.

    ``headers`` holds caller overrides; they take precedence over the
    structured fields when the message is encoded. Decoding fills the
    structured fields and leaves every other header in ``headers``.

    Attributes:
        sender: The From address.
        to: Recipient addresses.
        cc: Carbon-copy addresses.
        bcc: Blind carbon-copy addresses (never written as a header).
        subject: The subject line.
        text: Plain-text body, empty when absent.
        html: HTML body, empty when absent.
        headers: Additional or overriding header fields.
        attachments: Attached files, written in list order.
    """

    sender: str = ""
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    subject: str = ""
    text: bytes = b""
    html: bytes = b""
    headers: HeaderSet = field(default_factory=HeaderSet)
    attachments: list[Attachment] = field(default_factory=list)

    def attach(
        self,
        source: BinaryIO,
        filename: str,
        content_type: str | None = None,
        *,
        sniffer: Sniffer = detect_content_type,
    ) -> Attachment:
        """Attach a binary source to the message.

        The message takes over closing ``source``. When ``content_type``
        is not given it is looked up with ``sniffer``.

        Raises:
            SniffError: If the source fails while its type is detected;
                the source is closed before the error propagates.
        """
        if not content_type:
            try:
                content_type = sniffer(filename, source)
            except Exception:
                source.close()
                raise

        attachment = Attachment.build(source, filename, content_type)
        self.attachments.append(attachment)
        logger.debug(
            "attachment_added",
            filename=sanitize_for_log(filename),
            content_type=sanitize_for_log(content_type),
        )
        return attachment

    def attach_file(self, path: str | os.PathLike[str]) -> Attachment:
        """Attach a file from disk under its base name, sniffing its type."""
        source = open(path, "rb")  # noqa: SIM115 - closed by Message.close()
        return self.attach(source, os.path.basename(os.fspath(path)))

    def close(self) -> None:
        """Close every attachment source.

        Each source is closed at most once. The first failure propagates
        immediately, so later attachments may remain open.
        """
        for attachment in self.attachments:
            attachment.close()

    def __enter__(self) -> "Message":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()
