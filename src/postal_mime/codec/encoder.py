"""Serialization of Message objects into RFC 5322 / MIME bytes.

Output layout::

    headers (Content-Type: multipart/mixed)
    multipart/mixed
      multipart/alternative       (only if text or html is set)
        text/plain; charset=UTF-8 (quoted-printable, if text is set)
        text/html; charset=UTF-8  (quoted-printable, if html is set)
      attachment parts            (base64, 76-column lines)
"""

import io
import shutil
from datetime import datetime
from email.utils import format_datetime

import structlog

from postal_mime.codec.chunked import ChunkWriter
from postal_mime.codec.header_block import write_header_block
from postal_mime.codec.message_id import generate_message_id
from postal_mime.codec.multipart import MultipartWriter
from postal_mime.codec.sink import CountingSink, Sink
from postal_mime.codec.transfer import BASE64, QUOTED_PRINTABLE, get_transfer_encoding
from postal_mime.config.settings import get_settings
from postal_mime.core.logging import sanitize_for_log
from postal_mime.exceptions import MissingFieldError
from postal_mime.models.headers import (
    CC,
    CONTENT_TRANSFER_ENCODING,
    CONTENT_TYPE,
    DATE,
    FROM,
    MESSAGE_ID,
    MIME_VERSION,
    SUBJECT,
    TO,
    HeaderSet,
)
from postal_mime.models.message import Attachment, Message

logger = structlog.get_logger(__name__)

COPY_CHUNK_SIZE = 32 * 1024

TEXT_PLAIN_UTF8 = "text/plain; charset=UTF-8"
TEXT_HTML_UTF8 = "text/html; charset=UTF-8"

# Overrides for these are written after every other field
_TRAILING_FIELDS = (MIME_VERSION, CONTENT_TYPE)


def assemble_headers(
    message: Message,
    *,
    now: datetime | None = None,
    hostname: str | None = None,
) -> HeaderSet:
    """Merge a message's fields and header overrides into the headers to write.

    A field present in ``message.headers`` always wins over the value
    derived from the message's attributes. ``message.headers`` is not
    modified. Content-Type is left for the encoder to set.

    Args:
        message: The message to serialize.
        now: Time used for the Date and Message-Id defaults.
        hostname: Host part of a generated Message-Id; defaults to the
            configured hostname.

    Returns:
        Headers in write order: To, Cc, From, Subject, Date, Message-Id,
        the remaining overrides, Mime-Version.

    Raises:
        MissingFieldError: If there is neither a From override nor a sender.
    """
    overrides = message.headers
    result = HeaderSet()

    def take_override(name: str) -> bool:
        if name in overrides:
            result[name] = overrides[name]
            return True
        return False

    if not take_override(TO) and message.to:
        result[TO] = ", ".join(message.to)
    if not take_override(CC) and message.cc:
        result[CC] = ", ".join(message.cc)
    if not take_override(FROM):
        if not message.sender:
            raise MissingFieldError("'From' field cannot be empty", field=FROM)
        result[FROM] = message.sender
    if not take_override(SUBJECT) and message.subject:
        result[SUBJECT] = message.subject

    now = now or datetime.now()
    if now.tzinfo is None:
        now = now.astimezone()
    if not take_override(DATE):
        result[DATE] = format_datetime(now)
    if not take_override(MESSAGE_ID):
        result[MESSAGE_ID] = generate_message_id(
            message.sender,
            message.subject,
            message.text,
            message.html,
            now,
            hostname or get_settings().hostname,
        )

    for name, values in overrides.items():
        if name not in result and name not in _TRAILING_FIELDS:
            result[name] = values
    if not take_override(MIME_VERSION):
        result[MIME_VERSION] = "1.0"
    return result


def _write_alternative(sink: Sink, mixed: MultipartWriter, message: Message) -> None:
    alternative = MultipartWriter(sink)
    mixed.create_part(
        HeaderSet({CONTENT_TYPE: f"multipart/alternative;\r\n boundary={alternative.boundary}"})
    )
    for body, content_type in ((message.text, TEXT_PLAIN_UTF8), (message.html, TEXT_HTML_UTF8)):
        if not body:
            continue
        alternative.create_part(
            HeaderSet(
                {
                    CONTENT_TYPE: content_type,
                    CONTENT_TRANSFER_ENCODING: QUOTED_PRINTABLE.name,
                }
            )
        )
        encoder = QUOTED_PRINTABLE.encoder(sink)
        encoder.write(body)
        encoder.close()
    alternative.close()


def _part_headers(attachment: Attachment) -> HeaderSet:
    if CONTENT_TRANSFER_ENCODING in attachment.headers:
        return attachment.headers
    headers = attachment.headers.copy()
    headers[CONTENT_TRANSFER_ENCODING] = BASE64.name
    return headers


def _write_attachments(sink: Sink, mixed: MultipartWriter, attachments: list[Attachment]) -> None:
    # One line writer for the whole loop; each part separator starts a new line
    chunks = ChunkWriter(sink)
    headers = [_part_headers(attachment) for attachment in attachments]
    encodings = [get_transfer_encoding(h.first(CONTENT_TRANSFER_ENCODING)) for h in headers]
    last_chunked = max(
        (index for index, encoding in enumerate(encodings) if not encoding.line_wrapped),
        default=None,
    )

    for index, attachment in enumerate(attachments):
        encoding = encodings[index]
        mixed.create_part(headers[index])
        if encoding.line_wrapped:
            encoder = encoding.encoder(sink)
        else:
            chunks.start_line()
            encoder = encoding.encoder(chunks)
        shutil.copyfileobj(attachment.source, encoder, COPY_CHUNK_SIZE)
        encoder.close()
        if index == last_chunked:
            chunks.close()
        logger.debug(
            "attachment_written",
            filename=sanitize_for_log(attachment.filename),
            transfer_encoding=encoding.name,
        )


def write_to(
    message: Message,
    sink: Sink,
    *,
    hostname: str | None = None,
    now: datetime | None = None,
) -> int:
    """Write the serialized message to ``sink``.

    Output already written is not rolled back if the sink or an
    attachment source fails part way; the sink should be discarded.

    Returns:
        Number of bytes written.

    Raises:
        MissingFieldError: If the message has no sender.
        OSError: If the sink or an attachment source fails.
    """
    counter = CountingSink(sink)
    headers = assemble_headers(message, now=now, hostname=hostname)
    if CONTENT_TYPE in message.headers:
        logger.debug("content_type_override_replaced")

    mixed = MultipartWriter(counter)
    headers[CONTENT_TYPE] = f"multipart/mixed;\r\n boundary={mixed.boundary}"
    write_header_block(counter, headers)

    if message.text or message.html:
        _write_alternative(counter, mixed, message)
    if message.attachments:
        _write_attachments(counter, mixed, message.attachments)
    mixed.close()

    logger.debug(
        "message_encoded",
        bytes_written=counter.count,
        attachments=len(message.attachments),
    )
    return counter.count


def encode(
    message: Message,
    *,
    hostname: str | None = None,
    now: datetime | None = None,
) -> bytes:
    """Return the serialized message as bytes.

    Raises:
        MissingFieldError: If the message has no sender.
    """
    buffer = io.BytesIO()
    write_to(message, buffer, hostname=hostname, now=now)
    return buffer.getvalue()
