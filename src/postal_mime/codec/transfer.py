"""Content-Transfer-Encoding transforms.

Each encoding provides a streaming encoder (a writer wrapping a sink,
flushed by ``close``) and a whole-body decoder. The transform for a part
is selected by the tag in its Content-Transfer-Encoding header.
"""

import base64
import binascii
import re
from abc import ABC, abstractmethod

from postal_mime.codec.sink import Sink
from postal_mime.exceptions import TransferDecodeError

_LINE_BREAK_RE = re.compile(rb"\r\n|\r|\n")
_WHITESPACE_RE = re.compile(rb"\s+")


class StreamEncoder(ABC):
    """Writer that transforms bytes on their way to a sink."""

    def __init__(self, sink: Sink) -> None:
        self._sink = sink

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Encode ``data``, possibly holding some back until ``close``."""

    @abstractmethod
    def close(self) -> None:
        """Flush anything held back. The sink itself is left open."""


class TransferEncoding(ABC):
    """A content-transfer-encoding.

    Attributes:
        name: The header tag, lower-cased.
        line_wrapped: True when the encoded output already keeps to the
            76-column limit; base64 output needs an external line writer.
    """

    name: str
    line_wrapped: bool = True

    @abstractmethod
    def encoder(self, sink: Sink) -> StreamEncoder:
        """Return a streaming encoder writing to ``sink``."""

    @abstractmethod
    def decode(self, data: bytes) -> bytes:
        """Reverse the encoding of a complete body."""


class _QuotedPrintableEncoder(StreamEncoder):
    def __init__(self, sink: Sink) -> None:
        super().__init__(sink)
        self._pending = b""

    def write(self, data: bytes) -> int:
        # Lines encode independently, so flush up to the last line break
        self._pending += bytes(data)
        cut = self._pending.rfind(b"\n") + 1
        if cut:
            self._sink.write(_encode_qp(self._pending[:cut]))
            self._pending = self._pending[cut:]
        return len(data)

    def close(self) -> None:
        if self._pending:
            self._sink.write(_encode_qp(self._pending))
            self._pending = b""


def _encode_qp(data: bytes) -> bytes:
    data = _LINE_BREAK_RE.sub(b"\r\n", data)
    if data.endswith(b"\r\n"):
        return binascii.b2a_qp(data, quotetabs=False, istext=True, header=False)
    # b2a_qp picks its soft line break style from the first line break seen
    encoded = binascii.b2a_qp(data + b"\r\n", quotetabs=False, istext=True, header=False)
    return encoded[:-2]


class QuotedPrintable(TransferEncoding):
    """Quoted-printable; line breaks are written as CRLF."""

    name = "quoted-printable"

    def encoder(self, sink: Sink) -> StreamEncoder:
        return _QuotedPrintableEncoder(sink)

    def decode(self, data: bytes) -> bytes:
        return binascii.a2b_qp(data)


class _Base64Encoder(StreamEncoder):
    def __init__(self, sink: Sink) -> None:
        super().__init__(sink)
        self._pending = b""

    def write(self, data: bytes) -> int:
        buffered = self._pending + bytes(data)
        cut = len(buffered) - len(buffered) % 3
        if cut:
            self._sink.write(base64.b64encode(buffered[:cut]))
        self._pending = buffered[cut:]
        return len(data)

    def close(self) -> None:
        if self._pending:
            self._sink.write(base64.b64encode(self._pending))
            self._pending = b""


class Base64(TransferEncoding):
    """Standard-alphabet base64 with padding, written as one long run."""

    name = "base64"
    line_wrapped = False

    def encoder(self, sink: Sink) -> StreamEncoder:
        return _Base64Encoder(sink)

    def decode(self, data: bytes) -> bytes:
        try:
            return base64.b64decode(_WHITESPACE_RE.sub(b"", data), validate=True)
        except binascii.Error as e:
            raise TransferDecodeError(f"Invalid base64 body: {e}") from e


class _PassThroughEncoder(StreamEncoder):
    def write(self, data: bytes) -> int:
        self._sink.write(bytes(data))
        return len(data)

    def close(self) -> None:
        pass


class Identity(TransferEncoding):
    """7bit, 8bit, binary and any unrecognised tag: bytes pass unchanged."""

    def __init__(self, name: str = "7bit") -> None:
        self.name = name

    def encoder(self, sink: Sink) -> StreamEncoder:
        return _PassThroughEncoder(sink)

    def decode(self, data: bytes) -> bytes:
        return data


QUOTED_PRINTABLE = QuotedPrintable()
BASE64 = Base64()

_ENCODINGS: dict[str, TransferEncoding] = {
    QUOTED_PRINTABLE.name: QUOTED_PRINTABLE,
    BASE64.name: BASE64,
}


def get_transfer_encoding(tag: str | None) -> TransferEncoding:
    """Return the transform for a Content-Transfer-Encoding value."""
    tag = (tag or "7bit").strip().lower()
    return _ENCODINGS.get(tag) or Identity(tag)
