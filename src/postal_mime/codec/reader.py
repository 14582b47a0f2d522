"""Size-bounded reader that drops whitespace at the start of a message.

Some inbound messages are preceded by blank lines added in transit,
which break strict RFC 5322 header parsing.
"""

import io
import re
from typing import BinaryIO

# UTF-8 encodings of the Unicode White_Space code points
_SPACE = (
    rb"(?:[\t\n\x0b\x0c\r ]"
    rb"|\xc2[\x85\xa0]"
    rb"|\xe1\x9a\x80"
    rb"|\xe2\x80[\x80-\x8a\xa8\xa9\xaf]"
    rb"|\xe2\x81\x9f"
    rb"|\xe3\x80\x80)"
)
_LEADING_SPACE = re.compile(rb"\A" + _SPACE + rb"+")

# Lead bytes of a multi-byte space cut off at the end of a read
_PARTIAL_SPACE = re.compile(rb"\xc2|\xe1\x9a?|\xe2[\x80\x81]?|\xe3\x80?")


class BoundedTrimReader(io.RawIOBase):
    """Raw reader over ``source`` returning at most ``max_size`` bytes.

    Leading whitespace is discarded on every read until the first other
    byte appears. Once ``max_size`` bytes have been consumed further reads
    return EOF; ``limit_reached`` then tells whether the source still had
    data, which callers use to report truncation instead of a parse error.
    """

    def __init__(self, source: BinaryIO, max_size: int) -> None:
        super().__init__()
        if max_size < 0:
            raise ValueError("max_size must not be negative")
        self.max_size = max_size
        self.limit_reached = False
        self._source = source
        self._remaining = max_size
        self._probed = False
        self._trimming = True
        self._pending = b""
        self._ready = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        if not self._ready:
            self._ready = self._next_chunk(len(buffer))
        n = min(len(buffer), len(self._ready))
        buffer[:n] = self._ready[:n]
        self._ready = self._ready[n:]
        return n

    def _next_chunk(self, size: int) -> bytes:
        while self._trimming:
            raw = self._read_source(size)
            data = _LEADING_SPACE.sub(b"", self._pending + raw, count=1)
            self._pending = b""
            if not raw:
                # EOF: whatever was held back is real content
                self._trimming = False
                return data
            if not data:
                continue
            if _PARTIAL_SPACE.fullmatch(data):
                self._pending = data
                continue
            self._trimming = False
            return data
        return self._read_source(size)

    def _read_source(self, size: int) -> bytes:
        if self._remaining == 0:
            if not self._probed:
                self._probed = True
                self.limit_reached = bool(self._source.read(1))
            return b""
        data = self._source.read(min(size, self._remaining)) or b""
        self._remaining -= len(data)
        return data
