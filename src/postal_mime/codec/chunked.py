"""Line-length limiting writer for encoded attachment bodies.

Base64 encoders emit one unbroken run of characters, but RFC 2045
limits encoded lines to 76 characters.
"""

from postal_mime.codec.sink import Sink
from postal_mime.exceptions import WriterClosedError

MAX_LINE_LENGTH = 76
LINE_ENDING = b"\r\n"


class ChunkWriter:
    """Write to ``sink`` in lines of at most 76 bytes, each ending in CRLF.

    The column is tracked across ``write`` calls, so any burst size from
    the caller produces the same output.
    """

    def __init__(self, sink: Sink, line_length: int = MAX_LINE_LENGTH) -> None:
        self._sink = sink
        self.line_length = line_length
        self._column = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        if self._closed:
            raise WriterClosedError("Chunk writer is closed")

        view = memoryview(data)
        written = 0
        while view:
            chunk = view[: self.line_length - self._column]
            self._sink.write(bytes(chunk))
            written += len(chunk)
            self._column += len(chunk)
            view = view[len(chunk):]
            if self._column == self.line_length:
                self._sink.write(LINE_ENDING)
                self._column = 0
        return written

    def start_line(self) -> None:
        """Reset the column after a line break written by someone else."""
        self._column = 0

    def close(self) -> None:
        """Terminate the current line, even if empty, and refuse further use."""
        if self._closed:
            raise WriterClosedError("Chunk writer is closed")
        self._closed = True
        self._sink.write(LINE_ENDING)
