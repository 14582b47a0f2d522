"""Output sink protocol and a byte-counting wrapper."""

from typing import Protocol


class Sink(Protocol):
    """Anything with a binary ``write`` method (files, sockets, buffers)."""

    def write(self, data: bytes, /) -> object: ...


class CountingSink:
    """Pass writes through to ``sink`` while counting the bytes written."""

    def __init__(self, sink: Sink) -> None:
        self._sink = sink
        self.count = 0

    def write(self, data: bytes) -> int:
        self._sink.write(data)
        self.count += len(data)
        return len(data)
