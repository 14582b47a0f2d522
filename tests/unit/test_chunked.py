"""Tests for the line-limiting chunk writer."""

import io

import pytest

from postal_mime.codec.chunked import MAX_LINE_LENGTH, ChunkWriter
from postal_mime.codec.transfer import BASE64
from postal_mime.exceptions import WriterClosedError

FILE = (
    b"I'm a file long enough to force the function to wrap a\n"
    b"couple of lines, but I stop short of the end of one line and\n"
    b"have some padding dangling at the end."
)
ENCODED = (
    b"SSdtIGEgZmlsZSBsb25nIGVub3VnaCB0byBmb3JjZSB0aGUgZnVuY3Rpb24gdG8gd3JhcCBhCmNv\r\n"
    b"dXBsZSBvZiBsaW5lcywgYnV0IEkgc3RvcCBzaG9ydCBvZiB0aGUgZW5kIG9mIG9uZSBsaW5lIGFu\r\n"
    b"ZApoYXZlIHNvbWUgcGFkZGluZyBkYW5nbGluZyBhdCB0aGUgZW5kLg==\r\n"
)


def _encode(chunk_size: int) -> bytes:
    buffer = io.BytesIO()
    writer = ChunkWriter(buffer)
    encoder = BASE64.encoder(writer)
    for start in range(0, len(FILE), chunk_size):
        encoder.write(FILE[start : start + chunk_size])
    encoder.close()
    writer.close()
    return buffer.getvalue()


def test_base64_wrapped_to_76_columns():
    assert _encode(len(FILE)) == ENCODED


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 64])
def test_output_independent_of_write_sizes(chunk_size):
    assert _encode(chunk_size) == ENCODED


def test_exact_line_gets_single_line_ending():
    buffer = io.BytesIO()
    writer = ChunkWriter(buffer)

    writer.write(b"x" * MAX_LINE_LENGTH)
    writer.close()

    assert buffer.getvalue() == b"x" * MAX_LINE_LENGTH + b"\r\n\r\n"


def test_close_on_empty_writer_ends_line():
    buffer = io.BytesIO()
    writer = ChunkWriter(buffer)

    writer.close()

    assert buffer.getvalue() == b"\r\n"
    assert writer.closed


def test_start_line_resets_column():
    buffer = io.BytesIO()
    writer = ChunkWriter(buffer)

    writer.write(b"a" * 10)
    writer.start_line()
    writer.write(b"b" * MAX_LINE_LENGTH)

    assert buffer.getvalue() == b"a" * 10 + b"b" * MAX_LINE_LENGTH + b"\r\n"


def test_custom_line_length():
    buffer = io.BytesIO()
    writer = ChunkWriter(buffer, line_length=4)

    assert writer.write(b"abcdefghij") == 10
    writer.close()

    assert buffer.getvalue() == b"abcd\r\nefgh\r\nij\r\n"


def test_write_after_close_raises():
    writer = ChunkWriter(io.BytesIO())
    writer.close()

    with pytest.raises(WriterClosedError):
        writer.write(b"late")


def test_close_twice_raises():
    buffer = io.BytesIO()
    writer = ChunkWriter(buffer)
    writer.close()

    with pytest.raises(WriterClosedError):
        writer.close()
    assert buffer.getvalue() == b"\r\n"
