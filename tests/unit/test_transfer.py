"""Tests for content-transfer-encoding transforms."""

import base64
import io

import pytest

from postal_mime.codec.transfer import (
    BASE64,
    QUOTED_PRINTABLE,
    Identity,
    get_transfer_encoding,
)
from postal_mime.exceptions import TransferDecodeError

PLAIN = (
    b"Dear reader!\n\n"
    b"This is a test email to try and capture some of the corner cases that exist within\n"
    b"the quoted-printable encoding.\n"
    b"There are some wacky parts like =, and this input assumes UNIX line breaks so\r\n"
    b"it can come out a little weird.  Also, we need to support unicode so here's a fish: "
    b"\xf0\x9f\x90\x9f\n"
)
QP_ENCODED = (
    b"Dear reader!\r\n\r\n"
    b"This is a test email to try and capture some of the corner cases that exist=\r\n"
    b" within\r\n"
    b"the quoted-printable encoding.\r\n"
    b"There are some wacky parts like =3D, and this input assumes UNIX line break=\r\n"
    b"s so\r\n"
    b"it can come out a little weird.  Also, we need to support unicode so here's=\r\n"
    b" a fish: =F0=9F=90=9F\r\n"
)


def _stream(encoding, data: bytes, chunk_size: int) -> bytes:
    buffer = io.BytesIO()
    encoder = encoding.encoder(buffer)
    for start in range(0, len(data), chunk_size):
        encoder.write(data[start : start + chunk_size])
    encoder.close()
    return buffer.getvalue()


class TestQuotedPrintable:
    """Tests for the quoted-printable transform."""

    def test_encode(self) -> None:
        assert _stream(QUOTED_PRINTABLE, PLAIN, len(PLAIN)) == QP_ENCODED

    @pytest.mark.parametrize("chunk_size", [1, 5, 80])
    def test_encode_in_bursts(self, chunk_size: int) -> None:
        assert _stream(QUOTED_PRINTABLE, PLAIN, chunk_size) == QP_ENCODED

    def test_decode(self) -> None:
        assert QUOTED_PRINTABLE.decode(QP_ENCODED) == PLAIN.replace(b"\r\n", b"\n").replace(
            b"\n", b"\r\n"
        )

    def test_utf8_round_trip(self) -> None:
        """Test multi-byte text with soft breaks decodes to the original bytes."""
        text = ("Grüße aus Köln, here is a fish \U0001f41f and a tab\t " * 4 + "\r\n").encode() * 3

        encoded = _stream(QUOTED_PRINTABLE, text, 17)

        assert max(len(line) for line in encoded.split(b"\r\n")) <= 76
        assert QUOTED_PRINTABLE.decode(encoded) == text

    def test_unterminated_last_line(self) -> None:
        """Test soft breaks stay CRLF when the data has no line break at all."""
        encoded = _stream(QUOTED_PRINTABLE, b"a" * 100, 100)

        assert encoded == b"a" * 75 + b"=\r\n" + b"a" * 25

    def test_trailing_space_is_encoded(self) -> None:
        assert _stream(QUOTED_PRINTABLE, b"end \n", 10) == b"end=20\r\n"

    def test_lone_carriage_return_is_line_break(self) -> None:
        assert _stream(QUOTED_PRINTABLE, b"one\rtwo\n", 10) == b"one\r\ntwo\r\n"

    def test_empty_input_writes_nothing(self) -> None:
        assert _stream(QUOTED_PRINTABLE, b"", 1) == b""


class TestBase64:
    """Tests for the base64 transform."""

    @pytest.mark.parametrize("chunk_size", [1, 2, 4, 1000])
    def test_streaming_matches_one_shot(self, chunk_size: int) -> None:
        data = bytes(range(256))

        assert _stream(BASE64, data, chunk_size) == base64.b64encode(data)

    def test_output_is_not_wrapped(self) -> None:
        assert b"\n" not in _stream(BASE64, b"x" * 500, 100)
        assert not BASE64.line_wrapped

    def test_decode_ignores_line_breaks(self) -> None:
        assert BASE64.decode(b"aGVs\r\nbG8g\r\nd29y\nbGQ=\r\n") == b"hello world"

    def test_decode_invalid_raises(self) -> None:
        with pytest.raises(TransferDecodeError):
            BASE64.decode(b"not*base64!")


class TestRegistry:
    """Tests for looking up transforms by header tag."""

    def test_known_tags(self) -> None:
        assert get_transfer_encoding("base64") is BASE64
        assert get_transfer_encoding(" Quoted-Printable ") is QUOTED_PRINTABLE

    def test_missing_tag_is_7bit(self) -> None:
        encoding = get_transfer_encoding(None)

        assert isinstance(encoding, Identity)
        assert encoding.name == "7bit"

    @pytest.mark.parametrize("tag", ["7bit", "8bit", "binary", "x-uuencode"])
    def test_other_tags_pass_through(self, tag: str) -> None:
        encoding = get_transfer_encoding(tag)

        assert encoding.name == tag
        assert encoding.decode(b"=41 raw\r\n") == b"=41 raw\r\n"
        assert _stream(encoding, b"=41 raw\r\n", 3) == b"=41 raw\r\n"
