"""MIME codec for postal-mime.

This package provides the two message pipelines:
- decode / decode_with_size: raw bytes -> Message
- encode / write_to: Message -> multipart/mixed bytes
"""

from postal_mime.codec.decoder import decode, decode_with_size
from postal_mime.codec.encoder import assemble_headers, encode, write_to
from postal_mime.codec.message_id import generate_message_id

__all__ = [
    "assemble_headers",
    "decode",
    "decode_with_size",
    "encode",
    "generate_message_id",
    "write_to",
]
