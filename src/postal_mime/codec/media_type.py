"""Content-Type value parsing (RFC 2045 section 5.1)."""

import re

from postal_mime.exceptions import ContentTypeError

_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"

_MEDIA_TYPE_RE = re.compile(rf"^{_TOKEN}/{_TOKEN}$")
_PARAM_RE = re.compile(
    rf'[ \t;]*(?P<name>{_TOKEN})[ \t]*=[ \t]*'
    rf'(?P<value>{_TOKEN}|"(?:[^"\\]|\\.)*")[ \t]*(?:;|$)'
)
_QUOTED_PAIR_RE = re.compile(r"\\(.)")


def parse_media_type(value: str) -> tuple[str, dict[str, str]]:
    """Split a Content-Type value into its media type and parameters.

    The media type and parameter names are lower-cased; quoted-string
    parameter values are unquoted.

    Args:
        value: The header value, e.g. ``multipart/mixed; boundary="x"``.

    Returns:
        Tuple of (media_type, params).

    Raises:
        ContentTypeError: If the media type or a parameter is malformed,
            or a parameter is repeated.
    """
    media_type, _, rest = value.partition(";")
    media_type = media_type.strip().lower()
    if not _MEDIA_TYPE_RE.match(media_type):
        raise ContentTypeError(f"Invalid media type in Content-Type: {value!r}")

    params: dict[str, str] = {}
    pos = 0
    while rest[pos:].strip(" \t;"):
        match = _PARAM_RE.match(rest, pos)
        if match is None:
            raise ContentTypeError(f"Invalid parameter in Content-Type: {value!r}")
        name = match.group("name").lower()
        param = match.group("value")
        if param.startswith('"'):
            param = _QUOTED_PAIR_RE.sub(r"\1", param[1:-1])
        if name in params:
            raise ContentTypeError(f"Duplicate parameter {name!r} in Content-Type")
        params[name] = param
        pos = match.end()
    return media_type, params
