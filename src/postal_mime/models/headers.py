"""Header field names and the ordered, case-insensitive header set.

Field names are stored under their canonical MIME form (``message-ID``
becomes ``Message-Id``) so lookups are case-insensitive while writing
keeps the order in which fields were added.
"""

import re
from collections.abc import Iterable, Iterator, Mapping, MutableMapping

# Field names
TO = "To"
CC = "Cc"
BCC = "Bcc"
FROM = "From"
SUBJECT = "Subject"
DATE = "Date"
MESSAGE_ID = "Message-Id"
MIME_VERSION = "Mime-Version"
CONTENT_TYPE = "Content-Type"
CONTENT_DISPOSITION = "Content-Disposition"
CONTENT_ID = "Content-Id"
CONTENT_TRANSFER_ENCODING = "Content-Transfer-Encoding"

# Default Content-Type according to RFC 2045, section 5.2
DEFAULT_CONTENT_TYPE = "text/plain; charset=us-ascii"

_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def canonical_key(name: str) -> str:
    """Return the canonical form of a header field name.

    The first letter and any letter following a hyphen are upper-cased,
    the rest lower-cased. Names with characters outside the token set
    (spaces, for instance) are returned unchanged.
    """
    if not _TOKEN_RE.match(name):
        return name
    return "-".join(word[:1].upper() + word[1:].lower() for word in name.split("-"))


class HeaderSet(MutableMapping[str, list[str]]):
    """Ordered mapping from canonical field name to its list of values.

    Assigning a plain string stores it as a single value. Iteration
    yields field names in insertion order.
    """

    def __init__(
        self,
        fields: Mapping[str, str | Iterable[str]] | Iterable[tuple[str, str | Iterable[str]]] | None = None,
    ) -> None:
        self._fields: dict[str, list[str]] = {}
        if fields is None:
            return
        items = fields.items() if isinstance(fields, Mapping) else fields
        for name, values in items:
            self[name] = values

    def __getitem__(self, name: str) -> list[str]:
        return self._fields[canonical_key(name)]

    def __setitem__(self, name: str, values: str | Iterable[str]) -> None:
        if isinstance(values, str):
            values = [values]
        self._fields[canonical_key(name)] = list(values)

    def __delitem__(self, name: str) -> None:
        del self._fields[canonical_key(name)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"HeaderSet({self._fields!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderSet):
            return list(self._fields.items()) == list(other._fields.items())
        return super().__eq__(other)

    def first(self, name: str, default: str = "") -> str:
        """Return the first value of a field, or ``default`` if absent."""
        values = self._fields.get(canonical_key(name))
        return values[0] if values else default

    def add(self, name: str, value: str) -> None:
        """Append a value, keeping any values already present."""
        self._fields.setdefault(canonical_key(name), []).append(value)

    def replace(self, name: str, value: str) -> None:
        """Set a field to a single value, keeping its position if present."""
        self[name] = value

    def copy(self) -> "HeaderSet":
        return HeaderSet((name, list(values)) for name, values in self._fields.items())

    def lines(self) -> Iterator[tuple[str, str]]:
        """Yield ``(name, value)`` pairs, one per value, in write order."""
        for name, values in self._fields.items():
            for value in values:
                yield name, value
