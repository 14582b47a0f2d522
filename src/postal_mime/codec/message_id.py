"""Deterministic Message-Id generation."""

import hashlib
from datetime import datetime, timezone

BUCKET_SECONDS = 5 * 60


def bucket_start(timestamp: datetime) -> datetime:
    """Round a timestamp down to the start of its 5-minute bucket, in UTC."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.astimezone()
    seconds = int(timestamp.timestamp())
    return datetime.fromtimestamp(seconds - seconds % BUCKET_SECONDS, tz=timezone.utc)


def generate_message_id(
    sender: str,
    subject: str,
    text: bytes,
    html: bytes,
    timestamp: datetime,
    hostname: str,
) -> str:
    """Build a Message-Id from the message content and its creation time.

    Identical content created within the same 5-minute bucket gets the
    same id, so a retried send does not look like a new message.

    Returns:
        ``<32 hex chars@hostname>``.
    """
    digest = hashlib.sha256()
    digest.update(sender.encode())
    digest.update(subject.encode())
    digest.update(bucket_start(timestamp).isoformat().encode())
    digest.update(text)
    digest.update(html)
    return f"<{digest.digest()[4:20].hex()}@{hostname}>"
