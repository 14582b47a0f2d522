from postal_mime.models.headers import DEFAULT_CONTENT_TYPE, HeaderSet, canonical_key
from postal_mime.models.message import Attachment, Message

__all__ = ["DEFAULT_CONTENT_TYPE", "Attachment", "HeaderSet", "Message", "canonical_key"]
