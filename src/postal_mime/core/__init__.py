from postal_mime.core.logging import configure_logging, sanitize_for_log
from postal_mime.core.sniff import detect_content_type, sniff_bytes

__all__ = ["configure_logging", "detect_content_type", "sanitize_for_log", "sniff_bytes"]
