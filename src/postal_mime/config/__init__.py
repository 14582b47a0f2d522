from postal_mime.config.settings import (
    DEFAULT_MAX_SIZE,
    FALLBACK_HOSTNAME,
    Settings,
    get_settings,
    resolve_hostname,
)

__all__ = [
    "DEFAULT_MAX_SIZE",
    "FALLBACK_HOSTNAME",
    "Settings",
    "get_settings",
    "resolve_hostname",
]
