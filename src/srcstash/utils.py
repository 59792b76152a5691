# src/srcstash/utils.py
import importlib.metadata
import os

from srcstash.constants import APP_NAME

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `srcstash/{version}`, where `{version}` is the installed package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version(APP_NAME)
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"{APP_NAME}/{app_version}"

    return _USER_AGENT_CACHE


def path_exists(path: str) -> bool:
    """Return True if `path` exists, following symlinks."""
    return os.path.exists(path)


def format_size(num_bytes: int) -> str:
    """Render a byte count the way download log lines show it."""
    size_mb = num_bytes / (1024 * 1024)
    if size_mb >= 1.0:
        return f"{size_mb:.1f} MB"
    return f"{num_bytes} bytes"
