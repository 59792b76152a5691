"""
Transfer Dispatcher

Maps a URI scheme onto the backend that retrieves it. The mapping is total:
anything not listed goes to the generic HTTP backend, and an unsupported
scheme fails from inside that backend's connection attempt.
"""

from typing import Dict, Optional, Type

from srcstash.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_FTP_CONNECT_TIMEOUT,
    FTP_SCHEME,
)

from .backends import FTPBackend, HTTPBackend
from .interfaces import TransferBackend

BACKENDS: Dict[str, Type[TransferBackend]] = {
    FTP_SCHEME: FTPBackend,
}
DEFAULT_BACKEND: Type[TransferBackend] = HTTPBackend


def backend_class_for(scheme: Optional[str]) -> Type[TransferBackend]:
    """Return the backend class handling `scheme`; never raises."""
    return BACKENDS.get((scheme or "").lower(), DEFAULT_BACKEND)


def select_backend(
    scheme: Optional[str],
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ftp_connect_timeout: float = DEFAULT_FTP_CONNECT_TIMEOUT,
) -> TransferBackend:
    """
    Return a configured backend instance for `scheme`.

    Parameters:
        scheme (Optional[str]): URI scheme; None or empty selects the HTTP backend.
        connect_timeout (float): Connect timeout for the HTTP backend, in seconds.
        ftp_connect_timeout (float): Connect timeout for the FTP backend, in seconds.
    """
    if backend_class_for(scheme) is FTPBackend:
        return FTPBackend(connect_timeout=ftp_connect_timeout)
    return HTTPBackend(connect_timeout=connect_timeout)
