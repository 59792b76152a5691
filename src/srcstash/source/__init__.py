"""
srcstash Source Subsystem

Content-addressed acquisition of upstream source artifacts.

Core Components:
- descriptor: SimpleSource, the parsed and validated source locator
- hashing: SHA-256 / SHA-1 digests
- backends: HTTP and FTP transfer strategies
- dispatch: scheme to backend mapping
- store: hash-keyed content store with legacy aliases
- fetcher: the fetch pipeline
"""

from .backends import FTPBackend, HTTPBackend
from .descriptor import SimpleSource
from .dispatch import select_backend
from .fetcher import SourceFetcher, fetch_source
from .hashing import digest, sha1sum, sha256sum
from .interfaces import BindConfiguration, FetchResult, ProgressObserver, TransferBackend
from .progress import (
    LoggingProgressObserver,
    NullProgressObserver,
    RichProgressObserver,
)
from .store import ContentStore

__all__ = [
    # Interfaces
    "BindConfiguration",
    "FetchResult",
    "ProgressObserver",
    "TransferBackend",
    # Descriptor
    "SimpleSource",
    # Hashing
    "digest",
    "sha1sum",
    "sha256sum",
    # Transfer
    "HTTPBackend",
    "FTPBackend",
    "select_backend",
    # Progress
    "LoggingProgressObserver",
    "NullProgressObserver",
    "RichProgressObserver",
    # Storage and orchestration
    "ContentStore",
    "SourceFetcher",
    "fetch_source",
]
