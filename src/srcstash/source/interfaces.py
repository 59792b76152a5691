"""
Core Interfaces for the srcstash Source Subsystem

This module defines the data structures and abstract interfaces shared by the
source descriptor, the transfer backends and the fetch orchestrator.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .descriptor import SimpleSource


@dataclass(frozen=True)
class BindConfiguration:
    """A read-only bind mount handed to the build execution engine."""

    bind_source: str
    """Cached artifact path on the host"""

    bind_target: str
    """Where the artifact must appear inside the build root"""


@dataclass
class FetchResult:
    """Result of a fetch operation."""

    source: "SimpleSource"
    """The source that was fetched"""

    file_path: str
    """Canonical path of the artifact in the content store"""

    primary_hash: Optional[str] = None
    """SHA-256 of the artifact (None when the fetch was skipped)"""

    legacy_hash: Optional[str] = None
    """SHA-1 alias created for legacy sources"""

    was_skipped: bool = False
    """Whether the artifact was already cached and no transfer happened"""


class ProgressObserver(ABC):
    """
    Receives transfer progress for user-facing display.

    Observers are passed explicitly into each backend call. They are not part
    of the correctness contract: a backend must behave identically whatever
    observer it is given.
    """

    @abstractmethod
    def start(self, label: str, total: Optional[int] = None) -> None:
        """
        Begin reporting a transfer.

        Parameters:
            label (str): Short name shown to the user, usually the file basename.
            total (Optional[int]): Expected size in bytes, or None when unknown.
        """

    @abstractmethod
    def update(self, completed: int, total: Optional[int] = None) -> None:
        """
        Report the number of bytes transferred so far.

        Parameters:
            completed (int): Bytes written so far; never decreases during a transfer.
            total (Optional[int]): Updated total size when the transfer layer learns it.
        """

    @abstractmethod
    def finish(self) -> None:
        """Stop reporting; called once on both success and failure paths."""


class TransferBackend(ABC):
    """
    Protocol-specific strategy that retrieves a source into a local file.

    Backends never retry internally and never clean up the destination on
    failure; errors are raised to the caller.
    """

    @abstractmethod
    def fetch(
        self,
        source: "SimpleSource",
        destination: str,
        observer: ProgressObserver,
    ) -> None:
        """
        Write the complete artifact named by `source` to `destination`.

        Any existing content at `destination` is overwritten.

        Parameters:
            source (SimpleSource): The parsed source to retrieve.
            destination (str): Local file path to write.
            observer (ProgressObserver): Receives progress updates.
        """
