"""
Source descriptor for upstream artifacts.

A SimpleSource is a tarball, patch or other single-file source for a package,
identified by its URI and keyed in the content store by a validator hash.
"""

import os
import posixpath
from typing import TYPE_CHECKING, Optional
from urllib.parse import SplitResult, unquote, urlsplit

from srcstash.constants import NETWORK_SCHEMES
from srcstash.exceptions import InvalidURIError

from .interfaces import BindConfiguration

if TYPE_CHECKING:
    from .store import ContentStore


class SimpleSource:
    """
    An immutable description of one upstream artifact.

    Attributes:
        uri: The original locator string; identity of the source.
        file_name: Basename of the URI path component; never empty.
        scheme: Lower-cased URI scheme used to pick a transfer backend.
        validator: Expected hash, lower-cased, used as the cache key (SHA-256, or SHA-1 for
            legacy sources).
        legacy: Whether the artifact must also be addressable by its SHA-1.
        url: The parsed locator.
    """

    __slots__ = ("uri", "file_name", "scheme", "validator", "legacy", "url")

    def __init__(self, uri: str, validator: str, legacy: bool = False) -> None:
        """
        Parse and validate `uri`.

        Raises:
            InvalidURIError: If the locator cannot be parsed, has no scheme, lacks a host
                for a network scheme, or has no final path segment to name the file.
        """
        if not isinstance(uri, str) or not uri.strip():
            raise InvalidURIError(str(uri), details="empty locator")

        try:
            url = urlsplit(uri.strip())
            # Accessing port validates it
            url.port
        except ValueError as e:
            raise InvalidURIError(uri, details=str(e)) from e

        scheme = url.scheme.lower()
        if not scheme:
            raise InvalidURIError(uri, details="missing scheme")
        if scheme in NETWORK_SCHEMES and not url.hostname:
            raise InvalidURIError(uri, details="missing host")

        # Decode before taking the basename so %2F cannot smuggle a separator in
        file_name = posixpath.basename(unquote(url.path))
        if not file_name or file_name in (".", ".."):
            raise InvalidURIError(uri, details="no file name in path")
        if any(sep and sep in file_name for sep in (os.sep, os.altsep)):
            raise InvalidURIError(uri, details="file name contains a path separator")

        object.__setattr__(self, "uri", uri)
        object.__setattr__(self, "file_name", file_name)
        object.__setattr__(self, "scheme", scheme)
        object.__setattr__(self, "validator", (validator or "").lower())
        object.__setattr__(self, "legacy", bool(legacy))
        object.__setattr__(self, "url", url)

    # Declared for type checkers; values are set via object.__setattr__ above.
    uri: str
    file_name: str
    scheme: str
    validator: str
    legacy: bool
    url: SplitResult

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other) -> bool:
        if not isinstance(other, SimpleSource):
            return NotImplemented
        return self.uri == other.uri

    def __hash__(self) -> int:
        return hash(self.uri)

    def __repr__(self) -> str:
        return f"SimpleSource(uri={self.uri!r}, validator={self.validator!r}, legacy={self.legacy})"

    def get_identifier(self) -> str:
        """Return the URI associated with this source."""
        return self.uri

    def get_path(self, hash_value: str, source_dir: str) -> str:
        """Return the on-disk location of this source under the given hash."""
        return os.path.join(source_dir, hash_value, self.file_name)

    def get_bind_configuration(
        self, rootfs: str, source_dir: str
    ) -> BindConfiguration:
        """
        Return the pair for binding this source into a build root.

        The build engine mounts `bind_source` read-only at `bind_target`.
        """
        return BindConfiguration(
            bind_source=self.get_path(self.validator, source_dir),
            bind_target=os.path.join(rootfs, self.file_name),
        )

    def is_fetched(self, store: "ContentStore") -> bool:
        """Return True if the content store already holds this source."""
        return store.exists(self.validator, self.file_name)

    @property
    def username(self) -> Optional[str]:
        return unquote(self.url.username) if self.url.username is not None else None

    @property
    def password(self) -> Optional[str]:
        return unquote(self.url.password) if self.url.password is not None else None
