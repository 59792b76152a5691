"""
Custom exceptions for srcstash.

This module defines domain-specific exceptions for source acquisition so that
callers can tell a malformed locator apart from a network failure, an
ambiguous remote listing or a corrupted cache entry.
"""


class SrcstashError(Exception):
    """
    Base exception for all srcstash errors.

    All custom exceptions in srcstash inherit from this class so callers can
    catch every application-specific error in one place.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(SrcstashError):
    """
    Exception raised when configuration is invalid.

    This includes:
    - Invalid configuration values (negative timeouts, empty directories)
    - Configuration file parsing errors
    """

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when the configuration file cannot be read or parsed."""

    pass


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(SrcstashError):
    """
    Exception raised when validation fails.

    Attributes:
        field: The name of the field that failed validation.
        value: The value that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURIError(ValidationError):
    """Exception raised when a source locator cannot be parsed."""

    def __init__(self, uri: str, details: str | None = None) -> None:
        super().__init__(
            f"Invalid source URI: {uri!r}", field="uri", value=uri, details=details
        )
        self.uri = uri


class HashMismatchError(ValidationError):
    """
    Exception raised when a fetched file does not match its validator hash.

    Attributes:
        expected: The validator hash supplied by the caller.
        actual: The digest computed from the downloaded bytes.
        algorithm: The hash algorithm the comparison used.
        path: The staged file that failed verification.
    """

    def __init__(
        self,
        expected: str,
        actual: str,
        algorithm: str,
        path: str | None = None,
    ) -> None:
        super().__init__(
            f"{algorithm} mismatch for {path or 'downloaded file'}",
            field="validator",
            value=expected,
            details=f"expected {expected}, got {actual}",
        )
        self.expected = expected
        self.actual = actual
        self.algorithm = algorithm
        self.path = path


# =============================================================================
# Download Errors
# =============================================================================


class DownloadError(SrcstashError):
    """
    Base exception for transfer failures.

    Attributes:
        url: The URI that was being fetched when the error occurred.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class NetworkError(DownloadError):
    """Exception raised for network-level transfer failures."""

    pass


class TransferConnectionError(NetworkError):
    """
    Exception raised when a connection cannot be established or is lost.

    This includes DNS failures, refused connections, protocol errors and
    schemes the transfer library does not understand.
    """

    pass


class TransferTimeoutError(NetworkError):
    """Exception raised when connection establishment exceeds its timeout."""

    pass


class HTTPError(DownloadError):
    """
    Exception raised when the server answers with an error status.

    Attributes:
        status_code: The HTTP status code returned by the server.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, url, details)
        self.status_code = status_code


class AuthenticationError(DownloadError):
    """Exception raised when the remote end rejects our credentials."""

    pass


class AmbiguousRemoteFileError(DownloadError):
    """
    Exception raised when an FTP listing does not name exactly one file.

    Attributes:
        path: The remote path that was listed.
        matches: How many entries the listing returned.
    """

    def __init__(
        self,
        path: str,
        matches: int,
        url: str | None = None,
    ) -> None:
        super().__init__(
            f"FTP expected 1 file, found {matches} files",
            url=url,
            details=f"remote path: {path}",
        )
        self.path = path
        self.matches = matches


# =============================================================================
# File System Errors
# =============================================================================


class FileSystemError(SrcstashError):
    """
    Exception raised for content store layout problems.

    Attributes:
        path: The file path that caused the error.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class AliasCollisionError(FileSystemError):
    """
    Exception raised when a legacy alias already exists with another target.

    Attributes:
        existing_target: What the existing entry points at (None if not a link).
        expected_target: The canonical hash directory we wanted to point at.
    """

    def __init__(
        self,
        path: str,
        existing_target: str | None,
        expected_target: str,
    ) -> None:
        super().__init__(
            f"Legacy alias {path} already exists",
            path=path,
            details=f"points to {existing_target!r}, expected {expected_target!r}",
        )
        self.existing_target = existing_target
        self.expected_target = expected_target
