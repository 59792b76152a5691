"""
Transfer Backends

Protocol-specific strategies that stream a source into a local file. Backends
never retry; retry policy, if any, belongs to the caller.
"""

import errno
import ftplib
import os
import time
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import unquote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry  # type: ignore

from srcstash.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_FTP_CONNECT_TIMEOUT,
    DEFAULT_FTP_PORT,
    DEFAULT_MAX_REDIRECTS,
    FTP_ANONYMOUS_PASSWORD,
    FTP_ANONYMOUS_USER,
)
from srcstash.exceptions import (
    AmbiguousRemoteFileError,
    AuthenticationError,
    DownloadError,
    HTTPError,
    TransferConnectionError,
    TransferTimeoutError,
)
from srcstash.log_utils import logger
from srcstash.utils import format_size, get_user_agent

from .descriptor import SimpleSource
from .interfaces import ProgressObserver, TransferBackend

_UNREACHABLE_ERRNOS = frozenset(
    {errno.ENETUNREACH, errno.EHOSTUNREACH, errno.ENETDOWN, errno.EHOSTDOWN}
)


def _content_length(response: requests.Response) -> Optional[int]:
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        length = int(value)
    except (TypeError, ValueError):
        return None
    return length if length >= 0 else None


def _translate_request_error(
    error: requests.exceptions.RequestException, url: str
) -> DownloadError:
    """Map a requests failure onto the srcstash error kinds."""
    if isinstance(error, requests.exceptions.Timeout):
        return TransferTimeoutError(
            f"Timed out connecting to {url}", url=url, details=str(error)
        )
    if isinstance(error, requests.exceptions.HTTPError):
        status = error.response.status_code if error.response is not None else None
        if status in (401, 403):
            return AuthenticationError(
                f"Access denied fetching {url}", url=url, details=f"HTTP {status}"
            )
        return HTTPError(
            f"Server returned HTTP {status} for {url}", status_code=status, url=url
        )
    return TransferConnectionError(
        f"Network error fetching {url}", url=url, details=str(error)
    )


class HTTPBackend(TransferBackend):
    """
    Generic backend for HTTP, HTTPS and anything else requests understands.

    Redirects are followed. The connect phase is bounded by `connect_timeout`;
    the data phase has no timeout.
    """

    def __init__(
        self,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        user_agent: Optional[str] = None,
    ) -> None:
        self.connect_timeout = connect_timeout
        self.user_agent = user_agent or get_user_agent()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers["User-Agent"] = self.user_agent
        session.max_redirects = DEFAULT_MAX_REDIRECTS
        # Zero retries: failures surface on the first attempt
        adapter = HTTPAdapter(max_retries=Retry(total=0, read=False))
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def fetch(
        self,
        source: SimpleSource,
        destination: str,
        observer: ProgressObserver,
    ) -> None:
        url = source.uri
        session = self._create_session()
        response = None
        started = False
        try:
            logger.debug(f"Requesting {url} into {destination}")
            start_time = time.time()
            try:
                response = session.get(
                    url,
                    stream=True,
                    allow_redirects=True,
                    timeout=(self.connect_timeout, None),
                )
                logger.debug(
                    f"Received HTTP response status code: {response.status_code} for URL: {url}"
                )
                response.raise_for_status()

                total = _content_length(response)
                observer.start(os.path.basename(destination), total)
                started = True

                downloaded = 0
                with open(destination, "wb") as out:
                    for chunk in response.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                        if not chunk:
                            continue
                        out.write(chunk)
                        downloaded += len(chunk)
                        observer.update(downloaded, total)
            except requests.exceptions.RequestException as e:
                logger.error(f"Network error downloading {url}: {e}")
                raise _translate_request_error(e, url) from e

            logger.debug(
                "Download elapsed time: %.2fs for %s", time.time() - start_time, url
            )
            logger.info(
                f"Downloaded: {os.path.basename(destination)} ({format_size(downloaded)})"
            )
        finally:
            if started:
                observer.finish()
            if response is not None:
                response.close()
            session.close()


@dataclass
class RemoteEntry:
    """One line of an FTP directory listing."""

    name: str
    size: Optional[int] = None


def parse_list_line(line: str) -> Optional[RemoteEntry]:
    """
    Parse a LIST response line in Unix `ls -l` or DOS/IIS format.

    Returns None for blank lines and `total N` summary lines.
    """
    stripped = line.strip()
    if not stripped or stripped.lower().startswith("total "):
        return None

    fields = stripped.split(None, 8)
    # drwxr-xr-x 1 owner group 4096 Jan 01 12:00 name
    if len(fields) == 9 and fields[4].isdigit():
        return RemoteEntry(name=fields[8], size=int(fields[4]))

    fields = stripped.split(None, 3)
    # 01-01-20  12:00PM  4096  name
    if len(fields) == 4:
        if fields[2].isdigit():
            return RemoteEntry(name=fields[3], size=int(fields[2]))
        if fields[2].upper() == "<DIR>":
            return RemoteEntry(name=fields[3], size=None)

    return RemoteEntry(name=stripped, size=None)


def _is_local_os_error(error: OSError) -> bool:
    """True for filesystem failures that must propagate unchanged."""
    if isinstance(error, (ConnectionError, TimeoutError)):
        return False
    if error.errno in _UNREACHABLE_ERRNOS:
        return False
    # gaierror / herror carry resolver codes, not filesystem errnos
    return type(error).__module__ != "socket"


class FTPBackend(TransferBackend):
    """
    Backend for ftp:// sources.

    The remote path must list as exactly one entry. The connection is always
    released on exit. `connect_timeout` also bounds each blocking socket
    operation, so a stalled transfer fails instead of hanging forever.
    """

    def __init__(self, connect_timeout: float = DEFAULT_FTP_CONNECT_TIMEOUT) -> None:
        self.connect_timeout = connect_timeout

    @staticmethod
    def credentials(source: SimpleSource) -> tuple:
        """Return (username, password), defaulting to anonymous login."""
        username = source.username
        if username is None:
            return FTP_ANONYMOUS_USER, FTP_ANONYMOUS_PASSWORD
        password = source.password
        return username, (password if password is not None else "")

    def _list(self, client: ftplib.FTP, path: str) -> List[RemoteEntry]:
        lines: List[str] = []
        client.retrlines(f"LIST {path}", lines.append)
        entries = [entry for entry in map(parse_list_line, lines) if entry is not None]
        if len(entries) == 1 and entries[0].size is None:
            try:
                client.voidcmd("TYPE I")
                entries[0].size = client.size(path)
            except ftplib.error_perm as e:
                logger.debug(f"SIZE not available for {path}: {e}")
        return entries

    def fetch(
        self,
        source: SimpleSource,
        destination: str,
        observer: ProgressObserver,
    ) -> None:
        url = source.uri
        host = source.url.hostname or ""
        port = source.url.port or DEFAULT_FTP_PORT
        path = unquote(source.url.path)
        username, password = self.credentials(source)

        client = ftplib.FTP(timeout=self.connect_timeout)
        started = False
        try:
            try:
                client.connect(host, port)

                logger.info(f"Logging into FTP server {host} as {username}")
                try:
                    client.login(username, password)
                except ftplib.error_perm as e:
                    if str(e).startswith("530"):
                        raise AuthenticationError(
                            f"FTP login failed for {username}@{host}",
                            url=url,
                            details=str(e),
                        ) from e
                    raise

                logger.info(f"Getting remote file information for {path}")
                entries = self._list(client, path)
                if len(entries) != 1:
                    raise AmbiguousRemoteFileError(path, len(entries), url=url)

                file_len = entries[0].size
                observer.start(os.path.basename(destination), file_len)
                started = True

                downloaded = 0
                with open(destination, "wb") as out:

                    def _write(block: bytes) -> None:
                        nonlocal downloaded
                        out.write(block)
                        downloaded += len(block)
                        observer.update(downloaded, file_len)

                    client.retrbinary(f"RETR {path}", _write, blocksize=DEFAULT_CHUNK_SIZE)
            except TimeoutError as e:
                raise TransferTimeoutError(
                    f"Timed out talking to FTP server {host}:{port}", url=url, details=str(e)
                ) from e
            except (ftplib.Error, EOFError) as e:
                raise TransferConnectionError(
                    f"FTP error fetching {url}", url=url, details=str(e)
                ) from e
            except OSError as e:
                if _is_local_os_error(e):
                    raise
                raise TransferConnectionError(
                    f"Could not reach FTP server {host}:{port}", url=url, details=str(e)
                ) from e

            logger.info(
                f"Downloaded: {os.path.basename(destination)} ({format_size(downloaded)})"
            )
        finally:
            if started:
                observer.finish()
            self._release(client)

    @staticmethod
    def _release(client: ftplib.FTP) -> None:
        try:
            client.quit()
        except (*ftplib.all_errors, AttributeError) as e:
            logger.debug(f"FTP quit failed, closing connection: {e}")
            client.close()
