"""
Fetch Orchestrator

Coordinates one source acquisition:

    cached? -> done
    stage -> download -> verify -> commit -> (legacy? alias) -> done

Any failure aborts the pipeline with no canonical entry committed. A partially
written staging file is left where it is; the next attempt overwrites it.
"""

from typing import Any, Dict, Optional

from srcstash import config as config_module
from srcstash.constants import CANONICAL_ALGORITHM, LEGACY_ALGORITHM
from srcstash.exceptions import HashMismatchError
from srcstash.log_utils import logger

from .descriptor import SimpleSource
from .dispatch import select_backend
from .hashing import digest
from .interfaces import FetchResult, ProgressObserver
from .progress import default_observer
from .store import ContentStore


class SourceFetcher:
    """
    Fetches sources into a shared content store.

    A single fetch is a sequential pipeline of blocking calls. Separate fetchers,
    in this process or others, may share the same store.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        store: Optional[ContentStore] = None,
        observer: Optional[ProgressObserver] = None,
    ) -> None:
        """
        Parameters:
            config (Optional[Dict[str, Any]]): Configuration mapping; see srcstash.config.
            store (Optional[ContentStore]): Store to use; built from `config` when omitted.
            observer (Optional[ProgressObserver]): Progress sink handed to every backend
                call; chosen from SHOW_PROGRESS when omitted.
        """
        self.config = config or {}
        if store is None:
            store = ContentStore(
                config_module.get_source_dir(self.config),
                config_module.get_staging_dir(self.config),
            )
        self.store = store
        self.observer = observer or default_observer(
            config_module.get_show_progress(self.config)
        )
        self.connect_timeout = config_module.get_connect_timeout(self.config)
        self.ftp_connect_timeout = config_module.get_ftp_connect_timeout(self.config)
        self.verify_hash = config_module.get_verify_hash(self.config)

    def is_fetched(self, source: SimpleSource) -> bool:
        return source.is_fetched(self.store)

    def _verify(self, source: SimpleSource, staged_path: str) -> None:
        if not self.verify_hash or not source.validator:
            return
        algorithm = LEGACY_ALGORITHM if source.legacy else CANONICAL_ALGORITHM
        actual = digest(staged_path, algorithm)
        if actual != source.validator:
            logger.error(
                f"Hash verification failed for {source.file_name}: "
                f"expected {source.validator}, got {actual}"
            )
            raise HashMismatchError(source.validator, actual, algorithm, staged_path)
        logger.debug(f"Hash verified for {source.file_name}")

    def fetch(self, source: SimpleSource) -> FetchResult:
        """
        Download `source` and cache it locally.

        Returns immediately without network access when the store already holds the
        validator hash.

        Raises:
            DownloadError: The transfer failed (connection, timeout, authentication,
                HTTP status, ambiguous FTP listing).
            HashMismatchError: The download does not match the validator.
            AliasCollisionError: The legacy alias exists with another target.
            OSError: A local filesystem operation failed.
        """
        if self.is_fetched(source):
            logger.info(f"Skipped: {source.file_name} (already cached)")
            return FetchResult(
                source=source,
                file_path=self.store.path_for(source.validator, source.file_name),
                was_skipped=True,
            )

        logger.debug(f"Downloading source {source.get_identifier()}")

        self.store.ensure_staging()
        dest_path = self.store.staging_path(source.file_name)

        backend = select_backend(
            source.scheme,
            connect_timeout=self.connect_timeout,
            ftp_connect_timeout=self.ftp_connect_timeout,
        )
        backend.fetch(source, dest_path, self.observer)

        self._verify(source, dest_path)

        primary_hash = self.store.commit(dest_path, source.file_name)
        committed = self.store.path_for(primary_hash, source.file_name)

        # Legacy manifests record SHA-1 sums, so link that name to the entry
        legacy_hash = None
        if source.legacy:
            legacy_hash = self.store.alias_legacy(primary_hash, committed)

        logger.info(f"Cached {source.file_name} as {primary_hash}")
        return FetchResult(
            source=source,
            file_path=committed,
            primary_hash=primary_hash,
            legacy_hash=legacy_hash,
        )


def fetch_source(
    uri: str,
    validator: str,
    legacy: bool = False,
    config: Optional[Dict[str, Any]] = None,
) -> FetchResult:
    """
    Build a SimpleSource from manifest values and fetch it.

    When `config` is omitted the user configuration file is loaded.
    """
    if config is None:
        config = config_module.load_config() or {}
    config_module.apply_logging_config(config)
    source = SimpleSource(uri, validator, legacy)
    return SourceFetcher(config=config).fetch(source)
