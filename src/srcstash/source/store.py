"""
Content Store

Owns the hash-keyed layout of the source cache:

    <source_dir>/<sha256>/<file_name>      canonical entry
    <source_dir>/<sha1> -> <sha256>        legacy alias (relative symlink)
    <staging_dir>/<file_name>              in-flight downloads

Entries are committed with a single rename, so a canonical path either holds
the complete file or does not exist.
"""

import errno
import json
import os
import tempfile
from typing import Dict, List, Optional

from srcstash.constants import (
    ALIAS_TABLE_FILE,
    DIRECTORY_PERMISSIONS,
    STAGING_DIR_NAME,
)
from srcstash.exceptions import AliasCollisionError, FileSystemError
from srcstash.log_utils import logger
from srcstash.utils import path_exists

from .hashing import sha1sum, sha256sum

# Windows ERROR_PRIVILEGE_NOT_HELD
_WINERROR_PRIVILEGE_NOT_HELD = 1314
_NO_SYMLINK_ERRNOS = frozenset(
    {errno.EPERM, getattr(errno, "ENOTSUP", -1), getattr(errno, "EOPNOTSUPP", -1)}
)


def _symlinks_unsupported(error: BaseException) -> bool:
    if isinstance(error, NotImplementedError):
        return True
    if isinstance(error, OSError):
        if getattr(error, "winerror", None) == _WINERROR_PRIVILEGE_NOT_HELD:
            return True
        return error.errno in _NO_SYMLINK_ERRNOS
    return False


def _atomic_write_json(file_path: str, data: dict) -> None:
    """
    Atomically write `data` as pretty-printed JSON.

    Writes to a temporary file in the same directory and replaces the target.
    Errors propagate; the temporary file is removed on failure.
    """
    temp_fd, temp_path = tempfile.mkstemp(
        dir=os.path.dirname(file_path), prefix="tmp-", suffix=".json"
    )
    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as temp_f:
            json.dump(data, temp_f, indent=2, sort_keys=True)
        os.replace(temp_path, file_path)
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)


class ContentStore:
    """
    Hash-keyed on-disk cache of fetched sources.

    `staging_dir` must live on the same filesystem as `source_dir` so that
    commit() can rename instead of copy.
    """

    def __init__(self, source_dir: str, staging_dir: Optional[str] = None) -> None:
        self.source_dir = source_dir
        self.staging_dir = staging_dir or os.path.join(source_dir, STAGING_DIR_NAME)

    @property
    def alias_table_path(self) -> str:
        return os.path.join(self.source_dir, ALIAS_TABLE_FILE)

    def path_for(self, hash_value: str, file_name: str) -> str:
        """Return `<source_dir>/<hash>/<file_name>`."""
        return os.path.join(self.source_dir, hash_value, file_name)

    def _load_aliases(self) -> Dict[str, str]:
        if not os.path.exists(self.alias_table_path):
            return {}
        try:
            with open(self.alias_table_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as e:
            raise FileSystemError(
                "Alias table is corrupt", path=self.alias_table_path, details=str(e)
            ) from e
        if not isinstance(data, dict):
            raise FileSystemError(
                "Alias table must be a JSON object",
                path=self.alias_table_path,
                details=f"got {type(data).__name__}",
            )
        return data

    def exists(self, hash_value: str, file_name: str) -> bool:
        """
        Return True if an entry for `hash_value` holds `file_name`.

        Legacy symlinks resolve through the filesystem; the alias table is consulted
        only on platforms where symlinks could not be created. Never touches the network.
        """
        return self.resolve(hash_value, file_name) is not None

    def resolve(self, hash_value: str, file_name: str) -> Optional[str]:
        """Return the real path of the cached file, or None if it is absent."""
        if not hash_value:
            return None
        path = self.path_for(hash_value, file_name)
        if path_exists(path):
            return os.path.realpath(path)

        canonical = self._load_aliases().get(hash_value)
        if canonical:
            aliased = self.path_for(canonical, file_name)
            if path_exists(aliased):
                return os.path.realpath(aliased)
        return None

    def ensure_staging(self) -> str:
        """Create the staging directory if needed and return it."""
        if not path_exists(self.staging_dir):
            os.makedirs(self.staging_dir, DIRECTORY_PERMISSIONS, exist_ok=True)
        return self.staging_dir

    def staging_path(self, file_name: str) -> str:
        return os.path.join(self.staging_dir, file_name)

    def commit(self, staged_path: str, file_name: str) -> str:
        """
        Move a staged download into its canonical location.

        Renames the staged file to a private name in the staging directory, computes
        its SHA-256, creates `<source_dir>/<sha256>` and renames the file into it.
        Every step is a rename, so the directory name always matches the content
        even if another fetch rewrites `staging/<file_name>` meanwhile. Another
        process committing the same hash at the same time is harmless: both files
        hold identical bytes and the rename is atomic.

        Returns:
            str: The SHA-256 hex digest, which is also the entry's directory name.

        Raises:
            OSError: If hashing, directory creation or the rename fails. The staged
                file is left in place.
        """
        # Claim the staged file under a private name first; another fetch of the
        # same file name may reopen staging/<file_name> at any moment
        fd, private_path = tempfile.mkstemp(
            dir=os.path.dirname(staged_path) or os.curdir, prefix=".commit-"
        )
        os.close(fd)
        try:
            os.replace(staged_path, private_path)
        except OSError:
            os.remove(private_path)
            raise

        try:
            primary_hash = sha256sum(private_path)

            tgt_dir = os.path.join(self.source_dir, primary_hash)
            if not path_exists(tgt_dir):
                os.makedirs(tgt_dir, DIRECTORY_PERMISSIONS, exist_ok=True)

            dest = os.path.join(tgt_dir, file_name)
            if path_exists(dest):
                logger.debug(f"{dest} already populated; replacing with identical content")
            os.replace(private_path, dest)
        except OSError:
            # Hand the file back unless a newer download already took its place
            if not path_exists(staged_path):
                os.replace(private_path, staged_path)
            raise
        logger.debug(f"Committed {file_name} as {primary_hash}")
        return primary_hash

    def alias_legacy(self, primary_hash: str, committed_path: str) -> str:
        """
        Make a committed entry addressable by its SHA-1.

        Creates the relative symlink `<source_dir>/<sha1> -> <sha256>`. An existing link
        with the same target is accepted. Where the platform cannot create symlinks the
        alias is recorded in the alias table instead.

        Returns:
            str: The SHA-1 hex digest.

        Raises:
            AliasCollisionError: If the alias path already exists with a different target.
        """
        secondary_hash = sha1sum(committed_path)
        link_path = os.path.join(self.source_dir, secondary_hash)

        try:
            os.symlink(primary_hash, link_path, target_is_directory=True)
        except FileExistsError:
            self._check_existing_alias(link_path, primary_hash)
        except (NotImplementedError, OSError) as e:
            if not _symlinks_unsupported(e):
                raise
            logger.debug(
                f"Symlinks unavailable ({e}); recording {secondary_hash} in alias table"
            )
            self._record_alias(secondary_hash, primary_hash)
        else:
            logger.debug(f"Linked legacy hash {secondary_hash} to {primary_hash}")
        return secondary_hash

    def _check_existing_alias(self, link_path: str, primary_hash: str) -> None:
        existing = os.readlink(link_path) if os.path.islink(link_path) else None
        if existing is not None:
            expected = os.path.join(self.source_dir, primary_hash)
            if existing.rstrip(os.sep) == primary_hash or os.path.realpath(
                link_path
            ) == os.path.realpath(expected):
                logger.debug(f"Legacy alias {link_path} already present")
                return
        raise AliasCollisionError(link_path, existing, primary_hash)

    def _record_alias(self, secondary_hash: str, primary_hash: str) -> None:
        aliases = self._load_aliases()
        existing = aliases.get(secondary_hash)
        if existing == primary_hash:
            return
        if existing is not None:
            raise AliasCollisionError(
                os.path.join(self.source_dir, secondary_hash), existing, primary_hash
            )
        aliases[secondary_hash] = primary_hash
        _atomic_write_json(self.alias_table_path, aliases)

    def staged_files(self) -> List[str]:
        """List files left in the staging directory by interrupted or failed fetches."""
        if not os.path.isdir(self.staging_dir):
            return []
        return sorted(
            os.path.join(self.staging_dir, name)
            for name in os.listdir(self.staging_dir)
            if os.path.isfile(os.path.join(self.staging_dir, name))
        )

    def purge_staging(self) -> int:
        """
        Remove leftover staging files. This is an operator action; the fetch
        pipeline never calls it.

        Returns:
            int: Number of files removed.
        """
        removed = 0
        for path in self.staged_files():
            os.remove(path)
            logger.info(f"Removed staged file: {path}")
            removed += 1
        return removed
