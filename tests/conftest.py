import ftplib
import hashlib
from pathlib import Path

import platformdirs
import pytest
import requests

from srcstash.source.interfaces import ProgressObserver

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.Session or ftplib.FTP."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """Register the markers used across the suite."""
    config.addinivalue_line("markers", "unit: fast isolated unit test")
    config.addinivalue_line(
        "markers", "core_downloads: exercises the fetch and transfer pipeline"
    )


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs and srcstash.config at a throwaway directory tree.

    Creates temp cache and config directories, patches platformdirs to return them and
    updates srcstash.config.CONFIG_DIR / CONFIG_FILE so no test reads the user's real
    configuration or writes into the real cache.
    """
    base = tmp_path_factory.mktemp("srcstash")
    cache_dir = base / "cache"
    config_dir = base / "config"
    for path in (cache_dir, config_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )

    import srcstash.config as config_module

    monkeypatch.setattr(config_module, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(
        config_module, "CONFIG_FILE", str(Path(config_dir) / "srcstash.yaml")
    )


@pytest.fixture(autouse=True)
def _block_real_network(monkeypatch):
    """Replace the real HTTP and FTP entry points with blockers."""
    monkeypatch.setattr(requests.Session, "request", _block_network)
    monkeypatch.setattr(requests, "get", _block_network)
    monkeypatch.setattr(ftplib.FTP, "connect", _block_network)


@pytest.fixture
def source_root(tmp_path):
    """Return (source_dir, staging_dir) under a temp directory."""
    source_dir = tmp_path / "sources"
    staging_dir = source_dir / "staging"
    return str(source_dir), str(staging_dir)


@pytest.fixture
def store(source_root):
    from srcstash.source.store import ContentStore

    source_dir, staging_dir = source_root
    return ContentStore(source_dir, staging_dir)


@pytest.fixture
def artifact_bytes():
    """Deterministic payload used as a downloaded tarball."""
    return b"srcstash test payload\n" * 200


@pytest.fixture
def artifact_hashes(artifact_bytes):
    """Return (sha256, sha1) hex digests of `artifact_bytes`."""
    return (
        hashlib.sha256(artifact_bytes).hexdigest(),
        hashlib.sha1(artifact_bytes).hexdigest(),  # noqa: S324
    )


class RecordingObserver(ProgressObserver):
    """ProgressObserver test double that records every call."""

    def __init__(self):
        self.started = []
        self.updates = []
        self.finished = 0

    def start(self, label, total=None):
        self.started.append((label, total))

    def update(self, completed, total=None):
        self.updates.append((completed, total))

    def finish(self):
        self.finished += 1


@pytest.fixture
def observer():
    return RecordingObserver()
