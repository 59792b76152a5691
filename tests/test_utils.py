import importlib.metadata
import os

import pytest

from srcstash import utils

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _clear_user_agent_cache():
    utils._USER_AGENT_CACHE = None
    yield
    utils._USER_AGENT_CACHE = None


def test_get_user_agent_with_version(mocker):
    mocker.patch("srcstash.utils.importlib.metadata.version", return_value="1.2.3")
    assert utils.get_user_agent() == "srcstash/1.2.3"


def test_get_user_agent_without_version(mocker):
    """Test get_user_agent when the package metadata is missing."""
    mocker.patch(
        "srcstash.utils.importlib.metadata.version",
        side_effect=importlib.metadata.PackageNotFoundError("Package not found"),
    )
    assert utils.get_user_agent() == "srcstash/unknown"


def test_get_user_agent_caching(mocker):
    mock_version = mocker.patch(
        "srcstash.utils.importlib.metadata.version", return_value="1.2.3"
    )
    assert utils.get_user_agent() == "srcstash/1.2.3"
    assert utils.get_user_agent() == "srcstash/1.2.3"
    assert mock_version.call_count == 1  # Should not be called again


def test_path_exists_follows_symlinks(tmp_path):
    target = tmp_path / "target"
    link = tmp_path / "link"
    os.symlink("target", link)

    assert utils.path_exists(str(link)) is False
    target.mkdir()
    assert utils.path_exists(str(link)) is True


@pytest.mark.parametrize(
    "num_bytes,expected",
    [
        (0, "0 bytes"),
        (4096, "4096 bytes"),
        (1024 * 1024, "1.0 MB"),
        (5 * 1024 * 1024 + 512 * 1024, "5.5 MB"),
    ],
)
def test_format_size(num_bytes, expected):
    assert utils.format_size(num_bytes) == expected
