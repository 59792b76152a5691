"""
Constants and configuration values for srcstash.

This module contains the directory names, timeouts, transfer settings and
logging formats used throughout the package.
"""

# Directory and file names
SOURCES_DIR_NAME = "sources"
STAGING_DIR_NAME = "staging"
ALIAS_TABLE_FILE = "aliases.json"
CONFIG_FILE_NAME = "srcstash.yaml"
APP_NAME = "srcstash"

DIRECTORY_PERMISSIONS = 0o755

# Hash algorithms
CANONICAL_ALGORITHM = "sha256"
LEGACY_ALGORITHM = "sha1"
SUPPORTED_ALGORITHMS = (CANONICAL_ALGORITHM, LEGACY_ALGORITHM)

# Network timeouts (in seconds)
DEFAULT_CONNECT_TIMEOUT = 300  # Matches libcurl's internal connect timeout
DEFAULT_FTP_CONNECT_TIMEOUT = 120
DEFAULT_FTP_PORT = 21

# Transfer settings
DEFAULT_CHUNK_SIZE = 8192
DEFAULT_MAX_REDIRECTS = 30
PROGRESS_LOG_EVERY = 100  # chunks between debug progress lines

# Anonymous FTP credentials
FTP_ANONYMOUS_USER = "anonymous"
FTP_ANONYMOUS_PASSWORD = "anonymous"

# URI schemes
FTP_SCHEME = "ftp"
NETWORK_SCHEMES = ("http", "https", "ftp")

# Logging configuration
LOGGER_NAME = "srcstash"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_NAME = "srcstash.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Environment variable names
LOG_LEVEL_ENV_VAR = "SRCSTASH_LOG_LEVEL"
