"""
Constants and configuration values for paketboot.

This module contains all hardcoded values, URLs, timeouts, and other constants
used throughout the application.
"""

# Artifact identity
PAKET_EXE = "paket.exe"
BOOTSTRAPPER_EXE = "paket.bootstrapper.exe"
PAKET_PACKAGE_ID = "Paket"
BOOTSTRAPPER_PACKAGE_ID = "Paket.Bootstrapper"
DEFAULT_TARGET_DIR = ".paket"

# GitHub URLs
GITHUB_API_BASE = "https://api.github.com/repos"
PAKET_RELEASES_API_URL = f"{GITHUB_API_BASE}/fsprojects/Paket/releases"
PAKET_RELEASE_DOWNLOAD_URL = (
    "https://github.com/fsprojects/Paket/releases/download/{version}/{file_name}"
)
GITHUB_MAX_PER_PAGE = 100

# NuGet feed
DEFAULT_NUGET_SOURCE = "https://www.nuget.org/api/v2"
NUGET_PACKAGE_VERSIONS_PATH = "package-versions/{package_id}?includePrerelease=true"
NUGET_PACKAGE_PATH = "package/{package_id}/{version}"
NUPKG_EXTENSION = ".nupkg"
NUPKG_TOOLS_DIR = "tools"

# Cache layout: <local-app-data>/NuGet/Cache/Paket/<version>/paket.exe
CACHE_DIR_PARTS = ("NuGet", "Cache", "Paket")

# Versions
ZERO_VERSION_TEXT = "0"
PRERELEASE_ARGUMENT = "prerelease"

# Network timeouts and retries (in seconds)
DEFAULT_REQUEST_TIMEOUT = 30
GITHUB_API_TIMEOUT = 10
DEFAULT_CONNECT_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.3
DEFAULT_CHUNK_SIZE = 8192
RETRY_STATUS_CODES = (408, 429, 500, 502, 503, 504)

# Installed-version marker written next to the target artifact
VERSION_MARKER_SUFFIX = ".version"
OLD_FILE_SUFFIX = ".old"

# Configuration
CONFIG_APP_NAME = "paketboot"
CONFIG_FILE_NAME = "config.yaml"
LOCAL_CONFIG_FILE_NAME = "paket.bootstrapper.yaml"

# Logging configuration
LOGGER_NAME = "paketboot"
LOG_LEVEL_ENV_VAR = "PAKETBOOT_LOG_LEVEL"
LOG_FILE_NAME = "paketboot.log"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5
SILENT_LOG_LEVEL = 60  # above CRITICAL

# Semantic version pattern: numeric core, optional prerelease and build metadata
SEMVER_REGEX_PATTERN = (
    r"^[vV]?"
    r"(?P<numbers>\d+(?:\.\d+){0,3})"  # major[.minor[.patch[.build]]]
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"  # optional prerelease
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"  # optional build metadata
    r"$"
)
