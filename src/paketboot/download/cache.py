"""
Caching Download Strategy

Wraps a single remote strategy with an on-disk artifact cache. The cache
saves repeated downloads and answers version lookups when the remote
source cannot be reached and no fallback strategy is configured.
"""

import logging
import os
from typing import Optional

import platformdirs

from paketboot.constants import CACHE_DIR_PARTS, PAKET_EXE, ZERO_VERSION_TEXT
from paketboot.exceptions import NETWORK_ERRORS, ConfigurationError
from paketboot.filesystem import FileSystemProxy
from paketboot.semver import parse_or_zero

from .base import DownloadStrategy


def get_default_cache_dir() -> str:
    """
    Return the shared artifact cache root, `<local-app-data>/NuGet/Cache/Paket`.

    Each subdirectory is named after a version and holds that version's paket.exe.
    """
    return os.path.join(platformdirs.user_data_dir(), *CACHE_DIR_PARTS)


class CacheDownloadStrategy(DownloadStrategy):
    """
    A strategy that interposes the local cache in front of an effective strategy.

    The effective strategy must not have a fallback of its own; fallback
    belongs on the caching strategy so that the cache can tell whether a
    failed lookup should be answered locally or passed on.
    """

    def __init__(
        self,
        effective_strategy: Optional[DownloadStrategy],
        file_system: Optional[FileSystemProxy] = None,
        cache_dir: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Parameters:
            effective_strategy (DownloadStrategy): The strategy doing the real work.
            file_system (Optional[FileSystemProxy]): Filesystem access; a default proxy is used if omitted.
            cache_dir (Optional[str]): Cache root; defaults to `get_default_cache_dir()`.
            logger (Optional[logging.Logger]): Diagnostic sink.

        Raises:
            ConfigurationError: If `effective_strategy` is None or has a fallback strategy.
        """
        if effective_strategy is None:
            raise ConfigurationError(
                "CacheDownloadStrategy needs a non-null effective strategy"
            )
        if effective_strategy.fallback_strategy is not None:
            raise ConfigurationError(
                "CacheDownloadStrategy should not have a fallback strategy",
                details=f"{effective_strategy.name} falls back to "
                f"{effective_strategy.fallback_strategy.name}",
            )

        super().__init__(logger)
        self.effective_strategy = effective_strategy
        self.file_system = file_system or FileSystemProxy()
        self.cache_dir = cache_dir or get_default_cache_dir()

    @property
    def name(self) -> str:
        return f"{self.effective_strategy.name} - cached"

    def get_cached_path(self, version: str) -> str:
        return os.path.join(self.cache_dir, version, PAKET_EXE)

    def _get_latest_version_core(self, ignore_prerelease: bool) -> str:
        try:
            return self.effective_strategy.get_latest_version(ignore_prerelease)
        except NETWORK_ERRORS:
            if self.fallback_strategy is not None:
                raise

            latest_version = self.get_latest_version_in_cache(ignore_prerelease)
            self.logger.info(
                f"Unable to look up the latest version online, the cache contains version {latest_version}."
            )
            return latest_version

    def _download_version_core(self, version: str, target: str) -> None:
        cached = self.get_cached_path(version)

        if not self.file_system.file_exists(cached):
            self.logger.info(f"Version {version} not found in cache.")

            self.effective_strategy.download_version(version, target)

            self.logger.debug(f"Caching version {version} for later")
            self.file_system.create_directory(os.path.dirname(cached))
            self.file_system.copy_file(target, cached, overwrite=True)
        else:
            self.logger.info(f"Copying version {version} from cache.")
            self.logger.debug(f"{cached} -> {target}")
            self.file_system.copy_file(cached, target, overwrite=True)

    def _self_update_core(self, version: str) -> None:
        self.effective_strategy.self_update(version)

    def get_latest_version_in_cache(self, ignore_prerelease: bool) -> str:
        """
        Pick the highest version among the cache's subdirectory names.

        Names that are not versions, and prereleases when `ignore_prerelease`
        is set, rank as the zero version but stay eligible, so a non-empty
        cache always yields an answer.

        Returns:
            str: The chosen directory name, or "0" when the cache is empty.
        """
        self.file_system.create_directory(self.cache_dir)

        names = [
            os.path.basename(os.path.normpath(path))
            for path in self.file_system.get_directories(self.cache_dir)
        ]
        if not names:
            return ZERO_VERSION_TEXT

        ranked = sorted(
            names,
            key=lambda name: parse_or_zero(name, ignore_prerelease),
            reverse=True,
        )
        return ranked[0]
