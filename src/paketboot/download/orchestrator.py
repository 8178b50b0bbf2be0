"""
Bootstrap Orchestration

This module assembles the strategy chain from the run options and drives a
single bootstrap run: resolve a version, then install it or self-update.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from paketboot import utils
from paketboot.config import BootstrapOptions
from paketboot.constants import VERSION_MARKER_SUFFIX, ZERO_VERSION_TEXT
from paketboot.exceptions import DownloadError
from paketboot.filesystem import FileSystemProxy
from paketboot.log_utils import logger as default_logger

from .base import DownloadStrategy
from .cache import CacheDownloadStrategy
from .chain import iter_chain, link_chain, run_with_fallback
from .github import GitHubDownloadStrategy
from .nuget import NugetDownloadStrategy


@dataclass
class BootstrapResult:
    """Outcome of a bootstrap run."""

    action: str
    """One of 'fresh', 'up_to_date', 'downloaded', 'self_updated', 'kept'"""

    version: Optional[str] = None
    """The version resolved for this run, if any"""

    target: Optional[str] = None


def build_strategy_chain(
    options: BootstrapOptions,
    file_system: Optional[FileSystemProxy] = None,
    cache_dir: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> DownloadStrategy:
    """
    Build and link the strategy chain described by `options`.

    GitHub comes first unless NuGet is preferred; `force_nuget` uses NuGet
    alone. Each source is wrapped in a CacheDownloadStrategy unless caching
    is disabled, and fallbacks are set on the outermost strategies.

    Returns:
        DownloadStrategy: Head of the chain.
    """
    github = GitHubDownloadStrategy(
        options.bootstrapper_path, github_token=options.github_token, logger=logger
    )
    nuget = NugetDownloadStrategy(
        options.bootstrapper_path, nuget_source=options.nuget_source, logger=logger
    )

    if options.force_nuget:
        ordered = [nuget]
    elif options.prefer_nuget:
        ordered = [nuget, github]
    else:
        ordered = [github, nuget]

    if options.use_cache:
        ordered = [
            CacheDownloadStrategy(
                strategy, file_system=file_system, cache_dir=cache_dir, logger=logger
            )
            for strategy in ordered
        ]

    head = link_chain(ordered)
    (logger or default_logger).debug(
        "Using strategies: " + " -> ".join(s.name for s in iter_chain(head))
    )
    return head


class Bootstrapper:
    """Runs one bootstrap: resolve, then download or self-update."""

    def __init__(
        self,
        options: BootstrapOptions,
        strategy: DownloadStrategy,
        file_system: Optional[FileSystemProxy] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.options = options
        self.strategy = strategy
        self.file_system = file_system or FileSystemProxy()
        self.logger = logger or default_logger

    @property
    def marker_path(self) -> str:
        return self.options.target + VERSION_MARKER_SUFFIX

    def is_target_fresh(self) -> bool:
        """True when the target exists and is younger than `max_file_age` minutes."""
        if self.options.max_file_age is None:
            return False
        if not self.file_system.file_exists(self.options.target):
            return False
        age = datetime.now(timezone.utc) - self.file_system.get_last_write_time(
            self.options.target
        )
        return age < timedelta(minutes=self.options.max_file_age)

    def get_local_version(self) -> str:
        """Return the installed version recorded next to the target, or ''."""
        if not self.file_system.file_exists(self.options.target):
            return ""
        if not self.file_system.file_exists(self.marker_path):
            return ""
        return self.file_system.read_text(self.marker_path).strip()

    def resolve_version(self) -> str:
        if self.options.download_version:
            return self.options.download_version
        return run_with_fallback(
            self.strategy,
            lambda s: s.get_latest_version(self.options.ignore_prerelease),
            self.logger,
        )

    def run(self) -> BootstrapResult:
        """
        Perform the bootstrap.

        Raises:
            DownloadError: If no version could be determined and no artifact is installed.
            Exception: The last strategy's failure when every strategy in the chain failed.
        """
        target = self.options.target

        if not self.options.self_update and self.is_target_fresh():
            self.logger.info(
                f"{target} is newer than {self.options.max_file_age} minutes; skipping checks."
            )
            return BootstrapResult("fresh", target=target)

        version = self.resolve_version()

        if version == ZERO_VERSION_TEXT:
            if self.file_system.file_exists(target):
                self.logger.warning(
                    f"No version could be determined; keeping existing {target}."
                )
                return BootstrapResult("kept", target=target)
            raise DownloadError("Unable to determine a version of paket.exe to download")

        if self.options.self_update:
            run_with_fallback(
                self.strategy, lambda s: s.self_update(version), self.logger
            )
            return BootstrapResult("self_updated", version=version)

        local_version = self.get_local_version()
        if local_version == version:
            self.logger.info(f"Paket.exe {version} is up to date.")
            return BootstrapResult("up_to_date", version=version, target=target)

        self.logger.info(f"Installing paket.exe {version} to {target}")
        temp_file = utils.get_temp_file("paket")
        try:
            run_with_fallback(
                self.strategy,
                lambda s: s.download_version(version, temp_file),
                self.logger,
            )

            target_dir = os.path.dirname(os.path.abspath(target))
            self.file_system.create_directory(target_dir)
            utils.replace_file(temp_file, target)
        finally:
            if os.path.exists(temp_file):
                os.remove(temp_file)

        self.file_system.write_text(self.marker_path, version)
        self.logger.info(f"Done. Paket.exe {version} installed.")
        return BootstrapResult("downloaded", version=version, target=target)
