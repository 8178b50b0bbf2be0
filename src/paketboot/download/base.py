"""
Download Strategy Contract

This module defines the operation set every download source implements and
the timing/tracing wrapper applied to each public call.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, TypeVar

from paketboot.log_utils import is_trace_enabled
from paketboot.log_utils import logger as default_logger

T = TypeVar("T")


def traced(
    logger: logging.Logger, name: str, action: str, func: Callable[[], T]
) -> T:
    """
    Run `func`, tracing its duration and outcome on `logger`.

    When trace output is disabled the call is passed straight through.
    Otherwise the start, the elapsed time and either the returned value
    ("void" for None) or the failure message are logged at DEBUG level.
    Failures are re-raised unchanged.

    Parameters:
        logger (logging.Logger): Diagnostic sink.
        name (str): Strategy name shown in the trace.
        action (str): Operation name shown in the trace.
        func (Callable[[], T]): The operation to run.

    Returns:
        T: Whatever `func` returns.
    """
    if not is_trace_enabled(logger):
        return func()

    logger.debug(f"[{name}] {action}...")
    start = time.perf_counter()
    try:
        result = func()
    except Exception as exc:
        elapsed = time.perf_counter() - start
        logger.debug(
            f"[{name}] {action} took {elapsed:.2f} second(s) and failed with {exc}."
        )
        raise

    elapsed = time.perf_counter() - start
    shown = "void" if result is None else result
    logger.debug(f"[{name}] {action} took {elapsed:.2f} second(s) and returned {shown}.")
    return result


class DownloadStrategy(ABC):
    """
    Abstract base class for download strategies.

    Subclasses implement the `_..._core` methods; callers use the public
    methods, which add tracing. A strategy may point at a fallback strategy
    that callers consult when this one fails.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or default_logger
        self.fallback_strategy: Optional["DownloadStrategy"] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable strategy name used in logs."""

    def get_latest_version(self, ignore_prerelease: bool) -> str:
        """
        Resolve the newest version available from this source.

        Parameters:
            ignore_prerelease (bool): Demote prerelease versions below every release.

        Returns:
            str: The version string as published by the source.
        """
        return traced(
            self.logger,
            self.name,
            "GetLatestVersion",
            lambda: self._get_latest_version_core(ignore_prerelease),
        )

    def download_version(self, version: str, target: str) -> None:
        """Place the artifact for `version` at `target`, overwriting any existing file."""
        traced(
            self.logger,
            self.name,
            "DownloadVersion",
            lambda: self._download_version_core(version, target),
        )

    def self_update(self, version: str) -> None:
        """Replace the running bootstrapper with `version`."""
        traced(
            self.logger,
            self.name,
            "SelfUpdate",
            lambda: self._self_update_core(version),
        )

    @abstractmethod
    def _get_latest_version_core(self, ignore_prerelease: bool) -> str: ...

    @abstractmethod
    def _download_version_core(self, version: str, target: str) -> None: ...

    @abstractmethod
    def _self_update_core(self, version: str) -> None: ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
