"""
Fallback chains of download strategies.

A chain is an ordered list of strategies. Linking sets each strategy's
`fallback_strategy` so a caching strategy can tell whether it is the last
resort; callers then walk the chain with `run_with_fallback`.
"""

import logging
from typing import Callable, Iterator, Optional, Sequence, TypeVar

from paketboot.exceptions import RECOVERABLE_ERRORS, ConfigurationError
from paketboot.log_utils import logger as default_logger

from .base import DownloadStrategy

T = TypeVar("T")


def link_chain(strategies: Sequence[DownloadStrategy]) -> DownloadStrategy:
    """
    Link `strategies` in order and return the head of the chain.

    Raises:
        ConfigurationError: If `strategies` is empty or repeats a strategy.
    """
    if not strategies:
        raise ConfigurationError("A strategy chain needs at least one strategy")
    if len({id(strategy) for strategy in strategies}) != len(strategies):
        raise ConfigurationError("A strategy may appear only once in a chain")

    for current, following in zip(strategies, strategies[1:]):
        current.fallback_strategy = following
    strategies[-1].fallback_strategy = None
    return strategies[0]


def iter_chain(head: Optional[DownloadStrategy]) -> Iterator[DownloadStrategy]:
    """Yield `head` and then each fallback in order."""
    strategy = head
    while strategy is not None:
        yield strategy
        strategy = strategy.fallback_strategy


def run_with_fallback(
    head: DownloadStrategy,
    operation: Callable[[DownloadStrategy], T],
    logger: Optional[logging.Logger] = None,
) -> T:
    """
    Apply `operation` to each strategy of the chain until one succeeds.

    Network, download and filesystem failures move on to the next strategy;
    the failure of the last strategy propagates unchanged. Any other
    exception propagates immediately.

    Parameters:
        head (DownloadStrategy): First strategy of the chain.
        operation (Callable[[DownloadStrategy], T]): Call to make against a strategy.
        logger (Optional[logging.Logger]): Diagnostic sink.

    Returns:
        T: The result of the first successful call.
    """
    log = logger or default_logger
    for strategy in iter_chain(head):
        try:
            return operation(strategy)
        except RECOVERABLE_ERRORS as exc:
            if strategy.fallback_strategy is None:
                raise
            log.warning(
                f"{strategy.name} failed ({exc}); trying {strategy.fallback_strategy.name}"
            )

    # iter_chain always yields the head, so the loop returns or raises
    raise ConfigurationError("Strategy chain is empty")
