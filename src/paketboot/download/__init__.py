"""
paketboot Download Subsystem

Core Components:
- base: Download strategy contract and call tracing
- cache: Caching strategy backed by the local artifact cache
- chain: Fallback chain linking and traversal
- github: GitHub releases strategy
- nuget: NuGet feed / folder strategy
- orchestrator: Strategy chain assembly and the bootstrap run
"""

from .base import DownloadStrategy, traced
from .cache import CacheDownloadStrategy, get_default_cache_dir
from .chain import iter_chain, link_chain, run_with_fallback
from .github import GitHubDownloadStrategy
from .nuget import NugetDownloadStrategy
from .orchestrator import Bootstrapper, BootstrapResult, build_strategy_chain

__all__ = [
    "DownloadStrategy",
    "traced",
    "CacheDownloadStrategy",
    "get_default_cache_dir",
    "iter_chain",
    "link_chain",
    "run_with_fallback",
    "GitHubDownloadStrategy",
    "NugetDownloadStrategy",
    "Bootstrapper",
    "BootstrapResult",
    "build_strategy_chain",
]
