"""
Proxy selection for outbound requests.

Precedence is fixed: an explicit environment proxy wins, then the host's
configured system proxy, and otherwise requests go out directly.
"""

import ipaddress
import sys
import urllib.request
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import quote, urlparse

from requests.utils import select_proxy

from paketboot.log_utils import logger


@dataclass(frozen=True)
class WebProxy:
    """A resolved proxy for a target URL."""

    address: str
    """Proxy URL, e.g. 'http://proxy.local:8080'"""

    use_default_credentials: bool = True
    """Authenticate with the host's stored credentials (netrc)"""

    bypass_on_local: bool = True
    """Send requests to local-network hosts directly"""

    source: str = "system"
    """Where the proxy came from: 'environment' or 'system'"""

    def for_requests(
        self, url: str, credentials: Optional[Tuple[str, str]] = None
    ) -> Dict[str, str]:
        """
        Build the `proxies` mapping requests expects for `url`.

        `credentials` are embedded as userinfo in the proxy URL, which requests
        turns into a Proxy-Authorization header for the proxy alone. An address
        that already carries userinfo is left as it is.

        Returns an empty mapping when the target is a local-network host and
        `bypass_on_local` is set.
        """
        parsed = urlparse(url)
        if self.bypass_on_local and is_local_host(parsed.hostname):
            return {}
        return {parsed.scheme or "http": self._with_credentials(credentials)}

    def _with_credentials(self, credentials: Optional[Tuple[str, str]]) -> str:
        if not credentials:
            return self.address
        proxy_url = urlparse(self.address)
        if not proxy_url.netloc or "@" in proxy_url.netloc:
            return self.address
        user, password = credentials
        userinfo = f"{quote(user, safe='')}:{quote(password, safe='')}"
        return proxy_url._replace(netloc=f"{userinfo}@{proxy_url.netloc}").geturl()


def is_local_host(host: Optional[str]) -> bool:
    """Return True for loopback, private, link-local and dotless intranet host names."""
    if not host:
        return False
    if host.lower() == "localhost":
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return "." not in host
    return address.is_loopback or address.is_private or address.is_link_local


def _same_address(proxy_url: str, target_url: str) -> bool:
    return proxy_url.rstrip("/").lower() == target_url.rstrip("/").lower()


def _environment_proxies() -> Dict[str, str]:
    return urllib.request.getproxies_environment()


def _system_proxies() -> Dict[str, str]:
    """Read the platform proxy configuration (registry on Windows, SystemConfiguration on macOS)."""
    if sys.platform == "win32":
        reader = getattr(urllib.request, "getproxies_registry", None)
    elif sys.platform == "darwin":
        reader = getattr(urllib.request, "getproxies_macosx_sysconf", None)
    else:
        reader = None
    return reader() if reader else {}


def _system_bypass(host: str) -> bool:
    if sys.platform in ("win32", "darwin"):
        return bool(urllib.request.proxy_bypass(host))
    return False


def _environment_bypass(host: str, proxies: Mapping[str, str]) -> bool:
    return bool(urllib.request.proxy_bypass_environment(host, dict(proxies)))


def resolve_proxy(
    url: str,
    env_proxies: Optional[Mapping[str, str]] = None,
    system_proxies: Optional[Mapping[str, str]] = None,
) -> Optional[WebProxy]:
    """
    Determine which proxy, if any, requests to `url` should use.

    Parameters:
        url (str): The target URL.
        env_proxies (Optional[Mapping[str, str]]): Environment proxy mapping (scheme -> proxy URL,
            plus an optional 'no' entry); read from the process environment when omitted.
        system_proxies (Optional[Mapping[str, str]]): System proxy mapping; read from the platform
            configuration when omitted.

    Returns:
        Optional[WebProxy]: The proxy to use, or None for a direct connection.
    """
    host = urlparse(url).hostname or ""

    env = _environment_proxies() if env_proxies is None else dict(env_proxies)
    env_address = select_proxy(url, env) if env else None
    if (
        env_address
        and not _environment_bypass(host, env)
        and not _same_address(env_address, url)
    ):
        logger.debug(f"Using environment proxy {env_address} for {url}")
        return WebProxy(env_address, use_default_credentials=False, source="environment")

    system = _system_proxies() if system_proxies is None else dict(system_proxies)
    system_address = select_proxy(url, system) if system else None
    if (
        not system_address
        or _same_address(system_address, url)
        or _system_bypass(host)
    ):
        return None

    logger.debug(f"Using system proxy {system_address} for {url}")
    return WebProxy(system_address, use_default_credentials=True, bypass_on_local=True)
